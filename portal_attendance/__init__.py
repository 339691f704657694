"""
Attendance extraction for the academic portal's course-content page.

The package turns saved or fetched portal HTML into AttendanceData
(per-subject and overall percentages, safe-bunk allowances, streak and
day counts) and parses the lab record page into lab weeks.
"""
from .attendance_html import parse_attendance_html
from .lab_html import parse_lab_subjects, parse_lab_weeks
from .models import AttendanceData, DayCount, OverallAttendance, Subject
from .settings import DEFAULT_SETTINGS, EngineSettings

__version__ = "0.1.0"

__all__ = [
    "parse_attendance_html",
    "parse_lab_subjects",
    "parse_lab_weeks",
    "AttendanceData",
    "DayCount",
    "OverallAttendance",
    "Subject",
    "EngineSettings",
    "DEFAULT_SETTINGS",
    "__version__",
]
