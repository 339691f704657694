"""
Normalized attendance model.

Field names in ``to_dict()`` output are the ones the dashboard consumes
(camelCase), so the JSON export can be served as-is.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class DayCount:
    present: int = 0
    absent: int = 0

    def to_dict(self) -> dict:
        return {"present": self.present, "absent": self.absent}


@dataclass(frozen=True)
class DayMetrics:
    streak: int = 0
    attended_days: int = 0
    absent_days: int = 0
    safe_bunk_days: int = 0


@dataclass(frozen=True)
class OverallAttendance:
    present: int = 0
    absent: int = 0
    percentage: float = 0
    safe_bunk_periods: int = 0

    def to_dict(self) -> dict:
        return {
            "present": self.present,
            "absent": self.absent,
            "percentage": self.percentage,
            "safeBunkPeriods": self.safe_bunk_periods,
        }


@dataclass(frozen=True)
class Subject:
    code: str
    name: str
    present: int = 0
    absent: int = 0
    percentage: float = 0
    safe_bunk_periods: int = 0
    attended_days: int = 0
    absent_days: int = 0
    safe_bunk_days: int = 0

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "present": self.present,
            "absent": self.absent,
            "percentage": self.percentage,
            "safeBunkPeriods": self.safe_bunk_periods,
            "attendedDays": self.attended_days,
            "absentDays": self.absent_days,
            "safeBunkDays": self.safe_bunk_days,
        }


@dataclass(frozen=True)
class AttendanceData:
    subjects: Mapping[str, Subject] = field(default_factory=dict)
    overall: OverallAttendance = field(default_factory=OverallAttendance)
    date_attendance: Mapping[str, DayCount] = field(default_factory=dict)
    streak: int = 0
    attended_days: int = 0
    absent_days: int = 0
    safe_bunk_days: int = 0

    def __post_init__(self):
        # The day fields are derived from date_attendance, so neither map may change.
        object.__setattr__(self, "subjects", MappingProxyType(dict(self.subjects)))
        object.__setattr__(self, "date_attendance", MappingProxyType(dict(self.date_attendance)))

    @classmethod
    def empty(cls) -> "AttendanceData":
        return cls()

    def to_dict(self) -> dict:
        return {
            "subjects": {code: s.to_dict() for code, s in self.subjects.items()},
            "overall": self.overall.to_dict(),
            "dateAttendance": {key: c.to_dict() for key, c in self.date_attendance.items()},
            "streak": self.streak,
            "attendedDays": self.attended_days,
            "absentDays": self.absent_days,
            "safeBunkDays": self.safe_bunk_days,
        }
