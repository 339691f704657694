"""
Parse the portal's "Course Content" page HTML into AttendanceData.

The page is a sequence of <tr> rows. A course header row such as

    AB101 - Data Structures

opens a section; the rows after it belong to that course until the next
header. Data rows hold an optional date and one PRESENT/ABSENT token per
period taught that day:

    | 1 | 12 Jan, 2025 | Linked lists | PRESENT PRESENT |

Rows are folded left to right into an AttendanceTally; the metrics pass
runs once over the finished tally. Parsing never raises: any input string
gives a structurally valid (possibly all-zero) result.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import reduce
from typing import Dict, Iterable, Optional, Tuple

from .dates import extract_date
from .metrics import compute_day_metrics, percentage, safe_bunk
from .models import AttendanceData, DayCount, OverallAttendance, Subject
from .rows import is_skippable, iter_row_texts
from .settings import DEFAULT_SETTINGS, EngineSettings

logger = logging.getLogger(__name__)

ROW_SKIP = "skip"
ROW_HEADER = "header"
ROW_DATA = "data"

PRESENT_TOKEN = "PRESENT"
ABSENT_TOKEN = "ABSENT"


# ──────────────────────────────────────────────────────────────────
#  Row classification
# ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RowClass:
    kind: str
    code: Optional[str] = None
    name: Optional[str] = None


def course_header_re(settings: EngineSettings = DEFAULT_SETTINGS) -> "re.Pattern[str]":
    alternates = "".join(f"|{re.escape(c)}" for c in settings.alternate_course_codes)
    return re.compile(rf"^([A-Z]+\d+{alternates})\s*[-:\s]+([^-:\s].*)$")


_DEFAULT_HEADER_RE = course_header_re()


def _skip_rule(text: str, header_re) -> Optional[RowClass]:
    return RowClass(ROW_SKIP) if is_skippable(text) else None


def _header_rule(text: str, header_re) -> Optional[RowClass]:
    m = header_re.match(text)
    if not m:
        return None
    return RowClass(ROW_HEADER, code=m.group(1), name=m.group(2).strip())


def _data_rule(text: str, header_re) -> Optional[RowClass]:
    return RowClass(ROW_DATA)


# First match wins.
ROW_RULES = (_skip_rule, _header_rule, _data_rule)


def classify_row(text: str, header_re=None) -> RowClass:
    """Classify one tokenized row as skip, course header or data."""
    header_re = header_re or _DEFAULT_HEADER_RE
    for rule in ROW_RULES:
        result = rule(text, header_re)
        if result is not None:
            return result
    return RowClass(ROW_SKIP)


def count_statuses(text: str) -> Tuple[int, int]:
    """Non-overlapping (PRESENT, ABSENT) counts in a row; one per period."""
    return text.count(PRESENT_TOKEN), text.count(ABSENT_TOKEN)


# ──────────────────────────────────────────────────────────────────
#  Aggregation
# ──────────────────────────────────────────────────────────────────

@dataclass
class _Counts:
    present: int = 0
    absent: int = 0

    def add(self, present: int, absent: int) -> None:
        self.present += present
        self.absent += absent


@dataclass
class AttendanceTally:
    """Accumulator threaded through the row fold."""
    default_year: int = DEFAULT_SETTINGS.default_year
    header_re: "re.Pattern[str]" = _DEFAULT_HEADER_RE
    current_course: Optional[str] = None
    names: Dict[str, str] = field(default_factory=dict)
    subjects: Dict[str, _Counts] = field(default_factory=dict)
    dates: Dict[str, _Counts] = field(default_factory=dict)
    course_dates: Dict[str, Dict[str, _Counts]] = field(default_factory=dict)

    @classmethod
    def for_settings(cls, settings: EngineSettings) -> "AttendanceTally":
        return cls(default_year=settings.default_year, header_re=course_header_re(settings))


def fold_row(tally: AttendanceTally, text: str) -> AttendanceTally:
    """Apply one tokenized row to the tally and return it."""
    row = classify_row(text, tally.header_re)

    if row.kind == ROW_HEADER:
        code = row.code or ""
        tally.current_course = code
        # A repeated header continues the same subject.
        tally.names.setdefault(code, row.name or "")
        tally.subjects.setdefault(code, _Counts())
        tally.course_dates.setdefault(code, {})
        return tally

    if row.kind != ROW_DATA or tally.current_course is None:
        return tally

    present, absent = count_statuses(text)
    code = tally.current_course
    tally.subjects[code].add(present, absent)

    date_key = extract_date(text, tally.default_year)
    if date_key is None:
        return tally
    tally.dates.setdefault(date_key, _Counts()).add(present, absent)
    tally.course_dates[code].setdefault(date_key, _Counts()).add(present, absent)
    return tally


def aggregate_rows(rows: Iterable[str], settings: EngineSettings = DEFAULT_SETTINGS) -> AttendanceTally:
    return reduce(fold_row, rows, AttendanceTally.for_settings(settings))


# ──────────────────────────────────────────────────────────────────
#  Result assembly
# ──────────────────────────────────────────────────────────────────

def _freeze_dates(counts: Dict[str, _Counts]) -> Dict[str, DayCount]:
    return {key: DayCount(c.present, c.absent) for key, c in counts.items()}


def build_attendance_data(tally: AttendanceTally) -> AttendanceData:
    """Run the metrics pass over a finished tally."""
    subjects: Dict[str, Subject] = {}
    total_present = 0
    total_absent = 0

    for code, counts in tally.subjects.items():
        day = compute_day_metrics(_freeze_dates(tally.course_dates.get(code, {})))
        subjects[code] = Subject(
            code=code,
            name=tally.names.get(code, ""),
            present=counts.present,
            absent=counts.absent,
            percentage=percentage(counts.present, counts.absent),
            safe_bunk_periods=safe_bunk(counts.present, counts.absent),
            attended_days=day.attended_days,
            absent_days=day.absent_days,
            safe_bunk_days=day.safe_bunk_days,
        )
        total_present += counts.present
        total_absent += counts.absent

    overall = OverallAttendance(
        present=total_present,
        absent=total_absent,
        percentage=percentage(total_present, total_absent),
        safe_bunk_periods=safe_bunk(total_present, total_absent),
    )

    date_attendance = _freeze_dates(tally.dates)
    day = compute_day_metrics(date_attendance)

    return AttendanceData(
        subjects=subjects,
        overall=overall,
        date_attendance=date_attendance,
        streak=day.streak,
        attended_days=day.attended_days,
        absent_days=day.absent_days,
        safe_bunk_days=day.safe_bunk_days,
    )


def parse_attendance_html(
    html: str | None,
    settings: EngineSettings | None = None,
) -> AttendanceData:
    """
    Parse a course-content page.

    :param html: Raw HTML of the page (as fetched after login).
    :param settings: Engine settings; defaults to DEFAULT_SETTINGS.
    :returns: AttendanceData for every course section found.
    """
    settings = settings or DEFAULT_SETTINGS
    tally = aggregate_rows(iter_row_texts(html), settings)
    data = build_attendance_data(tally)
    logger.debug(
        "Parsed %d subject(s), %d dated day(s), overall %s%%",
        len(data.subjects), len(data.date_attendance), data.overall.percentage,
    )
    return data
