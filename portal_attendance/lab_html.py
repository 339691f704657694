"""
Parse the portal's lab record page.

Two things live on that page:
- a <select id="sub_code"> listing the student's lab courses;
- once a course is chosen, a table of weekly experiments:

    | Week-1 | AB101L | Stack implementation | B2 | 20-01-2025 |

Each week is reported with an availability flag: a record can still be
uploaded while its submission date has not passed.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import List

import pytz

from .dates import parse_date
from .rows import collapse_ws, iter_rows, make_soup, row_cells
from .settings import DEFAULT_SETTINGS, EngineSettings

_WEEK_RE = re.compile(r"Week-?(\d+)", re.I)


@dataclass(frozen=True)
class LabSubject:
    value: str
    text: str

    def to_dict(self) -> dict:
        return {"value": self.value, "text": self.text}


@dataclass(frozen=True)
class LabWeek:
    week_number: str
    week_text: str
    subject_code: str
    experiment_title: str
    batch_no: str
    submission_date: str
    is_available: bool

    def to_dict(self) -> dict:
        return {
            "weekNumber": self.week_number,
            "weekText": self.week_text,
            "subjectCode": self.subject_code,
            "experimentTitle": self.experiment_title,
            "batchNo": self.batch_no,
            "submissionDate": self.submission_date,
            "isAvailable": self.is_available,
        }


def portal_today(settings: EngineSettings = DEFAULT_SETTINGS) -> date:
    """Current date in the portal's timezone."""
    return datetime.now(pytz.timezone(settings.portal_timezone)).date()


def parse_lab_subjects(html: str | None) -> List[LabSubject]:
    """Options of the lab course dropdown, without the "Select ..." prompt."""
    soup = make_soup(html)
    subjects: List[LabSubject] = []
    for select in soup.find_all("select", id="sub_code"):
        for option in select.find_all("option"):
            value = (option.get("value") or "").strip()
            text = collapse_ws(option.get_text(separator=" ", strip=True))
            if not value or "select" in text.lower():
                continue
            subjects.append(LabSubject(value=value, text=text))
    return subjects


def is_week_available(submission_date: str, today: date, default_year: int) -> bool:
    # Unparseable dates stay open; the portal decides on upload.
    due = parse_date(submission_date, default_year)
    if due is None:
        return True
    return due >= today


def parse_lab_weeks(
    html: str | None,
    today: date | None = None,
    settings: EngineSettings | None = None,
) -> List[LabWeek]:
    """
    Parse the weekly experiment table of a lab course.

    :param html: Raw HTML returned after selecting a lab course.
    :param today: Reference date for availability; defaults to portal_today().
    :param settings: Engine settings (timezone, default year).
    """
    settings = settings or DEFAULT_SETTINGS
    if today is None:
        today = portal_today(settings)

    weeks: List[LabWeek] = []
    for tr in iter_rows(html):
        cells = row_cells(tr)
        if len(cells) < 5:
            continue
        week_text, subject_code, title, batch_no, submission_date = cells[:5]

        m = _WEEK_RE.search(week_text)
        if not m or not title or not submission_date:
            continue

        weeks.append(LabWeek(
            week_number=m.group(1),
            week_text=week_text,
            subject_code=subject_code,
            experiment_title=title,
            batch_no=batch_no,
            submission_date=submission_date,
            is_available=is_week_available(submission_date, today, settings.default_year),
        ))
    return weeks
