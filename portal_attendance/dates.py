"""
Date extraction and canonicalization for portal rows.

The course-content table writes the class date in whatever shape the
faculty member typed it:

    12 Jan, 2025     day + month abbreviation + year
    12-01-2025       day-month-year, '-' or '/' separated
    5 Mar            day + month abbreviation, no year

All of them are re-emitted as ``dd-mm-yyyy``, which is the key used for the
per-date aggregation.
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime

from .settings import DEFAULT_YEAR

logger = logging.getLogger(__name__)

CANONICAL_FORMAT = "%d-%m-%Y"

_MONTH_MAP = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

# One alternation, tried in priority order at each position.
DATE_RE = re.compile(
    r"\d{1,2}\s[A-Za-z]{3},?\s\d{4}"
    r"|\d{1,2}[-/]\d{1,2}[-/]\d{4}"
    r"|\d{1,2}\s[A-Za-z]{3}"
)

_DAY_MONTH_YEAR_RE = re.compile(r"^(\d{1,2})\s([A-Za-z]{3}),?\s(\d{4})$")
_NUMERIC_RE = re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$")
_DAY_MONTH_RE = re.compile(r"^(\d{1,2})\s([A-Za-z]{3})$")


def find_date_text(text: str) -> str | None:
    """Return the first date-shaped substring of a row, if any."""
    m = DATE_RE.search(text or "")
    return m.group(0) if m else None


def _build_date(year: int, month: int | None, day: int) -> date | None:
    if month is None:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(raw: str, default_year: int = DEFAULT_YEAR) -> date | None:
    """
    Parse one date substring into a calendar date.

    Returns None for impossible dates ("32 Jan 2025"), unknown month
    abbreviations or text that fits none of the accepted shapes.
    """
    token = (raw or "").strip()
    if not token:
        return None

    m = _DAY_MONTH_YEAR_RE.match(token)
    if m:
        return _build_date(int(m.group(3)), _MONTH_MAP.get(m.group(2).lower()), int(m.group(1)))

    m = _NUMERIC_RE.match(token)
    if m:
        return _build_date(int(m.group(3)), int(m.group(2)), int(m.group(1)))

    m = _DAY_MONTH_RE.match(token)
    if m:
        return _build_date(default_year, _MONTH_MAP.get(m.group(2).lower()), int(m.group(1)))

    return None


def format_canonical(d: date) -> str:
    return f"{d.day:02d}-{d.month:02d}-{d.year:04d}"


def normalize_date(raw: str, default_year: int = DEFAULT_YEAR) -> str | None:
    """Canonical ``dd-mm-yyyy`` form of a date substring, or None."""
    parsed = parse_date(raw, default_year)
    if parsed is None:
        logger.debug("Unparseable date %r", raw)
        return None
    return format_canonical(parsed)


def extract_date(text: str, default_year: int = DEFAULT_YEAR) -> str | None:
    """Find the first date in a row and normalize it."""
    raw = find_date_text(text)
    if raw is None:
        return None
    return normalize_date(raw, default_year)


def parse_canonical_date(key: str) -> date:
    """Inverse of format_canonical. Raises ValueError on a corrupt key."""
    return datetime.strptime(key, CANONICAL_FORMAT).date()
