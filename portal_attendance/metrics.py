"""
Derived statistics: percentages, safe-bunk allowances, streak and day
classification. Everything here is a pure function of counts or of a
date -> DayCount mapping.
"""
from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Mapping

from .dates import parse_canonical_date
from .models import DayCount, DayMetrics

logger = logging.getLogger(__name__)

DAY_PRESENT = "present"
DAY_ABSENT = "absent"
DAY_NO_CLASS = "no_class"

_TWO_PLACES = Decimal("0.01")


def percentage(present: int, absent: int) -> float:
    """present / total * 100, half away from zero at 2 decimals; 0 if no periods."""
    total = present + absent
    if total <= 0:
        return 0.0
    ratio = Decimal(present) * 100 / Decimal(total)
    return float(ratio.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def safe_bunk(present: int, absent: int) -> int:
    """One absence is absorbed per three banked presents."""
    return max(0, present // 3 - absent)


def classify_day(counts: DayCount) -> str:
    # A day with no recorded period is "no class", never an absence.
    if counts.present > 0:
        return DAY_PRESENT
    if counts.absent > 0:
        return DAY_ABSENT
    return DAY_NO_CLASS


def sort_dates_desc(keys: Iterable[str]) -> List[str]:
    """Canonical dd-mm-yyyy keys, most recent first."""
    return sorted(keys, key=parse_canonical_date, reverse=True)


def compute_streak(date_attendance: Mapping[str, DayCount]) -> int:
    if not date_attendance:
        return 0
    streak = 0
    for key in sort_dates_desc(date_attendance):
        if date_attendance[key].present <= 0:
            break
        streak += 1
    return streak


def compute_day_metrics(date_attendance: Mapping[str, DayCount]) -> DayMetrics:
    """
    Streak and day counts for one date map.

    A corrupt date key leaves every field at zero instead of failing the
    whole result.
    """
    if not date_attendance:
        return DayMetrics()
    try:
        streak = compute_streak(date_attendance)
        kinds = [classify_day(c) for c in date_attendance.values()]
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning("Could not compute streak: %s", e)
        return DayMetrics()

    attended = kinds.count(DAY_PRESENT)
    absent = kinds.count(DAY_ABSENT)
    return DayMetrics(
        streak=streak,
        attended_days=attended,
        absent_days=absent,
        safe_bunk_days=safe_bunk(attended, absent),
    )
