"""
Export attendance data to JSON, CSV, and ICS.
"""
from __future__ import annotations

import csv
import hashlib
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import icalendar

from .dates import parse_canonical_date
from .metrics import DAY_ABSENT, DAY_PRESENT, classify_day
from .models import AttendanceData

CSV_FIELDS = [
    "code", "name", "present", "absent", "percentage", "safeBunkPeriods",
    "attendedDays", "absentDays", "safeBunkDays",
]

_DAY_LABELS = {DAY_PRESENT: "Present", DAY_ABSENT: "Absent"}


def export_json(data: AttendanceData, out_path: str | Path) -> None:
    """Export the full attendance model to JSON."""
    Path(out_path).write_text(
        json.dumps(data.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
    )


def export_csv(data: AttendanceData, out_path: str | Path) -> None:
    """Export one row per subject, followed by an OVERALL row."""
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction="ignore")
        w.writeheader()
        for subject in data.subjects.values():
            w.writerow(subject.to_dict())
        overall = data.overall.to_dict()
        overall.update({
            "code": "OVERALL",
            "name": "All subjects",
            "attendedDays": data.attended_days,
            "absentDays": data.absent_days,
            "safeBunkDays": data.safe_bunk_days,
        })
        w.writerow(overall)


def export_ics(data: AttendanceData, out_path: str | Path) -> None:
    """Export one all-day event per attended or missed date."""
    cal = icalendar.Calendar()
    cal.add("prodid", "-//Portal Attendance Export//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", "Attendance")

    days = []
    for key, counts in data.date_attendance.items():
        label = _DAY_LABELS.get(classify_day(counts))
        if label is None:
            continue
        try:
            days.append((parse_canonical_date(key), key, label, counts))
        except ValueError:
            continue

    for day, key, label, counts in sorted(days, key=lambda d: d[0]):
        event = icalendar.Event()
        uid_hash = hashlib.md5(f"attendance-{key}".encode("utf-8")).hexdigest()
        event.add("uid", f"{uid_hash}@portal-attendance")
        event.add("summary", f"{label} ({counts.present}P / {counts.absent}A)")
        event.add(
            "description",
            f"Periods present: {counts.present}\nPeriods absent: {counts.absent}",
        )
        event.add("dtstart", day)
        event.add("dtend", day + timedelta(days=1))
        event.add("dtstamp", datetime.now(timezone.utc))
        event.add("categories", [label])
        cal.add_component(event)

    Path(out_path).write_text(cal.to_ical().decode("utf-8"), encoding="utf-8")


def export_records_json(records: list, out_path: str | Path) -> None:
    """Export a list of lab subjects or lab weeks to JSON."""
    Path(out_path).write_text(
        json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )


def export(data: AttendanceData, out_path: str | Path, fmt: str) -> None:
    """Export to the given format: json, csv, or ics."""
    fmt = fmt.lower()
    if fmt == "json":
        export_json(data, out_path)
    elif fmt == "csv":
        export_csv(data, out_path)
    elif fmt == "ics":
        export_ics(data, out_path)
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use json, csv, or ics.")
