"""
Command-line interface: parse saved portal pages and export attendance.
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from . import __version__
from .attendance_html import parse_attendance_html
from .export import export, export_records_json
from .lab_html import parse_lab_subjects, parse_lab_weeks
from .models import AttendanceData
from .settings import EngineSettings


def _read_html(path: str) -> str:
    return Path(path).read_text(encoding="utf-8", errors="ignore")


def _out_path(output: str, ext: str) -> Path:
    return Path(output).with_suffix(ext) if Path(output).suffix else Path(output + ext)


def _print_summary(data: AttendanceData) -> None:
    print("Code       | Present | Absent |      % | Safe bunk | Course")
    print("-" * 72)
    for s in data.subjects.values():
        print(
            f"{s.code:<10} | {s.present:>7} | {s.absent:>6} | {s.percentage:>6.2f} "
            f"| {s.safe_bunk_periods:>9} | {s.name[:30]}"
        )
    print("-" * 72)
    o = data.overall
    print(
        f"{'OVERALL':<10} | {o.present:>7} | {o.absent:>6} | {o.percentage:>6.2f} "
        f"| {o.safe_bunk_periods:>9} |"
    )
    print(
        f"\nStreak: {data.streak} day(s)  Attended days: {data.attended_days}  "
        f"Absent days: {data.absent_days}  Safe bunk days: {data.safe_bunk_days}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Extract attendance from saved academic portal pages.\n"
            "- Attendance mode: parse the Course Content page and export JSON / CSV / ICS.\n"
            "- Lab mode: list lab record weeks and their upload availability."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-o",
        "--output",
        default="attendance",
        help="Output path (without extension). Default: attendance",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "csv", "ics"],
        default="json",
        help="Export format. Default: json (lab mode supports json only)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--attendance-html",
        metavar="HTML_PATH",
        help="Saved Course Content page (home?action=course_content).",
    )
    mode.add_argument(
        "--lab-html",
        metavar="HTML_PATH",
        help="Saved lab record page (home?action=labrecord_std).",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="(Attendance mode) Print a per-subject table instead of exporting.",
    )
    parser.add_argument(
        "--list-lab-subjects",
        action="store_true",
        help="(Lab mode) List the lab courses in the dropdown then exit.",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="JSON settings file (default_year, alternate_course_codes, portal_timezone).",
    )
    parser.add_argument(
        "--default-year",
        type=int,
        metavar="YYYY",
        help="Year used for dates written without one, e.g. '5 Mar'.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = EngineSettings.load_from_file(args.config)
    if args.default_year:
        settings = replace(settings, default_year=args.default_year)

    if args.attendance_html:
        try:
            html = _read_html(args.attendance_html)
        except OSError as e:
            print(f"Error reading attendance HTML: {e}", file=sys.stderr)
            return 1

        data = parse_attendance_html(html, settings)
        if not data.subjects:
            print("Warning: no course sections found in the HTML.", file=sys.stderr)

        if args.summary:
            _print_summary(data)
            return 0

        ext = {"json": ".json", "csv": ".csv", "ics": ".ics"}[args.format]
        out_path = _out_path(args.output, ext)
        export(data, out_path, args.format)
        print(f"Exported {len(data.subjects)} subject(s) to {out_path}")
        return 0

    if args.lab_html:
        try:
            html = _read_html(args.lab_html)
        except OSError as e:
            print(f"Error reading lab HTML: {e}", file=sys.stderr)
            return 1

        if args.list_lab_subjects:
            subjects = parse_lab_subjects(html)
            print("Value        | Lab course")
            print("-" * 60)
            for s in subjects:
                print(f"{s.value:<12} | {s.text[:45]}")
            return 0

        if args.format != "json":
            print("Error: lab mode only exports json.", file=sys.stderr)
            return 1
        weeks = parse_lab_weeks(html, settings=settings)
        for w in weeks:
            status = "open" if w.is_available else "closed"
            print(f"Week {w.week_number:<3} {w.submission_date:<12} {status:<6} {w.experiment_title[:45]}")
        out_path = _out_path(args.output, ".json")
        export_records_json(weeks, out_path)
        print(f"Exported {len(weeks)} lab week(s) to {out_path}")
        return 0

    print(
        "No mode specified. Use --attendance-html for a saved Course Content page "
        "or --lab-html for a saved lab record page.",
        file=sys.stderr,
    )
    return 1


if __name__ == "__main__":
    sys.exit(main())
