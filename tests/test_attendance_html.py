"""Tests for attendance_html.py – Course Content page parser."""
import json

import pytest

from portal_attendance.attendance_html import (
    ROW_DATA,
    ROW_HEADER,
    ROW_SKIP,
    aggregate_rows,
    classify_row,
    count_statuses,
    course_header_re,
    parse_attendance_html,
)
from portal_attendance.models import DayCount
from portal_attendance.settings import EngineSettings


def _make_page(sections: list[tuple[str, list[tuple[str, str]]]]) -> str:
    """
    Build a minimal course-content page.
    sections: list of (header_text, [(date_text, status_text), ...])
    """
    html = "<html><body><table>"
    html += "<tr><th>S.No</th><th>Date</th><th>Period</th><th>Topics Covered</th><th>Status</th></tr>"
    for header, rows in sections:
        html += f'<tr><td colspan="5"><b>{header}</b></td></tr>'
        for i, (date_text, status) in enumerate(rows, start=1):
            html += (
                f"<tr><td>{i}</td><td>{date_text}</td><td>1</td>"
                f"<td><span>Lecture {i}</span></td><td>{status}</td></tr>"
            )
    html += "</table></body></html>"
    return html


class TestClassifyRow:
    def test_header(self):
        row = classify_row("AB101 - DATA STRUCTURES")
        assert row.kind == ROW_HEADER
        assert row.code == "AB101"
        assert row.name == "DATA STRUCTURES"

    def test_header_colon_separator(self):
        row = classify_row("ACS002: OPERATING SYSTEMS")
        assert (row.kind, row.code, row.name) == (ROW_HEADER, "ACS002", "OPERATING SYSTEMS")

    def test_header_space_separator(self):
        row = classify_row("AHS010 ENGLISH")
        assert (row.code, row.name) == ("AHS010", "ENGLISH")

    def test_alternate_code(self):
        header_re = course_header_re(EngineSettings(alternate_course_codes=("XLAB",)))
        row = classify_row("XLAB - MENTORING", header_re)
        assert (row.kind, row.code) == (ROW_HEADER, "XLAB")

    def test_data(self):
        assert classify_row("1 12 JAN, 2025 PRESENT").kind == ROW_DATA

    def test_skip(self):
        assert classify_row("").kind == ROW_SKIP
        assert classify_row("S.NO DATE").kind == ROW_SKIP
        assert classify_row("TOPICS COVERED").kind == ROW_SKIP

    def test_code_without_name_is_not_header(self):
        assert classify_row("AB101").kind == ROW_DATA


class TestCountStatuses:
    def test_multiple_periods(self):
        assert count_statuses("1 12 JAN 2025 PRESENT PRESENT ABSENT") == (2, 1)

    def test_none(self):
        assert count_statuses("1 12 JAN 2025") == (0, 0)


class TestAggregateRows:
    def test_rows_before_header_ignored(self):
        tally = aggregate_rows(["1 PRESENT", "AB101 - DS", "2 ABSENT"])
        assert tally.subjects["AB101"].present == 0
        assert tally.subjects["AB101"].absent == 1

    def test_header_switches_course(self):
        tally = aggregate_rows([
            "AB101 - DS", "1 12 JAN 2025 PRESENT",
            "AB102 - OS", "1 12 JAN 2025 ABSENT",
        ])
        assert tally.current_course == "AB102"
        assert (tally.subjects["AB101"].present, tally.subjects["AB101"].absent) == (1, 0)
        assert (tally.subjects["AB102"].present, tally.subjects["AB102"].absent) == (0, 1)
        assert (tally.dates["12-01-2025"].present, tally.dates["12-01-2025"].absent) == (1, 1)

    def test_order_matters(self):
        a = aggregate_rows(["AB101 - DS", "1 PRESENT", "AB102 - OS"])
        b = aggregate_rows(["AB101 - DS", "AB102 - OS", "1 PRESENT"])
        assert a.subjects["AB101"].present == 1
        assert b.subjects["AB101"].present == 0
        assert b.subjects["AB102"].present == 1

    def test_repeated_header_keeps_counts(self):
        tally = aggregate_rows(["AB101 - DS", "1 PRESENT", "AB101 - DS", "2 PRESENT"])
        assert tally.subjects["AB101"].present == 2


class TestParseAttendanceHtml:
    def test_empty_input(self):
        data = parse_attendance_html("<html><body></body></html>")
        assert data.subjects == {}
        assert data.to_dict()["overall"] == {
            "present": 0, "absent": 0, "percentage": 0, "safeBunkPeriods": 0,
        }
        assert data.streak == 0
        assert data.date_attendance == {}

    def test_none_and_garbage_input(self):
        assert parse_attendance_html(None).subjects == {}
        assert parse_attendance_html("<tr><td>unterminated").subjects == {}

    def test_single_course_mixed_periods(self):
        html = _make_page([
            ("AB101 - Data Structures", [
                ("12 Jan, 2025", "PRESENT PRESENT ABSENT"),
                ("", "PRESENT PRESENT ABSENT"),
            ]),
        ])
        data = parse_attendance_html(html)
        s = data.subjects["AB101"]
        assert s.name == "DATA STRUCTURES"
        assert (s.present, s.absent) == (4, 2)
        assert s.percentage == 66.67
        assert s.safe_bunk_periods == 0
        assert data.date_attendance == {"12-01-2025": DayCount(2, 1)}

    def test_overall_sums_subjects(self):
        html = _make_page([
            ("AB101 - Data Structures", [("12 Jan, 2025", "PRESENT"), ("13 Jan, 2025", "PRESENT")]),
            ("AB102 - Operating Systems", [("12-01-2025", "ABSENT"), ("14/01/2025", "PRESENT")]),
        ])
        data = parse_attendance_html(html)
        assert (data.overall.present, data.overall.absent) == (3, 1)
        assert data.overall.percentage == 75.0
        assert data.overall.safe_bunk_periods == 0
        assert data.date_attendance["12-01-2025"] == DayCount(1, 1)

    def test_day_metrics(self):
        html = _make_page([
            ("AB101 - Data Structures", [
                ("10 Jan, 2025", "ABSENT"),
                ("11 Jan, 2025", "PRESENT"),
                ("12 Jan, 2025", "PRESENT"),
                ("13 Jan, 2025", "PRESENT"),
            ]),
        ])
        data = parse_attendance_html(html)
        assert data.streak == 3
        assert data.attended_days == 3
        assert data.absent_days == 1
        assert data.safe_bunk_days == 0

    def test_per_subject_day_fields(self):
        html = _make_page([
            ("AB101 - Data Structures", [
                ("10 Jan, 2025", "PRESENT"),
                ("11 Jan, 2025", "PRESENT"),
                ("12 Jan, 2025", "PRESENT"),
            ]),
            ("AB102 - Operating Systems", [("12 Jan, 2025", "ABSENT")]),
        ])
        data = parse_attendance_html(html)
        ds = data.subjects["AB101"]
        os_ = data.subjects["AB102"]
        assert (ds.attended_days, ds.absent_days, ds.safe_bunk_days) == (3, 0, 1)
        assert (os_.attended_days, os_.absent_days, os_.safe_bunk_days) == (0, 1, 0)

    def test_date_without_year(self):
        html = _make_page([("AB101 - Data Structures", [("5 Mar", "PRESENT")])])
        data = parse_attendance_html(html)
        assert list(data.date_attendance) == ["05-03-2025"]

    def test_date_without_year_custom_default(self):
        html = _make_page([("AB101 - Data Structures", [("5 Mar", "PRESENT")])])
        data = parse_attendance_html(html, EngineSettings(default_year=2026))
        assert list(data.date_attendance) == ["05-03-2026"]

    def test_malformed_date_keeps_counts(self):
        html = _make_page([("AB101 - Data Structures", [("32 Jan 2025", "PRESENT ABSENT")])])
        data = parse_attendance_html(html)
        assert data.date_attendance == {}
        s = data.subjects["AB101"]
        assert (s.present, s.absent) == (1, 1)
        assert data.streak == 0

    def test_json_serializable(self):
        html = _make_page([("AB101 - Data Structures", [("12 Jan, 2025", "PRESENT")])])
        payload = json.loads(json.dumps(parse_attendance_html(html).to_dict()))
        assert set(payload) == {
            "subjects", "overall", "dateAttendance", "streak",
            "attendedDays", "absentDays", "safeBunkDays",
        }
        assert payload["subjects"]["AB101"]["safeBunkPeriods"] == 0
        assert payload["dateAttendance"] == {"12-01-2025": {"present": 1, "absent": 0}}

    @pytest.mark.parametrize("statuses", ["PRESENT", "ABSENT", "PRESENT ABSENT ABSENT", ""])
    def test_percentage_bounds(self, statuses):
        html = _make_page([("AB101 - Data Structures", [("12 Jan, 2025", statuses)])])
        data = parse_attendance_html(html)
        for s in list(data.subjects.values()) + [data.overall]:
            assert 0 <= s.percentage <= 100
            assert s.safe_bunk_periods >= 0
            if s.present + s.absent == 0:
                assert s.percentage == 0


class TestMarkupTolerance:
    def test_rows_without_end_tags(self):
        html = (
            "<table><tr><td>AB101 - Data Structures"
            "<tr><td>1<td>12 Jan, 2025<td>PRESENT"
            "<tr><td>2<td>13 Jan, 2025<td>PRESENT</table>"
        )
        data = parse_attendance_html(html)
        s = data.subjects["AB101"]
        assert (s.present, s.absent) == (2, 0)
        assert data.streak == 2

    def test_header_sharing_row_with_nested_table(self):
        html = (
            "<table><tr><td>AB101 - DS</td></tr>"
            "<tr><td>AB102 - OS"
            "<table><tr><td>1</td><td>12 Jan, 2025</td><td>PRESENT</td></tr></table>"
            "</td></tr></table>"
        )
        data = parse_attendance_html(html)
        assert data.subjects["AB101"].present == 0
        assert data.subjects["AB102"].present == 1
        assert data.subjects["AB102"].name == "OS"

    def test_header_needs_a_name(self):
        assert classify_row("AB101 -").kind == ROW_DATA
        assert classify_row("AB101 : -").kind == ROW_DATA


class TestResultIsReadOnly:
    def _data(self):
        html = _make_page([("AB101 - Data Structures", [("12 Jan, 2025", "PRESENT")])])
        return parse_attendance_html(html)

    def test_date_attendance_cannot_change(self):
        data = self._data()
        with pytest.raises(TypeError):
            data.date_attendance["13-01-2025"] = DayCount(0, 3)
        assert data.streak == 1
        assert list(data.date_attendance) == ["12-01-2025"]

    def test_subjects_cannot_change(self):
        data = self._data()
        with pytest.raises(TypeError):
            del data.subjects["AB101"]
        assert "AB101" in data.subjects
