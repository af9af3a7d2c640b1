from __future__ import annotations

import datetime

from holidayplan.holidays import Holiday
from holidayplan.optimizer import generate_plan
from holidayplan.plan import Plan
from holidayplan.preferences import Preference
from holidayplan.report import format_calendar_view, format_ics, format_plan

HOLIDAYS = [Holiday(datetime.date(2025, 5, 29), "Ascension Day", "Kristi himmelfartsdag")]


def _plan() -> Plan:
    return Plan.create(
        generate_plan(HOLIDAYS, 1, 2025, "balanced"),
        country="no",
        available_days=1,
        preference=Preference.BALANCED,
        holidays=HOLIDAYS,
    )


class TestFormatting:
    def test_format_plan(self) -> None:
        output = format_plan(_plan())
        assert "VACATION PLAN 2025 (NO)" in output
        assert "Vacation days used: 1 / 1" in output
        assert "Total days off: 4" in output
        assert "Friday, May 30, 2025" in output

    def test_format_empty_plan(self) -> None:
        output = format_plan(_plan().with_suggestions([]))
        assert "(none)" in output

    def test_calendar_marks_whole_blocks(self) -> None:
        output = format_calendar_view(_plan())
        assert "Calendar View 2025" in output
        assert "May 2025" in output
        # Ascension and the weekend sit inside the block; Friday is the day off.
        assert " 29o 30V 31o" in output
        assert "June 2025" in output
        assert "  1o" in output
        assert output.count("#1   May 29 - Jun 01  1 vacation day, 4 days off") == 2
        assert "January" not in output

    def test_calendar_holiday_outside_blocks(self) -> None:
        christmas = Holiday(datetime.date(2025, 12, 25), "Christmas Day")
        output = format_calendar_view(_plan()._replace(holidays=[*HOLIDAYS, christmas]))
        assert "December 2025" in output
        assert " 25H" in output
        december = output[output.index("December 2025") :]
        assert "#1" not in december

    def test_calendar_manual_days(self) -> None:
        plan = _plan()
        manual = plan.suggestions[0]._replace(is_manual=True)
        output = format_calendar_view(plan.with_suggestions([manual]))
        assert " 30M" in output
        assert " 30V" not in output

    def test_calendar_empty(self) -> None:
        plan = _plan().with_suggestions([])._replace(holidays=[])
        assert format_calendar_view(plan) == ""


class TestIcs:
    def test_one_event_per_block(self) -> None:
        plan = _plan()
        output = format_ics(plan, stamp=datetime.date(2025, 1, 2))
        lines = output.split("\r\n")
        assert lines[0] == "BEGIN:VCALENDAR"
        assert lines[-2:] == ["END:VCALENDAR", ""]
        assert output.count("BEGIN:VEVENT") == 1
        assert "UID:2025-no-1@holidayplan" in lines
        assert "DTSTAMP:20250102T000000Z" in lines
        assert "DTSTART;VALUE=DATE:20250529" in lines
        # All-day DTEND is exclusive.
        assert "DTEND;VALUE=DATE:20250602" in lines
        assert any(line.startswith("SUMMARY:") and len(line) > len("SUMMARY:") for line in lines)

    def test_text_is_escaped(self) -> None:
        plan = _plan()
        s = plan.suggestions[0]._replace(description="Bridge; long, weekend", note="a\\b")
        output = format_ics(plan.with_suggestions([s]), stamp=datetime.date(2025, 1, 2))
        assert "SUMMARY:Bridge\\; long\\, weekend" in output
        assert "\\na\\\\b" in output

    def test_empty_plan(self) -> None:
        output = format_ics(_plan().with_suggestions([]))
        assert "BEGIN:VEVENT" not in output
        assert output.endswith("END:VCALENDAR\r\n")
