"""Text and iCalendar rendering of plans."""

from __future__ import annotations

import calendar
import datetime

from holidayplan.days import holiday_set, is_off_day, iter_days
from holidayplan.plan import Plan
from holidayplan.suggestion import Suggestion


def format_plan(plan: Plan) -> str:
    """Return a human-readable summary of a vacation plan."""
    lines: list[str] = []
    w = 64

    lines.append("")
    lines.append("=" * w)
    lines.append(f"  VACATION PLAN {plan.year} ({plan.country.upper() or 'custom holidays'})")
    lines.append(f"  Preference: {plan.preference.value}{'' if plan.is_premium else ' (free)'}")
    lines.append("=" * w)

    lines.append(f"  Vacation days used: {plan.used_days} / {plan.available_days}")
    lines.append(f"  Total days off: {plan.total_days_off}")
    if plan.used_days > 0:
        lines.append(
            f"  Efficiency: {plan.total_days_off / plan.used_days:.1f}x "
            "(days off per vacation day)"
        )
    lines.append("")

    lines.append("  Suggestions:")
    lines.append("  " + "-" * (w - 4))

    if not plan.suggestions:
        lines.append("  (none)")

    for s in plan.suggestions:
        n = s.total_days_off
        day_word = "day" if n == 1 else "days"
        if s.start_date == s.end_date:
            dr = s.start_date.strftime("%a, %b %d")
        else:
            dr = f"{s.start_date.strftime('%a, %b %d')} -> {s.end_date.strftime('%a, %b %d')}"
        tags = []
        if s.is_manual:
            tags.append("manual")
        if s.is_merged:
            tags.append("merged")
        tag = f"  [{', '.join(tags)}]" if tags else ""
        lines.append(f"  #{s.id:<3} {dr}  ({n} {day_word}){tag}")
        lines.append(f"       {s.description}")
        if s.reason:
            lines.append(f"       {s.reason}")
        if s.note:
            lines.append(f"       Note: {s.note}")
        lines.append("")

    hs = holiday_set(h.date for h in plan.holidays)
    vacation_days = [
        d
        for s in plan.suggestions
        for d in iter_days(s.start_date, s.end_date)
        if not is_off_day(d, hs)
    ]
    lines.append("  Days to request off:")
    for d in vacation_days:
        lines.append(f"    -> {d.strftime('%A, %B %d, %Y')}")

    return "\n".join(lines)


CALENDAR_LEGEND = "V=vacation day  M=manual day  o=off inside a block  H=holiday"


def _day_marks(plan: Plan) -> dict[datetime.date, str]:
    """Map each marked date of *plan* to its one-letter calendar mark."""
    hs = holiday_set(h.date for h in plan.holidays)
    marks = {d: "H" for d in hs if d.year == plan.year}
    for s in plan.suggestions:
        for d in iter_days(s.start_date, s.end_date):
            if is_off_day(d, hs):
                marks[d] = "o"
            else:
                marks[d] = "M" if s.is_manual else "V"
    return marks


def _block_line(s: Suggestion) -> str:
    used = s.vacation_days_used
    day_word = "day" if used == 1 else "days"
    return (
        f"    #{s.id:<3} {s.start_date.strftime('%b %d')} - {s.end_date.strftime('%b %d')}"
        f"  {used} vacation {day_word}, {s.total_days_off} days off"
    )


def format_calendar_view(plan: Plan) -> str:
    """Return a calendar of every month that holds a block or a holiday.

    Whole blocks are marked, so the weekend and holiday days a block
    swallows read differently from holidays on their own.  Each month
    is followed by the blocks that touch it.
    """
    marks = _day_marks(plan)
    if not marks:
        return ""

    lines = ["", f"  Calendar View {plan.year}", f"  Legend: {CALENDAR_LEGEND}", ""]

    for month in sorted({d.month for d in marks if d.year == plan.year}):
        first = datetime.date(plan.year, month, 1)
        last = first.replace(day=calendar.monthrange(plan.year, month)[1])

        lines.append(f"  {calendar.month_name[month]} {plan.year}")
        lines.append("  Mo  Tu  We  Th  Fr  Sa  Su")
        for week in calendar.monthcalendar(plan.year, month):
            cells = []
            for day in week:
                if day == 0:
                    cells.append("    ")
                    continue
                mark = marks.get(datetime.date(plan.year, month, day), " ")
                cells.append(f"{day:>3}{mark}")
            lines.append(" " + "".join(cells).rstrip())

        blocks = [s for s in plan.suggestions if s.start_date <= last and s.end_date >= first]
        lines.extend(_block_line(s) for s in blocks)
        lines.append("")

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# iCalendar
# ---------------------------------------------------------------------------


def _escape_ics(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def _ics_date(d: datetime.date) -> str:
    return d.strftime("%Y%m%d")


def format_ics(plan: Plan, stamp: datetime.date | None = None) -> str:
    """Return *plan* as an iCalendar document with one all-day event per block.

    DTEND is exclusive for all-day events, so it is the day after the
    block ends.  *stamp* sets DTSTAMP and defaults to today.
    """
    stamp = stamp or datetime.date.today()
    country = plan.country.upper() or "custom"

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//holidayplan//Vacation Plan//EN",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]
    for s in plan.suggestions:
        details = "\n".join(
            [
                f"{s.vacation_days_used} vacation days, {s.total_days_off} days off",
                *(text for text in (s.reason, s.note) if text),
            ]
        )
        lines.extend(
            [
                "BEGIN:VEVENT",
                f"UID:{plan.year}-{plan.country or 'custom'}-{s.id}@holidayplan",
                f"DTSTAMP:{_ics_date(stamp)}T000000Z",
                f"DTSTART;VALUE=DATE:{_ics_date(s.start_date)}",
                f"DTEND;VALUE=DATE:{_ics_date(s.end_date + datetime.timedelta(days=1))}",
                f"SUMMARY:{_escape_ics(s.description or 'Vacation')}",
                f"DESCRIPTION:{_escape_ics(details)}",
                f"LOCATION:{country}",
                "STATUS:CONFIRMED",
                "TRANSP:TRANSPARENT",
                "END:VEVENT",
            ]
        )
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"
