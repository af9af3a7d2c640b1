"""Built-in public holiday presets and holiday file loading.

Each preset computes the public holidays of a country for a given year.
US presets use *observed* dates: if a holiday falls on Saturday the observed
date is the preceding Friday; if it falls on Sunday the observed date is the
following Monday.  Norway and the Netherlands do not move holidays.
"""

from __future__ import annotations

import datetime
import json
import pathlib
from collections.abc import Callable, Iterable
from typing import NamedTuple

from loguru import logger

from holidayplan.errors import InvalidInputError
from holidayplan.suggestion import parse_date


class Holiday(NamedTuple):
    """A public holiday: date plus English and local display names."""

    date: datetime.date
    name: str
    local_name: str = ""

    def display_name(self, lang: str = "en") -> str:
        if lang != "en" and self.local_name:
            return self.local_name
        return self.name or self.local_name


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _nth_weekday(year: int, month: int, weekday: int, n: int) -> datetime.date:
    """Return the *n*-th occurrence of *weekday* in *month* of *year*.

    *weekday* follows ``datetime`` convention: 0 = Monday … 6 = Sunday.
    *n* is 1-based (1 = first, 2 = second, …).
    """
    first = datetime.date(year, month, 1)
    delta = (weekday - first.weekday()) % 7
    first_occurrence = first + datetime.timedelta(days=delta)
    return first_occurrence + datetime.timedelta(weeks=n - 1)


def _last_weekday(year: int, month: int, weekday: int) -> datetime.date:
    """Return the last occurrence of *weekday* in *month* of *year*."""
    if month == 12:
        last = datetime.date(year, 12, 31)
    else:
        last = datetime.date(year, month + 1, 1) - datetime.timedelta(days=1)
    delta = (last.weekday() - weekday) % 7
    return last - datetime.timedelta(days=delta)


def _observed(d: datetime.date) -> datetime.date:
    """Shift a holiday to its *observed* date (Sat→Fri, Sun→Mon)."""
    if d.weekday() == 5:  # Saturday
        return d - datetime.timedelta(days=1)
    if d.weekday() == 6:  # Sunday
        return d + datetime.timedelta(days=1)
    return d


def easter_sunday(year: int) -> datetime.date:
    """Western (Gregorian) Easter Sunday, anonymous Gregorian algorithm."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return datetime.date(year, month, day + 1)


def _easter_offset(year: int, days: int) -> datetime.date:
    return easter_sunday(year) + datetime.timedelta(days=days)


# ---------------------------------------------------------------------------
# Country presets
# ---------------------------------------------------------------------------

PRESETS: dict[str, str] = {
    "nl": "Netherlands public holidays",
    "no": "Norway public holidays",
    "us": "United States federal holidays",
}


def us_holidays(year: int) -> list[Holiday]:
    """US federal holidays (observed) for *year*."""
    return sorted(
        [
            Holiday(_observed(datetime.date(year, 1, 1)), "New Year's Day"),
            Holiday(_nth_weekday(year, 1, 0, 3), "Martin Luther King Jr. Day"),
            Holiday(_nth_weekday(year, 2, 0, 3), "Presidents' Day"),
            Holiday(_last_weekday(year, 5, 0), "Memorial Day"),
            Holiday(_observed(datetime.date(year, 6, 19)), "Juneteenth"),
            Holiday(_observed(datetime.date(year, 7, 4)), "Independence Day"),
            Holiday(_nth_weekday(year, 9, 0, 1), "Labor Day"),
            Holiday(_nth_weekday(year, 11, 3, 4), "Thanksgiving"),
            Holiday(_observed(datetime.date(year, 12, 25)), "Christmas Day"),
        ]
    )


def no_holidays(year: int) -> list[Holiday]:
    """Norwegian public holidays for *year*."""
    return sorted(
        [
            Holiday(datetime.date(year, 1, 1), "New Year's Day", "Første nyttårsdag"),
            Holiday(_easter_offset(year, -3), "Maundy Thursday", "Skjærtorsdag"),
            Holiday(_easter_offset(year, -2), "Good Friday", "Langfredag"),
            Holiday(_easter_offset(year, 0), "Easter Sunday", "Første påskedag"),
            Holiday(_easter_offset(year, 1), "Easter Monday", "Andre påskedag"),
            Holiday(datetime.date(year, 5, 1), "Labour Day", "Arbeidernes dag"),
            Holiday(datetime.date(year, 5, 17), "Constitution Day", "Grunnlovsdag"),
            Holiday(_easter_offset(year, 39), "Ascension Day", "Kristi himmelfartsdag"),
            Holiday(_easter_offset(year, 49), "Whit Sunday", "Første pinsedag"),
            Holiday(_easter_offset(year, 50), "Whit Monday", "Andre pinsedag"),
            Holiday(datetime.date(year, 12, 25), "Christmas Day", "Første juledag"),
            Holiday(datetime.date(year, 12, 26), "St. Stephen's Day", "Andre juledag"),
        ]
    )


def nl_holidays(year: int) -> list[Holiday]:
    """Dutch public holidays for *year*."""
    kings_day = datetime.date(year, 4, 27)
    if kings_day.weekday() == 6:
        kings_day -= datetime.timedelta(days=1)
    return sorted(
        [
            Holiday(datetime.date(year, 1, 1), "New Year's Day", "Nieuwjaarsdag"),
            Holiday(_easter_offset(year, -2), "Good Friday", "Goede Vrijdag"),
            Holiday(_easter_offset(year, 0), "Easter Sunday", "Eerste Paasdag"),
            Holiday(_easter_offset(year, 1), "Easter Monday", "Tweede Paasdag"),
            Holiday(kings_day, "King's Day", "Koningsdag"),
            Holiday(datetime.date(year, 5, 5), "Liberation Day", "Bevrijdingsdag"),
            Holiday(_easter_offset(year, 39), "Ascension Day", "Hemelvaartsdag"),
            Holiday(_easter_offset(year, 49), "Whit Sunday", "Eerste Pinksterdag"),
            Holiday(_easter_offset(year, 50), "Whit Monday", "Tweede Pinksterdag"),
            Holiday(datetime.date(year, 12, 25), "Christmas Day", "Eerste Kerstdag"),
            Holiday(datetime.date(year, 12, 26), "St. Stephen's Day", "Tweede Kerstdag"),
        ]
    )


_PRESET_FNS: dict[str, Callable[[int], list[Holiday]]] = {
    "nl": nl_holidays,
    "no": no_holidays,
    "us": us_holidays,
}


def get_holidays(country: str, year: int) -> list[Holiday]:
    """Return the holidays for the given *country* preset and *year*.

    Raises ``KeyError`` if the country is not supported.
    """
    fn = _PRESET_FNS.get(country.lower())
    if fn is None:
        supported = ", ".join(sorted(PRESETS))
        msg = f"Unknown country preset {country!r}. Supported: {supported}"
        raise KeyError(msg)
    return fn(year)


# ---------------------------------------------------------------------------
# Holiday lists from data
# ---------------------------------------------------------------------------


def holidays_from_records(records: Iterable[dict[str, object]]) -> list[Holiday]:
    """Build holidays from ``{date, name, localName}`` records.

    This is the shape of the Nager.Date public holiday API and of the holiday
    list stored inside a plan file.
    """
    out: list[Holiday] = []
    for rec in records:
        if "date" not in rec:
            raise InvalidInputError(f"Holiday record without a date: {rec!r}")
        out.append(
            Holiday(
                date=parse_date(rec["date"]),
                name=str(rec.get("name") or ""),
                local_name=str(rec.get("localName") or ""),
            )
        )
    return dedupe_holidays(out)


def holidays_to_records(holidays: Iterable[Holiday]) -> list[dict[str, str]]:
    return [
        {"date": h.date.isoformat(), "name": h.name, "localName": h.local_name}
        for h in holidays
    ]


def load_holidays_file(path: str | pathlib.Path) -> list[Holiday]:
    """Load a JSON list of holiday records."""
    p = pathlib.Path(path)
    try:
        data = json.loads(p.read_text())
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"Invalid JSON in holiday file {str(p)!r}: {exc}") from None

    if not isinstance(data, list):
        raise InvalidInputError(f"Holiday file {str(p)!r} must contain a JSON list.")

    holidays = holidays_from_records(data)
    logger.debug("Loaded {} holidays from {}", len(holidays), p)
    return holidays


def dedupe_holidays(holidays: Iterable[Holiday]) -> list[Holiday]:
    """Sort by date, keeping the first holiday seen for each date."""
    by_date: dict[datetime.date, Holiday] = {}
    for h in holidays:
        by_date.setdefault(h.date, h)
    return [by_date[d] for d in sorted(by_date)]


def holidays_for_year(holidays: Iterable[Holiday], year: int) -> list[Holiday]:
    return [h for h in holidays if h.date.year == year]
