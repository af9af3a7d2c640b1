"""Calendar model: weekends, holidays and maximal runs of off-days.

An *off-day* is a weekend day or a public holiday; every other day is a
*workday*.  An *off-block* is a maximal run of consecutive off-days.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable, Iterator
from typing import NamedTuple

ONE_DAY = datetime.timedelta(days=1)

HolidaySet = frozenset[datetime.date]


def holiday_set(dates: Iterable[datetime.date]) -> HolidaySet:
    return frozenset(dates)


def is_weekend(d: datetime.date) -> bool:
    return d.weekday() >= 5


def is_off_day(d: datetime.date, holidays: HolidaySet) -> bool:
    return is_weekend(d) or d in holidays


def is_summer_month(d: datetime.date) -> bool:
    """June, July and August."""
    return 6 <= d.month <= 8


def iter_days(start: datetime.date, end: datetime.date) -> Iterator[datetime.date]:
    """Yield every date from *start* to *end*, inclusive."""
    d = start
    while d <= end:
        yield d
        d += ONE_DAY


def count_days_between(start: datetime.date, end: datetime.date) -> int:
    """Inclusive number of calendar days in ``[start, end]``."""
    return (end - start).days + 1


def count_workdays(start: datetime.date, end: datetime.date, holidays: HolidaySet) -> int:
    return sum(1 for d in iter_days(start, end) if not is_off_day(d, holidays))


def workdays_in_range(
    start: datetime.date, end: datetime.date, holidays: HolidaySet
) -> list[datetime.date]:
    return [d for d in iter_days(start, end) if not is_off_day(d, holidays)]


def only_off_days_between(
    first: datetime.date, second: datetime.date, holidays: HolidaySet
) -> bool:
    """True when every day strictly between *first* and *second* is an off-day.

    Also true when the two dates are adjacent (nothing lies between them).
    """
    return all(
        is_off_day(d, holidays) for d in iter_days(first + ONE_DAY, second - ONE_DAY)
    )


def expand_to_contiguous_days(
    start: datetime.date, end: datetime.date, holidays: HolidaySet
) -> tuple[datetime.date, datetime.date]:
    """Grow ``[start, end]`` outwards through every adjacent off-day."""
    while is_off_day(start - ONE_DAY, holidays):
        start -= ONE_DAY
    while is_off_day(end + ONE_DAY, holidays):
        end += ONE_DAY
    return start, end


def ranges_overlap(
    a_start: datetime.date,
    a_end: datetime.date,
    b_start: datetime.date,
    b_end: datetime.date,
) -> bool:
    return not (a_end < b_start or b_end < a_start)


def days_apart(
    a_start: datetime.date,
    a_end: datetime.date,
    b_start: datetime.date,
    b_end: datetime.date,
) -> int:
    """Calendar distance between two ranges (0 when they overlap)."""
    if a_start > b_end:
        return (a_start - b_end).days
    if b_start > a_end:
        return (b_start - a_end).days
    return 0


# ---------------------------------------------------------------------------
# Off-blocks
# ---------------------------------------------------------------------------


class OffBlock(NamedTuple):
    """A maximal run of consecutive off-days, clipped to the planning year."""

    start: datetime.date
    end: datetime.date

    def has_holiday(self, holidays: HolidaySet) -> bool:
        return any(d in holidays for d in iter_days(self.start, self.end))


def build_off_blocks(year: int, holidays: HolidaySet) -> list[OffBlock]:
    """Return the off-blocks covering Jan 1 to Dec 31 of *year*, in order."""
    blocks: list[OffBlock] = []
    block_start: datetime.date | None = None
    last = datetime.date(year, 12, 31)

    for d in iter_days(datetime.date(year, 1, 1), last):
        if is_off_day(d, holidays):
            if block_start is None:
                block_start = d
        elif block_start is not None:
            blocks.append(OffBlock(block_start, d - ONE_DAY))
            block_start = None

    if block_start is not None:
        blocks.append(OffBlock(block_start, last))

    return blocks
