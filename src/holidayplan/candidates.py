"""Candidate generation: bridges between off-blocks and holiday extensions.

A *bridge* (``gap``) spends the workdays between two neighbouring off-blocks
so they become one continuous break.  An *extension* spends the workdays just
before or after a holiday-containing off-block to make it longer.  Every
candidate is expanded through adjacent off-days, so its range always starts
and ends on the widest possible contiguous break.
"""

from __future__ import annotations

import datetime
import enum
from collections.abc import Iterable
from typing import NamedTuple

from holidayplan.days import (
    ONE_DAY,
    HolidaySet,
    OffBlock,
    count_days_between,
    count_workdays,
    expand_to_contiguous_days,
    is_off_day,
    iter_days,
    workdays_in_range,
)


class Kind(str, enum.Enum):
    """How a block came to be."""

    GAP = "gap"
    EXTEND_BEFORE = "extend-before"
    EXTEND_AFTER = "extend-after"
    FILLER = "filler"
    MERGED = "merged"

    @property
    def is_extension(self) -> bool:
        return self in (Kind.EXTEND_BEFORE, Kind.EXTEND_AFTER)


class Meta(NamedTuple):
    """Strategy metadata attached to a generated block."""

    kind: Kind
    k: int | None = None


class Candidate(NamedTuple):
    """A proposed vacation block."""

    start_date: datetime.date
    end_date: datetime.date
    vacation_days_used: int
    total_days_off: int
    meta: Meta
    score: float | None = None

    @property
    def ratio(self) -> float:
        if self.vacation_days_used == 0:
            return float(self.total_days_off)
        return self.total_days_off / self.vacation_days_used

    @property
    def has_real_gain(self) -> bool:
        return self.total_days_off > self.vacation_days_used


def make_candidate(
    run_start: datetime.date,
    run_end: datetime.date,
    holidays: HolidaySet,
    meta: Meta,
) -> Candidate:
    """Expand the workday run ``[run_start, run_end]`` into a candidate."""
    start, end = expand_to_contiguous_days(run_start, run_end, holidays)
    return Candidate(
        start_date=start,
        end_date=end,
        vacation_days_used=count_workdays(start, end, holidays),
        total_days_off=count_days_between(start, end),
        meta=meta,
    )


def dedupe_candidates(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Keep the first candidate for every distinct ``(start, end)`` range."""
    seen: dict[tuple[datetime.date, datetime.date], Candidate] = {}
    for c in candidates:
        seen.setdefault((c.start_date, c.end_date), c)
    return list(seen.values())


def workday_runs(
    start: datetime.date, end: datetime.date, k: int, holidays: HolidaySet
) -> list[tuple[datetime.date, datetime.date]]:
    """Every run of *k* consecutive workdays inside ``[start, end]``."""
    days = workdays_in_range(start, end, holidays)
    return [(days[i], days[i + k - 1]) for i in range(len(days) - k + 1)]


def _gap_candidates(
    off_blocks: list[OffBlock], holidays: HolidaySet, max_k: int
) -> list[Candidate]:
    cands: list[Candidate] = []
    for a, b in zip(off_blocks, off_blocks[1:]):
        gap_start = a.end + ONE_DAY
        gap_end = b.start - ONE_DAY
        if gap_start > gap_end:
            continue
        for k in range(1, max_k + 1):
            for run_start, run_end in workday_runs(gap_start, gap_end, k, holidays):
                cands.append(make_candidate(run_start, run_end, holidays, Meta(Kind.GAP, k)))
    return cands


def _extension_candidates(
    off_blocks: list[OffBlock], holidays: HolidaySet, max_k: int, kind: Kind
) -> list[Candidate]:
    cands: list[Candidate] = []
    for blk in off_blocks:
        # Plain weekends are never extended.
        if not blk.has_holiday(holidays):
            continue

        for k in range(1, max_k + 1):
            if kind is Kind.EXTEND_BEFORE:
                run_start = blk.start - datetime.timedelta(days=k)
                run_end = blk.start - ONE_DAY
            else:
                run_start = blk.end + ONE_DAY
                run_end = blk.end + datetime.timedelta(days=k)

            # The run must be a clean stretch of workdays.
            if any(is_off_day(d, holidays) for d in iter_days(run_start, run_end)):
                continue
            cands.append(make_candidate(run_start, run_end, holidays, Meta(kind, k)))
    return cands


def generate_candidates(
    off_blocks: list[OffBlock],
    holidays: HolidaySet,
    max_k: int,
    mode: Kind,
) -> list[Candidate]:
    """Enumerate candidates of one *mode* using up to *max_k* workdays.

    *mode* is :attr:`Kind.GAP`, :attr:`Kind.EXTEND_BEFORE` or
    :attr:`Kind.EXTEND_AFTER`.  Candidates that do not give more days off than
    the vacation days they cost are dropped, and candidates that expand to the
    same range are reported once.
    """
    if mode is Kind.GAP:
        cands = _gap_candidates(off_blocks, holidays, max_k)
    elif mode.is_extension:
        cands = _extension_candidates(off_blocks, holidays, max_k, mode)
    else:
        raise ValueError(f"Cannot generate candidates for mode {mode.value!r}")

    return dedupe_candidates(c for c in cands if c.has_real_gain)
