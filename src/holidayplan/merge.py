"""Block merger: collapse touching suggestions into single blocks.

Two blocks touch when they overlap, sit on consecutive days, or are separated
only by off-days.  The merged block's counts are always recomputed over the
union range; adding the two counts would double count shared off-days.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable

from holidayplan.candidates import Kind, Meta
from holidayplan.days import HolidaySet, count_days_between, count_workdays, only_off_days_between
from holidayplan.describe import describe_manual, describe_merged
from holidayplan.suggestion import Suggestion


def ranges_touch(
    a_start: datetime.date,
    a_end: datetime.date,
    b_start: datetime.date,
    b_end: datetime.date,
    holidays: HolidaySet,
) -> bool:
    """True when the two ranges would form one continuous break."""
    if a_start > b_start:
        a_start, a_end, b_start, b_end = b_start, b_end, a_start, a_end
    if b_start <= a_end:
        return True
    return only_off_days_between(a_end, b_start, holidays)


def blocks_touch(a: Suggestion, b: Suggestion, holidays: HolidaySet) -> bool:
    return ranges_touch(a.start_date, a.end_date, b.start_date, b.end_date, holidays)


def _strength(s: Suggestion) -> float:
    return s.score if s.score is not None else s.ratio


def _merge_pair(
    last: Suggestion, cur: Suggestion, holidays: HolidaySet, lang: str
) -> Suggestion:
    start = min(last.start_date, cur.start_date)
    end = max(last.end_date, cur.end_date)
    used = count_workdays(start, end, holidays)
    total = count_days_between(start, end)

    if last.is_manual and cur.is_manual:
        merged = last._replace(
            start_date=start,
            end_date=end,
            vacation_days_used=used,
            total_days_off=total,
            is_merged=last.is_merged or cur.is_merged,
            note=last.note or cur.note,
            meta=None,
            score=None,
        )
        return describe_manual(merged, lang)

    if last.is_manual or cur.is_manual:
        manual, generated = (last, cur) if last.is_manual else (cur, last)
        merged = manual._replace(
            start_date=start,
            end_date=end,
            vacation_days_used=used,
            total_days_off=total,
            is_merged=True,
            meta=None,
            score=None,
        )
        return describe_merged(
            merged,
            generated_used=generated.vacation_days_used,
            gain=total - manual.total_days_off,
            lang=lang,
        )

    keep = last if _strength(last) >= _strength(cur) else cur
    # Descriptions are rebuilt by the caller for the new range.
    return last._replace(
        start_date=start,
        end_date=end,
        vacation_days_used=used,
        total_days_off=total,
        description="",
        reason=None,
        roi=None,
        efficiency=None,
        meta=keep.meta or Meta(Kind.MERGED),
        score=None,
    )


def merge_selections(
    blocks: Iterable[Suggestion], holidays: HolidaySet, lang: str = "en"
) -> list[Suggestion]:
    """Merge overlapping or touching blocks; result is sorted by start date.

    A manual block merged with a generated one stays manual, keeps its id and
    is flagged ``is_merged``.  Merging an already merged list changes nothing.
    """
    ordered = sorted(blocks, key=lambda s: (s.start_date, s.end_date))
    if not ordered:
        return []

    out = [ordered[0]]
    for cur in ordered[1:]:
        last = out[-1]
        if blocks_touch(last, cur, holidays):
            out[-1] = _merge_pair(last, cur, holidays, lang)
        else:
            out.append(cur)
    return out
