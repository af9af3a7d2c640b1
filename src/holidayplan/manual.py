"""User edits to an existing suggestion list.

Adding a day grows it through neighbouring off-days, but never into another
suggestion.  Removing a day re-derives the workday groups left in its
suggestion and shrinks, deletes or splits the suggestion accordingly.  After
every edit the full list is merged again, so the totals of a plan are always
the sum of its suggestions.

All functions are pure: they take the current list and return a new one.
Callers persisting the result must serialize edits to the same plan.
"""

from __future__ import annotations

import datetime
from collections import Counter
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, NamedTuple

from holidayplan.days import (
    ONE_DAY,
    HolidaySet,
    count_days_between,
    count_workdays,
    holiday_set,
    is_off_day,
    is_weekend,
    only_off_days_between,
    workdays_in_range,
)
from holidayplan.describe import describe_generated, describe_manual
from holidayplan.errors import (
    BudgetExceededError,
    InvalidInputError,
    NoOpError,
    NotFoundError,
    SkippedDay,
)
from holidayplan.merge import merge_selections
from holidayplan.optimizer import VacationPlanner
from holidayplan.preferences import Preference
from holidayplan.suggestion import Suggestion, next_id, parse_date

if TYPE_CHECKING:
    from holidayplan.holidays import Holiday

# No manual day expands more than this many off-days in either direction.
MAX_EXPANSION_STEPS = 10

SKIP_WEEKEND = "weekend"
SKIP_HOLIDAY = "holiday"
SKIP_ALLOCATED = "already_allocated"


class ManualDay(NamedTuple):
    """A day the user wants off, with an optional note."""

    date: datetime.date
    note: str | None = None


class ManualRange(NamedTuple):
    start_date: datetime.date
    end_date: datetime.date
    vacation_days_used: int
    total_days_off: int


class AddResult(NamedTuple):
    suggestions: list[Suggestion]
    skipped_days: list[SkippedDay]


def _inside_any(d: datetime.date, blocks: Iterable[Suggestion]) -> bool:
    return any(b.start_date <= d <= b.end_date for b in blocks)


def expand_manual_day(
    start: datetime.date,
    end: datetime.date,
    holidays: HolidaySet,
    others: Sequence[Suggestion] = (),
    max_steps: int = MAX_EXPANSION_STEPS,
) -> ManualRange:
    """Grow ``[start, end]`` through adjacent off-days.

    Expansion stops at the first workday, at the edge of any block in
    *others*, or after *max_steps* days in each direction.
    """
    for _ in range(max_steps):
        prev = start - ONE_DAY
        if not is_off_day(prev, holidays) or _inside_any(prev, others):
            break
        start = prev

    for _ in range(max_steps):
        nxt = end + ONE_DAY
        if not is_off_day(nxt, holidays) or _inside_any(nxt, others):
            break
        end = nxt

    return ManualRange(
        start_date=start,
        end_date=end,
        vacation_days_used=count_workdays(start, end, holidays),
        total_days_off=count_days_between(start, end),
    )


def workday_groups(
    workdays: Sequence[datetime.date], holidays: HolidaySet
) -> list[list[datetime.date]]:
    """Split sorted workdays into groups joined only by off-days."""
    groups: list[list[datetime.date]] = []
    for w in workdays:
        if groups and only_off_days_between(groups[-1][-1], w, holidays):
            groups[-1].append(w)
        else:
            groups.append([w])
    return groups


def refresh_descriptions(
    suggestions: Iterable[Suggestion],
    holidays: Sequence[Holiday],
    preference: str | Preference = Preference.BALANCED,
    lang: str = "en",
    is_premium: bool = False,
) -> list[Suggestion]:
    """Describe every suggestion whose description was cleared by an edit."""
    pref = Preference.parse(preference)
    out: list[Suggestion] = []
    for s in suggestions:
        if not s.description:
            if s.is_manual:
                s = describe_manual(s, lang)
            else:
                s = describe_generated(s, holidays, pref, lang, detailed=is_premium)
        out.append(s)
    return out


def _find(existing: Sequence[Suggestion], suggestion_id: int) -> Suggestion:
    for s in existing:
        if s.id == suggestion_id:
            return s
    raise NotFoundError(f"Suggestion {suggestion_id} not found.")


def _as_manual_day(item: ManualDay | datetime.date | str | dict[str, object]) -> ManualDay:
    if isinstance(item, ManualDay):
        return item._replace(date=parse_date(item.date))
    if isinstance(item, dict) and "$date" not in item:
        if "date" not in item:
            raise InvalidInputError(f"Manual day without a date: {item!r}")
        note = item.get("note")
        return ManualDay(parse_date(item["date"]), str(note) if note else None)
    return ManualDay(parse_date(item))


def _infer_year(holidays: Sequence[Holiday]) -> int:
    if not holidays:
        raise InvalidInputError("No public holidays given.")
    return Counter(h.date.year for h in holidays).most_common(1)[0][0]


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def add_manual_days(
    existing: Sequence[Suggestion],
    holidays: Sequence[Holiday],
    dates: Iterable[ManualDay | datetime.date | str | dict[str, object]],
    *,
    available_days: int | None = None,
    preference: str | Preference = Preference.BALANCED,
    is_premium: bool = False,
    lang: str = "en",
    max_steps: int = MAX_EXPANSION_STEPS,
) -> AddResult:
    """Add user-chosen days as manual suggestions.

    Weekends, holidays and days already inside a suggestion are skipped and
    reported.  If every date is skipped, :class:`NoOpError` carries the
    reasons.  With *available_days* set, an addition that would overspend
    raises :class:`BudgetExceededError` and nothing is added.
    """
    hs = holiday_set(h.date for h in holidays)
    current = list(existing)
    skipped: list[SkippedDay] = []
    added = 0

    for item in dates:
        day = _as_manual_day(item)
        d = day.date
        if is_weekend(d):
            skipped.append(SkippedDay(d, SKIP_WEEKEND))
            continue
        if d in hs:
            skipped.append(SkippedDay(d, SKIP_HOLIDAY))
            continue
        if _inside_any(d, current):
            skipped.append(SkippedDay(d, SKIP_ALLOCATED))
            continue

        r = expand_manual_day(d, d, hs, current, max_steps)
        s = Suggestion(
            id=next_id(current),
            start_date=r.start_date,
            end_date=r.end_date,
            vacation_days_used=r.vacation_days_used,
            total_days_off=r.total_days_off,
            is_manual=True,
            note=day.note,
        )
        current.append(describe_manual(s, lang))
        added += 1

    if not added:
        reasons = ", ".join(f"{sk.date.isoformat()} ({sk.reason})" for sk in skipped)
        raise NoOpError(f"No days were added: {reasons or 'no dates given'}.", skipped)

    merged = merge_selections(current, hs, lang)
    if available_days is not None:
        used = sum(s.vacation_days_used for s in merged)
        if used > available_days:
            raise BudgetExceededError(used, available_days)

    return AddResult(refresh_descriptions(merged, holidays, preference, lang, is_premium), skipped)


def remove_day_from_suggestion(
    existing: Sequence[Suggestion],
    holidays: Sequence[Holiday],
    suggestion_id: int,
    date: datetime.date | str,
    *,
    preference: str | Preference = Preference.BALANCED,
    is_premium: bool = False,
    lang: str = "en",
    max_steps: int = MAX_EXPANSION_STEPS,
) -> list[Suggestion]:
    """Give back one workday of a suggestion.

    The remaining workdays are regrouped; the suggestion is deleted when
    nothing is left, updated in place (same id) when one group is left, or
    split into one new suggestion per group.
    """
    hs = holiday_set(h.date for h in holidays)
    target = _find(existing, suggestion_id)
    d = parse_date(date)

    if not target.contains(d):
        raise InvalidInputError(
            f"{d.isoformat()} is not part of suggestion {suggestion_id} "
            f"({target.start_date.isoformat()} to {target.end_date.isoformat()})."
        )
    if is_off_day(d, hs):
        raise InvalidInputError(f"{d.isoformat()} is a weekend or holiday; nothing to remove.")

    others = [s for s in existing if s.id != target.id]
    remaining = [w for w in workdays_in_range(target.start_date, target.end_date, hs) if w != d]

    ranges: list[ManualRange] = []
    for group in workday_groups(remaining, hs):
        r = expand_manual_day(group[0], group[-1], hs, others, max_steps)
        if r.vacation_days_used > 0:
            ranges.append(r)

    def _reshape(s: Suggestion, r: ManualRange, suggestion_id: int) -> Suggestion:
        return s._replace(
            id=suggestion_id,
            start_date=r.start_date,
            end_date=r.end_date,
            vacation_days_used=r.vacation_days_used,
            total_days_off=r.total_days_off,
            description="",
            reason=None,
            roi=None,
            efficiency=None,
        )

    if not ranges:
        result = others
    elif len(ranges) == 1:
        result = [_reshape(s, ranges[0], s.id) if s.id == target.id else s for s in existing]
    else:
        first_id = next_id(existing)
        result = others + [
            _reshape(target, r, first_id + i)._replace(is_merged=False)
            for i, r in enumerate(ranges)
        ]

    merged = merge_selections(result, hs, lang)
    return refresh_descriptions(merged, holidays, preference, lang, is_premium)


def remove_suggestion(
    existing: Sequence[Suggestion],
    holidays: Sequence[Holiday],
    suggestion_id: int,
    *,
    lang: str = "en",
) -> list[Suggestion]:
    """Drop a whole suggestion."""
    target = _find(existing, suggestion_id)
    hs = holiday_set(h.date for h in holidays)
    return merge_selections([s for s in existing if s.id != target.id], hs, lang)


def regenerate_keeping_manual(
    existing: Sequence[Suggestion],
    holidays: Sequence[Holiday],
    available_days: int,
    preference: str | Preference = Preference.BALANCED,
    is_premium: bool = False,
    *,
    year: int | None = None,
    lang: str = "en",
) -> list[Suggestion]:
    """Throw away generated suggestions and plan again around manual ones."""
    hs = holiday_set(h.date for h in holidays)
    manual = [s for s in existing if s.is_manual]
    budget = available_days - sum(s.vacation_days_used for s in manual)
    if budget <= 0:
        return merge_selections(manual, hs, lang)

    year = _infer_year(holidays) if year is None else year
    planner = VacationPlanner(year, holidays, preference, is_premium=is_premium, lang=lang)
    fresh = planner.plan(budget, manual)
    merged = merge_selections([*manual, *fresh], hs, lang)
    return refresh_descriptions(merged, holidays, planner.preference, lang, is_premium)


def optimize_remaining(
    existing: Sequence[Suggestion],
    holidays: Sequence[Holiday],
    available_days: int,
    preference: str | Preference = Preference.BALANCED,
    is_premium: bool = False,
    *,
    year: int | None = None,
    lang: str = "en",
) -> list[Suggestion]:
    """Spend the unused budget without touching existing suggestions.

    Raises :class:`NoOpError` when no budget is left or nothing new fits.
    """
    remaining = available_days - sum(s.vacation_days_used for s in existing)
    if remaining <= 0:
        raise NoOpError("No vacation days left to optimize.")

    year = _infer_year(holidays) if year is None else year
    planner = VacationPlanner(year, holidays, preference, is_premium=is_premium, lang=lang)
    fresh = planner.plan(remaining, existing, keep_apart=True)
    if not fresh:
        raise NoOpError("No further suggestions fit the remaining days.")

    hs = holiday_set(h.date for h in holidays)
    return merge_selections([*existing, *fresh], hs, lang)
