"""Vacation Block Optimizer

Spend a fixed budget of vacation days so they turn weekends and public
holidays into the longest possible breaks.

The optimizer is a deterministic greedy heuristic, not a solver.  It runs a
preference-specific sequence of *phases*; each phase generates a fresh pool
of bridge or extension candidates, scores them, and greedily accepts the
best ones that fit the remaining budget, do not overlap earlier picks and are
spaced far enough apart.  Premium plans then spend any leftover days on
single-day fillers.

Phases by preference (premium):
  balanced            1-, 2-, 3-day bridges, then extensions up to 5 days
  many_long_weekends  short bridges that make long weekends, then short extensions
  few_long_vacations  long extensions and 3-day bridges of 7+ days first
  summer_vacation     short bridges, then summer-only extensions of 3+ days
  spread_out          1-, 2-, 3-day bridges, then extensions up to 3 days

Free plans run a single phase of 1-day bridges with the balanced preference.
"""

from __future__ import annotations

import datetime
from collections.abc import Callable, Iterable, Sequence
from typing import NamedTuple, Protocol

from holidayplan.candidates import Candidate, Kind, Meta, dedupe_candidates, generate_candidates
from holidayplan.days import (
    ONE_DAY,
    HolidaySet,
    OffBlock,
    build_off_blocks,
    count_days_between,
    days_apart,
    expand_to_contiguous_days,
    holiday_set,
    is_off_day,
    is_summer_month,
    iter_days,
    ranges_overlap,
)
from holidayplan.describe import describe_generated
from holidayplan.errors import InvalidInputError
from holidayplan.holidays import Holiday, holidays_for_year
from holidayplan.merge import merge_selections, ranges_touch
from holidayplan.preferences import (
    PREFERENCE_BONUS,
    SPACING_DAYS,
    SUMMER_EXTENSION_BONUS,
    Preference,
)
from holidayplan.suggestion import Suggestion, next_id

LONG_BLOCK_DAYS = 7
HIGH_SCORE_TIER = 4.0
EFFICIENT_RATIO = 4.0
FILLER_MONTHLY_CAP = 2


class DateRange(Protocol):
    @property
    def start_date(self) -> datetime.date: ...

    @property
    def end_date(self) -> datetime.date: ...


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def score_candidate(c: Candidate, preference: Preference, is_extension: bool = False) -> float:
    """Day-off ratio plus the additive bonus of *preference*.

    Extensions that start in summer earn an extra point, unless the
    preference already rewards summer.
    """
    score = c.ratio + PREFERENCE_BONUS[preference](c)
    if (
        is_extension
        and is_summer_month(c.start_date)
        and preference is not Preference.SUMMER_VACATION
    ):
        score += SUMMER_EXTENSION_BONUS
    return score


# ---------------------------------------------------------------------------
# Spacing
# ---------------------------------------------------------------------------


def spacing_threshold(preference: Preference) -> int:
    return SPACING_DAYS[preference]


def adaptive_spacing_threshold(
    preference: Preference, remaining_days: int, total_available_days: int
) -> int:
    """Relax spacing while most of the budget is left; tighten it near the end."""
    base = spacing_threshold(preference)
    if remaining_days > total_available_days * 0.5:
        return max(0, base - 7)
    if remaining_days < total_available_days * 0.25:
        return base + 7
    return base


def well_distributed(
    candidate: Candidate,
    chosen: Iterable[DateRange],
    preference: Preference,
    remaining_days: int,
    total_available_days: int,
) -> bool:
    """True when *candidate* keeps the minimum distance to every chosen block.

    One-day bridges worth four or more days off skip the check, except for
    the distribution-focused preferences.
    """
    if (
        not preference.is_distribution_focused
        and candidate.vacation_days_used == 1
        and candidate.ratio >= EFFICIENT_RATIO
    ):
        return True

    min_gap = adaptive_spacing_threshold(preference, remaining_days, total_available_days)
    if min_gap == 0:
        return True

    return all(
        days_apart(candidate.start_date, candidate.end_date, c.start_date, c.end_date) >= min_gap
        for c in chosen
    )


# ---------------------------------------------------------------------------
# Greedy selection
# ---------------------------------------------------------------------------


def _sort_key(preference: Preference) -> Callable[[Candidate], tuple[object, ...]]:
    if preference is Preference.MANY_LONG_WEEKENDS:
        # High-value tier first, then chronological to spread weekends out.
        return lambda c: (c.score < HIGH_SCORE_TIER, c.start_date)
    return lambda c: (-c.score, -c.total_days_off, c.vacation_days_used, c.start_date)


def pick_greedy(
    candidates: Iterable[Candidate],
    available_days: int,
    preference: Preference,
    already: Sequence[DateRange] = (),
    is_extension: bool = False,
    *,
    require_long: bool = False,
    total_available_days: int | None = None,
) -> list[Candidate]:
    """Accept the best candidates that fit *available_days*.

    *already* holds blocks picked earlier (previous phases or existing
    suggestions); accepted candidates never overlap them.  With
    *require_long*, blocks shorter than a week are skipped.
    """
    total = available_days if total_available_days is None else total_available_days
    scored = sorted(
        (c._replace(score=score_candidate(c, preference, is_extension)) for c in candidates),
        key=_sort_key(preference),
    )

    taken: list[Candidate] = []
    used = 0

    for cand in scored:
        if require_long and cand.total_days_off < LONG_BLOCK_DAYS:
            continue
        if used + cand.vacation_days_used > available_days:
            continue

        others = [*already, *taken]
        if any(
            ranges_overlap(x.start_date, x.end_date, cand.start_date, cand.end_date)
            for x in others
        ):
            continue
        if not well_distributed(cand, others, preference, available_days - used, total):
            continue

        taken.append(cand)
        used += cand.vacation_days_used
        if used == available_days:
            break

    return taken


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------


class Phase(NamedTuple):
    """One pass of candidate generation and greedy selection."""

    type: str  # "gap" or "ext"
    k: int | None = None
    max_k: int | None = None
    min_k: int | None = None
    min_days_off: int | None = None
    summer_only: bool = False
    require_long: bool = False


def get_phase_plan(preference: Preference, remaining: int, is_premium: bool) -> list[Phase]:
    """Ordered phases for *preference*; free plans get 1-day bridges only."""
    if not is_premium:
        return [Phase("gap", k=1)]

    if preference is Preference.FEW_LONG_VACATIONS:
        return [
            Phase("ext", max_k=min(10, remaining), min_k=3, min_days_off=7),
            Phase("gap", k=3, min_days_off=7),
            Phase("ext", max_k=min(5, remaining), min_k=2),
            Phase("gap", k=2),
            Phase("gap", k=1),
            Phase("ext", max_k=min(2, remaining)),
        ]
    if preference is Preference.MANY_LONG_WEEKENDS:
        return [
            Phase("gap", k=1, min_days_off=3),
            Phase("gap", k=2, min_days_off=4),
            Phase("gap", k=3),
            Phase("ext", max_k=min(2, remaining), min_days_off=3),
        ]
    if preference is Preference.SUMMER_VACATION:
        return [
            Phase("gap", k=1),
            Phase("gap", k=2),
            Phase("ext", max_k=min(10, remaining), min_k=3, summer_only=True),
            Phase("gap", k=3),
            Phase("ext", max_k=min(5, remaining)),
        ]
    if preference is Preference.SPREAD_OUT:
        return [
            Phase("gap", k=1),
            Phase("gap", k=2),
            Phase("gap", k=3),
            Phase("ext", max_k=min(3, remaining)),
        ]
    return [
        Phase("gap", k=1),
        Phase("gap", k=2),
        Phase("gap", k=3),
        Phase("ext", max_k=min(5, remaining)),
    ]


def get_phase_candidates(
    off_blocks: list[OffBlock],
    holidays: HolidaySet,
    phase: Phase,
    remaining: int,
) -> list[Candidate]:
    """Fresh candidate pool for *phase*, filtered by its constraints."""
    if phase.type == "gap":
        k = phase.k or 1
        cands = [
            c
            for c in generate_candidates(off_blocks, holidays, k, Kind.GAP)
            if c.vacation_days_used == k
        ]
        if phase.min_days_off:
            cands = [c for c in cands if c.total_days_off >= phase.min_days_off]
        return cands

    if phase.type == "ext":
        max_k = min(remaining if phase.max_k is None else phase.max_k, remaining)
        if max_k <= 0:
            return []
        cands = dedupe_candidates(
            [
                *generate_candidates(off_blocks, holidays, max_k, Kind.EXTEND_BEFORE),
                *generate_candidates(off_blocks, holidays, max_k, Kind.EXTEND_AFTER),
            ]
        )
        if phase.min_k:
            cands = [c for c in cands if c.vacation_days_used >= phase.min_k]
        if phase.min_days_off:
            cands = [c for c in cands if c.total_days_off >= phase.min_days_off]
        if phase.summer_only:
            cands = [c for c in cands if is_summer_month(c.start_date)]
        return cands

    raise ValueError(f"Unknown phase type {phase.type!r}")


# ---------------------------------------------------------------------------
# Filler days
# ---------------------------------------------------------------------------


class FillerDay(NamedTuple):
    """A single workday that could be taken off with the leftover budget."""

    date: datetime.date
    start_date: datetime.date
    end_date: datetime.date
    total_days_off: int
    is_bridge: bool

    @property
    def ratio(self) -> float:
        # Always costs exactly one vacation day.
        return float(self.total_days_off)


def filler_candidates(
    year: int,
    holidays: HolidaySet,
    covered: Sequence[DateRange],
    preference: Preference,
) -> list[FillerDay]:
    """Uncovered workdays worth a single vacation day, best first.

    Bridge days (off-days on both sides) rank above plain Mondays and
    Fridays; four-or-more-day breaks always come first.
    """
    fillers: list[FillerDay] = []
    for d in iter_days(datetime.date(year, 1, 1), datetime.date(year, 12, 31)):
        if is_off_day(d, holidays):
            continue
        if any(c.start_date <= d <= c.end_date for c in covered):
            continue

        is_bridge = is_off_day(d - ONE_DAY, holidays) and is_off_day(d + ONE_DAY, holidays)
        if not is_bridge and d.weekday() not in (0, 4):
            continue

        start, end = expand_to_contiguous_days(d, d, holidays)
        fillers.append(FillerDay(d, start, end, count_days_between(start, end), is_bridge))

    if preference is Preference.SUMMER_VACATION:
        fillers.sort(
            key=lambda f: (
                f.ratio < EFFICIENT_RATIO,
                not is_summer_month(f.date),
                -f.ratio,
                not f.is_bridge,
                f.date,
            )
        )
    else:
        fillers.sort(key=lambda f: (f.ratio < EFFICIENT_RATIO, -f.ratio, not f.is_bridge, f.date))
    return fillers


def pick_fillers(
    fillers: Iterable[FillerDay],
    remaining: int,
    preference: Preference,
    covered: Sequence[DateRange],
) -> list[Candidate]:
    """Spend up to *remaining* days on fillers, one vacation day each.

    For ``many_long_weekends`` no month gets more than two blocks, counting
    the blocks already in *covered*.
    """
    capped = preference is Preference.MANY_LONG_WEEKENDS
    month_counts: dict[int, int] = {}
    if capped:
        for c in covered:
            month_counts[c.start_date.month] = month_counts.get(c.start_date.month, 0) + 1

    picked: list[Candidate] = []
    for f in fillers:
        if remaining <= 0:
            break
        if capped:
            count = month_counts.get(f.date.month, 0)
            if count >= FILLER_MONTHLY_CAP:
                continue
            month_counts[f.date.month] = count + 1

        picked.append(
            Candidate(
                start_date=f.start_date,
                end_date=f.end_date,
                vacation_days_used=1,
                total_days_off=f.total_days_off,
                meta=Meta(Kind.FILLER),
            )
        )
        remaining -= 1
    return picked


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------


class GeneratedPlan(NamedTuple):
    """Result of a planning run."""

    year: int
    used_days: int
    total_days_off: int
    suggestions: list[Suggestion]


class VacationPlanner:
    """Runs the phase plan and filler pass for one year and holiday calendar.

    The planner holds no state between calls; every method takes the
    current suggestions and returns new ones.
    """

    def __init__(
        self,
        year: int,
        holidays: Sequence[Holiday],
        preference: str | Preference = Preference.BALANCED,
        *,
        is_premium: bool = False,
        lang: str = "en",
    ):
        self.year = year
        self.holiday_list = holidays_for_year(holidays, year)
        if not self.holiday_list:
            raise InvalidInputError(f"No public holidays given for {year}.")

        self.is_premium = is_premium
        # Free plans are always balanced.
        self.preference = Preference.parse(preference) if is_premium else Preference.BALANCED
        self.lang = lang

        self.holidays: HolidaySet = holiday_set(h.date for h in holidays)
        self.off_blocks = build_off_blocks(year, self.holidays)

    # ------------------------------------------------------------------
    # Phases + fillers
    # ------------------------------------------------------------------

    def _touches_any(self, c: DateRange, blocks: Sequence[DateRange]) -> bool:
        return any(
            ranges_touch(c.start_date, c.end_date, b.start_date, b.end_date, self.holidays)
            for b in blocks
        )

    def pick(
        self,
        budget: int,
        existing: Sequence[Suggestion] = (),
        keep_apart: bool = False,
    ) -> list[Candidate]:
        """Choose candidates worth at most *budget* vacation days.

        Candidates never overlap *existing*; with *keep_apart* they must not
        even touch it, so existing blocks keep their exact ranges.
        """
        picked: list[Candidate] = []
        remaining = budget

        for phase in get_phase_plan(self.preference, remaining, self.is_premium):
            if remaining <= 0:
                break
            cands = get_phase_candidates(self.off_blocks, self.holidays, phase, remaining)
            if keep_apart:
                cands = [c for c in cands if not self._touches_any(c, existing)]
            if not cands:
                continue

            chosen = pick_greedy(
                cands,
                remaining,
                self.preference,
                [*existing, *picked],
                phase.type == "ext",
                require_long=phase.require_long,
                total_available_days=budget,
            )
            picked.extend(chosen)
            remaining -= sum(c.vacation_days_used for c in chosen)

        if self.is_premium and remaining > 0:
            merged = merge_selections(
                [Suggestion.from_candidate(0, c) for c in picked], self.holidays
            )
            covered: list[DateRange] = [*existing, *merged]
            fillers = filler_candidates(self.year, self.holidays, covered, self.preference)
            if keep_apart:
                fillers = [f for f in fillers if not self._touches_any(f, existing)]
            picked.extend(pick_fillers(fillers, remaining, self.preference, covered))

        return picked

    def plan(
        self,
        budget: int,
        existing: Sequence[Suggestion] = (),
        keep_apart: bool = False,
    ) -> list[Suggestion]:
        """New, merged and described suggestions for *budget* days.

        The result does not include *existing*; ids continue after its ids.
        """
        picked = self.pick(budget, existing, keep_apart)
        first_id = next_id(existing)
        fresh = [Suggestion.from_candidate(first_id + i, c) for i, c in enumerate(picked)]
        merged = merge_selections(fresh, self.holidays, self.lang)
        return [self.describe(s) for s in merged]

    def describe(self, s: Suggestion) -> Suggestion:
        return describe_generated(
            s, self.holiday_list, self.preference, self.lang, detailed=self.is_premium
        )


def summarize(year: int, suggestions: list[Suggestion]) -> GeneratedPlan:
    return GeneratedPlan(
        year=year,
        used_days=sum(s.vacation_days_used for s in suggestions),
        total_days_off=sum(s.total_days_off for s in suggestions),
        suggestions=suggestions,
    )


def generate_plan(
    holidays: Sequence[Holiday],
    available_days: int,
    year: int,
    preference: str | Preference = Preference.BALANCED,
    *,
    is_premium: bool = False,
    lang: str = "en",
) -> GeneratedPlan:
    """Recommend vacation blocks for *available_days* in *year*.

    Raises :class:`InvalidInputError` for a non-positive budget or when no
    holidays fall in *year*.
    """
    if available_days <= 0:
        raise InvalidInputError(f"Vacation day budget must be positive, got {available_days}.")

    planner = VacationPlanner(year, holidays, preference, is_premium=is_premium, lang=lang)
    return summarize(year, planner.plan(available_days))
