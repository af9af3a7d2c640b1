"""Planning preferences and their scoring rules."""

from __future__ import annotations

import enum
from collections.abc import Callable

from holidayplan.candidates import Candidate
from holidayplan.days import is_summer_month


class Preference(str, enum.Enum):
    """Named heuristic profile controlling scoring, spacing and phases."""

    BALANCED = "balanced"
    MANY_LONG_WEEKENDS = "many_long_weekends"
    FEW_LONG_VACATIONS = "few_long_vacations"
    SUMMER_VACATION = "summer_vacation"
    SPREAD_OUT = "spread_out"

    @classmethod
    def parse(cls, value: str | Preference | None) -> Preference:
        """Return the matching preference; anything unrecognized is balanced."""
        if isinstance(value, Preference):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.BALANCED

    @property
    def is_distribution_focused(self) -> bool:
        return self in (Preference.MANY_LONG_WEEKENDS, Preference.SPREAD_OUT)


def _many_long_weekends_bonus(c: Candidate) -> float:
    if c.vacation_days_used == 1:
        return 2.0
    if c.vacation_days_used == 2:
        return 0.5
    return 0.0


def _few_long_vacations_bonus(c: Candidate) -> float:
    if c.total_days_off >= 10:
        return 3.0
    if c.total_days_off >= 8:
        return 2.25
    if c.total_days_off >= 6:
        return 1.25
    return 0.0


def _summer_vacation_bonus(c: Candidate) -> float:
    if not is_summer_month(c.start_date):
        return 0.0
    return 5.0 if c.total_days_off >= 7 else 3.0


def _spread_out_bonus(c: Candidate) -> float:
    return 0.5 if c.vacation_days_used <= 2 else 0.0


PREFERENCE_BONUS: dict[Preference, Callable[[Candidate], float]] = {
    Preference.BALANCED: lambda _c: 0.0,
    Preference.MANY_LONG_WEEKENDS: _many_long_weekends_bonus,
    Preference.FEW_LONG_VACATIONS: _few_long_vacations_bonus,
    Preference.SUMMER_VACATION: _summer_vacation_bonus,
    Preference.SPREAD_OUT: _spread_out_bonus,
}

SUMMER_EXTENSION_BONUS = 1.0

# Minimum number of days between two picked blocks.
SPACING_DAYS: dict[Preference, int] = {
    Preference.BALANCED: 21,
    Preference.MANY_LONG_WEEKENDS: 21,
    Preference.FEW_LONG_VACATIONS: 0,
    Preference.SUMMER_VACATION: 14,
    Preference.SPREAD_OUT: 35,
}
