"""Exceptions raised by the planner."""

from __future__ import annotations

import datetime
from typing import NamedTuple


class SkippedDay(NamedTuple):
    """A requested manual day that was not added, with the reason."""

    date: datetime.date
    reason: str


class PlannerError(Exception):
    """Base class for every planner error."""


class InvalidInputError(PlannerError, ValueError):
    """Missing or malformed input (bad date, empty holiday list, ...)."""


class NotFoundError(PlannerError, LookupError):
    """A suggestion id does not exist."""


class BudgetExceededError(PlannerError):
    """A manual addition would spend more days than the plan allows."""

    def __init__(self, used: int, available: int):
        self.used = used
        self.available = available
        super().__init__(
            f"Adding these days would use {used} vacation days, "
            f"but only {available} are available."
        )


class NoOpError(PlannerError):
    """The requested operation has nothing to do."""

    def __init__(self, message: str, skipped: list[SkippedDay] | None = None):
        self.skipped = skipped or []
        super().__init__(message)


class ConcurrentModificationError(PlannerError):
    """The plan file was saved by someone else after it was loaded."""
