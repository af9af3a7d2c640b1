"""Plan documents and their JSON file storage.

A plan is always rewritten as a whole: load, transform the suggestion list,
save.  :func:`save_plan` refuses to overwrite a file that was saved by
someone else after the plan was loaded, so concurrent edits to the same plan
cannot interleave.
"""

from __future__ import annotations

import json
import os
import pathlib
import tempfile
from collections.abc import Sequence
from typing import Any, NamedTuple

from loguru import logger

from holidayplan.errors import ConcurrentModificationError, InvalidInputError
from holidayplan.holidays import Holiday, holidays_from_records, holidays_to_records
from holidayplan.optimizer import GeneratedPlan
from holidayplan.preferences import Preference
from holidayplan.suggestion import Suggestion, suggestions_from_wire, to_wire


class Plan(NamedTuple):
    """A year's vacation plan for one user."""

    year: int
    country: str
    available_days: int
    used_days: int
    total_days_off: int
    preference: Preference
    suggestions: list[Suggestion]
    holidays: list[Holiday]
    is_premium: bool = False
    lang: str = "en"
    version: int = 0

    @classmethod
    def create(
        cls,
        generated: GeneratedPlan,
        *,
        country: str,
        available_days: int,
        preference: Preference,
        holidays: Sequence[Holiday],
        is_premium: bool = False,
        lang: str = "en",
    ) -> Plan:
        return cls(
            year=generated.year,
            country=country,
            available_days=available_days,
            used_days=generated.used_days,
            total_days_off=generated.total_days_off,
            preference=preference,
            suggestions=list(generated.suggestions),
            holidays=list(holidays),
            is_premium=is_premium,
            lang=lang,
        )

    @property
    def remaining_days(self) -> int:
        return self.available_days - self.used_days

    def with_suggestions(self, suggestions: Sequence[Suggestion]) -> Plan:
        """Replace the suggestion list and recompute the totals."""
        ordered = sorted(suggestions, key=lambda s: s.start_date)
        return self._replace(
            suggestions=ordered,
            used_days=sum(s.vacation_days_used for s in ordered),
            total_days_off=sum(s.total_days_off for s in ordered),
        )


def plan_to_dict(plan: Plan) -> dict[str, Any]:
    return {
        "version": plan.version,
        "year": plan.year,
        "country": plan.country,
        "availableDays": plan.available_days,
        "usedDays": plan.used_days,
        "totalDaysOff": plan.total_days_off,
        "preference": plan.preference.value,
        "isPremium": plan.is_premium,
        "lang": plan.lang,
        "holidays": holidays_to_records(plan.holidays),
        "suggestions": [to_wire(s) for s in plan.suggestions],
    }


def plan_from_dict(data: dict[str, Any]) -> Plan:
    try:
        year = int(data["year"])
        available = int(data["availableDays"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid plan document: {exc}") from None

    plan = Plan(
        year=year,
        country=str(data.get("country", "")),
        available_days=available,
        used_days=0,
        total_days_off=0,
        preference=Preference.parse(data.get("preference")),
        suggestions=[],
        holidays=holidays_from_records(data.get("holidays", [])),
        is_premium=bool(data.get("isPremium", False)),
        lang=str(data.get("lang", "en")),
        version=int(data.get("version", 0)),
    )
    # Stored totals are never trusted; they are re-derived from the blocks.
    return plan.with_suggestions(suggestions_from_wire(data.get("suggestions", [])))


def _stored_version(p: pathlib.Path) -> int | None:
    if not p.exists():
        return None
    try:
        return int(json.loads(p.read_text()).get("version", 0))
    except (json.JSONDecodeError, AttributeError, TypeError, ValueError):
        return None


def load_plan(path: str | pathlib.Path) -> Plan:
    p = pathlib.Path(path)
    if not p.exists():
        raise InvalidInputError(f"Plan file not found: {path}")
    try:
        data = json.loads(p.read_text())
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"Invalid JSON in plan file: {exc}") from None
    if not isinstance(data, dict):
        raise InvalidInputError("Plan file must contain a JSON object.")

    plan = plan_from_dict(data)
    logger.debug("Loaded plan for {} from {} (version {})", plan.year, p, plan.version)
    return plan


def save_plan(plan: Plan, path: str | pathlib.Path, *, overwrite: bool = False) -> Plan:
    """Write *plan* to *path* and return it with its new version.

    Unless *overwrite* is set, the file on disk must still hold the version
    the plan was loaded with.
    """
    p = pathlib.Path(path)
    stored = _stored_version(p)
    if not overwrite and stored is not None and stored != plan.version:
        raise ConcurrentModificationError(
            f"{p} was changed by someone else (version {stored}, expected {plan.version})."
        )

    saved = plan._replace(version=(stored or 0) + 1 if overwrite else plan.version + 1)
    p.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=p.parent, prefix=f".{p.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(plan_to_dict(saved), f, indent=2, ensure_ascii=False)
        os.replace(tmp, p)
    except BaseException:
        pathlib.Path(tmp).unlink(missing_ok=True)
        raise

    logger.debug("Saved plan for {} to {} (version {})", saved.year, p, saved.version)
    return saved
