"""Suggestion blocks and their wire representation.

All date normalization happens here: dates may arrive as ``date`` or
``datetime`` objects, ``YYYY-MM-DD`` strings (optionally with a time part) or
document-store wrappers such as ``{"$date": "2025-05-17"}``.  The rest of the
package only ever sees :class:`datetime.date`.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable
from typing import Any, NamedTuple

from holidayplan.candidates import Candidate, Kind, Meta
from holidayplan.errors import InvalidInputError


class Suggestion(NamedTuple):
    """A vacation block as stored in a plan."""

    id: int
    start_date: datetime.date
    end_date: datetime.date
    vacation_days_used: int
    total_days_off: int
    description: str = ""
    reason: str | None = None
    roi: str | None = None
    efficiency: str | None = None
    is_manual: bool = False
    is_merged: bool = False
    meta: Meta | None = None
    score: float | None = None
    note: str | None = None

    @property
    def ratio(self) -> float:
        if self.vacation_days_used == 0:
            return float(self.total_days_off)
        return self.total_days_off / self.vacation_days_used

    def contains(self, d: datetime.date) -> bool:
        return self.start_date <= d <= self.end_date

    @classmethod
    def from_candidate(cls, suggestion_id: int, candidate: Candidate) -> Suggestion:
        return cls(
            id=suggestion_id,
            start_date=candidate.start_date,
            end_date=candidate.end_date,
            vacation_days_used=candidate.vacation_days_used,
            total_days_off=candidate.total_days_off,
            meta=candidate.meta,
            score=candidate.score,
        )


def next_id(suggestions: Iterable[Suggestion]) -> int:
    return max((s.id for s in suggestions), default=0) + 1


# ---------------------------------------------------------------------------
# Boundary adapter
# ---------------------------------------------------------------------------


def parse_date(value: object) -> datetime.date:
    """Normalize any supported date representation to a calendar date."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, dict) and "$date" in value:
        return parse_date(value["$date"])
    if isinstance(value, str):
        text = value.strip().split("T")[0].split(" ")[0]
        try:
            return datetime.date.fromisoformat(text)
        except ValueError:
            raise InvalidInputError(
                f"Invalid date {value!r}. Use YYYY-MM-DD."
            ) from None
    raise InvalidInputError(f"Invalid date {value!r}. Use YYYY-MM-DD.")


def to_wire(s: Suggestion) -> dict[str, Any]:
    """Serialize a suggestion to the camelCase document shape."""
    data: dict[str, Any] = {
        "id": s.id,
        "startDate": s.start_date.isoformat(),
        "endDate": s.end_date.isoformat(),
        "vacationDaysUsed": s.vacation_days_used,
        "totalDaysOff": s.total_days_off,
        "description": s.description,
        "isManual": s.is_manual,
    }
    if s.reason is not None:
        data["reason"] = s.reason
    if s.roi is not None:
        data["roi"] = s.roi
    if s.efficiency is not None:
        data["efficiency"] = s.efficiency
    if s.is_merged:
        data["isMerged"] = True
    if s.meta is not None:
        data["meta"] = {"kind": s.meta.kind.value, "k": s.meta.k}
    if s.note:
        data["note"] = s.note
    return data


def from_wire(data: dict[str, Any], default_id: int = 0) -> Suggestion:
    """Parse a stored suggestion document."""
    try:
        start = parse_date(data["startDate"])
        end = parse_date(data["endDate"])
    except KeyError as exc:
        raise InvalidInputError(f"Suggestion is missing {exc.args[0]!r}") from None
    if end < start:
        raise InvalidInputError(f"Suggestion ends ({end}) before it starts ({start})")

    meta = None
    raw_meta = data.get("meta")
    if raw_meta:
        try:
            meta = Meta(Kind(raw_meta["kind"]), raw_meta.get("k"))
        except (KeyError, ValueError):
            raise InvalidInputError(f"Invalid suggestion meta {raw_meta!r}") from None

    return Suggestion(
        id=int(data.get("id", default_id)),
        start_date=start,
        end_date=end,
        vacation_days_used=int(data.get("vacationDaysUsed", 0)),
        total_days_off=int(data.get("totalDaysOff", (end - start).days + 1)),
        description=data.get("description", ""),
        reason=data.get("reason"),
        roi=data.get("roi"),
        efficiency=data.get("efficiency"),
        is_manual=bool(data.get("isManual", False)),
        is_merged=bool(data.get("isMerged", False)),
        meta=meta,
        note=data.get("note"),
    )


def suggestions_from_wire(items: Iterable[dict[str, Any]]) -> list[Suggestion]:
    """Parse a stored list, numbering suggestions that have no id yet."""
    parsed = [(from_wire(data), "id" in data) for data in items]
    top = max((s.id for s, has_id in parsed if has_id), default=0)
    out: list[Suggestion] = []
    for s, has_id in parsed:
        if not has_id:
            top += 1
            s = s._replace(id=top)
        out.append(s)
    return out
