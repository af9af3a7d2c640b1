from __future__ import annotations

import datetime
import json
import pathlib

import pytest

from holidayplan.candidates import Kind, Meta
from holidayplan.errors import ConcurrentModificationError, InvalidInputError
from holidayplan.holidays import Holiday
from holidayplan.optimizer import generate_plan
from holidayplan.plan import Plan, load_plan, plan_from_dict, plan_to_dict, save_plan
from holidayplan.preferences import Preference
from holidayplan.suggestion import (
    Suggestion,
    from_wire,
    parse_date,
    suggestions_from_wire,
    to_wire,
)

ASCENSION = datetime.date(2025, 5, 29)
HOLIDAYS = [Holiday(ASCENSION, "Ascension Day", "Kristi himmelfartsdag")]


def _plan() -> Plan:
    generated = generate_plan(HOLIDAYS, 1, 2025, "balanced")
    return Plan.create(
        generated,
        country="no",
        available_days=1,
        preference=Preference.BALANCED,
        holidays=HOLIDAYS,
    )


class TestParseDate:
    def test_plain_string(self) -> None:
        assert parse_date("2025-05-17") == datetime.date(2025, 5, 17)

    def test_string_with_time(self) -> None:
        assert parse_date("2025-05-17T00:00:00.000Z") == datetime.date(2025, 5, 17)
        assert parse_date("2025-05-17 12:30") == datetime.date(2025, 5, 17)

    def test_datetime(self) -> None:
        assert parse_date(datetime.datetime(2025, 5, 17, 23, 59)) == datetime.date(2025, 5, 17)

    def test_wrapped(self) -> None:
        assert parse_date({"$date": "2025-05-17T00:00:00Z"}) == datetime.date(2025, 5, 17)

    @pytest.mark.parametrize("value", ["17.05.2025", "", None, 20250517, {"date": "x"}])
    def test_invalid(self, value: object) -> None:
        with pytest.raises(InvalidInputError):
            parse_date(value)


class TestWireFormat:
    def test_to_wire_omits_empty_fields(self) -> None:
        s = Suggestion(1, ASCENSION, datetime.date(2025, 6, 1), 1, 4, "Bridge")
        assert to_wire(s) == {
            "id": 1,
            "startDate": "2025-05-29",
            "endDate": "2025-06-01",
            "vacationDaysUsed": 1,
            "totalDaysOff": 4,
            "description": "Bridge",
            "isManual": False,
        }

    def test_from_wire_reads_optional_fields(self) -> None:
        s = from_wire(
            {
                "id": 3,
                "startDate": {"$date": "2025-05-29"},
                "endDate": "2025-06-01T00:00:00Z",
                "vacationDaysUsed": 1,
                "totalDaysOff": 4,
                "description": "Bridge",
                "roi": "4.0",
                "efficiency": "high",
                "isManual": False,
                "isMerged": True,
                "meta": {"kind": "extend-after", "k": 1},
            }
        )
        assert s.id == 3
        assert s.start_date == ASCENSION
        assert s.roi == "4.0"
        assert s.is_merged
        assert s.meta == Meta(Kind.EXTEND_AFTER, 1)

    def test_from_wire_rejects_reversed_range(self) -> None:
        with pytest.raises(InvalidInputError):
            from_wire({"startDate": "2025-06-01", "endDate": "2025-05-29"})

    def test_from_wire_requires_dates(self) -> None:
        with pytest.raises(InvalidInputError, match="startDate"):
            from_wire({"endDate": "2025-05-29"})

    def test_missing_ids_follow_existing(self) -> None:
        items = [
            {"startDate": "2025-01-02", "endDate": "2025-01-02"},
            {"id": 7, "startDate": "2025-03-03", "endDate": "2025-03-03"},
        ]
        assert [s.id for s in suggestions_from_wire(items)] == [8, 7]


class TestPlanDocument:
    def test_create_copies_totals(self) -> None:
        plan = _plan()
        assert plan.year == 2025
        assert (plan.used_days, plan.total_days_off) == (1, 4)
        assert plan.remaining_days == 0
        assert plan.version == 0

    def test_totals_are_rederived_on_load(self) -> None:
        data = plan_to_dict(_plan())
        data["usedDays"] = 99
        data["totalDaysOff"] = 99
        plan = plan_from_dict(data)
        assert (plan.used_days, plan.total_days_off) == (1, 4)

    def test_round_trip(self) -> None:
        plan = _plan()
        again = plan_from_dict(json.loads(json.dumps(plan_to_dict(plan))))
        assert again.suggestions == [s._replace(score=None) for s in plan.suggestions]
        assert again.holidays == plan.holidays
        assert again.preference is Preference.BALANCED

    def test_with_suggestions_sorts_and_sums(self) -> None:
        late = Suggestion(1, datetime.date(2025, 9, 5), datetime.date(2025, 9, 7), 1, 3)
        early = Suggestion(2, datetime.date(2025, 2, 7), datetime.date(2025, 2, 9), 1, 3)
        plan = _plan().with_suggestions([late, early])
        assert [s.id for s in plan.suggestions] == [2, 1]
        assert (plan.used_days, plan.total_days_off) == (2, 6)

    def test_invalid_document(self) -> None:
        with pytest.raises(InvalidInputError):
            plan_from_dict({"year": 2025})


class TestPlanStorage:
    def test_save_and_load(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "plan.json"
        saved = save_plan(_plan(), path)
        assert saved.version == 1

        loaded = load_plan(path)
        assert loaded.version == 1
        assert loaded.used_days == 1
        assert loaded.suggestions[0].start_date == ASCENSION

    def test_stale_save_is_rejected(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "plan.json"
        save_plan(_plan(), path)
        first = load_plan(path)
        second = load_plan(path)

        save_plan(first.with_suggestions([]), path)
        with pytest.raises(ConcurrentModificationError):
            save_plan(second.with_suggestions([]), path)

    def test_overwrite_ignores_version(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "plan.json"
        save_plan(_plan(), path)
        saved = save_plan(_plan(), path, overwrite=True)
        assert saved.version == 2

    def test_no_temp_files_left(self, tmp_path: pathlib.Path) -> None:
        save_plan(_plan(), tmp_path / "plan.json")
        assert [p.name for p in tmp_path.iterdir()] == ["plan.json"]

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(InvalidInputError, match="not found"):
            load_plan(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "plan.json"
        path.write_text("{not json")
        with pytest.raises(InvalidInputError, match="Invalid JSON"):
            load_plan(path)
