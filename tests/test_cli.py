from __future__ import annotations

import datetime
import json
import pathlib

from typer.testing import CliRunner

from holidayplan.candidates import Kind, Meta
from holidayplan.cli import app
from holidayplan.holidays import Holiday
from holidayplan.plan import Plan, load_plan, save_plan
from holidayplan.preferences import Preference
from holidayplan.suggestion import Suggestion

runner = CliRunner()

ASCENSION_ARGS = ["--country", "none", "--holiday", "2025-05-29", "--year", "2025"]


def _write_config(tmp_path: pathlib.Path, data: dict[str, object]) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))
    return str(path)


def _saved_plan(tmp_path: pathlib.Path, available_days: int = 5) -> str:
    """A plan holding the May 1-4 bridge, saved as version 1."""
    bridge = Suggestion(
        1,
        datetime.date(2025, 5, 1),
        datetime.date(2025, 5, 4),
        1,
        4,
        "Bridge: 1 day → 4 days off (Great value)",
        meta=Meta(Kind.GAP, 1),
    )
    plan = Plan(
        year=2025,
        country="no",
        available_days=available_days,
        used_days=0,
        total_days_off=0,
        preference=Preference.BALANCED,
        suggestions=[],
        holidays=[Holiday(datetime.date(2025, 5, 1), "Labour Day", "Arbeidernes dag")],
    ).with_suggestions([bridge])
    path = tmp_path / "plan.json"
    save_plan(plan, path)
    return str(path)


class TestPlanCommand:
    def test_plan_basic(self) -> None:
        result = runner.invoke(app, ["plan", "--budget", "1", *ASCENSION_ARGS, "--no-calendar"])
        assert result.exit_code == 0
        assert "VACATION PLAN 2025" in result.output
        assert "Vacation days used: 1 / 1" in result.output
        assert "Total days off: 4" in result.output

    def test_plan_json_output(self) -> None:
        result = runner.invoke(app, ["plan", "--budget", "1", *ASCENSION_ARGS, "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["usedDays"] == 1
        assert data["totalDaysOff"] == 4
        (s,) = data["suggestions"]
        assert s["startDate"] == "2025-05-29"
        assert s["endDate"] == "2025-06-01"
        # Free plans carry no reason or efficiency figures.
        assert "roi" not in s
        assert "reason" not in s

    def test_free_plan_is_balanced(self) -> None:
        result = runner.invoke(
            app,
            ["plan", "--budget", "1", *ASCENSION_ARGS, "-p", "summer_vacation", "--json"],
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["preference"] == "balanced"

    def test_premium_plan(self) -> None:
        result = runner.invoke(
            app,
            [
                "plan",
                "--budget",
                "10",
                "--year",
                "2025",
                "--country",
                "no",
                "--premium",
                "-p",
                "few_long_vacations",
                "--json",
            ],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["isPremium"] is True
        assert data["usedDays"] <= 10
        assert all("roi" in s for s in data["suggestions"])

    def test_plan_with_calendar(self) -> None:
        result = runner.invoke(app, ["plan", "--budget", "1", *ASCENSION_ARGS, "--calendar"])
        assert result.exit_code == 0
        assert "Calendar View" in result.output

    def test_unknown_preference_falls_back_to_balanced(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "plan.json"
        args = ["plan", "--budget", "1", *ASCENSION_ARGS, "-p", "bogus", "--premium"]
        result = runner.invoke(app, [*args, "--save", str(path)])
        assert result.exit_code == 0
        assert "Unknown preference 'bogus'; using balanced" in result.output
        assert "Preference: balanced" in result.output
        assert load_plan(path).preference is Preference.BALANCED

    def test_config_budget_must_be_integer(self, tmp_path: pathlib.Path) -> None:
        config = _write_config(tmp_path, {"year": 2025, "budget": "lots", "country": "none"})
        result = runner.invoke(app, ["plan", "--config", config])
        assert result.exit_code == 1
        assert "budget must be an integer" in result.output

    def test_budget_required(self) -> None:
        result = runner.invoke(app, ["plan", "--year", "2025"])
        assert result.exit_code == 1
        assert "--budget is required" in result.output

    def test_no_holidays(self) -> None:
        result = runner.invoke(app, ["plan", "--budget", "5", "--year", "2025", "-c", "none"])
        assert result.exit_code == 1
        assert "No public holidays" in result.output

    def test_unknown_country(self) -> None:
        result = runner.invoke(app, ["plan", "--budget", "5", "--year", "2025", "-c", "xx"])
        assert result.exit_code == 1
        assert "Unknown country preset" in result.output

    def test_bad_holiday_date(self) -> None:
        result = runner.invoke(
            app, ["plan", "--budget", "5", "--year", "2025", "--holiday", "29.05.2025"]
        )
        assert result.exit_code != 0

    def test_config_file(self, tmp_path: pathlib.Path) -> None:
        config = _write_config(
            tmp_path,
            {"year": 2025, "budget": 1, "country": "none", "holidays": ["2025-05-29"]},
        )
        result = runner.invoke(app, ["plan", "--config", config, "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["totalDaysOff"] == 4

    def test_config_missing(self, tmp_path: pathlib.Path) -> None:
        result = runner.invoke(app, ["plan", "--config", str(tmp_path / "nope.json")])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_holidays_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "holidays.json"
        path.write_text(json.dumps([{"date": "2025-05-29", "name": "Ascension Day"}]))
        result = runner.invoke(
            app,
            ["plan", "-b", "1", "-y", "2025", "-c", "none", "--holidays-file", str(path), "--json"],
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["holidays"][0]["name"] == "Ascension Day"

    def test_save_refuses_existing_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "plan.json"
        args = ["plan", "--budget", "1", *ASCENSION_ARGS, "--save", str(path), "--no-calendar"]
        assert runner.invoke(app, args).exit_code == 0
        assert load_plan(path).version == 1

        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "already exists" in result.output

        assert runner.invoke(app, [*args, "--force"]).exit_code == 0
        assert load_plan(path).version == 2


class TestShowCommand:
    def test_show(self, tmp_path: pathlib.Path) -> None:
        result = runner.invoke(app, ["show", _saved_plan(tmp_path), "--no-calendar"])
        assert result.exit_code == 0
        assert "#1" in result.output
        assert "Vacation days used: 1 / 5" in result.output

    def test_show_missing(self, tmp_path: pathlib.Path) -> None:
        result = runner.invoke(app, ["show", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestEditCommands:
    def test_add_day(self, tmp_path: pathlib.Path) -> None:
        path = _saved_plan(tmp_path)
        result = runner.invoke(app, ["add-day", path, "2025-05-06", "--note", "moving"])
        assert result.exit_code == 0

        plan = load_plan(path)
        assert plan.version == 2
        assert plan.used_days == 2
        added = plan.suggestions[1]
        assert added.is_manual
        assert added.note == "moving"

    def test_add_day_reports_skipped(self, tmp_path: pathlib.Path) -> None:
        path = _saved_plan(tmp_path)
        result = runner.invoke(app, ["add-day", path, "2025-05-06", "2025-05-10"])
        assert result.exit_code == 0
        assert "Skipped 2025-05-10: weekend" in result.output

    def test_add_day_all_skipped(self, tmp_path: pathlib.Path) -> None:
        path = _saved_plan(tmp_path)
        result = runner.invoke(app, ["add-day", path, "2025-05-02"])
        assert result.exit_code == 1
        assert "No days were added" in result.output
        assert load_plan(path).version == 1

    def test_add_day_over_budget(self, tmp_path: pathlib.Path) -> None:
        path = _saved_plan(tmp_path, available_days=1)
        result = runner.invoke(app, ["add-day", path, "2025-05-06"])
        assert result.exit_code == 1
        assert "only 1 are available" in result.output
        assert load_plan(path).used_days == 1

    def test_remove_day(self, tmp_path: pathlib.Path) -> None:
        path = _saved_plan(tmp_path)
        result = runner.invoke(app, ["remove-day", path, "1", "2025-05-02"])
        assert result.exit_code == 0
        assert "(none)" in result.output
        assert load_plan(path).suggestions == []

    def test_remove_day_on_holiday(self, tmp_path: pathlib.Path) -> None:
        path = _saved_plan(tmp_path)
        result = runner.invoke(app, ["remove-day", path, "1", "2025-05-01"])
        assert result.exit_code == 1
        assert "weekend or holiday" in result.output

    def test_remove(self, tmp_path: pathlib.Path) -> None:
        path = _saved_plan(tmp_path)
        assert runner.invoke(app, ["remove", path, "1"]).exit_code == 0
        assert load_plan(path).used_days == 0

    def test_remove_unknown(self, tmp_path: pathlib.Path) -> None:
        result = runner.invoke(app, ["remove", _saved_plan(tmp_path), "99"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_optimize(self, tmp_path: pathlib.Path) -> None:
        path = _saved_plan(tmp_path)
        result = runner.invoke(app, ["optimize", path, "--json"])
        assert result.exit_code == 0

        plan = load_plan(path)
        assert 1 < plan.used_days <= 5
        ranges = {(s.start_date, s.end_date) for s in plan.suggestions}
        assert (datetime.date(2025, 5, 1), datetime.date(2025, 5, 4)) in ranges

    def test_optimize_without_budget(self, tmp_path: pathlib.Path) -> None:
        result = runner.invoke(app, ["optimize", _saved_plan(tmp_path, available_days=1)])
        assert result.exit_code == 1
        assert "No vacation days left" in result.output

    def test_regenerate(self, tmp_path: pathlib.Path) -> None:
        path = _saved_plan(tmp_path)
        runner.invoke(app, ["add-day", path, "2025-10-15"])
        result = runner.invoke(app, ["regenerate", path])
        assert result.exit_code == 0

        plan = load_plan(path)
        assert plan.used_days <= 5
        assert any(s.is_manual and s.contains(datetime.date(2025, 10, 15)) for s in plan.suggestions)

    def test_regenerate_unknown_preference(self, tmp_path: pathlib.Path) -> None:
        path = _saved_plan(tmp_path)
        result = runner.invoke(app, ["regenerate", path, "-p", "bogus"])
        assert result.exit_code == 0
        assert "Unknown preference 'bogus'; using balanced" in result.output
        assert load_plan(path).preference is Preference.BALANCED


class TestExportCommand:
    def test_export_to_stdout(self, tmp_path: pathlib.Path) -> None:
        result = runner.invoke(app, ["export", _saved_plan(tmp_path)])
        assert result.exit_code == 0
        assert result.output.startswith("BEGIN:VCALENDAR")
        assert "DTSTART;VALUE=DATE:20250501" in result.output
        assert "DTEND;VALUE=DATE:20250505" in result.output

    def test_export_to_file(self, tmp_path: pathlib.Path) -> None:
        out = tmp_path / "plan.ics"
        result = runner.invoke(app, ["export", _saved_plan(tmp_path), "--out", str(out)])
        assert result.exit_code == 0
        assert "Calendar written to" in result.output

        text = out.read_bytes().decode("utf-8")
        assert text.count("BEGIN:VEVENT") == 1
        assert "UID:2025-no-1@holidayplan\r\n" in text
        assert "SUMMARY:Bridge: 1 day → 4 days off (Great value)" in text

    def test_export_missing_plan(self, tmp_path: pathlib.Path) -> None:
        result = runner.invoke(app, ["export", str(tmp_path / "missing.json")])
        assert result.exit_code == 1


class TestHolidaysCommand:
    def test_holidays_no(self) -> None:
        result = runner.invoke(app, ["holidays", "--country", "no", "--year", "2025"])
        assert result.exit_code == 0
        assert "Norway public holidays" in result.output
        assert "Ascension Day" in result.output

    def test_holidays_local_names(self) -> None:
        result = runner.invoke(app, ["holidays", "-c", "no", "-y", "2025", "--lang", "no"])
        assert result.exit_code == 0
        assert "Kristi himmelfartsdag" in result.output

    def test_holidays_unknown_country(self) -> None:
        result = runner.invoke(app, ["holidays", "--country", "xx"])
        assert result.exit_code == 1
        assert "Unknown country preset" in result.output
