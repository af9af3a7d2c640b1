"""Typer CLI for the vacation block planner."""

from __future__ import annotations

import datetime
import json
import pathlib
import sys
from collections.abc import Callable

import typer
from loguru import logger

from holidayplan.errors import InvalidInputError, PlannerError
from holidayplan.holidays import (
    PRESETS,
    Holiday,
    dedupe_holidays,
    get_holidays,
    holidays_from_records,
    load_holidays_file,
)
from holidayplan.manual import (
    MAX_EXPANSION_STEPS,
    ManualDay,
    add_manual_days,
    optimize_remaining,
    regenerate_keeping_manual,
    remove_day_from_suggestion,
    remove_suggestion,
)
from holidayplan.optimizer import generate_plan
from holidayplan.plan import Plan, load_plan, plan_to_dict, save_plan
from holidayplan.preferences import Preference
from holidayplan.report import format_calendar_view, format_ics, format_plan
from holidayplan.suggestion import Suggestion, parse_date

app = typer.Typer(
    name="holidayplan",
    help="Vacation planner — spend your vacation days where they bridge "
    "weekends and public holidays into the longest breaks.",
    add_completion=False,
)

PREFERENCE_CHOICES = [p.value for p in Preference]


def _parse_date(value: str) -> datetime.date:
    """Parse a YYYY-MM-DD date string."""
    try:
        return parse_date(value)
    except InvalidInputError:
        raise typer.BadParameter(f"Invalid date format {value!r}. Use YYYY-MM-DD.") from None


def _current_year() -> int:
    return datetime.date.today().year


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging on stderr.",
    ),
) -> None:
    """Plan vacation days around weekends and public holidays."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


def _load_config(path: str | None) -> dict[str, object]:
    """Load a JSON config file with default option values."""
    if path is None:
        return {}

    p = pathlib.Path(path)
    if not p.exists():
        raise _fail(f"Config file not found: {path}")

    try:
        data = json.loads(p.read_text())
    except json.JSONDecodeError as exc:
        raise _fail(f"Invalid JSON in config file: {exc}") from None

    if not isinstance(data, dict):
        raise _fail("Config file must contain a JSON object.")

    logger.debug("Loaded config from {}", p)
    return data


def _collect_holidays(
    country: str | None,
    year: int,
    extra: list[object],
    holidays_file: str | None,
) -> list[Holiday]:
    holidays: list[Holiday] = []

    if country and country != "none":
        try:
            holidays.extend(get_holidays(country, year))
        except KeyError as exc:
            raise _fail(str(exc.args[0])) from None

    if holidays_file:
        try:
            holidays.extend(load_holidays_file(holidays_file))
        except (OSError, PlannerError) as exc:
            raise _fail(str(exc)) from None

    for raw in extra:
        if isinstance(raw, dict):
            holidays.extend(holidays_from_records([raw]))
        else:
            holidays.append(Holiday(_parse_date(str(raw)), "Custom holiday"))

    return dedupe_holidays(holidays)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def _print_plan(plan: Plan, output_json: bool, show_calendar: bool) -> None:
    if output_json:
        json.dump(plan_to_dict(plan), sys.stdout, indent=2, ensure_ascii=False)
        typer.echo()
        return

    typer.echo(format_plan(plan))
    if show_calendar:
        typer.echo(format_calendar_view(plan))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def plan(
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Target year. Defaults to the current year.",
    ),
    budget: int = typer.Option(
        None,
        "--budget",
        "-b",
        help="Number of vacation days available.",
    ),
    country: str | None = typer.Option(
        None,
        "--country",
        "-c",
        help=f"Holiday preset ({', '.join(sorted(PRESETS))}). Use 'none' to skip. Default: no.",
    ),
    holiday: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--holiday",
        "-H",
        help="Additional holiday date (YYYY-MM-DD). Repeatable.",
    ),
    holidays_file: str | None = typer.Option(
        None,
        "--holidays-file",
        help="JSON list of {date, name, localName} holiday records.",
    ),
    preference: str | None = typer.Option(
        None,
        "--preference",
        "-p",
        help=f"Planning preference: {', '.join(PREFERENCE_CHOICES)}.",
    ),
    premium: bool | None = typer.Option(
        None,
        "--premium/--free",
        help="Premium plans unlock all preferences, extensions and filler days.",
    ),
    lang: str | None = typer.Option(
        None,
        "--lang",
        help="Description language (en, no, nl).",
    ),
    calendar: bool = typer.Option(
        True,
        "--calendar/--no-calendar",
        help="Show month-by-month calendar view.",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Output the plan as JSON.",
    ),
    save: str | None = typer.Option(
        None,
        "--save",
        help="Write the plan to this file for later edits.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing plan file.",
    ),
    config: str | None = typer.Option(
        None,
        "--config",
        help="Path to JSON config file with default option values.",
    ),
) -> None:
    """Generate a vacation plan."""
    cfg = _load_config(config)

    resolved_year = year if year is not None else int(cfg.get("year", _current_year()))  # type: ignore[arg-type]
    resolved_budget = budget if budget is not None else cfg.get("budget")
    if resolved_budget is None:
        raise _fail("--budget is required (or set 'budget' in --config).")
    try:
        budget_days = int(resolved_budget)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        raise _fail("budget must be an integer") from None

    resolved_country = country if country is not None else str(cfg.get("country", "no"))
    resolved_pref = preference if preference is not None else str(cfg.get("preference", "balanced"))
    if resolved_pref not in PREFERENCE_CHOICES:
        logger.warning("Unknown preference {!r}; using balanced", resolved_pref)
        resolved_pref = Preference.BALANCED.value
    is_premium = premium if premium is not None else bool(cfg.get("premium", False))
    resolved_lang = lang if lang is not None else str(cfg.get("lang", "en"))

    extra = list(holiday or []) + list(cfg.get("holidays", []))  # type: ignore[call-overload]
    holidays = _collect_holidays(
        resolved_country,
        resolved_year,
        extra,
        holidays_file or cfg.get("holidays_file"),  # type: ignore[arg-type]
    )

    if save and not force and pathlib.Path(save).exists():
        raise _fail(f"Plan file already exists: {save}. Use --force to overwrite.")

    try:
        generated = generate_plan(
            holidays,
            budget_days,
            resolved_year,
            resolved_pref,
            is_premium=is_premium,
            lang=resolved_lang,
        )
    except PlannerError as exc:
        raise _fail(str(exc)) from None

    result = Plan.create(
        generated,
        country=resolved_country,
        available_days=budget_days,
        # Free plans are always balanced.
        preference=Preference.parse(resolved_pref) if is_premium else Preference.BALANCED,
        holidays=holidays,
        is_premium=is_premium,
        lang=resolved_lang,
    )
    if save:
        result = save_plan(result, save, overwrite=force)
        logger.info("Plan saved to {}", save)

    _print_plan(result, output_json, calendar)


@app.command()
def show(
    plan_file: str = typer.Argument(..., help="Plan file written by 'plan --save'."),
    calendar: bool = typer.Option(
        True,
        "--calendar/--no-calendar",
        help="Show month-by-month calendar view.",
    ),
    output_json: bool = typer.Option(False, "--json", help="Output the plan as JSON."),
) -> None:
    """Show a saved plan."""
    try:
        current = load_plan(plan_file)
    except PlannerError as exc:
        raise _fail(str(exc)) from None
    _print_plan(current, output_json, calendar)


def _edit(
    plan_file: str,
    change: Callable[[Plan], list[Suggestion]],
    output_json: bool,
) -> Plan:
    """Load, change and save a plan file as one unit."""
    try:
        current = load_plan(plan_file)
        updated = current.with_suggestions(change(current))
        updated = save_plan(updated, plan_file)
    except PlannerError as exc:
        raise _fail(str(exc)) from None

    _print_plan(updated, output_json, show_calendar=False)
    return updated


@app.command("add-day")
def add_day(
    plan_file: str = typer.Argument(..., help="Plan file written by 'plan --save'."),
    dates: list[str] = typer.Argument(..., help="Days to take off (YYYY-MM-DD)."),  # noqa: B008
    note: str | None = typer.Option(None, "--note", help="Note stored with the new days."),
    max_expand_steps: int = typer.Option(
        MAX_EXPANSION_STEPS,
        "--max-expand-steps",
        min=0,
        help="Most off-days a manual day may grow by in each direction.",
    ),
    output_json: bool = typer.Option(False, "--json", help="Output the plan as JSON."),
) -> None:
    """Add days of your own choosing to a saved plan."""
    days = [ManualDay(_parse_date(d), note) for d in dates]
    skipped = []

    def change(current: Plan) -> list[Suggestion]:
        result = add_manual_days(
            current.suggestions,
            current.holidays,
            days,
            available_days=current.available_days,
            preference=current.preference,
            is_premium=current.is_premium,
            lang=current.lang,
            max_steps=max_expand_steps,
        )
        skipped.extend(result.skipped_days)
        return result.suggestions

    _edit(plan_file, change, output_json)
    for s in skipped:
        typer.echo(f"Skipped {s.date.isoformat()}: {s.reason.replace('_', ' ')}", err=True)


@app.command("remove-day")
def remove_day(
    plan_file: str = typer.Argument(..., help="Plan file written by 'plan --save'."),
    suggestion_id: int = typer.Argument(..., help="Id of the suggestion to shrink."),
    date: str = typer.Argument(..., help="Workday to give back (YYYY-MM-DD)."),
    max_expand_steps: int = typer.Option(
        MAX_EXPANSION_STEPS,
        "--max-expand-steps",
        min=0,
        help="Most off-days a remaining part may grow by in each direction.",
    ),
    output_json: bool = typer.Option(False, "--json", help="Output the plan as JSON."),
) -> None:
    """Give back one vacation day from a suggestion."""
    day = _parse_date(date)
    _edit(
        plan_file,
        lambda current: remove_day_from_suggestion(
            current.suggestions,
            current.holidays,
            suggestion_id,
            day,
            preference=current.preference,
            is_premium=current.is_premium,
            lang=current.lang,
            max_steps=max_expand_steps,
        ),
        output_json,
    )


@app.command()
def remove(
    plan_file: str = typer.Argument(..., help="Plan file written by 'plan --save'."),
    suggestion_id: int = typer.Argument(..., help="Id of the suggestion to delete."),
    output_json: bool = typer.Option(False, "--json", help="Output the plan as JSON."),
) -> None:
    """Delete a whole suggestion."""
    _edit(
        plan_file,
        lambda current: remove_suggestion(
            current.suggestions, current.holidays, suggestion_id, lang=current.lang
        ),
        output_json,
    )


@app.command()
def regenerate(
    plan_file: str = typer.Argument(..., help="Plan file written by 'plan --save'."),
    preference: str | None = typer.Option(
        None,
        "--preference",
        "-p",
        help=f"New planning preference: {', '.join(PREFERENCE_CHOICES)}.",
    ),
    output_json: bool = typer.Option(False, "--json", help="Output the plan as JSON."),
) -> None:
    """Plan again from scratch, keeping the days you added yourself."""
    if preference is not None and preference not in PREFERENCE_CHOICES:
        logger.warning("Unknown preference {!r}; using balanced", preference)
        preference = Preference.BALANCED.value

    try:
        current = load_plan(plan_file)
        pref = Preference.parse(preference) if preference is not None else current.preference
        if not current.is_premium:
            pref = Preference.BALANCED
        suggestions = regenerate_keeping_manual(
            current.suggestions,
            current.holidays,
            current.available_days,
            pref,
            current.is_premium,
            year=current.year,
            lang=current.lang,
        )
        updated = save_plan(
            current._replace(preference=pref).with_suggestions(suggestions), plan_file
        )
    except PlannerError as exc:
        raise _fail(str(exc)) from None

    _print_plan(updated, output_json, show_calendar=False)


@app.command()
def optimize(
    plan_file: str = typer.Argument(..., help="Plan file written by 'plan --save'."),
    output_json: bool = typer.Option(False, "--json", help="Output the plan as JSON."),
) -> None:
    """Spend the days the plan has not used yet."""
    _edit(
        plan_file,
        lambda current: optimize_remaining(
            current.suggestions,
            current.holidays,
            current.available_days,
            current.preference,
            current.is_premium,
            year=current.year,
            lang=current.lang,
        ),
        output_json,
    )


@app.command()
def export(
    plan_file: str = typer.Argument(..., help="Plan file written by 'plan --save'."),
    out: str | None = typer.Option(
        None,
        "--out",
        "-o",
        help="Write the .ics file here instead of printing it.",
    ),
) -> None:
    """Export a saved plan as an iCalendar file."""
    try:
        current = load_plan(plan_file)
    except PlannerError as exc:
        raise _fail(str(exc)) from None

    text = format_ics(current)
    if out is None:
        typer.echo(text, nl=False)
        return

    pathlib.Path(out).write_bytes(text.encode("utf-8"))
    logger.info("Exported {} blocks to {}", len(current.suggestions), out)
    typer.echo(f"Calendar written to {out}")


@app.command()
def holidays(
    country: str = typer.Option(
        "no",
        "--country",
        "-c",
        help=f"Country preset ({', '.join(sorted(PRESETS))}).",
    ),
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Year to list holidays for. Defaults to the current year.",
    ),
    lang: str = typer.Option("en", "--lang", help="Show local names unless 'en'."),
) -> None:
    """List holidays for a country preset."""
    resolved_year = year if year is not None else _current_year()

    try:
        preset = get_holidays(country, resolved_year)
    except KeyError as exc:
        raise _fail(str(exc.args[0])) from None

    typer.echo(f"  {PRESETS[country.lower()]} — {resolved_year}")
    typer.echo()
    for h in preset:
        typer.echo(f"    {h.date.strftime('%a, %b %d'):>12}  {h.display_name(lang)}")


if __name__ == "__main__":
    app()
