"""Human-readable titles and reasons for suggestion blocks.

Phrases come from per-language tables (English, Norwegian, Dutch); unknown
languages fall back to English.
"""

from __future__ import annotations

import datetime
from collections.abc import Sequence
from typing import TYPE_CHECKING, NamedTuple

from holidayplan.candidates import Kind
from holidayplan.days import ONE_DAY, is_summer_month
from holidayplan.preferences import Preference

if TYPE_CHECKING:
    from holidayplan.holidays import Holiday
    from holidayplan.suggestion import Suggestion

NEARBY_DAYS = 3

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "connects": "Connects {holidays} into one continuous break",
        "bridges": "Bridges {before} to {after}",
        "creates_break": "Creates a {days}-day break",
        "turns_weekend": "Turns a weekend into {days} days off",
        "adds_days_before": "Adds days before {holiday} for a longer break",
        "adds_days_after": "Adds days after {holiday} for a longer break",
        "extends_holiday_weekend": "Extends a holiday weekend into {days} days off",
        "highly_efficient": "Highly efficient: Taking {day_name} off gives you {days} consecutive days",
        "adds_day_off": "Adds a {day_name} off for a {days}-day break",
        "merged_gain": "Suggested days add {used} vacation {day_word} for {gain} more days off",
        "manual_block": "Your own choice: {days} days off",
        "other_holiday": "other holiday",
        "other_holidays": "other holidays",
        "and": "and",
        "strategy_bridge": "Bridge",
        "strategy_extend": "Extend",
        "strategy_optimize": "Optimize",
        "strategy_vacation": "Vacation",
        "day": "day",
        "days": "days",
        "days_off": "days off",
        "exceptional_efficiency": " (Exceptional efficiency)",
        "great_value": " (Great value)",
        "good_value": " (Good value)",
        "summer_period": " Summer period",
        "extended_vacation": " Extended vacation",
        "long_weekend": " Long weekend",
    },
    "no": {
        "connects": "Kobler sammen {holidays} til én sammenhengende ferie",
        "bridges": "Bygger bro mellom {before} og {after}",
        "creates_break": "Skaper en {days} dagers pause",
        "turns_weekend": "Gjør en helg om til {days} fridager",
        "adds_days_before": "Legger til dager før {holiday} for en lengre ferie",
        "adds_days_after": "Legger til dager etter {holiday} for en lengre ferie",
        "extends_holiday_weekend": "Utvider en hellighelg til {days} fridager",
        "highly_efficient": "Svært effektivt: Å ta {day_name} fri gir deg {days} sammenhengende dager",
        "adds_day_off": "Legger til en {day_name} fri for en {days} dagers ferie",
        "merged_gain": "Foreslåtte dager bruker {used} {day_word} for {gain} flere fridager",
        "manual_block": "Ditt eget valg: {days} fridager",
        "other_holiday": "annen helligdag",
        "other_holidays": "andre helligdager",
        "and": "og",
        "strategy_bridge": "Bro",
        "strategy_extend": "Utvid",
        "strategy_optimize": "Optimaliser",
        "strategy_vacation": "Ferie",
        "day": "dag",
        "days": "dager",
        "days_off": "fridager",
        "exceptional_efficiency": " (Eksepsjonell effektivitet)",
        "great_value": " (Utmerket verdi)",
        "good_value": " (God verdi)",
        "summer_period": " Sommerperiode",
        "extended_vacation": " Utvidet ferie",
        "long_weekend": " Lang helg",
    },
    "nl": {
        "connects": "Verbindt {holidays} tot één aaneengesloten vakantie",
        "bridges": "Brugt tussen {before} en {after}",
        "creates_break": "Creëert een {days} dagen durende pauze",
        "turns_weekend": "Verandert een weekend in {days} vrije dagen",
        "adds_days_before": "Voegt dagen toe voor {holiday} voor een langere vakantie",
        "adds_days_after": "Voegt dagen toe na {holiday} voor een langere vakantie",
        "extends_holiday_weekend": "Verlengt een feestweekend tot {days} vrije dagen",
        "highly_efficient": "Zeer efficiënt: {day_name} vrij nemen geeft je {days} opeenvolgende dagen",
        "adds_day_off": "Voegt een {day_name} vrij toe voor een {days} dagen durende vakantie",
        "merged_gain": "Voorgestelde dagen kosten {used} {day_word} voor {gain} extra vrije dagen",
        "manual_block": "Je eigen keuze: {days} vrije dagen",
        "other_holiday": "andere feestdag",
        "other_holidays": "andere feestdagen",
        "and": "en",
        "strategy_bridge": "Brug",
        "strategy_extend": "Verleng",
        "strategy_optimize": "Optimaliseer",
        "strategy_vacation": "Vakantie",
        "day": "dag",
        "days": "dagen",
        "days_off": "vrije dagen",
        "exceptional_efficiency": " (Uitzonderlijke efficiëntie)",
        "great_value": " (Uitstekende waarde)",
        "good_value": " (Goede waarde)",
        "summer_period": " Zomerperiode",
        "extended_vacation": " Uitgebreide vakantie",
        "long_weekend": " Lang weekend",
    },
}

DAY_NAMES: dict[str, list[str]] = {
    "en": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
    "no": ["mandag", "tirsdag", "onsdag", "torsdag", "fredag", "lørdag", "søndag"],
    "nl": ["maandag", "dinsdag", "woensdag", "donderdag", "vrijdag", "zaterdag", "zondag"],
}


def translate(lang: str, key: str, **kwargs: object) -> str:
    """Look up *key* for *lang*, falling back to English."""
    table = TRANSLATIONS.get(lang, TRANSLATIONS["en"])
    template = table.get(key, TRANSLATIONS["en"].get(key, key))
    return template.format(**kwargs)


class Description(NamedTuple):
    title: str
    reason: str
    roi: str
    efficiency: str


def efficiency_label(ratio: float) -> str:
    if ratio >= 4:
        return "high"
    if ratio >= 3:
        return "good"
    return "normal"


def format_roi(ratio: float) -> str:
    return f"{ratio:.1f}"


def _day_word(n: int, lang: str) -> str:
    return translate(lang, "day" if n == 1 else "days")


def _title(strategy: str, used: int, total: int, lang: str, note: str = "") -> str:
    return (
        f"{translate(lang, strategy)}: {used} {_day_word(used, lang)} → "
        f"{total} {translate(lang, 'days_off')}{note}"
    )


def _efficiency_note(ratio: float, lang: str) -> str:
    if ratio >= 5:
        return translate(lang, "exceptional_efficiency")
    if ratio >= 4:
        return translate(lang, "great_value")
    if ratio >= 3:
        return translate(lang, "good_value")
    return ""


def find_nearby_holidays(
    start: datetime.date, end: datetime.date, holidays: Sequence[Holiday]
) -> list[Holiday]:
    """Holidays inside ``[start, end]`` or within three days of it."""
    lo = start - NEARBY_DAYS * ONE_DAY
    hi = end + NEARBY_DAYS * ONE_DAY
    return sorted((h for h in holidays if lo <= h.date <= hi), key=lambda h: h.date)


def holiday_names(hols: Sequence[Holiday], lang: str) -> str:
    if not hols:
        return ""
    first = hols[0].display_name(lang)
    if len(hols) == 1:
        return first
    conj = translate(lang, "and")
    if len(hols) == 2:
        return f"{first} {conj} {hols[1].display_name(lang)}"
    others = len(hols) - 1
    return f"{first} {conj} {others} {translate(lang, 'other_holidays')}"


def _gap_reason(s: Suggestion, nearby: list[Holiday], inside: list[Holiday], lang: str) -> str:
    if len(inside) >= 2:
        return translate(lang, "connects", holidays=holiday_names(inside, lang))
    if len(nearby) >= 2:
        before = [h for h in nearby if h.date < s.start_date]
        after = [h for h in nearby if h.date > s.end_date]
        if before and after:
            return translate(
                lang,
                "bridges",
                before=holiday_names([before[-1]], lang),
                after=holiday_names([after[0]], lang),
            )
        return translate(lang, "creates_break", days=s.total_days_off)
    return translate(lang, "turns_weekend", days=s.total_days_off)


def generate_description(
    s: Suggestion,
    holidays: Sequence[Holiday],
    preference: Preference,
    lang: str = "en",
) -> Description:
    """Build the title, reason and efficiency figures for a generated block."""
    ratio = s.ratio
    nearby = find_nearby_holidays(s.start_date, s.end_date, holidays)
    inside = [h for h in nearby if s.start_date <= h.date <= s.end_date]
    kind = s.meta.kind if s.meta is not None else Kind.FILLER

    if kind is Kind.GAP:
        strategy = "strategy_bridge"
        reason = _gap_reason(s, nearby, inside, lang)
    elif kind is Kind.EXTEND_BEFORE:
        strategy = "strategy_extend"
        if inside:
            reason = translate(lang, "adds_days_before", holiday=holiday_names(inside[:1], lang))
        else:
            reason = translate(lang, "extends_holiday_weekend", days=s.total_days_off)
    elif kind is Kind.EXTEND_AFTER:
        strategy = "strategy_extend"
        if inside:
            reason = translate(lang, "adds_days_after", holiday=holiday_names(inside[-1:], lang))
        else:
            reason = translate(lang, "extends_holiday_weekend", days=s.total_days_off)
    else:
        strategy = "strategy_optimize"
        day_name = DAY_NAMES.get(lang, DAY_NAMES["en"])[s.start_date.weekday()]
        key = "highly_efficient" if ratio >= 4 else "adds_day_off"
        reason = translate(lang, key, day_name=day_name, days=s.total_days_off)

    context = ""
    if preference is Preference.SUMMER_VACATION and is_summer_month(s.start_date):
        context = translate(lang, "summer_period")
    elif preference is Preference.FEW_LONG_VACATIONS and s.total_days_off >= 10:
        context = translate(lang, "extended_vacation")
    elif (
        preference is Preference.MANY_LONG_WEEKENDS
        and s.vacation_days_used <= 2
        and s.total_days_off >= 3
    ):
        context = translate(lang, "long_weekend")

    return Description(
        title=_title(
            strategy, s.vacation_days_used, s.total_days_off, lang, _efficiency_note(ratio, lang)
        ),
        reason=reason + context,
        roi=format_roi(ratio),
        efficiency=efficiency_label(ratio),
    )


def describe_generated(
    s: Suggestion,
    holidays: Sequence[Holiday],
    preference: Preference,
    lang: str = "en",
    detailed: bool = True,
) -> Suggestion:
    """Fill the descriptive fields of an engine-generated suggestion.

    With ``detailed=False`` (free tier) only the title is set.
    """
    desc = generate_description(s, holidays, preference, lang)
    if not detailed:
        return s._replace(description=desc.title, reason=None, roi=None, efficiency=None)
    return s._replace(
        description=desc.title,
        reason=desc.reason,
        roi=desc.roi,
        efficiency=desc.efficiency,
    )


def describe_manual(s: Suggestion, lang: str = "en") -> Suggestion:
    ratio = s.ratio
    return s._replace(
        description=_title("strategy_vacation", s.vacation_days_used, s.total_days_off, lang),
        reason=translate(lang, "manual_block", days=s.total_days_off),
        roi=format_roi(ratio),
        efficiency=efficiency_label(ratio),
    )


def describe_merged(
    merged: Suggestion,
    generated_used: int,
    gain: int,
    lang: str = "en",
) -> Suggestion:
    """Describe a manual block that absorbed a generated one.

    *generated_used* and *gain* are the generated side's own vacation days and
    the extra days off it brought beyond the manual block alone.
    """
    marginal = gain / generated_used if generated_used else float(gain)
    return merged._replace(
        description=_title(
            "strategy_vacation", merged.vacation_days_used, merged.total_days_off, lang
        ),
        reason=translate(
            lang,
            "merged_gain",
            used=generated_used,
            day_word=_day_word(generated_used, lang),
            gain=gain,
        ),
        roi=format_roi(marginal),
        efficiency=efficiency_label(marginal),
    )
