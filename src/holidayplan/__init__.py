"""Vacation Block Planner.

Spend a budget of vacation days where they bridge weekends and public
holidays into the longest breaks, then edit the plan day by day.
"""

from holidayplan.errors import (
    BudgetExceededError,
    ConcurrentModificationError,
    InvalidInputError,
    NoOpError,
    NotFoundError,
    PlannerError,
)
from holidayplan.holidays import Holiday, get_holidays
from holidayplan.manual import (
    ManualDay,
    add_manual_days,
    optimize_remaining,
    regenerate_keeping_manual,
    remove_day_from_suggestion,
    remove_suggestion,
)
from holidayplan.merge import merge_selections
from holidayplan.optimizer import GeneratedPlan, VacationPlanner, generate_plan
from holidayplan.plan import Plan, load_plan, save_plan
from holidayplan.preferences import Preference
from holidayplan.suggestion import Suggestion

__all__ = [
    "BudgetExceededError",
    "ConcurrentModificationError",
    "GeneratedPlan",
    "Holiday",
    "InvalidInputError",
    "ManualDay",
    "NoOpError",
    "NotFoundError",
    "Plan",
    "PlannerError",
    "Preference",
    "Suggestion",
    "VacationPlanner",
    "add_manual_days",
    "generate_plan",
    "get_holidays",
    "load_plan",
    "merge_selections",
    "optimize_remaining",
    "regenerate_keeping_manual",
    "remove_day_from_suggestion",
    "remove_suggestion",
    "save_plan",
]
