"""Macro Calculations - Pure functions for per-day nutrition math.

All functions are pure: same input always produces same output, no side effects.
"""

from collections.abc import Iterable

from .dates import is_date_key
from .models import DailyAggregate, FoodLogEntry, GoalSet


# Tolerances for "on target", as a fraction of the target
TARGET_TOLERANCE = 0.10
TIGHT_CALORIE_TOLERANCE = 0.05

FULL_DAY_MEALS = frozenset({"breakfast", "lunch", "dinner"})


def build_daily_aggregates(entries: Iterable[FoodLogEntry]) -> dict[str, DailyAggregate]:
    """Sum log entries per calendar date.

    Entries without a valid date key can't be placed on a day and are left
    out. Dates with no entries are absent from the result, not zero-valued.

    Args:
        entries: Food log entries in any order

    Returns:
        Mapping of calendar-date key to that day's aggregate
    """
    by_date: dict[str, DailyAggregate] = {}
    for entry in entries:
        if not is_date_key(entry.date):
            continue
        day = by_date.setdefault(entry.date, DailyAggregate())
        day.calories += entry.calories
        day.protein += entry.protein
        day.carbs += entry.carbs
        day.fat += entry.fat
        if entry.meal:
            day.meals.add(entry.meal)
        if entry.source:
            day.sources.append(entry.source)
    return by_date


def within_pct(actual: float, target: float | None, pct: float) -> bool:
    """Check that a value lies within a fraction of its target.

    A missing or zero target never matches.
    """
    if not target:
        return False
    return abs(actual - target) <= target * pct


def calories_on_target(day: DailyAggregate, goals: GoalSet, pct: float = TARGET_TOLERANCE) -> bool:
    return within_pct(day.calories, goals.target_calories, pct)


def protein_on_target(day: DailyAggregate, goals: GoalSet) -> bool:
    return within_pct(day.protein, goals.target_protein, TARGET_TOLERANCE)


def all_macros_on_target(day: DailyAggregate, goals: GoalSet) -> bool:
    """Protein, carbs and fat each within tolerance of their targets."""
    return (
        within_pct(day.protein, goals.target_protein, TARGET_TOLERANCE)
        and within_pct(day.carbs, goals.target_carbs, TARGET_TOLERANCE)
        and within_pct(day.fat, goals.target_fat, TARGET_TOLERANCE)
    )


def is_full_day(day: DailyAggregate) -> bool:
    return FULL_DAY_MEALS <= day.meals


def is_double_protein(day: DailyAggregate, goals: GoalSet) -> bool:
    return bool(goals.target_protein) and day.protein >= goals.target_protein * 2
