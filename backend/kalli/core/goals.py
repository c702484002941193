"""Goal Resolution - Pick the daily targets used for badge evaluation."""

from collections.abc import Mapping
from typing import Any

from .models import GoalSet


DEFAULT_GOALS = GoalSet(
    target_calories=2000,
    target_protein=50,
    target_carbs=250,
    target_fat=65,
)

GOAL_KEYS = ("targetCalories", "targetProtein", "targetCarbs", "targetFat")


def resolve_goals(
    snapshot: Mapping[str, Any] | None,
    settings: Mapping[str, Any] | None = None,
) -> GoalSet:
    """Resolve targets for one date.

    The per-date snapshot wins when it exists, otherwise the user's settings.
    Missing or zero values fall through to settings and then to DEFAULT_GOALS.

    Args:
        snapshot: dailyGoals document for the date, or None if absent
        settings: User settings keyed by camelCase goal names

    Returns:
        GoalSet with every target filled in
    """
    settings = settings or {}
    source = snapshot if snapshot is not None else settings
    defaults = DEFAULT_GOALS.model_dump(by_alias=True)

    return GoalSet.model_validate({
        key: source.get(key) or settings.get(key) or defaults[key]
        for key in GOAL_KEYS
    })
