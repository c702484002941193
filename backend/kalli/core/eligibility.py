"""Badge Eligibility - Pure evaluation of badge requirements.

The caller loads history, goals and already-earned ids, builds an
EvaluationContext once, then asks which catalog badges newly qualify.
Persistence is the shell's job.

Each requirement tag has exactly one evaluator in REQUIREMENT_EVALUATORS.
A tag with no evaluator is treated as never earned.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .dates import days_between, shift_date_key
from .macros import (
    TIGHT_CALORIE_TOLERANCE,
    all_macros_on_target,
    build_daily_aggregates,
    calories_on_target,
    is_double_protein,
    is_full_day,
    protein_on_target,
)
from .models import BadgeDefinition, DailyAggregate, FoodLogEntry, GoalSet, StreakSummary
from .streaks import compute_best_run, compute_streak


logger = logging.getLogger(__name__)

PHOTO_SOURCE = "photo"
WEEK_DAYS = 7


@dataclass(frozen=True)
class EvaluationContext:
    """Everything a requirement evaluator may look at, computed once per check.

    Attributes:
        aggregates: Per-date totals, only for dates with logs
        sorted_dates: Keys of aggregates in ascending order
        entry_count: Lifetime number of log entries
        photo_count: Lifetime number of entries logged from a photo
        streak: Current and best logging streak
        goals: Targets held constant for the whole history
        timezone: User's IANA timezone
        now: Evaluation instant
    """

    aggregates: dict[str, DailyAggregate]
    sorted_dates: list[str]
    entry_count: int
    photo_count: int
    streak: StreakSummary
    goals: GoalSet
    timezone: str | None
    now: datetime

    def best_run(self, predicate: Callable[[DailyAggregate], bool]) -> int:
        return compute_best_run(self.aggregates, self.sorted_dates, predicate)


def build_context(
    entries: Sequence[FoodLogEntry],
    goals: GoalSet,
    timezone: str | None,
    now: datetime,
) -> EvaluationContext:
    """Aggregate a user's log history for evaluation."""
    aggregates = build_daily_aggregates(entries)
    return EvaluationContext(
        aggregates=aggregates,
        sorted_dates=sorted(aggregates),
        entry_count=len(entries),
        photo_count=sum(1 for e in entries if e.source == PHOTO_SOURCE),
        streak=compute_streak(aggregates.keys(), timezone, now),
        goals=goals,
        timezone=timezone,
        now=now,
    )


# ==================== Evaluators ====================


def _streak(ctx: EvaluationContext, req: Any) -> bool:
    return ctx.streak.current >= req.target


def _total_logs(ctx: EvaluationContext, req: Any) -> bool:
    return ctx.entry_count >= req.target


def _calorie_on_target_once(ctx: EvaluationContext, req: Any) -> bool:
    return any(calories_on_target(day, ctx.goals) for day in ctx.aggregates.values())


def _consecutive_calorie_target(ctx: EvaluationContext, req: Any) -> bool:
    return ctx.best_run(lambda day: calories_on_target(day, ctx.goals)) >= req.target


def _all_macros_on_target_once(ctx: EvaluationContext, req: Any) -> bool:
    return any(all_macros_on_target(day, ctx.goals) for day in ctx.aggregates.values())


def _balanced_week(ctx: EvaluationContext, req: Any) -> bool:
    # Windows start at each logged date; a window needs at least
    # req.target logged dates from its start to qualify.
    dates = ctx.sorted_dates
    for i in range(len(dates) - req.target + 1):
        window_end = shift_date_key(dates[i], WEEK_DAYS - 1)
        balanced = 0
        for key in dates[i:]:
            if key > window_end:
                break
            if all_macros_on_target(ctx.aggregates[key], ctx.goals):
                balanced += 1
        if balanced >= req.target:
            return True
    return False


def _consecutive_protein_target(ctx: EvaluationContext, req: Any) -> bool:
    return ctx.best_run(lambda day: protein_on_target(day, ctx.goals)) >= req.target


def _full_day_meals(ctx: EvaluationContext, req: Any) -> bool:
    return any(is_full_day(day) for day in ctx.aggregates.values())


def _photo_logs(ctx: EvaluationContext, req: Any) -> bool:
    return ctx.photo_count >= req.target


def _comeback(ctx: EvaluationContext, req: Any) -> bool:
    dates = ctx.sorted_dates
    return any(
        days_between(previous, key) >= req.gap_days
        for previous, key in zip(dates, dates[1:])
    )


def _double_protein(ctx: EvaluationContext, req: Any) -> bool:
    return any(is_double_protein(day, ctx.goals) for day in ctx.aggregates.values())


def _consecutive_tight_calorie(ctx: EvaluationContext, req: Any) -> bool:
    run = ctx.best_run(lambda day: calories_on_target(day, ctx.goals, TIGHT_CALORIE_TOLERANCE))
    return run >= req.target


RequirementEvaluator = Callable[[EvaluationContext, Any], bool]

REQUIREMENT_EVALUATORS: dict[str, RequirementEvaluator] = {
    "streak": _streak,
    "total_logs": _total_logs,
    "calorie_on_target_once": _calorie_on_target_once,
    "consecutive_calorie_target": _consecutive_calorie_target,
    "all_macros_on_target_once": _all_macros_on_target_once,
    "balanced_week": _balanced_week,
    "consecutive_protein_target": _consecutive_protein_target,
    "full_day_meals": _full_day_meals,
    "photo_logs": _photo_logs,
    "comeback": _comeback,
    "double_protein": _double_protein,
    "consecutive_tight_calorie": _consecutive_tight_calorie,
}


def evaluate_requirement(requirement: Any, ctx: EvaluationContext) -> bool:
    """Decide whether a requirement is met by the user's history.

    Args:
        requirement: A requirement model (anything with a ``type`` tag)
        ctx: Aggregated history for the user

    Returns:
        True if met; False if not met or the tag is unknown
    """
    req_type = getattr(requirement, "type", None)
    evaluator = REQUIREMENT_EVALUATORS.get(req_type)
    if evaluator is None:
        logger.warning("Unknown badge requirement type: %r", req_type)
        return False
    return evaluator(ctx, requirement)


def find_newly_earned(
    catalog: Iterable[BadgeDefinition],
    earned_ids: set[str],
    ctx: EvaluationContext,
) -> list[BadgeDefinition]:
    """List catalog badges that qualify and aren't already earned, in catalog order."""
    return [
        badge for badge in catalog
        if badge.id not in earned_ids and evaluate_requirement(badge.requirement, ctx)
    ]
