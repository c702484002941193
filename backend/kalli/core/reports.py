"""Badge Reports - Pure functions for the badge gallery.

All functions are pure: same input always produces same output, no side effects.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Optional

from .eligibility import EvaluationContext
from .macros import (
    TIGHT_CALORIE_TOLERANCE,
    all_macros_on_target,
    calories_on_target,
    protein_on_target,
)
from .models import (
    BadgeDefinition,
    BadgeProgress,
    BadgeStats,
    EarnedBadge,
    EarnedBadgeView,
    UserBadges,
)
from .streaks import compute_current_run


# (current, target) for a badge, or None when it has no partial progress
ProgressHandler = Optional[Callable[[EvaluationContext, Any], tuple[int, int]]]

PROGRESS_HANDLERS: dict[str, ProgressHandler] = {
    "streak": lambda ctx, req: (ctx.streak.current, req.target),
    "total_logs": lambda ctx, req: (ctx.entry_count, req.target),
    "consecutive_calorie_target": lambda ctx, req: (
        ctx.best_run(lambda day: calories_on_target(day, ctx.goals)),
        req.target,
    ),
    "consecutive_protein_target": lambda ctx, req: (
        ctx.best_run(lambda day: protein_on_target(day, ctx.goals)),
        req.target,
    ),
    "photo_logs": lambda ctx, req: (ctx.photo_count, req.target),
    "consecutive_tight_calorie": lambda ctx, req: (
        ctx.best_run(lambda day: calories_on_target(day, ctx.goals, TIGHT_CALORIE_TOLERANCE)),
        req.target,
    ),
    # Binary badges: earned or not
    "calorie_on_target_once": None,
    "all_macros_on_target_once": None,
    "balanced_week": None,
    "full_day_meals": None,
    "comeback": None,
    "double_protein": None,
}


def compute_progress(requirement: Any, ctx: EvaluationContext) -> tuple[int, int] | None:
    """Get (current, target) toward a requirement.

    Returns:
        The pair, or None for binary and unknown requirement types
    """
    handler = PROGRESS_HANDLERS.get(getattr(requirement, "type", None))
    if handler is None:
        return None
    return handler(ctx, requirement)


def progress_percentage(current: int, target: int) -> int:
    """Percent complete, rounded half up and capped at 100."""
    return min(100, int(current * 100 / target + 0.5))


def compute_stats(ctx: EvaluationContext) -> BadgeStats:
    """Live streak counters, using current (not best) runs for targets."""
    calorie_streak = compute_current_run(
        ctx.aggregates, ctx.timezone, lambda day: calories_on_target(day, ctx.goals), ctx.now
    )
    macro_streak = compute_current_run(
        ctx.aggregates, ctx.timezone, lambda day: all_macros_on_target(day, ctx.goals), ctx.now
    )
    return BadgeStats(
        current_streak=ctx.streak.current,
        best_streak=ctx.streak.best,
        calorie_streak=calorie_streak,
        macro_streak=macro_streak,
    )


def build_user_badges(
    catalog: Iterable[BadgeDefinition],
    earned: Mapping[str, EarnedBadge],
    ctx: EvaluationContext,
) -> UserBadges:
    """Build the badge gallery: earned badges, progress on the rest, and stats.

    Args:
        catalog: Badge definitions in display order
        earned: Earned badge records keyed by badge id
        ctx: Aggregated history for the user

    Returns:
        UserBadges with earned sorted newest first and progress sorted
        closest-to-done first
    """
    earned_views: list[EarnedBadgeView] = []
    progress: list[BadgeProgress] = []

    for badge in catalog:
        display = {
            "badge_id": badge.id,
            "name": badge.name,
            "description": badge.description,
            "icon": badge.icon,
            "category": badge.category,
            "tier": badge.tier,
        }
        record = earned.get(badge.id)
        if record is not None:
            earned_views.append(EarnedBadgeView(**display, earned_at=record.earned_at))
            continue

        pair = compute_progress(badge.requirement, ctx)
        if pair is None:
            continue
        current, target = pair
        progress.append(BadgeProgress(
            **display,
            current=current,
            target=target,
            percentage=progress_percentage(current, target),
        ))

    earned_views.sort(key=lambda view: view.earned_at, reverse=True)
    progress.sort(key=lambda item: item.percentage, reverse=True)

    return UserBadges(earned=earned_views, progress=progress, stats=compute_stats(ctx))
