"""Streaks and Runs - Pure functions for consecutive-day counting.

A streak counts consecutive dates with at least one log. A run counts
consecutive dates whose aggregate satisfies a predicate. Both "current"
counters walk back from an anchor date chosen with an evening grace period:
a day with no log yet doesn't break anything until GRACE_PERIOD_HOUR local time.
"""

from collections.abc import Callable, Collection, Mapping, Sequence
from datetime import date, datetime, timedelta

from .dates import days_between, format_date_key, local_now
from .models import DailyAggregate, StreakSummary


GRACE_PERIOD_HOUR = 20

DayPredicate = Callable[[DailyAggregate], bool]


def streak_anchor(log_dates: Collection[str], timezone: str | None, now: datetime | None = None) -> date:
    """Pick the date that current streaks and runs count back from.

    Today if it has a log. Otherwise yesterday before the grace hour, and
    today (which then breaks the count) from the grace hour on.
    """
    local = local_now(timezone, now)
    today = local.date()
    if format_date_key(today) in log_dates:
        return today
    if local.hour < GRACE_PERIOD_HOUR:
        return today - timedelta(days=1)
    return today


def is_consecutive(previous: str | None, current: str) -> bool:
    """True when current is the calendar day right after previous."""
    if previous is None:
        return False
    return days_between(previous, current) == 1


def compute_streak(
    log_dates: Collection[str],
    timezone: str | None,
    now: datetime | None = None,
) -> StreakSummary:
    """Compute the current and best logging streaks.

    Args:
        log_dates: Calendar-date keys with at least one log
        timezone: User's IANA timezone (None for host local)
        now: Evaluation instant

    Returns:
        StreakSummary where best is never below current
    """
    if not log_dates:
        return StreakSummary(current=0, best=0)

    day = streak_anchor(log_dates, timezone, now)
    current = 0
    while format_date_key(day) in log_dates:
        current += 1
        day -= timedelta(days=1)

    sorted_dates = sorted(log_dates)
    best = 0
    run = 1
    for previous, key in zip(sorted_dates, sorted_dates[1:]):
        if is_consecutive(previous, key):
            run += 1
        else:
            best = max(best, run)
            run = 1
    best = max(best, run, current)

    return StreakSummary(current=current, best=best)


def compute_current_run(
    aggregates: Mapping[str, DailyAggregate],
    timezone: str | None,
    predicate: DayPredicate,
    now: datetime | None = None,
) -> int:
    """Count consecutive qualifying days ending at the streak anchor."""
    if not aggregates:
        return 0

    day = streak_anchor(aggregates, timezone, now)
    run = 0
    while True:
        aggregate = aggregates.get(format_date_key(day))
        if aggregate is None or not predicate(aggregate):
            break
        run += 1
        day -= timedelta(days=1)
    return run


def compute_best_run(
    aggregates: Mapping[str, DailyAggregate],
    sorted_dates: Sequence[str],
    predicate: DayPredicate,
) -> int:
    """Find the longest run of consecutive qualifying days anywhere in history.

    A gap of more than one calendar day breaks the run even when the days on
    both sides qualify.
    """
    best = 0
    run = 0
    previous = None
    for key in sorted_dates:
        if predicate(aggregates[key]):
            run = run + 1 if run and is_consecutive(previous, key) else 1
            best = max(best, run)
        else:
            run = 0
        previous = key
    return best
