"""Unit tests for streak and run counting - pure functions, fixed clocks."""

from datetime import datetime, timezone

import pytest

from kalli.core.models import DailyAggregate
from kalli.core.streaks import (
    compute_best_run,
    compute_current_run,
    compute_streak,
    is_consecutive,
    streak_anchor,
)


def at_hour(hour: int) -> datetime:
    """2025-01-07 at the given UTC hour."""
    return datetime(2025, 1, 7, hour, 0, tzinfo=timezone.utc)


def week_of_january(first: int, last: int) -> set[str]:
    return {f"2025-01-{day:02d}" for day in range(first, last + 1)}


class TestStreakAnchor:
    """Tests for streak_anchor."""

    def test_today_logged(self):
        assert str(streak_anchor({"2025-01-07"}, "UTC", at_hour(21))) == "2025-01-07"

    def test_grace_period_before_eight_pm(self):
        """No log yet today and before 20:00: count from yesterday."""
        assert str(streak_anchor({"2025-01-06"}, "UTC", at_hour(19))) == "2025-01-06"

    def test_no_grace_after_eight_pm(self):
        """No log today and 20:00 or later: count from today."""
        assert str(streak_anchor({"2025-01-06"}, "UTC", at_hour(20))) == "2025-01-07"


class TestComputeStreak:
    """Tests for compute_streak."""

    def test_empty(self):
        result = compute_streak(set(), "UTC", at_hour(12))
        assert (result.current, result.best) == (0, 0)

    def test_seven_consecutive_days_including_today(self):
        result = compute_streak(week_of_january(1, 7), "UTC", at_hour(12))
        assert (result.current, result.best) == (7, 7)

    def test_yesterday_only_at_seven_pm(self):
        """Streak stays alive during the grace period."""
        result = compute_streak({"2025-01-06"}, "UTC", at_hour(19))
        assert (result.current, result.best) == (1, 1)

    def test_yesterday_only_at_nine_pm(self):
        """Streak is broken once the grace period is over."""
        result = compute_streak({"2025-01-06"}, "UTC", at_hour(21))
        assert (result.current, result.best) == (0, 1)

    def test_best_from_history(self):
        """Best streak is found anywhere in history."""
        dates = {"2024-12-01", "2024-12-02", "2024-12-03", "2024-12-05", "2024-12-06"}
        result = compute_streak(dates, "UTC", at_hour(12))
        assert (result.current, result.best) == (0, 3)

    def test_run_across_month_boundary(self):
        dates = {"2024-12-30", "2024-12-31", "2025-01-01"}
        assert compute_streak(dates, "UTC", at_hour(12)).best == 3

    def test_user_timezone_decides_today(self):
        """02:00 UTC is 21:00 the previous day in New York."""
        now = datetime(2025, 1, 7, 2, 0, tzinfo=timezone.utc)
        assert compute_streak({"2025-01-07"}, "UTC", now).current == 1
        assert compute_streak({"2025-01-07"}, "America/New_York", now).current == 0

    @pytest.mark.parametrize("dates", [
        {"2025-01-06"},
        week_of_january(1, 5),
        week_of_january(3, 6) | {"2024-12-01"},
        {"2025-01-01", "2025-01-03", "2025-01-05"},
    ])
    @pytest.mark.parametrize("hour", [8, 19, 20, 23])
    def test_logging_today_never_lowers_streak(self, dates, hour):
        """Adding today's key can only grow the current streak."""
        before = compute_streak(dates, "UTC", at_hour(hour))
        after = compute_streak(dates | {"2025-01-07"}, "UTC", at_hour(hour))
        assert after.current >= before.current
        assert before.best >= before.current
        assert after.best >= after.current


def days(values: dict[str, float]) -> dict[str, DailyAggregate]:
    return {key: DailyAggregate(calories=calories) for key, calories in values.items()}


def on_target(day: DailyAggregate) -> bool:
    return 1800 <= day.calories <= 2200


class TestComputeCurrentRun:
    """Tests for compute_current_run."""

    def test_empty(self):
        assert compute_current_run({}, "UTC", on_target, at_hour(12)) == 0

    def test_run_ending_yesterday_in_grace_period(self):
        aggregates = days({"2025-01-04": 2000, "2025-01-05": 2000, "2025-01-06": 2000})
        assert compute_current_run(aggregates, "UTC", on_target, at_hour(10)) == 3

    def test_forced_to_zero_after_grace_period(self):
        """Today has no log and it is past 20:00: the run is over."""
        aggregates = days({"2025-01-05": 2000, "2025-01-06": 2000})
        assert compute_current_run(aggregates, "UTC", on_target, at_hour(21)) == 0

    def test_today_logged_but_off_target(self):
        aggregates = days({"2025-01-06": 2000, "2025-01-07": 500})
        assert compute_current_run(aggregates, "UTC", on_target, at_hour(12)) == 0

    def test_stops_at_first_failing_day(self):
        aggregates = days({
            "2025-01-04": 2000,
            "2025-01-05": 3000,
            "2025-01-06": 2000,
            "2025-01-07": 2100,
        })
        assert compute_current_run(aggregates, "UTC", on_target, at_hour(12)) == 2


class TestComputeBestRun:
    """Tests for compute_best_run."""

    def test_consecutive_qualifying_days(self):
        aggregates = days({"2025-01-01": 2000, "2025-01-02": 2000, "2025-01-03": 2000})
        assert compute_best_run(aggregates, sorted(aggregates), on_target) == 3

    def test_calendar_gap_breaks_run(self):
        """Qualifying days on both sides of a gap don't join up."""
        aggregates = days({"2025-01-01": 2000, "2025-01-02": 2000, "2025-01-04": 2000})
        assert compute_best_run(aggregates, sorted(aggregates), on_target) == 2

    def test_failing_day_resets_run(self):
        aggregates = days({
            "2025-01-01": 2000,
            "2025-01-02": 5000,
            "2025-01-03": 2000,
            "2025-01-04": 2000,
            "2025-01-05": 2000,
        })
        assert compute_best_run(aggregates, sorted(aggregates), on_target) == 3

    def test_nothing_qualifies(self):
        aggregates = days({"2025-01-01": 100})
        assert compute_best_run(aggregates, sorted(aggregates), on_target) == 0


class TestIsConsecutive:
    """Tests for is_consecutive."""

    def test_no_previous(self):
        assert not is_consecutive(None, "2025-01-01")

    def test_next_day(self):
        assert is_consecutive("2025-02-28", "2025-03-01")

    def test_gap(self):
        assert not is_consecutive("2025-01-01", "2025-01-03")
