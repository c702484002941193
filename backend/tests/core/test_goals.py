"""Unit tests for goal resolution."""

from kalli.core.goals import DEFAULT_GOALS, resolve_goals


class TestResolveGoals:
    """Tests for resolve_goals."""

    def test_defaults_when_nothing_set(self):
        assert resolve_goals(None, {}) == DEFAULT_GOALS
        assert resolve_goals(None) == DEFAULT_GOALS

    def test_settings_used_without_snapshot(self):
        goals = resolve_goals(None, {"targetCalories": 1800, "targetProtein": 120})
        assert goals.target_calories == 1800
        assert goals.target_protein == 120
        assert goals.target_carbs == DEFAULT_GOALS.target_carbs

    def test_snapshot_wins_over_settings(self):
        """The per-date snapshot takes priority."""
        goals = resolve_goals({"targetCalories": 2400}, {"targetCalories": 1800})
        assert goals.target_calories == 2400

    def test_snapshot_gaps_fall_through_to_settings(self):
        goals = resolve_goals({"targetCalories": 2400}, {"targetFat": 80})
        assert goals.target_fat == 80

    def test_zero_target_falls_through_to_default(self):
        """A zero target would make every on-target check fail, so it is replaced."""
        goals = resolve_goals({"targetProtein": 0}, {})
        assert goals.target_protein == DEFAULT_GOALS.target_protein
