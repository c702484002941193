"""Unit tests for data models - validation, defaults and aliases."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from kalli.core.models import (
    BadgeDefinition,
    BadgeStats,
    ComebackRequirement,
    EarnedBadge,
    FoodLogEntry,
    GoalSet,
    UserBadges,
    UserSettings,
)


class TestFoodLogEntry:
    """Tests for FoodLogEntry model."""

    def test_defaults(self):
        """Entry gets an id and zero macros by default."""
        entry = FoodLogEntry(date="2025-01-01")
        assert entry.id
        assert (entry.calories, entry.protein, entry.carbs, entry.fat) == (0, 0, 0, 0)
        assert entry.meal is None
        assert entry.source is None

    def test_unique_ids(self):
        assert FoodLogEntry().id != FoodLogEntry().id

    def test_reads_firestore_document(self):
        """camelCase documents and unknown fields are accepted."""
        entry = FoodLogEntry.model_validate({
            "date": "2025-01-01",
            "meal": "dinner",
            "calories": 650,
            "fat": None,
            "loggedAt": "2025-01-01T19:00:00Z",
            "imageUrl": "gs://bucket/photo.jpg",
        })
        assert entry.calories == 650
        assert entry.fat == 0
        assert entry.logged_at.hour == 19


class TestGoalSet:
    """Tests for GoalSet and UserSettings."""

    def test_aliases(self):
        goals = GoalSet.model_validate({
            "targetCalories": 2000, "targetProtein": 50, "targetCarbs": 250, "targetFat": 65,
        })
        assert goals.target_calories == 2000
        assert goals.model_dump(by_alias=True)["targetFat"] == 65

    def test_negative_setting_rejected(self):
        with pytest.raises(ValidationError):
            UserSettings(target_calories=-100)


class TestBadgeDefinition:
    """Tests for BadgeDefinition and requirement parsing."""

    def test_requirement_parsed_by_tag(self):
        badge = BadgeDefinition.model_validate({
            "id": "comeback_kid",
            "name": "Comeback Kid",
            "icon": "x",
            "category": "behavior",
            "description": "Return after a gap",
            "requirement": {"type": "comeback", "gapDays": 7},
        })
        assert isinstance(badge.requirement, ComebackRequirement)
        assert badge.requirement.gap_days == 7
        assert badge.tier is None

    def test_unknown_requirement_tag_rejected(self):
        with pytest.raises(ValidationError):
            BadgeDefinition.model_validate({
                "id": "typo", "name": "Typo", "icon": "x", "category": "behavior",
                "description": "", "requirement": {"type": "streakk", "target": 3},
            })

    def test_target_must_be_positive(self):
        with pytest.raises(ValidationError):
            BadgeDefinition.model_validate({
                "id": "zero", "name": "Zero", "icon": "x", "category": "consistency",
                "description": "", "requirement": {"type": "streak", "target": 0},
            })


class TestEarnedBadge:
    """Tests for EarnedBadge model."""

    def test_naive_timestamp_is_utc(self):
        badge = EarnedBadge(badge_id="first_bite", earned_at=datetime(2025, 1, 1, 12, 0))
        assert badge.earned_at.tzinfo == timezone.utc
        assert badge.metadata == {}

    def test_document_shape(self):
        earned_at = datetime(2025, 1, 1, tzinfo=timezone.utc)
        badge = EarnedBadge(badge_id="first_bite", earned_at=earned_at)
        assert badge.model_dump(by_alias=True) == {
            "badgeId": "first_bite", "earnedAt": earned_at, "metadata": {},
        }


class TestUserBadges:
    """Tests for the gallery payload."""

    def test_camel_case_output(self):
        payload = UserBadges(
            stats=BadgeStats(current_streak=2, best_streak=5, calorie_streak=1, macro_streak=0),
        ).model_dump(mode="json", by_alias=True)
        assert payload == {
            "earned": [],
            "progress": [],
            "stats": {"currentStreak": 2, "bestStreak": 5, "calorieStreak": 1, "macroStreak": 0},
        }
