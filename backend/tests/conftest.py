"""Shared fixtures: fixed clocks and an in-memory stand-in for Firestore."""

from datetime import datetime, timezone

import pytest

from kalli.core.goals import resolve_goals
from kalli.core.models import EarnedBadge, FoodLogEntry, GoalSet, UserSettings


class InMemoryStore:
    """Implements the FoodLogFirestoreClient methods the badge code uses."""

    def __init__(self) -> None:
        self.settings: dict[str, UserSettings] = {}
        self.snapshots: dict[tuple[str, str], dict] = {}
        self.logs: dict[str, dict[str, FoodLogEntry]] = {}
        self.badges: dict[str, dict[str, EarnedBadge]] = {}
        self.failing: set[str] = set()
        self.goal_dates: list[str] = []
        self.query_limits: list[int] = []

    def _check(self, operation: str) -> None:
        if operation in self.failing:
            raise RuntimeError(f"{operation} unavailable")

    def get_user_settings(self, user_id: str) -> UserSettings:
        self._check("get_user_settings")
        return self.settings.get(user_id, UserSettings())

    def save_user_settings(self, user_id: str, settings: UserSettings) -> bool:
        current = self.settings.get(user_id, UserSettings())
        self.settings[user_id] = current.model_copy(update=settings.model_dump(exclude_none=True))
        return True

    def snapshot_goals(self, user_id: str, date_key: str, settings: UserSettings) -> bool:
        self._check("snapshot_goals")
        data = settings.model_dump(by_alias=True, exclude_none=True, exclude={"timezone"})
        if data:
            self.snapshots.setdefault((user_id, date_key), {}).update(data)
        return True

    def get_goals_for_date(self, user_id: str, date_key: str, settings: UserSettings) -> GoalSet:
        self._check("get_goals_for_date")
        self.goal_dates.append(date_key)
        snapshot = self.snapshots.get((user_id, date_key))
        return resolve_goals(snapshot, settings.model_dump(by_alias=True, exclude_none=True))

    def query_logs(self, user_id: str, limit: int = 5000) -> list[FoodLogEntry]:
        self._check("query_logs")
        self.query_limits.append(limit)
        entries = sorted(self.logs.get(user_id, {}).values(), key=lambda e: e.date or "", reverse=True)
        return entries[:limit]

    def add_food_log(self, user_id: str, entry: FoodLogEntry) -> FoodLogEntry | None:
        self.logs.setdefault(user_id, {})[entry.id] = entry
        return entry

    def delete_food_log(self, user_id: str, entry_id: str) -> bool:
        return self.logs.get(user_id, {}).pop(entry_id, None) is not None

    def list_earned_badges(self, user_id: str) -> list[EarnedBadge]:
        self._check("list_earned_badges")
        return list(self.badges.get(user_id, {}).values())

    def list_earned_badge_ids(self, user_id: str) -> set[str]:
        self._check("list_earned_badge_ids")
        return set(self.badges.get(user_id, {}))

    def create_badge_if_absent(self, user_id: str, badge_id: str, earned_at: datetime) -> bool:
        self._check("create_badge_if_absent")
        user_badges = self.badges.setdefault(user_id, {})
        if badge_id in user_badges:
            return False
        user_badges[badge_id] = EarnedBadge(badge_id=badge_id, earned_at=earned_at)
        return True


@pytest.fixture
def store():
    """Empty in-memory store; user "user-1234567890" is on UTC."""
    memory = InMemoryStore()
    memory.settings["user-1234567890"] = UserSettings(timezone="UTC")
    return memory


@pytest.fixture
def noon():
    """2025-01-07 12:00 UTC."""
    return datetime(2025, 1, 7, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_entry():
    """Factory for food log entries."""

    def _make(date, calories=0, protein=0, carbs=0, fat=0, meal="lunch", source="chat"):
        return FoodLogEntry(
            name="Food",
            date=date,
            meal=meal,
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
            source=source,
        )

    return _make
