"""Firestore Client - Persistence for food logs, settings and badges.

This module handles all database I/O for logging and badge operations.
All I/O is contained here; business logic is in the core module.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from google.api_core.exceptions import AlreadyExists
from google.cloud import firestore
from pydantic import ValidationError

from ..core.goals import resolve_goals
from ..core.models import EarnedBadge, FoodLogEntry, GoalSet, UserSettings


logger = logging.getLogger(__name__)

# Most recent entries read for badge evaluation
HISTORY_LIMIT = 5000


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
    """

    project_id: str | None = None
    database: str | None = None


class FoodLogFirestoreClient:
    """Client for persisting food logs, settings and badges to Firestore.

    Document structure per user:
        users/{user_id}: { settings: { timezone, targetCalories, ... } }
        users/{user_id}/dailyGoals/{YYYY-MM-DD}: { targetCalories, ... }
        users/{user_id}/foodLogs/{entry_id}: { date, meal, calories, ... }
        users/{user_id}/badges/{badge_id}: { badgeId, earnedAt, metadata }

    Read methods used by badge evaluation raise on failure so the caller can
    tell an empty history from an unavailable store.
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _user_ref(self, user_id: str) -> firestore.DocumentReference:
        """Get reference to user document."""
        return self.client.collection("users").document(user_id)

    def _logs_ref(self, user_id: str) -> firestore.CollectionReference:
        return self._user_ref(user_id).collection("foodLogs")

    def _badges_ref(self, user_id: str) -> firestore.CollectionReference:
        return self._user_ref(user_id).collection("badges")

    # ==================== Settings Operations ====================

    def get_user_settings(self, user_id: str) -> UserSettings:
        """Fetch user settings, empty if the user has none.

        Raises:
            google.api_core.exceptions.GoogleAPIError: If Firestore is unavailable
        """
        logger.debug("Fetching settings for user: %s", user_id[:8])
        doc = self._user_ref(user_id).get()
        if not doc.exists:
            return UserSettings()
        return UserSettings.model_validate((doc.to_dict() or {}).get("settings") or {})

    def save_user_settings(self, user_id: str, settings: UserSettings) -> bool:
        """Merge settings into the user's profile.

        Args:
            user_id: The user's ID
            settings: Settings to save; unset fields are left untouched

        Returns:
            True if successful
        """
        logger.info("Saving settings for user: %s", user_id[:8])
        try:
            data = settings.model_dump(by_alias=True, exclude_none=True)
            self._user_ref(user_id).set({"settings": data}, merge=True)
            return True
        except Exception as e:
            logger.error("Failed to save settings: %s", str(e))
            return False

    def get_daily_goal_snapshot(self, user_id: str, date_key: str) -> dict[str, Any] | None:
        """Fetch the goal snapshot stored for one date, if any. Written by snapshot_goals."""
        doc = self._user_ref(user_id).collection("dailyGoals").document(date_key).get()
        if not doc.exists:
            return None
        return doc.to_dict() or {}

    def snapshot_goals(self, user_id: str, date_key: str, settings: UserSettings) -> bool:
        """Merge the targets set in settings into the snapshot for one date.

        Args:
            user_id: The user's ID
            date_key: Calendar-date key of the snapshot
            settings: Settings whose non-empty targets are copied

        Returns:
            True if successful (or there was nothing to write)
        """
        data = settings.model_dump(by_alias=True, exclude_none=True, exclude={"timezone"})
        if not data:
            return True
        try:
            self._user_ref(user_id).collection("dailyGoals").document(date_key).set(data, merge=True)
            return True
        except Exception as e:
            logger.error("Failed to snapshot goals: %s", str(e))
            return False

    def get_goals_for_date(self, user_id: str, date_key: str, settings: UserSettings) -> GoalSet:
        """Resolve the user's targets for a date.

        Args:
            user_id: The user's ID
            date_key: Calendar-date key
            settings: Already-fetched user settings

        Returns:
            GoalSet from the date snapshot, settings or defaults
        """
        snapshot = self.get_daily_goal_snapshot(user_id, date_key)
        return resolve_goals(snapshot, settings.model_dump(by_alias=True, exclude_none=True))

    # ==================== Food Log Operations ====================

    def query_logs(self, user_id: str, limit: int = HISTORY_LIMIT) -> list[FoodLogEntry]:
        """Fetch the most recent log entries, newest date first.

        Args:
            user_id: The user's ID
            limit: Maximum number of entries

        Returns:
            List of entries (may be empty)
        """
        logger.debug("Fetching up to %d logs for %s", limit, user_id[:8])
        query = (
            self._logs_ref(user_id)
            .order_by("date", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        entries: list[FoodLogEntry] = []
        for doc in query.stream():
            try:
                entries.append(FoodLogEntry.model_validate({"id": doc.id, **(doc.to_dict() or {})}))
            except ValidationError as e:
                logger.warning("Skipping malformed log %s for %s: %s", doc.id, user_id[:8], str(e))
        logger.debug("Found %d logs", len(entries))
        return entries

    def add_food_log(self, user_id: str, entry: FoodLogEntry) -> FoodLogEntry | None:
        """Save a new food log entry.

        Args:
            user_id: The user's ID
            entry: The entry to save

        Returns:
            The saved entry if successful, None otherwise
        """
        logger.info("Saving log for %s on %s", user_id[:8], entry.date)
        try:
            data = entry.model_dump(by_alias=True, exclude={"id"})
            self._logs_ref(user_id).document(entry.id).set(data)
            return entry
        except Exception as e:
            logger.error("Failed to save log: %s", str(e))
            return None

    def delete_food_log(self, user_id: str, entry_id: str) -> bool:
        """Delete a food log entry.

        Args:
            user_id: The user's ID
            entry_id: ID of the entry to delete

        Returns:
            True if the entry existed and was deleted
        """
        try:
            ref = self._logs_ref(user_id).document(entry_id)
            if not ref.get().exists:
                logger.warning("Entry not found: %s", entry_id)
                return False
            ref.delete()
            logger.info("Deleted log %s for %s", entry_id, user_id[:8])
            return True
        except Exception as e:
            logger.error("Failed to delete log: %s", str(e))
            return False

    # ==================== Badge Operations ====================

    def list_earned_badges(self, user_id: str) -> list[EarnedBadge]:
        """Fetch every badge record for a user."""
        badges = []
        for doc in self._badges_ref(user_id).stream():
            data = {"badgeId": doc.id, "metadata": {}, **(doc.to_dict() or {})}
            badges.append(EarnedBadge.model_validate(data))
        return badges

    def list_earned_badge_ids(self, user_id: str) -> set[str]:
        """Fetch the ids of badges a user already has."""
        return {doc.id for doc in self._badges_ref(user_id).stream()}

    def create_badge_if_absent(self, user_id: str, badge_id: str, earned_at: datetime) -> bool:
        """Write a badge record unless one already exists.

        The write is a create, so a concurrent award for the same badge can't
        produce a second record or move earnedAt.

        Args:
            user_id: The user's ID
            badge_id: Catalog id of the badge
            earned_at: Award timestamp

        Returns:
            True if this call created the record, False if it already existed
        """
        record = EarnedBadge(badge_id=badge_id, earned_at=earned_at)
        try:
            self._badges_ref(user_id).document(badge_id).create(record.model_dump(by_alias=True))
        except AlreadyExists:
            logger.debug("Badge %s already awarded to %s", badge_id, user_id[:8])
            return False
        return True
