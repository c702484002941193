"""Badge Service - Loads a user's history and runs the badge engine.

Checks recompute from the full history every time, since edits and deletes
change past totals. Badges are only ever added: a badge already in the
earned set is never re-evaluated, so later edits can't revoke it.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from ..core.catalog import BADGE_CATALOG
from ..core.dates import DEFAULT_TIMEZONE, today_key
from ..core.eligibility import EvaluationContext, build_context, find_newly_earned
from ..core.models import BadgeDefinition, UserBadges
from ..core.reports import build_user_badges
from .firestore_client import HISTORY_LIMIT, FoodLogFirestoreClient


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BadgeService:
    """Badge eligibility checks and gallery queries for one store.

    Args:
        store: Persistence for settings, goals, logs and badges
        clock: Returns the current instant; replaced by a fixed clock in tests
        catalog: Badge definitions to evaluate, in evaluation order
        history_limit: Maximum log entries read per user
    """

    def __init__(
        self,
        store: FoodLogFirestoreClient,
        clock: Callable[[], datetime] = utc_now,
        catalog: Sequence[BadgeDefinition] = BADGE_CATALOG,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        self.store = store
        self.clock = clock
        self.catalog = catalog
        self.history_limit = history_limit

    def _load_context(self, user_id: str, now: datetime) -> EvaluationContext:
        """Load settings, today's goals and log history into one context."""
        settings = self.store.get_user_settings(user_id)
        tz = settings.timezone or DEFAULT_TIMEZONE
        goals = self.store.get_goals_for_date(user_id, today_key(tz, now), settings)
        entries = self.store.query_logs(user_id, limit=self.history_limit)
        return build_context(entries, goals, tz, now)

    def check_eligibility(self, user_id: str) -> list[BadgeDefinition]:
        """Award every badge the user newly qualifies for.

        Never raises: a failure is logged and reported as no new badges,
        so the action that triggered the check still succeeds.

        Args:
            user_id: The user's ID

        Returns:
            Badges this call awarded, in catalog order
        """
        now = self.clock()
        try:
            earned_ids = self.store.list_earned_badge_ids(user_id)
            ctx = self._load_context(user_id, now)
            if ctx.entry_count == 0:
                return []
            candidates = find_newly_earned(self.catalog, earned_ids, ctx)
        except Exception:
            logger.exception("Badge eligibility check failed for user %s", user_id[:8])
            return []

        awarded: list[BadgeDefinition] = []
        for badge in candidates:
            try:
                created = self.store.create_badge_if_absent(user_id, badge.id, now)
            except Exception:
                logger.exception("Failed to award badge %s to %s", badge.id, user_id[:8])
                continue
            if created:
                awarded.append(badge)
                logger.info("Badge earned by %s: %s", user_id[:8], badge.name)
        return awarded

    def get_user_badges(self, user_id: str) -> UserBadges:
        """Build the badge gallery for a user.

        Raises:
            google.api_core.exceptions.GoogleAPIError: If Firestore is unavailable
        """
        now = self.clock()
        earned = {badge.badge_id: badge for badge in self.store.list_earned_badges(user_id)}
        ctx = self._load_context(user_id, now)
        return build_user_badges(self.catalog, earned, ctx)
