"""MCP Server - Tool definitions for the Kalli chat agent.

Defines the tools the agent invokes to log food and show badges.
Logging or deleting food runs a badge check so the agent can celebrate
new badges in its reply.
"""

import logging
import os
from contextvars import ContextVar

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from pydantic import ValidationError

from ..core.dates import DEFAULT_TIMEZONE, is_date_key, today_key
from ..core.models import BadgeDefinition, FoodLogEntry, UserSettings
from .badge_service import BadgeService
from .firestore_client import HISTORY_LIMIT, FirestoreConfig, FoodLogFirestoreClient


logger = logging.getLogger(__name__)

# Context variable to store current user_id per request
current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")

transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=[
        "localhost:*",
        "127.0.0.1:*",
        "*.run.app:*",
        "*.run.app",
    ],
)

mcp = FastMCP(
    "kalli",
    instructions="""Kalli - Conversational nutrition tracker.

Use these tools to log the user's meals and to show their streaks and badges.

Always pass the meal type when logging. Use source="photo" for items
recognised from a photo. When a tool result lists new_badges, congratulate
the user on each one by name.""",
    stateless_http=True,
    transport_security=transport_security,
)

# Lazy-initialized clients
_firestore_client: FoodLogFirestoreClient | None = None
_badge_service: BadgeService | None = None


def get_firestore_client() -> FoodLogFirestoreClient:
    """Get or create Firestore client."""
    global _firestore_client
    if _firestore_client is None:
        config = FirestoreConfig(
            project_id=os.environ.get("FIRESTORE_PROJECT"),
            database=os.environ.get("FIRESTORE_DATABASE", "kalli"),
        )
        _firestore_client = FoodLogFirestoreClient(config)
    return _firestore_client


def get_badge_service() -> BadgeService:
    """Get or create the badge service."""
    global _badge_service
    if _badge_service is None:
        limit = int(os.environ.get("BADGE_HISTORY_LIMIT", HISTORY_LIMIT))
        _badge_service = BadgeService(get_firestore_client(), history_limit=limit)
    return _badge_service


def get_user_id() -> str:
    """Get current authenticated user ID.

    Raises:
        RuntimeError: If no user is authenticated
    """
    user_id = current_user_id.get()
    if user_id is None:
        raise RuntimeError("No authenticated user. Ensure the gateway forwards X-User-Id.")
    return user_id


def _badge_summary(badges: list[BadgeDefinition]) -> list[dict]:
    return [
        {"id": b.id, "name": b.name, "icon": b.icon, "description": b.description}
        for b in badges
    ]


# ==================== Settings Tools ====================


@mcp.tool()
def update_settings(
    timezone: str | None = None,
    target_calories: float | None = None,
    target_protein: float | None = None,
    target_carbs: float | None = None,
    target_fat: float | None = None,
) -> dict:
    """Store the user's timezone and daily targets. Only provided fields change.

    Args:
        timezone: IANA timezone name (e.g., "Europe/Berlin")
        target_calories: Daily calorie target
        target_protein: Daily protein target in grams
        target_carbs: Daily carbohydrate target in grams
        target_fat: Daily fat target in grams

    Returns:
        The settings that were saved, or an error message
    """
    user_id = get_user_id()
    db = get_firestore_client()

    try:
        settings = UserSettings(
            timezone=timezone,
            target_calories=target_calories,
            target_protein=target_protein,
            target_carbs=target_carbs,
            target_fat=target_fat,
        )
    except ValidationError:
        return {"error": "Invalid settings. Targets must be zero or more."}
    if not settings.model_dump(exclude_none=True):
        return {"error": "No settings provided."}

    if not db.save_user_settings(user_id, settings):
        return {"error": "Failed to save settings. Please try again."}

    # New targets apply from today; earlier days keep their snapshots
    tz = settings.timezone
    if tz is None:
        try:
            tz = db.get_user_settings(user_id).timezone
        except Exception as e:
            logger.error("Failed to fetch settings: %s", str(e))
    db.snapshot_goals(user_id, today_key(tz or DEFAULT_TIMEZONE, get_badge_service().clock()), settings)

    return {"settings": settings.model_dump(by_alias=True, exclude_none=True)}


# ==================== Logging Tools ====================


@mcp.tool()
def log_food(
    name: str,
    meal: str,
    calories: float,
    protein: float,
    carbs: float,
    fat: float,
    source: str = "chat",
    date_str: str | None = None,
) -> dict:
    """Add a food entry to the user's log and check for new badges.

    Args:
        name: Name of the food (e.g., "Greek yogurt")
        meal: One of breakfast, lunch, dinner, snack
        calories: Total calories for this serving
        protein: Protein in grams
        carbs: Carbohydrates in grams
        fat: Fat in grams
        source: How the item was logged: chat, photo or manual
        date_str: Date in YYYY-MM-DD format (defaults to the user's today)

    Returns:
        The created entry and any badges it earned
    """
    user_id = get_user_id()
    db = get_firestore_client()

    badges = get_badge_service()

    if meal not in MEAL_TYPES:
        return {"error": f"Invalid meal. Use one of: {', '.join(MEAL_TYPES)}."}

    if date_str is None:
        try:
            settings = db.get_user_settings(user_id)
        except Exception as e:
            logger.error("Failed to fetch settings: %s", str(e))
            return {"error": "Failed to log food. Please try again."}
        date_str = today_key(settings.timezone or DEFAULT_TIMEZONE, badges.clock())
    elif not is_date_key(date_str):
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    entry = FoodLogEntry(
        name=name,
        date=date_str,
        meal=meal,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        source=source,
    )

    if db.add_food_log(user_id, entry) is None:
        return {"error": "Failed to log food. Please try again."}

    new_badges = badges.check_eligibility(user_id)

    return {
        "entry": entry.model_dump(by_alias=True, exclude={"logged_at"}),
        "new_badges": _badge_summary(new_badges),
    }


@mcp.tool()
def delete_food(entry_id: str) -> dict:
    """Delete a food entry. Badges already earned are kept.

    Args:
        entry_id: The ID of the entry to delete

    Returns:
        Confirmation and any badges earned by the re-check
    """
    user_id = get_user_id()
    db = get_firestore_client()

    if not db.delete_food_log(user_id, entry_id):
        return {"error": "Entry not found or delete failed."}

    new_badges = get_badge_service().check_eligibility(user_id)

    return {"success": True, "new_badges": _badge_summary(new_badges)}


# ==================== Badge Tools ====================


@mcp.tool()
def check_badges() -> dict:
    """Check whether the user has earned any new badges.

    Returns:
        Newly earned badges (empty when nothing changed)
    """
    user_id = get_user_id()
    new_badges = get_badge_service().check_eligibility(user_id)
    return {"new_badges": _badge_summary(new_badges)}


@mcp.tool()
def get_badges() -> dict:
    """Get the user's badge gallery: earned badges, progress and streaks.

    Returns:
        Dictionary with earned, progress and stats
    """
    user_id = get_user_id()
    try:
        badges = get_badge_service().get_user_badges(user_id)
    except Exception as e:
        logger.error("Failed to load badges: %s", str(e))
        return {"error": "Failed to load badges. Please try again."}
    return badges.model_dump(mode="json", by_alias=True)
