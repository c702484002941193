"""Core Data Models - Pydantic models for type safety.

Persisted and UI-facing models use camelCase aliases so Firestore documents
and badge-gallery payloads keep their wire names, while Python code uses
snake_case attributes.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==================== Inputs ====================


class FoodLogEntry(CamelModel):
    """A single food item logged by the user."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: Optional[str] = Field(default=None, description="Name of the food")
    date: Optional[str] = Field(default=None, description="Calendar-date key (YYYY-MM-DD)")
    meal: Optional[str] = Field(default=None, description="breakfast, lunch, dinner or snack")
    calories: float = Field(default=0, description="Total calories")
    protein: float = Field(default=0, description="Protein in grams")
    carbs: float = Field(default=0, description="Carbohydrates in grams")
    fat: float = Field(default=0, description="Fat in grams")
    source: Optional[str] = Field(default=None, description="Origin tag: photo, chat, manual")
    logged_at: datetime = Field(default_factory=_utcnow)

    @field_validator("calories", "protein", "carbs", "fat", mode="before")
    @classmethod
    def _missing_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class GoalSet(CamelModel):
    """Daily nutrition targets held constant for one evaluation pass."""

    target_calories: float = Field(description="Daily calorie target")
    target_protein: float = Field(description="Daily protein target in grams")
    target_carbs: float = Field(description="Daily carbohydrate target in grams")
    target_fat: float = Field(description="Daily fat target in grams")


class UserSettings(CamelModel):
    """User profile settings relevant to badge evaluation."""

    timezone: Optional[str] = Field(default=None, description="IANA timezone name")
    target_calories: Optional[float] = Field(default=None, ge=0)
    target_protein: Optional[float] = Field(default=None, ge=0)
    target_carbs: Optional[float] = Field(default=None, ge=0)
    target_fat: Optional[float] = Field(default=None, ge=0)


class DailyAggregate(BaseModel):
    """Totals for one calendar date that has at least one log entry."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    meals: set[str] = Field(default_factory=set)
    sources: list[str] = Field(default_factory=list)


class StreakSummary(BaseModel):
    """Current and best consecutive-day logging streak."""

    current: int = Field(ge=0)
    best: int = Field(ge=0)


# ==================== Badge Requirements ====================


class _Requirement(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class StreakRequirement(_Requirement):
    type: Literal["streak"] = "streak"
    target: int = Field(gt=0)


class TotalLogsRequirement(_Requirement):
    type: Literal["total_logs"] = "total_logs"
    target: int = Field(gt=0)


class CalorieOnTargetOnceRequirement(_Requirement):
    type: Literal["calorie_on_target_once"] = "calorie_on_target_once"


class ConsecutiveCalorieTargetRequirement(_Requirement):
    type: Literal["consecutive_calorie_target"] = "consecutive_calorie_target"
    target: int = Field(gt=0)


class AllMacrosOnTargetOnceRequirement(_Requirement):
    type: Literal["all_macros_on_target_once"] = "all_macros_on_target_once"


class BalancedWeekRequirement(_Requirement):
    type: Literal["balanced_week"] = "balanced_week"
    target: int = Field(gt=0, le=7)


class ConsecutiveProteinTargetRequirement(_Requirement):
    type: Literal["consecutive_protein_target"] = "consecutive_protein_target"
    target: int = Field(gt=0)


class FullDayMealsRequirement(_Requirement):
    type: Literal["full_day_meals"] = "full_day_meals"


class PhotoLogsRequirement(_Requirement):
    type: Literal["photo_logs"] = "photo_logs"
    target: int = Field(gt=0)


class ComebackRequirement(_Requirement):
    type: Literal["comeback"] = "comeback"
    gap_days: int = Field(gt=0)


class DoubleProteinRequirement(_Requirement):
    type: Literal["double_protein"] = "double_protein"


class ConsecutiveTightCalorieRequirement(_Requirement):
    type: Literal["consecutive_tight_calorie"] = "consecutive_tight_calorie"
    target: int = Field(gt=0)


REQUIREMENT_MODELS = (
    StreakRequirement,
    TotalLogsRequirement,
    CalorieOnTargetOnceRequirement,
    ConsecutiveCalorieTargetRequirement,
    AllMacrosOnTargetOnceRequirement,
    BalancedWeekRequirement,
    ConsecutiveProteinTargetRequirement,
    FullDayMealsRequirement,
    PhotoLogsRequirement,
    ComebackRequirement,
    DoubleProteinRequirement,
    ConsecutiveTightCalorieRequirement,
)

REQUIREMENT_TYPES: tuple[str, ...] = tuple(
    model.model_fields["type"].default for model in REQUIREMENT_MODELS
)

Requirement = Annotated[
    Union[
        StreakRequirement,
        TotalLogsRequirement,
        CalorieOnTargetOnceRequirement,
        ConsecutiveCalorieTargetRequirement,
        AllMacrosOnTargetOnceRequirement,
        BalancedWeekRequirement,
        ConsecutiveProteinTargetRequirement,
        FullDayMealsRequirement,
        PhotoLogsRequirement,
        ComebackRequirement,
        DoubleProteinRequirement,
        ConsecutiveTightCalorieRequirement,
    ],
    Field(discriminator="type"),
]


BadgeCategory = Literal["consistency", "target", "milestone", "behavior", "quality"]
BadgeTier = Literal["bronze", "silver", "gold", "platinum", "diamond"]


class BadgeDefinition(CamelModel):
    """Static catalog entry describing a badge and how it is earned."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    name: str
    icon: str
    category: BadgeCategory
    tier: Optional[BadgeTier] = None
    description: str
    requirement: Requirement


class EarnedBadge(CamelModel):
    """Write-once record of a badge awarded to a user."""

    badge_id: str
    earned_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("earned_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# ==================== Badge Gallery ====================


class EarnedBadgeView(CamelModel):
    """An earned badge with its display metadata."""

    badge_id: str
    name: str
    description: str
    icon: str
    category: BadgeCategory
    tier: Optional[BadgeTier] = None
    earned_at: datetime


class BadgeProgress(CamelModel):
    """Partial progress toward a badge that is not yet earned."""

    badge_id: str
    name: str
    description: str
    icon: str
    category: BadgeCategory
    tier: Optional[BadgeTier] = None
    current: int = Field(ge=0)
    target: int = Field(gt=0)
    percentage: int = Field(ge=0, le=100)


class BadgeStats(CamelModel):
    """Live streak counters shown alongside the gallery."""

    current_streak: int = Field(ge=0)
    best_streak: int = Field(ge=0)
    calorie_streak: int = Field(ge=0)
    macro_streak: int = Field(ge=0)


class UserBadges(CamelModel):
    """Complete badge gallery for one user."""

    earned: list[EarnedBadgeView] = Field(default_factory=list)
    progress: list[BadgeProgress] = Field(default_factory=list)
    stats: BadgeStats
