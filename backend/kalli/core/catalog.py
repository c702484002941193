"""Badge Catalog - The static, ordered registry of badge definitions.

Evaluation iterates BADGE_CATALOG in this order, so several badges earned
by one check are always reported in the same order.
"""

from types import MappingProxyType

from .models import (
    AllMacrosOnTargetOnceRequirement,
    BadgeDefinition,
    BalancedWeekRequirement,
    CalorieOnTargetOnceRequirement,
    ComebackRequirement,
    ConsecutiveCalorieTargetRequirement,
    ConsecutiveProteinTargetRequirement,
    ConsecutiveTightCalorieRequirement,
    DoubleProteinRequirement,
    FullDayMealsRequirement,
    PhotoLogsRequirement,
    StreakRequirement,
    TotalLogsRequirement,
)


BADGE_CATALOG: tuple[BadgeDefinition, ...] = (
    # Consistency
    BadgeDefinition(
        id="first_steps", name="First Steps", category="consistency",
        icon="\U0001F463", description="Log meals for 3 consecutive days",
        requirement=StreakRequirement(target=3),
    ),
    BadgeDefinition(
        id="week_warrior", name="Week Warrior", category="consistency",
        icon="\U0001F525", tier="bronze", description="7-day logging streak",
        requirement=StreakRequirement(target=7),
    ),
    BadgeDefinition(
        id="fortnight_force", name="Fortnight Force", category="consistency",
        icon="\U0001F525", tier="silver", description="14-day logging streak",
        requirement=StreakRequirement(target=14),
    ),
    BadgeDefinition(
        id="monthly_master", name="Monthly Master", category="consistency",
        icon="\U0001F525", tier="gold", description="30-day logging streak",
        requirement=StreakRequirement(target=30),
    ),
    BadgeDefinition(
        id="century_club", name="Century Club", category="consistency",
        icon="\U0001F525", tier="platinum", description="100-day logging streak",
        requirement=StreakRequirement(target=100),
    ),
    BadgeDefinition(
        id="year_of_kalli", name="Year of Kalli", category="consistency",
        icon="\U0001F525", tier="diamond", description="365-day logging streak",
        requirement=StreakRequirement(target=365),
    ),

    # Target hitting
    BadgeDefinition(
        id="goal_getter", name="Goal Getter", category="target",
        icon="\U0001F3AF", description="Hit calorie target (within ±10%) for the first time",
        requirement=CalorieOnTargetOnceRequirement(),
    ),
    BadgeDefinition(
        id="bullseye_week", name="Bullseye Week", category="target",
        icon="\U0001F3AF\U0001F3AF", description="Hit calorie target 7 consecutive days",
        requirement=ConsecutiveCalorieTargetRequirement(target=7),
    ),
    BadgeDefinition(
        id="macro_master", name="Macro Master", category="target",
        icon="⚖️", description="Hit all 3 macros within ±10% in a single day",
        requirement=AllMacrosOnTargetOnceRequirement(),
    ),
    BadgeDefinition(
        id="balanced_week", name="Balanced Week", category="target",
        icon="⚖️⚖️", description="Hit all 3 macros within ±10% for 5+ days in a week",
        requirement=BalancedWeekRequirement(target=5),
    ),
    BadgeDefinition(
        id="protein_machine", name="Protein Machine", category="target",
        icon="\U0001F4AA", description="Hit protein goal for 14 consecutive days",
        requirement=ConsecutiveProteinTargetRequirement(target=14),
    ),

    # Logging milestones
    BadgeDefinition(
        id="first_bite", name="First Bite", category="milestone",
        icon="\U0001F34E", description="Log your first food item",
        requirement=TotalLogsRequirement(target=1),
    ),
    BadgeDefinition(
        id="century_logger", name="Century Logger", category="milestone",
        icon="\U0001F4DD", description="Log 100 total food items",
        requirement=TotalLogsRequirement(target=100),
    ),
    BadgeDefinition(
        id="five_hundred_club", name="Five Hundred Club", category="milestone",
        icon="\U0001F4DD\U0001F4DD", description="Log 500 total food items",
        requirement=TotalLogsRequirement(target=500),
    ),
    BadgeDefinition(
        id="thousand_strong", name="Thousand Strong", category="milestone",
        icon="\U0001F4DD\U0001F4DD\U0001F4DD", description="Log 1,000 total food items",
        requirement=TotalLogsRequirement(target=1000),
    ),

    # Behavior
    BadgeDefinition(
        id="full_day", name="Full Day", category="behavior",
        icon="\U0001F37D️", description="Log breakfast, lunch, AND dinner in a single day",
        requirement=FullDayMealsRequirement(),
    ),
    BadgeDefinition(
        id="photo_scout", name="Photo Scout", category="behavior",
        icon="\U0001F4F8", description="Use photo recognition to log 5+ items",
        requirement=PhotoLogsRequirement(target=5),
    ),
    BadgeDefinition(
        id="comeback_kid", name="Comeback Kid", category="behavior",
        icon="\U0001F504", description="Return and log after 7+ day gap",
        requirement=ComebackRequirement(gap_days=7),
    ),

    # Nutrition quality
    BadgeDefinition(
        id="protein_power_day", name="Protein Power Day", category="quality",
        icon="\U0001F3CB️", description="Hit 2x your daily protein target in a single day",
        requirement=DoubleProteinRequirement(),
    ),
    BadgeDefinition(
        id="under_budget", name="Under Budget", category="quality",
        icon="\U0001F4B0", description="Stay within ±5% of calorie target for 7 consecutive days",
        requirement=ConsecutiveTightCalorieRequirement(target=7),
    ),
)

BADGES_BY_ID = MappingProxyType({badge.id: badge for badge in BADGE_CATALOG})


def get_badge(badge_id: str) -> BadgeDefinition | None:
    """Look up a badge definition by id."""
    return BADGES_BY_ID.get(badge_id)
