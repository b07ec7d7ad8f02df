"""Badge catalog — the 46 static badge definitions and lookups."""

from __future__ import annotations

from watchbadges.badges.schemas import Badge, BadgeCategory

BADGE_SEED_DATA: list[dict] = [
    # Binge: episodes inside one rolling session window
    {
        "id": "binge_bronze",
        "category": "binge",
        "tier": "bronze",
        "name": "Snack Session",
        "description": "Watch 3 episodes in a row",
        "emoji": "\U0001f37f",
        "requirements": {"episodes": 3, "timeframe": "10hours"},
        "rarity": "common",
    },
    {
        "id": "binge_bronze_plus",
        "category": "binge",
        "tier": "bronze",
        "name": "Appetizer",
        "description": "Watch 5 episodes in a row",
        "emoji": "\U0001f968",
        "requirements": {"episodes": 5, "timeframe": "10hours"},
        "rarity": "common",
    },
    {
        "id": "binge_silver",
        "category": "binge",
        "tier": "silver",
        "name": "Couch Potato",
        "description": "Watch 8 episodes in a row",
        "emoji": "\U0001f6cb️",
        "requirements": {"episodes": 8, "timeframe": "10hours"},
        "rarity": "rare",
    },
    {
        "id": "binge_silver_plus",
        "category": "binge",
        "tier": "silver",
        "name": "Series Sprinter",
        "description": "Watch 10 episodes in a row",
        "emoji": "\U0001f4fa",
        "requirements": {"episodes": 10, "timeframe": "10hours"},
        "rarity": "rare",
    },
    {
        "id": "binge_gold",
        "category": "binge",
        "tier": "gold",
        "name": "Binge Master",
        "description": "Watch 15 episodes in one day",
        "emoji": "\U0001f3c6",
        "requirements": {"episodes": 15, "timeframe": "1day"},
        "rarity": "epic",
    },
    {
        "id": "binge_gold_plus",
        "category": "binge",
        "tier": "gold",
        "name": "Binge King",
        "description": "Watch 20 episodes in one day",
        "emoji": "\U0001f451",
        "requirements": {"episodes": 20, "timeframe": "1day"},
        "rarity": "epic",
    },
    {
        "id": "binge_platinum",
        "category": "binge",
        "tier": "platinum",
        "name": "Binge Monster",
        "description": "Devour 25 episodes in one day",
        "emoji": "\U0001f479",
        "requirements": {"episodes": 25, "timeframe": "1day"},
        "rarity": "epic",
    },
    {
        "id": "binge_diamond",
        "category": "binge",
        "tier": "diamond",
        "name": "Binge God",
        "description": "Watch 35 episodes in two days",
        "emoji": "\U0001f525",
        "requirements": {"episodes": 35, "timeframe": "2days"},
        "rarity": "legendary",
    },
    {
        "id": "binge_diamond_plus",
        "category": "binge",
        "tier": "diamond",
        "name": "Binge Titan",
        "description": "Watch 50 episodes in two days",
        "emoji": "⚡",
        "requirements": {"episodes": 50, "timeframe": "2days"},
        "rarity": "legendary",
    },
    # Quickwatch: episodes watched on their release day
    {
        "id": "quickwatch_bronze",
        "category": "quickwatch",
        "tier": "bronze",
        "name": "Early Bird",
        "description": "Watch 3 episodes on their release day",
        "emoji": "⚡",
        "requirements": {"episodes": 3},
        "rarity": "common",
    },
    {
        "id": "quickwatch_silver",
        "category": "quickwatch",
        "tier": "silver",
        "name": "Day One Fan",
        "description": "Watch 8 episodes on their release day",
        "emoji": "\U0001f305",
        "requirements": {"episodes": 8},
        "rarity": "rare",
    },
    {
        "id": "quickwatch_gold",
        "category": "quickwatch",
        "tier": "gold",
        "name": "Release Hunter",
        "description": "Watch 15 episodes on their release day",
        "emoji": "\U0001f3af",
        "requirements": {"episodes": 15},
        "rarity": "epic",
    },
    {
        "id": "quickwatch_platinum",
        "category": "quickwatch",
        "tier": "platinum",
        "name": "Release Predator",
        "description": "Watch 25 episodes on their release day",
        "emoji": "\U0001f985",
        "requirements": {"episodes": 25},
        "rarity": "legendary",
    },
    {
        "id": "quickwatch_diamond",
        "category": "quickwatch",
        "tier": "diamond",
        "name": "Day Zero Destroyer",
        "description": "Watch 40 episodes on their release day",
        "emoji": "\U0001f480",
        "requirements": {"episodes": 40},
        "rarity": "legendary",
    },
    # Marathon: best ISO week ever
    {
        "id": "marathon_bronze",
        "category": "marathon",
        "tier": "bronze",
        "name": "Series Fan",
        "description": "Watch 15 episodes in one week",
        "emoji": "\U0001f4fa",
        "requirements": {"episodes": 15, "timeframe": "1week"},
        "rarity": "common",
    },
    {
        "id": "marathon_silver",
        "category": "marathon",
        "tier": "silver",
        "name": "Weekend Warrior",
        "description": "Watch 25 episodes in one week",
        "emoji": "⚔️",
        "requirements": {"episodes": 25, "timeframe": "1week"},
        "rarity": "rare",
    },
    {
        "id": "marathon_gold",
        "category": "marathon",
        "tier": "gold",
        "name": "Marathon Master",
        "description": "Watch 40 episodes in one week",
        "emoji": "\U0001f3c3",
        "requirements": {"episodes": 40, "timeframe": "1week"},
        "rarity": "epic",
    },
    {
        "id": "marathon_platinum",
        "category": "marathon",
        "tier": "platinum",
        "name": "Weekend Titan",
        "description": "Watch 60 episodes in one week",
        "emoji": "⚔️",
        "requirements": {"episodes": 60, "timeframe": "1week"},
        "rarity": "legendary",
    },
    {
        "id": "marathon_diamond",
        "category": "marathon",
        "tier": "diamond",
        "name": "Series Annihilator",
        "description": "Watch 80 episodes in one week",
        "emoji": "\U0001f480",
        "requirements": {"episodes": 80, "timeframe": "1week"},
        "rarity": "legendary",
    },
    # Streak: consecutive days with activity
    {
        "id": "streak_bronze",
        "category": "streak",
        "tier": "bronze",
        "name": "Creature of Habit",
        "description": "Watch something 7 days in a row",
        "emoji": "\U0001f525",
        "requirements": {"days": 7},
        "rarity": "common",
    },
    {
        "id": "streak_silver",
        "category": "streak",
        "tier": "silver",
        "name": "Series Routine",
        "description": "Watch something 14 days in a row",
        "emoji": "⚡",
        "requirements": {"days": 14},
        "rarity": "rare",
    },
    {
        "id": "streak_gold",
        "category": "streak",
        "tier": "gold",
        "name": "Unstoppable",
        "description": "Watch something 30 days in a row",
        "emoji": "\U0001f48e",
        "requirements": {"days": 30},
        "rarity": "epic",
    },
    {
        "id": "streak_platinum",
        "category": "streak",
        "tier": "platinum",
        "name": "Hooked",
        "description": "Watch something 60 days in a row",
        "emoji": "\U0001f517",
        "requirements": {"days": 60},
        "rarity": "legendary",
    },
    {
        "id": "streak_diamond",
        "category": "streak",
        "tier": "diamond",
        "name": "Eternal Flame",
        "description": "Watch something 100 days in a row",
        "emoji": "\U0001f525",
        "requirements": {"days": 100},
        "rarity": "legendary",
    },
    # Rewatch: repeat views across all episodes
    {
        "id": "rewatch_bronze",
        "category": "rewatch",
        "tier": "bronze",
        "name": "Second Look",
        "description": "Rewatch 5 episodes",
        "emoji": "\U0001f504",
        "requirements": {"episodes": 5},
        "rarity": "common",
    },
    {
        "id": "rewatch_silver",
        "category": "rewatch",
        "tier": "silver",
        "name": "Nostalgia Fan",
        "description": "Rewatch 15 episodes",
        "emoji": "\U0001f4ab",
        "requirements": {"episodes": 15},
        "rarity": "rare",
    },
    {
        "id": "rewatch_gold",
        "category": "rewatch",
        "tier": "gold",
        "name": "Rewatch King",
        "description": "Rewatch 30 episodes",
        "emoji": "\U0001f451",
        "requirements": {"episodes": 30},
        "rarity": "epic",
    },
    {
        "id": "rewatch_platinum",
        "category": "rewatch",
        "tier": "platinum",
        "name": "Nostalgia Expert",
        "description": "Rewatch 60 episodes",
        "emoji": "\U0001f3ad",
        "requirements": {"episodes": 60},
        "rarity": "legendary",
    },
    {
        "id": "rewatch_diamond",
        "category": "rewatch",
        "tier": "diamond",
        "name": "Time Traveller",
        "description": "Rewatch 100 episodes",
        "emoji": "⏰",
        "requirements": {"episodes": 100},
        "rarity": "legendary",
    },
    # Series explorer: distinct series started
    {
        "id": "explorer_bronze",
        "category": "series_explorer",
        "tier": "bronze",
        "name": "Explorer",
        "description": "Start 50 different series",
        "emoji": "\U0001f5fa️",
        "requirements": {"series": 50},
        "rarity": "common",
    },
    {
        "id": "explorer_silver",
        "category": "series_explorer",
        "tier": "silver",
        "name": "Series Scout",
        "description": "Start 100 different series",
        "emoji": "\U0001f50d",
        "requirements": {"series": 100},
        "rarity": "rare",
    },
    {
        "id": "explorer_gold",
        "category": "series_explorer",
        "tier": "gold",
        "name": "Genre Master",
        "description": "Start 200 different series",
        "emoji": "\U0001f30d",
        "requirements": {"series": 200},
        "rarity": "epic",
    },
    {
        "id": "explorer_platinum",
        "category": "series_explorer",
        "tier": "platinum",
        "name": "Series Globetrotter",
        "description": "Start 300 different series",
        "emoji": "✈️",
        "requirements": {"series": 300},
        "rarity": "legendary",
    },
    {
        "id": "explorer_diamond",
        "category": "series_explorer",
        "tier": "diamond",
        "name": "Series Universe",
        "description": "Start 500 different series",
        "emoji": "\U0001f30c",
        "requirements": {"series": 500},
        "rarity": "legendary",
    },
    {
        "id": "explorer_mythic",
        "category": "series_explorer",
        "tier": "diamond",
        "name": "Omnipresent Explorer",
        "description": "Start 750+ different series",
        "emoji": "\U0001f680",
        "requirements": {"series": 750},
        "rarity": "legendary",
    },
    # Collector: rated series and movies
    {
        "id": "collector_bronze",
        "category": "collector",
        "tier": "bronze",
        "name": "Critic",
        "description": "Rate 50 series or movies",
        "emoji": "⭐",
        "requirements": {"ratings": 50},
        "rarity": "common",
    },
    {
        "id": "collector_silver",
        "category": "collector",
        "tier": "silver",
        "name": "Rating Expert",
        "description": "Rate 150 series or movies",
        "emoji": "\U0001f31f",
        "requirements": {"ratings": 150},
        "rarity": "rare",
    },
    {
        "id": "collector_gold",
        "category": "collector",
        "tier": "gold",
        "name": "Rating Master",
        "description": "Rate 300 series or movies",
        "emoji": "\U0001f3af",
        "requirements": {"ratings": 300},
        "rarity": "epic",
    },
    {
        "id": "collector_platinum",
        "category": "collector",
        "tier": "platinum",
        "name": "Rating God",
        "description": "Rate 500 series or movies",
        "emoji": "\U0001f3c6",
        "requirements": {"ratings": 500},
        "rarity": "legendary",
    },
    {
        "id": "collector_diamond",
        "category": "collector",
        "tier": "diamond",
        "name": "Critic Legend",
        "description": "Rate 750 series or movies",
        "emoji": "\U0001f4dd",
        "requirements": {"ratings": 750},
        "rarity": "legendary",
    },
    {
        "id": "collector_mythic",
        "category": "collector",
        "tier": "diamond",
        "name": "Almighty Critic",
        "description": "Rate 1000+ series or movies",
        "emoji": "\U0001f31f",
        "requirements": {"ratings": 1000},
        "rarity": "legendary",
    },
    # Social: friends
    {
        "id": "social_bronze",
        "category": "social",
        "tier": "bronze",
        "name": "Sociable",
        "description": "Add 3 friends",
        "emoji": "\U0001f91d",
        "requirements": {"friends": 3},
        "rarity": "common",
    },
    {
        "id": "social_silver",
        "category": "social",
        "tier": "silver",
        "name": "Series Buddy",
        "description": "Add 8 friends",
        "emoji": "\U0001f465",
        "requirements": {"friends": 8},
        "rarity": "rare",
    },
    {
        "id": "social_gold",
        "category": "social",
        "tier": "gold",
        "name": "Community Leader",
        "description": "Add 15 friends",
        "emoji": "\U0001f451",
        "requirements": {"friends": 15},
        "rarity": "epic",
    },
    {
        "id": "social_platinum",
        "category": "social",
        "tier": "platinum",
        "name": "Network Guru",
        "description": "Add 25 friends",
        "emoji": "\U0001f310",
        "requirements": {"friends": 25},
        "rarity": "legendary",
    },
    {
        "id": "social_diamond",
        "category": "social",
        "tier": "diamond",
        "name": "Series Influencer",
        "description": "Add 50 friends",
        "emoji": "\U0001f468‍\U0001f4bc",
        "requirements": {"friends": 50},
        "rarity": "legendary",
    },
]

BADGE_DEFINITIONS: tuple[Badge, ...] = tuple(Badge.model_validate(data) for data in BADGE_SEED_DATA)

_BY_ID: dict[str, Badge] = {badge.id: badge for badge in BADGE_DEFINITIONS}

# Which requirement field carries the threshold for each category
THRESHOLD_FIELD: dict[str, str] = {
    "binge": "episodes",
    "quickwatch": "episodes",
    "marathon": "episodes",
    "rewatch": "episodes",
    "streak": "days",
    "series_explorer": "series",
    "collector": "ratings",
    "social": "friends",
}


def definitions() -> list[Badge]:
    """All badge definitions in display order."""
    return list(BADGE_DEFINITIONS)


def find_by_id(badge_id: str) -> Badge | None:
    return _BY_ID.get(badge_id)


def by_category(category: BadgeCategory) -> list[Badge]:
    return [badge for badge in BADGE_DEFINITIONS if badge.category == category]


def requirement_threshold(badge: Badge) -> int | None:
    """The requirement value a badge's category measures against, if set."""
    return getattr(badge.requirements, THRESHOLD_FIELD[badge.category])
