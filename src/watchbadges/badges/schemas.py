"""Pydantic models for badges, progress, watched content and the badge endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

BadgeCategory = Literal[
    "binge",
    "quickwatch",
    "marathon",
    "streak",
    "rewatch",
    "series_explorer",
    "collector",
    "social",
]
BadgeTier = Literal["bronze", "silver", "gold", "platinum", "diamond"]
BadgeRarity = Literal["common", "rare", "epic", "legendary"]
ItemKind = Literal["series", "movie"]

TIER_ORDER: dict[str, int] = {
    "bronze": 0,
    "silver": 1,
    "gold": 2,
    "platinum": 3,
    "diamond": 4,
}


# --- Badge ---


class BadgeRequirements(BaseModel):
    model_config = ConfigDict(frozen=True)

    episodes: int | None = None
    seasons: int | None = None
    days: int | None = None
    series: int | None = None
    ratings: int | None = None
    friends: int | None = None
    timeframe: str | None = None


class Badge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    category: BadgeCategory
    tier: BadgeTier
    name: str
    description: str
    emoji: str
    requirements: BadgeRequirements
    rarity: BadgeRarity


class EarnedBadge(Badge):
    earned_at: datetime
    details: str | None = None


class BadgeProgress(BaseModel):
    badge_id: str
    current: int
    total: int
    last_updated: datetime
    # Only set for window-bound (binge) badges
    time_remaining: int | None = None
    session_active: bool | None = None


# --- Watched content (read-only view of the content repository) ---


def _as_list(value: Any) -> list[Any]:
    """Stored collections may be JSON arrays or id-keyed objects."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [v for v in value.values() if v is not None]
    if isinstance(value, list):
        return [v for v in value if v is not None]
    return []


class Episode(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    watched: bool = False
    watch_count: int = Field(default=0, alias="watchCount")

    @field_validator("watch_count", mode="before")
    @classmethod
    def _coerce_watch_count(cls, value: Any) -> int:
        try:
            return max(int(value), 0)
        except (TypeError, ValueError):
            return 0

    @field_validator("watched", mode="before")
    @classmethod
    def _coerce_watched(cls, value: Any) -> bool:
        return value is True


class Season(BaseModel):
    model_config = ConfigDict(extra="ignore")

    episodes: list[Episode] = []

    @field_validator("episodes", mode="before")
    @classmethod
    def _episodes_as_list(cls, value: Any) -> list[Any]:
        return [v for v in _as_list(value) if isinstance(v, dict)]


class WatchedSeries(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: Any = None
    rating: Any = None
    seasons: list[Season] = []

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("seasons", mode="before")
    @classmethod
    def _seasons_as_list(cls, value: Any) -> list[Any]:
        return [v for v in _as_list(value) if isinstance(v, dict)]


class WatchedMovie(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: Any = None
    rating: Any = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> str | None:
        return None if value is None else str(value)


# --- Counters ---


class MarathonStats(BaseModel):
    current_week_episodes: int
    best_week_episodes: int
    time_remaining_in_week: int
    current_week_key: str


# --- Requests ---


class EpisodeWatchedRequest(BaseModel):
    is_rewatch: bool = False
    air_date: date | None = None


class ItemAddedRequest(BaseModel):
    kind: ItemKind


class FriendshipChangedRequest(BaseModel):
    friend_id: str


# --- Responses ---


class CatalogResponse(BaseModel):
    badges: list[Badge]
    total: int


class UserBadgesResponse(BaseModel):
    earned: list[EarnedBadge]
    total_available: int
    total_earned: int


class NewBadgesResponse(BaseModel):
    new_badges: list[EarnedBadge]
    count: int


class ProgressResponse(BaseModel):
    progress: dict[str, BadgeProgress]


class CountersResponse(BaseModel):
    counters: dict[str, Any]
