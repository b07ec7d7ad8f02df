"""Store-backed collaborators: watched content, friends and earned badges.

Reads here propagate store errors. Evaluating badges on partial data could
award or hide badges wrongly, so callers must see the failure.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from watchbadges.badges.catalog import find_by_id
from watchbadges.badges.schemas import Badge, EarnedBadge, WatchedMovie, WatchedSeries
from watchbadges.badges.week_utils import from_epoch_ms, to_epoch_ms
from watchbadges.store import KeyValueStore, user_path

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _records(doc: Any) -> list[tuple[str, dict]]:
    """(key, record) pairs of an id-keyed collection; arrays use their index."""
    if isinstance(doc, dict):
        items = doc.items()
    elif isinstance(doc, list):
        items = ((str(i), v) for i, v in enumerate(doc))
    else:
        return []
    return [(str(k), v) for k, v in items if isinstance(v, dict)]


class ContentRepository:
    """Watched series and movies under ``series/<user>`` and ``movies/<user>``."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def get_series(self, user_id: str) -> list[WatchedSeries]:
        doc = await self.store.get(user_path("series", user_id))
        series = []
        for key, record in _records(doc):
            item = WatchedSeries.model_validate(record)
            if item.id is None:
                item = item.model_copy(update={"id": key})
            series.append(item)
        return series

    async def get_movies(self, user_id: str) -> list[WatchedMovie]:
        doc = await self.store.get(user_path("movies", user_id))
        movies = []
        for key, record in _records(doc):
            item = WatchedMovie.model_validate(record)
            if item.id is None:
                item = item.model_copy(update={"id": key})
            movies.append(item)
        return movies


class FriendRepository:
    """Friend set under ``friends/<user>`` (friend id -> anything)."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def count_friends(self, user_id: str) -> int:
        doc = await self.store.get(user_path("friends", user_id))
        if isinstance(doc, dict):
            return len(doc)
        if isinstance(doc, list):
            return sum(1 for v in doc if v is not None)
        return 0


def earned_badge_to_document(badge: EarnedBadge) -> dict[str, Any]:
    doc = badge.model_dump(mode="json", exclude={"earned_at", "details", "requirements"})
    doc["requirements"] = badge.requirements.model_dump(exclude_none=True)
    doc["earnedAt"] = to_epoch_ms(badge.earned_at)
    if badge.details:
        doc["details"] = badge.details
    return doc


def earned_badge_from_document(badge_id: str, doc: Any) -> EarnedBadge | None:
    """Rebuild an earned badge, preferring the current catalog definition."""
    if not isinstance(doc, dict):
        return None
    earned_at = from_epoch_ms(doc.get("earnedAt")) or _EPOCH
    details = doc.get("details") if isinstance(doc.get("details"), str) else None

    definition: Badge | None = find_by_id(badge_id)
    if definition is not None:
        return EarnedBadge(**definition.model_dump(), earned_at=earned_at, details=details)

    try:
        base = Badge.model_validate({**doc, "id": badge_id})
    except ValidationError:
        logger.warning("Skipping unreadable earned badge %s", badge_id)
        return None
    return EarnedBadge(**base.model_dump(), earned_at=earned_at, details=details)


class EarnedBadgeRepository:
    """Earned badges under ``badges/<user>/<badge_id>`` — written once, never changed."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def list_badges(self, user_id: str) -> list[EarnedBadge]:
        doc = await self.store.get(user_path("badges", user_id))
        badges = []
        for badge_id, record in _records(doc):
            badge = earned_badge_from_document(badge_id, record)
            if badge is not None:
                badges.append(badge)
        badges.sort(key=lambda b: b.earned_at)
        return badges

    async def save(self, user_id: str, badge: EarnedBadge) -> tuple[EarnedBadge, bool]:
        """Persist a newly earned badge. An existing record is left untouched.

        Returns the stored badge and whether this call created it.
        """
        created = False

        def write_once(current: Any) -> Any:
            nonlocal created
            created = current is None
            return earned_badge_to_document(badge) if created else current

        stored = await self.store.transaction(user_path("badges", user_id, badge.id), write_once)
        return earned_badge_from_document(badge.id, stored) or badge, created
