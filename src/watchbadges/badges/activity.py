"""Activity hooks — update counters for a user action, then re-check badges."""

from __future__ import annotations

import logging
from datetime import date, datetime

from watchbadges.badges.engine import BadgeEngineRegistry
from watchbadges.badges.schemas import EarnedBadge, ItemKind
from watchbadges.badges.week_utils import local_today

logger = logging.getLogger(__name__)


async def record_episode_watched(
    registry: BadgeEngineRegistry,
    user_id: str,
    *,
    is_rewatch: bool = False,
    air_date: date | None = None,
    now: datetime | None = None,
) -> list[EarnedBadge]:
    """Count one watched episode and return any badges it unlocked."""
    if now is None:
        now = registry.clock()
    counters = registry.counters

    await counters.update_streak_counter(user_id, now)

    if is_rewatch:
        await counters.increment_rewatch_counter(user_id)
    elif air_date is not None and air_date == local_today(now, counters.tz):
        await counters.increment_quickwatch_counter(user_id)

    await counters.record_marathon_episode(user_id, now)
    await counters.record_binge_episode(user_id, now)

    engine = registry.get(user_id)
    await engine.invalidate_cache()
    return await engine.check_for_new_badges()


async def record_item_added(registry: BadgeEngineRegistry, user_id: str, kind: ItemKind) -> None:
    await registry.counters.increment_social_counter(user_id, kind)
    await registry.invalidate(user_id)


async def record_friendship_changed(
    registry: BadgeEngineRegistry, user_id: str, friend_id: str
) -> None:
    """Friend counts changed outside the engine; both sides re-read them."""
    logger.debug("Friendship changed between %s and %s", user_id, friend_id)
    await registry.invalidate(user_id)
    await registry.invalidate(friend_id)
