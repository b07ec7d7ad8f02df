"""Badge counters: small per-user tallies for badges not derivable from watch data.

Every write runs as a store transaction and is best effort: failures are
logged and swallowed so a counter can never block the watch/rating action
that triggered it.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any

from watchbadges.badges.schemas import ItemKind, MarathonStats
from watchbadges.badges.sessions import (
    BINGE_TIMEFRAMES,
    ActiveWindow,
    AbsentWindow,
    non_negative_int,
    parse_window,
    record_episode,
)
from watchbadges.badges.week_utils import (
    get_week_iso,
    local_today,
    parse_activity_date,
    seconds_until_week_end,
    utcnow,
)
from watchbadges.store import KeyValueStore, user_path

logger = logging.getLogger(__name__)

COUNTERS_ROOT = "badgeCounters"


def counters_path(user_id: str, *parts: str) -> str:
    return user_path(COUNTERS_ROOT, user_id, *parts)


def _add(amount: int):
    def update(current: Any) -> int:
        if isinstance(current, bool) or not isinstance(current, (int, float)):
            current = 0
        return int(current) + amount

    return update


def next_streak(doc: Any, today_date: date) -> dict[str, Any]:
    """Streak transition for one activity on ``today_date``.

    Same day is a no-op, the day after the last activity extends the streak,
    anything else (gap, first activity, unreadable date) restarts it at 1.
    """
    doc = doc if isinstance(doc, dict) else {}
    last = parse_activity_date(doc.get("lastActivityDate"))
    if last == today_date:
        return doc

    streak = non_negative_int(doc.get("currentStreak"))
    if last is not None and last == today_date - timedelta(days=1):
        streak += 1
    else:
        streak = 1

    doc["currentStreak"] = streak
    doc["lastActivityDate"] = today_date.isoformat()
    return doc


class BadgeCounterService:
    """Reads and best-effort updates of ``badgeCounters/<user_id>``."""

    def __init__(self, store: KeyValueStore, tz: tzinfo | None = None) -> None:
        self.store = store
        self.tz = tz

    async def increment_counter(self, user_id: str, name: str, amount: int = 1) -> None:
        """Create the counter at ``amount`` or add ``amount`` to it."""
        try:
            await self.store.transaction(counters_path(user_id, name), _add(amount))
        except Exception:
            logger.warning("Failed to increment counter %s for %s", name, user_id, exc_info=True)

    async def increment_quickwatch_counter(self, user_id: str) -> None:
        await self.increment_counter(user_id, "quickwatchEpisodes")

    async def increment_rewatch_counter(self, user_id: str) -> None:
        await self.increment_counter(user_id, "rewatchEpisodes")

    async def increment_social_counter(self, user_id: str, kind: ItemKind) -> None:
        """Count an added series/movie in the aggregate and the per-kind tally."""
        await self.increment_counter(user_id, "itemsAdded")
        await self.increment_counter(user_id, f"{kind}Added")

    async def record_binge_episode(self, user_id: str, now: datetime | None = None) -> None:
        """Add one episode to every binge timeframe.

        Each timeframe runs expire-then-increment inside a single
        transaction, so an expired window is never incremented and readers
        never see a half-reset session.
        """
        if now is None:
            now = utcnow()
        for timeframe, duration in BINGE_TIMEFRAMES.items():
            try:
                await self.store.transaction(
                    counters_path(user_id, "bingeWindows", timeframe),
                    lambda raw, duration=duration: record_episode(raw, now, duration),
                )
            except Exception:
                logger.warning(
                    "Failed to record binge episode (%s) for %s", timeframe, user_id, exc_info=True
                )

    async def finalize_binge_session(self, user_id: str, now: datetime | None = None) -> None:
        """Remove windows that have expired or cannot be read."""
        if now is None:
            now = utcnow()

        def drop_stale(raw: Any) -> Any:
            if raw is None:
                return None
            window = parse_window(raw)
            if isinstance(window, AbsentWindow) or window.is_expired(now):
                return None
            return raw

        for timeframe in BINGE_TIMEFRAMES:
            try:
                await self.store.transaction(
                    counters_path(user_id, "bingeWindows", timeframe), drop_stale
                )
            except Exception:
                logger.warning(
                    "Failed to finalize binge window (%s) for %s", timeframe, user_id, exc_info=True
                )

    async def record_marathon_episode(self, user_id: str, now: datetime | None = None) -> None:
        """Add one episode to the current ISO week's bucket."""
        await self.record_marathon_progress(user_id, 1, now)

    async def record_marathon_progress(
        self, user_id: str, episodes: int, now: datetime | None = None
    ) -> None:
        week_key = get_week_iso(now or utcnow())
        try:
            await self.store.transaction(
                counters_path(user_id, "marathonWeeks", week_key), _add(episodes)
            )
        except Exception:
            logger.warning("Failed to record marathon week %s for %s", week_key, user_id, exc_info=True)

    async def ensure_current_marathon_week(self, user_id: str, now: datetime | None = None) -> None:
        """Create the current week's bucket at 0 when it does not exist yet."""
        week_key = get_week_iso(now or utcnow())
        try:
            await self.store.transaction(
                counters_path(user_id, "marathonWeeks", week_key),
                lambda current: 0 if current is None else current,
            )
        except Exception:
            logger.warning("Failed to create marathon week %s for %s", week_key, user_id, exc_info=True)

    async def get_marathon_stats(self, user_id: str, now: datetime | None = None) -> MarathonStats:
        if now is None:
            now = utcnow()
        week_key = get_week_iso(now)
        try:
            weeks = await self.store.get(counters_path(user_id, "marathonWeeks"))
        except Exception:
            logger.warning("Failed to read marathon weeks for %s", user_id, exc_info=True)
            weeks = None

        values = {
            k: int(v)
            for k, v in (weeks or {}).items()
            if isinstance(v, (int, float)) and not isinstance(v, bool)
        }
        current = values.get(week_key, 0)
        return MarathonStats(
            current_week_episodes=current,
            best_week_episodes=max([current, *values.values()]),
            time_remaining_in_week=seconds_until_week_end(now),
            current_week_key=week_key,
        )

    async def update_streak_counter(
        self,
        user_id: str,
        now: datetime | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        """Advance the daily streak using the user's local calendar day.

        ``currentStreak`` and ``lastActivityDate`` are written together in
        one transaction, so they always describe the same day.
        """
        today = local_today(now, tz or self.tz)
        try:
            await self.store.transaction(
                counters_path(user_id), lambda doc: next_streak(doc, today)
            )
        except Exception:
            logger.warning("Failed to update streak for %s", user_id, exc_info=True)

    async def get_counter(self, user_id: str, name: str) -> int:
        try:
            value = await self.store.get(counters_path(user_id, name))
        except Exception:
            logger.warning("Failed to read counter %s for %s", name, user_id, exc_info=True)
            return 0
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0
        return int(value)

    async def get_all_counters(self, user_id: str) -> dict[str, Any]:
        try:
            doc = await self.store.get(counters_path(user_id))
        except Exception:
            logger.warning("Failed to read counters for %s", user_id, exc_info=True)
            return {}
        return doc if isinstance(doc, dict) else {}

    async def get_binge_window(self, user_id: str, timeframe: str) -> ActiveWindow | AbsentWindow:
        try:
            raw = await self.store.get(counters_path(user_id, "bingeWindows", timeframe))
        except Exception:
            logger.warning("Failed to read binge window %s for %s", timeframe, user_id, exc_info=True)
            raw = None
        return parse_window(raw)

    async def reset_counter(self, user_id: str, name: str) -> None:
        try:
            await self.store.set(counters_path(user_id, name), 0)
        except Exception:
            logger.warning("Failed to reset counter %s for %s", name, user_id, exc_info=True)

    async def clear_all_counters(self, user_id: str) -> None:
        try:
            await self.store.delete(counters_path(user_id))
        except Exception:
            logger.warning("Failed to clear counters for %s", user_id, exc_info=True)
