"""Badge engine — per-user evaluation, progress and caching.

One engine per user id, handed out by ``BadgeEngineRegistry``. Evaluation
is split into a pure step (``rules.evaluate_badges``) and a commit step that
persists the candidates; only badges this engine actually wrote are
reported as new.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Generic, TypeVar

import structlog

from watchbadges.badges.aggregation import UserDataLoader
from watchbadges.badges.catalog import by_category, find_by_id
from watchbadges.badges.counter_service import BadgeCounterService
from watchbadges.badges.repositories import EarnedBadgeRepository
from watchbadges.badges.rules import UserData, compute_all_progress, compute_progress, evaluate_badges
from watchbadges.badges.schemas import BadgeProgress, EarnedBadge
from watchbadges.badges.week_utils import utcnow
from watchbadges.config import Settings
from watchbadges.store import KeyValueStore, StoreError, validate_user_id

logger = structlog.get_logger()

Clock = Callable[[], datetime]
T = TypeVar("T")


class BadgeCommitError(Exception):
    """Newly earned badges could not be persisted."""

    def __init__(self, user_id: str, failed: list[EarnedBadge], persisted: list[EarnedBadge]) -> None:
        self.user_id = user_id
        self.failed = failed
        self.persisted = persisted
        ids = ", ".join(b.id for b in failed)
        super().__init__(f"Could not persist badges for {user_id}: {ids}")


@dataclass
class _CacheEntry(Generic[T]):
    value: T
    loaded_at: datetime


class BadgeEngine:
    """Evaluates and tracks badges for a single user."""

    def __init__(
        self,
        user_id: str,
        store: KeyValueStore,
        *,
        counters: BadgeCounterService | None = None,
        cache_ttl: timedelta = timedelta(minutes=30),
        commit_attempts: int = 3,
        commit_retry_delay: float = 0.2,
        clock: Clock = utcnow,
    ) -> None:
        self.user_id = validate_user_id(user_id)
        self.loader = UserDataLoader(store, counters)
        self.earned_repo = EarnedBadgeRepository(store)
        self.cache_ttl = cache_ttl
        self.commit_attempts = max(1, commit_attempts)
        self.commit_retry_delay = commit_retry_delay
        self.clock = clock

        self._lock = asyncio.Lock()
        self._data: _CacheEntry[UserData] | None = None
        self._earned: _CacheEntry[list[EarnedBadge]] | None = None
        self._progress: _CacheEntry[dict[str, BadgeProgress]] | None = None

    # --- Cache helpers (call with the lock held) ---

    def _fresh(self, entry: _CacheEntry | None, now: datetime) -> bool:
        return entry is not None and now - entry.loaded_at < self.cache_ttl

    async def _user_data(self, now: datetime) -> UserData:
        if not self._fresh(self._data, now):
            self._data = _CacheEntry(await self.loader.load(self.user_id, now), now)
            # Progress is derived from this data and must not outlive it
            self._progress = None
        return self._data.value

    async def _earned_badges(self, now: datetime) -> list[EarnedBadge]:
        if not self._fresh(self._earned, now):
            self._earned = _CacheEntry(await self.earned_repo.list_badges(self.user_id), now)
        return self._earned.value

    async def _earned_ids(self, now: datetime) -> set[str]:
        return {b.id for b in await self._earned_badges(now)}

    async def _all_progress(self, now: datetime) -> dict[str, BadgeProgress]:
        data = await self._user_data(now)
        earned_ids = await self._earned_ids(now)

        if self._progress is None:
            self._progress = _CacheEntry(compute_all_progress(data, earned_ids, now), now)
            return dict(self._progress.value)

        progress = {}
        for badge_id, item in self._progress.value.items():
            if badge_id in earned_ids:
                continue
            badge = find_by_id(badge_id)
            if badge is not None and badge.category == "binge":
                # Session windows move with the clock; recompute from cached counters
                item = compute_progress(badge, data, now) or item
            progress[badge_id] = item
        self._progress.value = progress
        return dict(progress)

    # --- Public API ---

    def is_cache_valid(self) -> bool:
        return self._fresh(self._data, self.clock())

    async def check_for_new_badges(self) -> list[EarnedBadge]:
        """Evaluate every unearned badge and persist the ones now earned."""
        async with self._lock:
            now = self.clock()
            data = await self._user_data(now)
            earned_ids = await self._earned_ids(now)
            candidates = evaluate_badges(data, earned_ids, now)
            if not candidates:
                return []
            return await self._commit(candidates)

    async def _commit(self, candidates: list[EarnedBadge]) -> list[EarnedBadge]:
        created: list[EarnedBadge] = []
        stored: list[EarnedBadge] = []
        failed: list[EarnedBadge] = []

        for badge in candidates:
            for attempt in range(1, self.commit_attempts + 1):
                try:
                    saved, is_new = await self.earned_repo.save(self.user_id, badge)
                except StoreError as exc:
                    logger.warning(
                        "badge_commit_failed",
                        user_id=self.user_id,
                        badge_id=badge.id,
                        attempt=attempt,
                        error=str(exc),
                    )
                    if attempt == self.commit_attempts:
                        failed.append(badge)
                    else:
                        await asyncio.sleep(self.commit_retry_delay * attempt)
                    continue
                stored.append(saved)
                if is_new:
                    created.append(saved)
                break

        if stored:
            if self._earned is not None:
                known = {b.id for b in self._earned.value}
                self._earned.value = self._earned.value + [b for b in stored if b.id not in known]
            if self._progress is not None:
                for badge in stored:
                    self._progress.value.pop(badge.id, None)

        for badge in created:
            logger.info("badge_earned", user_id=self.user_id, badge_id=badge.id, details=badge.details)

        if failed:
            raise BadgeCommitError(self.user_id, failed, created)
        return created

    async def get_user_badges(self) -> list[EarnedBadge]:
        async with self._lock:
            return list(await self._earned_badges(self.clock()))

    async def get_all_badge_progress(self) -> dict[str, BadgeProgress]:
        """Progress for every badge the user has not earned yet."""
        async with self._lock:
            return await self._all_progress(self.clock())

    async def get_badge_progress(self, badge_id: str) -> BadgeProgress | None:
        """Progress for one badge; None when it is unknown or already earned."""
        if find_by_id(badge_id) is None:
            return None
        progress = await self.get_all_badge_progress()
        return progress.get(badge_id)

    async def get_category_progress(self, category: str) -> dict[str, BadgeProgress]:
        ids = {b.id for b in by_category(category)}
        progress = await self.get_all_badge_progress()
        return {k: v for k, v in progress.items() if k in ids}

    async def invalidate_cache(self) -> None:
        async with self._lock:
            self._data = None
            self._earned = None
            self._progress = None

    async def recalculate_all_badges(self) -> list[EarnedBadge]:
        await self.invalidate_cache()
        return await self.check_for_new_badges()


class BadgeEngineRegistry:
    """Application-scoped, LRU-bounded map of user id to ``BadgeEngine``."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        max_size: int = 10_000,
        cache_ttl: timedelta = timedelta(minutes=30),
        commit_attempts: int = 3,
        commit_retry_delay: float = 0.2,
        tz: tzinfo | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.store = store
        self.max_size = max(1, max_size)
        self.cache_ttl = cache_ttl
        self.commit_attempts = commit_attempts
        self.commit_retry_delay = commit_retry_delay
        self.tz = tz
        self.clock = clock
        self.counters = BadgeCounterService(store, tz=tz)
        self._engines: OrderedDict[str, BadgeEngine] = OrderedDict()

    @classmethod
    def from_settings(
        cls, store: KeyValueStore, settings: Settings, tz: tzinfo | None = None
    ) -> BadgeEngineRegistry:
        return cls(
            store,
            max_size=settings.engine_registry_max_size,
            cache_ttl=timedelta(seconds=settings.badge_cache_ttl_seconds),
            commit_attempts=settings.badge_commit_attempts,
            commit_retry_delay=settings.badge_commit_retry_delay_seconds,
            tz=tz,
        )

    def get(self, user_id: str) -> BadgeEngine:
        engine = self._engines.get(user_id)
        if engine is not None:
            self._engines.move_to_end(user_id)
            return engine

        engine = BadgeEngine(
            user_id,
            self.store,
            counters=self.counters,
            cache_ttl=self.cache_ttl,
            commit_attempts=self.commit_attempts,
            commit_retry_delay=self.commit_retry_delay,
            clock=self.clock,
        )
        self._engines[user_id] = engine
        while len(self._engines) > self.max_size:
            evicted, _ = self._engines.popitem(last=False)
            logger.debug("badge_engine_evicted", user_id=evicted)
        return engine

    async def invalidate(self, user_id: str) -> None:
        """Drop cached data of a live engine. Users without one are skipped."""
        engine = self._engines.get(user_id)
        if engine is not None:
            await engine.invalidate_cache()

    def discard(self, user_id: str) -> None:
        self._engines.pop(user_id, None)

    def clear(self) -> None:
        self._engines.clear()

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._engines

    def __len__(self) -> int:
        return len(self._engines)
