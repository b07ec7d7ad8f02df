"""Load everything badge evaluation needs for one user in a single pass."""

from __future__ import annotations

import asyncio
from datetime import datetime

from watchbadges.badges.counter_service import BadgeCounterService, counters_path
from watchbadges.badges.repositories import ContentRepository, FriendRepository
from watchbadges.badges.rules import UserData
from watchbadges.badges.sessions import BadgeCounters
from watchbadges.store import KeyValueStore


class UserDataLoader:
    """Aggregates series, movies, counters and friend count.

    Read failures propagate: evaluating on partial data would award or hide
    badges wrongly.
    """

    def __init__(self, store: KeyValueStore, counters: BadgeCounterService | None = None) -> None:
        self.store = store
        self.counters = counters or BadgeCounterService(store)
        self.content = ContentRepository(store)
        self.friends = FriendRepository(store)

    async def load(self, user_id: str, now: datetime) -> UserData:
        # Drop expired sessions first so stale windows are never read as active
        await self.counters.finalize_binge_session(user_id, now)

        series, movies, counter_doc, friend_count = await asyncio.gather(
            self.content.get_series(user_id),
            self.content.get_movies(user_id),
            self.store.get(counters_path(user_id)),
            self.friends.count_friends(user_id),
        )
        return UserData(
            series=series,
            movies=movies,
            counters=BadgeCounters.from_document(counter_doc),
            friend_count=friend_count,
        )
