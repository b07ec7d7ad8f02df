"""Binge session windows and the parsed view of a user's counter document.

A binge window is either absent or active. Stored windows look like
``{"count": 4, "windowStart": <ms>, "windowEnd": <ms>}``; anything that does
not parse into a usable window is treated as absent.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Union

from watchbadges.badges.week_utils import from_epoch_ms, parse_activity_date, to_epoch_ms

# Rolling windows a binge session is tracked in, keyed as stored
BINGE_TIMEFRAMES: dict[str, timedelta] = {
    "10hours": timedelta(hours=10),
    "1day": timedelta(days=1),
    "2days": timedelta(days=2),
}

TIMEFRAME_LABELS: dict[str, str] = {
    "10hours": "10 hours",
    "1day": "one day",
    "2days": "two days",
    "1week": "one week",
}


@dataclass(frozen=True)
class AbsentWindow:
    """No session is running for this timeframe."""

    count: int = 0

    def is_active(self, now: datetime) -> bool:  # noqa: ARG002
        return False


@dataclass(frozen=True)
class ActiveWindow:
    count: int
    window_start: datetime
    window_end: datetime

    def is_active(self, now: datetime) -> bool:
        return now < self.window_end

    def is_expired(self, now: datetime) -> bool:
        # The count is only valid strictly before window_end
        return now >= self.window_end

    def seconds_remaining(self, now: datetime) -> int:
        return max(0, math.ceil((self.window_end - now).total_seconds()))


BingeWindow = Union[AbsentWindow, ActiveWindow]

ABSENT = AbsentWindow()


def parse_window(raw: Any) -> BingeWindow:
    """Interpret a stored window document. Malformed documents are absent."""
    if not isinstance(raw, dict):
        return ABSENT
    window_end = from_epoch_ms(raw.get("windowEnd"))
    if window_end is None:
        return ABSENT
    count = raw.get("count")
    if isinstance(count, bool) or not isinstance(count, (int, float)) or count < 0:
        return ABSENT
    # Older documents used "startTime" for the session start
    window_start = from_epoch_ms(raw.get("windowStart", raw.get("startTime")))
    return ActiveWindow(
        count=int(count),
        window_start=window_start or window_end,
        window_end=window_end,
    )


def window_to_document(window: BingeWindow) -> dict[str, int] | None:
    if isinstance(window, AbsentWindow):
        return None
    return {
        "count": window.count,
        "windowStart": to_epoch_ms(window.window_start),
        "windowEnd": to_epoch_ms(window.window_end),
    }


def expire(window: BingeWindow, now: datetime) -> BingeWindow:
    """Forfeit a session whose window has passed. Nothing rolls over."""
    if isinstance(window, ActiveWindow) and window.is_expired(now):
        return ABSENT
    return window


def increment(window: BingeWindow, now: datetime, duration: timedelta) -> ActiveWindow:
    """Add one episode, opening a fresh window when none is running."""
    if isinstance(window, AbsentWindow):
        return ActiveWindow(count=1, window_start=now, window_end=now + duration)
    return ActiveWindow(
        count=window.count + 1,
        window_start=window.window_start,
        window_end=window.window_end,
    )


def record_episode(raw: Any, now: datetime, duration: timedelta) -> dict[str, int] | None:
    """Store update for one binge episode: expire, then increment."""
    window = expire(parse_window(raw), now)
    return window_to_document(increment(window, now, duration))


def non_negative_int(value: Any) -> int:
    """Stored counter value as an int; anything non-numeric reads as 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return max(int(value), 0)


@dataclass(frozen=True)
class BadgeCounters:
    """Parsed, read-only view of ``badgeCounters/<user_id>``."""

    quickwatch_episodes: int = 0
    rewatch_episodes: int = 0
    current_streak: int = 0
    last_activity_date: date | None = None
    items_added: int = 0
    marathon_weeks: dict[str, int] = field(default_factory=dict)
    binge_windows: dict[str, BingeWindow] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Any) -> BadgeCounters:
        if not isinstance(doc, dict):
            return cls()

        raw_weeks = doc.get("marathonWeeks")
        weeks = (
            {str(k): non_negative_int(v) for k, v in raw_weeks.items()}
            if isinstance(raw_weeks, dict)
            else {}
        )
        raw_windows = doc.get("bingeWindows")
        windows = (
            {str(k): parse_window(v) for k, v in raw_windows.items()}
            if isinstance(raw_windows, dict)
            else {}
        )
        return cls(
            quickwatch_episodes=non_negative_int(doc.get("quickwatchEpisodes")),
            rewatch_episodes=non_negative_int(doc.get("rewatchEpisodes")),
            current_streak=non_negative_int(doc.get("currentStreak")),
            last_activity_date=parse_activity_date(doc.get("lastActivityDate")),
            items_added=non_negative_int(doc.get("itemsAdded")),
            marathon_weeks=weeks,
            binge_windows=windows,
        )

    def binge_window(self, timeframe: str) -> BingeWindow:
        return self.binge_windows.get(timeframe, ABSENT)

    def best_marathon_week(self) -> tuple[str | None, int]:
        """(week key, episodes) of the best week ever recorded."""
        best_key: str | None = None
        best = 0
        for key, episodes in self.marathon_weeks.items():
            if episodes > best:
                best_key, best = key, episodes
        return best_key, best
