"""Badge rules — pure evaluation of badge requirements against user data.

Each category measures a ``current`` value against the badge's threshold.
A badge is earned exactly when ``current >= total``; progress reports the
same measurement, so "progress complete" and "would be earned now" can never
disagree.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from watchbadges.badges.catalog import BADGE_DEFINITIONS, requirement_threshold
from watchbadges.badges.schemas import Badge, BadgeProgress, EarnedBadge, WatchedMovie, WatchedSeries
from watchbadges.badges.sessions import TIMEFRAME_LABELS, ActiveWindow, BadgeCounters


@dataclass(frozen=True)
class UserData:
    """Everything badge evaluation reads for one user."""

    series: list[WatchedSeries]
    movies: list[WatchedMovie]
    counters: BadgeCounters
    friend_count: int


@dataclass(frozen=True)
class Measurement:
    current: int
    total: int
    detail: str
    time_remaining: int | None = None
    session_active: bool | None = None

    @property
    def earned(self) -> bool:
        return self.current >= self.total


def has_positive_rating(rating: Any) -> bool:
    """True for a positive number, or any positive number inside a rating map."""
    if isinstance(rating, bool):
        return False
    if isinstance(rating, (int, float)):
        return rating > 0
    if isinstance(rating, dict):
        return any(has_positive_rating(value) for value in rating.values())
    return False


def count_distinct_series(series: Iterable[WatchedSeries]) -> int:
    ids: set[str] = set()
    anonymous = 0
    for item in series:
        if item.id is None:
            anonymous += 1
        else:
            ids.add(item.id)
    return len(ids) + anonymous


def count_rated_items(series: Iterable[WatchedSeries], movies: Iterable[WatchedMovie]) -> int:
    rated = sum(1 for s in series if has_positive_rating(s.rating))
    return rated + sum(1 for m in movies if has_positive_rating(m.rating))


def count_rewatch_episodes(series: Iterable[WatchedSeries]) -> int:
    """Every view of an episode beyond the first counts as one rewatch."""
    return sum(
        episode.watch_count - 1
        for item in series
        for season in item.seasons
        for episode in season.episodes
        if episode.watch_count > 1
    )


# --- Category measurements ---


def _measure_explorer(badge: Badge, total: int, data: UserData, now: datetime) -> Measurement:
    count = count_distinct_series(data.series)
    return Measurement(count, total, f"{count} different series discovered")


def _measure_collector(badge: Badge, total: int, data: UserData, now: datetime) -> Measurement:
    count = count_rated_items(data.series, data.movies)
    return Measurement(count, total, f"{count} ratings given")


def _measure_social(badge: Badge, total: int, data: UserData, now: datetime) -> Measurement:
    return Measurement(data.friend_count, total, f"{data.friend_count} friends added")


def _measure_binge(badge: Badge, total: int, data: UserData, now: datetime) -> Measurement | None:
    timeframe = badge.requirements.timeframe
    if timeframe is None:
        return None
    label = TIMEFRAME_LABELS.get(timeframe, "one session")
    window = data.counters.binge_window(timeframe)
    if isinstance(window, ActiveWindow) and window.is_active(now):
        return Measurement(
            window.count,
            total,
            f"{window.count} episodes in {label}",
            time_remaining=window.seconds_remaining(now),
            session_active=True,
        )
    # No running session: history does not count
    return Measurement(0, total, f"0 episodes in {label}", session_active=False)


def _measure_marathon(badge: Badge, total: int, data: UserData, now: datetime) -> Measurement:
    week, best = data.counters.best_marathon_week()
    detail = f"{best} episodes in one week ({week})" if week else "0 episodes in one week"
    return Measurement(best, total, detail)


def _measure_streak(badge: Badge, total: int, data: UserData, now: datetime) -> Measurement:
    streak = data.counters.current_streak
    return Measurement(streak, total, f"{streak}-day streak")


def _measure_quickwatch(badge: Badge, total: int, data: UserData, now: datetime) -> Measurement:
    count = data.counters.quickwatch_episodes
    return Measurement(count, total, f"{count} episodes on release day")


def _measure_rewatch(badge: Badge, total: int, data: UserData, now: datetime) -> Measurement:
    count = count_rewatch_episodes(data.series)
    return Measurement(count, total, f"{count} rewatched episodes")


Measure = Callable[[Badge, int, UserData, datetime], "Measurement | None"]

MEASURES: dict[str, Measure] = {
    "series_explorer": _measure_explorer,
    "collector": _measure_collector,
    "social": _measure_social,
    "binge": _measure_binge,
    "marathon": _measure_marathon,
    "streak": _measure_streak,
    "quickwatch": _measure_quickwatch,
    "rewatch": _measure_rewatch,
}


def measure(badge: Badge, data: UserData, now: datetime) -> Measurement | None:
    """Measure one badge. None when the badge has no usable requirement."""
    total = requirement_threshold(badge)
    if total is None:
        return None
    return MEASURES[badge.category](badge, total, data, now)


def check_requirement(badge: Badge, data: UserData, now: datetime) -> str | None:
    """The earned-detail text if ``badge`` is earned right now, else None."""
    result = measure(badge, data, now)
    if result is None or not result.earned:
        return None
    return result.detail


def compute_progress(badge: Badge, data: UserData, now: datetime) -> BadgeProgress | None:
    result = measure(badge, data, now)
    if result is None:
        return None
    return BadgeProgress(
        badge_id=badge.id,
        current=result.current,
        total=result.total,
        last_updated=now,
        time_remaining=result.time_remaining,
        session_active=result.session_active,
    )


def evaluate_badges(
    data: UserData,
    earned_ids: set[str],
    now: datetime,
    badges: Iterable[Badge] = BADGE_DEFINITIONS,
) -> list[EarnedBadge]:
    """Every not-yet-earned badge whose requirement holds, stamped ``now``.

    Pure: nothing is persisted here.
    """
    candidates = []
    for badge in badges:
        if badge.id in earned_ids:
            continue
        detail = check_requirement(badge, data, now)
        if detail is not None:
            candidates.append(EarnedBadge(**badge.model_dump(), earned_at=now, details=detail))
    return candidates


def compute_all_progress(
    data: UserData,
    earned_ids: set[str],
    now: datetime,
    badges: Iterable[Badge] = BADGE_DEFINITIONS,
) -> dict[str, BadgeProgress]:
    progress = {}
    for badge in badges:
        if badge.id in earned_ids:
            continue
        item = compute_progress(badge, data, now)
        if item is not None:
            progress[badge.id] = item
    return progress
