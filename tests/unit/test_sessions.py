"""Binge window and counter-document tests."""

from datetime import datetime, timedelta, timezone

from watchbadges.badges.sessions import (
    ABSENT,
    AbsentWindow,
    ActiveWindow,
    BadgeCounters,
    expire,
    increment,
    parse_window,
    record_episode,
    window_to_document,
)
from watchbadges.badges.week_utils import to_epoch_ms

NOW = datetime(2024, 3, 6, 12, 0, 0, tzinfo=timezone.utc)
TEN_HOURS = timedelta(hours=10)


def _window(count: int, start: datetime, duration: timedelta = TEN_HOURS) -> dict:
    return {"count": count, "windowStart": to_epoch_ms(start), "windowEnd": to_epoch_ms(start + duration)}


class TestParseWindow:
    """Test interpretation of stored window documents."""

    def test_valid_window(self):
        window = parse_window(_window(4, NOW))
        assert isinstance(window, ActiveWindow)
        assert window.count == 4
        assert window.window_start == NOW
        assert window.window_end == NOW + TEN_HOURS

    def test_missing_is_absent(self):
        assert parse_window(None) is ABSENT

    def test_malformed_is_absent(self):
        assert isinstance(parse_window({"count": "many"}), AbsentWindow)
        assert isinstance(parse_window({"count": 3, "windowEnd": "soon"}), AbsentWindow)
        assert isinstance(parse_window({"count": -1, "windowEnd": 1}), AbsentWindow)
        assert isinstance(parse_window([1, 2, 3]), AbsentWindow)

    def test_legacy_start_time_key(self):
        raw = {"count": 2, "startTime": to_epoch_ms(NOW), "windowEnd": to_epoch_ms(NOW + TEN_HOURS)}
        assert parse_window(raw).window_start == NOW


class TestWindowTransitions:
    """Test expiry and increment."""

    def test_active_strictly_before_end(self):
        window = parse_window(_window(3, NOW))
        assert window.is_active(NOW + TEN_HOURS - timedelta(seconds=1))
        assert not window.is_active(NOW + TEN_HOURS)

    def test_expires_at_window_end(self):
        window = parse_window(_window(3, NOW))
        assert expire(window, NOW + TEN_HOURS) is ABSENT
        assert expire(window, NOW + timedelta(hours=9)) == window

    def test_increment_opens_new_window(self):
        window = increment(ABSENT, NOW, TEN_HOURS)
        assert window == ActiveWindow(count=1, window_start=NOW, window_end=NOW + TEN_HOURS)

    def test_increment_keeps_window_bounds(self):
        window = increment(parse_window(_window(2, NOW)), NOW + timedelta(hours=3), TEN_HOURS)
        assert window.count == 3
        assert window.window_end == NOW + TEN_HOURS

    def test_seconds_remaining_rounds_up(self):
        window = parse_window(_window(1, NOW))
        assert window.seconds_remaining(NOW + TEN_HOURS - timedelta(milliseconds=100)) == 1
        assert window.seconds_remaining(NOW + TEN_HOURS + timedelta(hours=1)) == 0

    def test_absent_window_serializes_to_nothing(self):
        assert window_to_document(ABSENT) is None


class TestRecordEpisode:
    """Test the single-step store update for one binge episode."""

    def test_first_episode(self):
        assert record_episode(None, NOW, TEN_HOURS) == _window(1, NOW)

    def test_episodes_inside_window_accumulate(self):
        doc = None
        for hour in range(5):
            doc = record_episode(doc, NOW + timedelta(hours=hour), TEN_HOURS)
        assert doc["count"] == 5
        assert doc["windowStart"] == to_epoch_ms(NOW)

    def test_gap_beyond_window_restarts_at_one(self):
        doc = record_episode(_window(7, NOW), NOW + timedelta(hours=11), TEN_HOURS)
        assert doc == _window(1, NOW + timedelta(hours=11))

    def test_malformed_document_restarts(self):
        assert record_episode({"count": "x"}, NOW, TEN_HOURS)["count"] == 1


class TestBadgeCounters:
    """Test the parsed view of the counter document."""

    def test_empty_document(self):
        counters = BadgeCounters.from_document(None)
        assert counters.current_streak == 0
        assert counters.binge_window("10hours") is ABSENT
        assert counters.best_marathon_week() == (None, 0)

    def test_full_document(self):
        counters = BadgeCounters.from_document(
            {
                "quickwatchEpisodes": 4,
                "rewatchEpisodes": 2,
                "currentStreak": 6,
                "lastActivityDate": "2024-03-05",
                "itemsAdded": 9,
                "marathonWeeks": {"2024-W09": 12, "2024-W10": 30},
                "bingeWindows": {"10hours": _window(3, NOW)},
            }
        )
        assert counters.quickwatch_episodes == 4
        assert counters.current_streak == 6
        assert counters.last_activity_date.isoformat() == "2024-03-05"
        assert counters.best_marathon_week() == ("2024-W10", 30)
        assert counters.binge_window("10hours").count == 3
        assert counters.binge_window("1day") is ABSENT

    def test_garbage_values_read_as_zero(self):
        counters = BadgeCounters.from_document(
            {"currentStreak": "7", "quickwatchEpisodes": True, "marathonWeeks": {"2024-W10": "lots"}}
        )
        assert counters.current_streak == 0
        assert counters.quickwatch_episodes == 0
        assert counters.best_marathon_week() == (None, 0)
