"""Badge API integration tests — full request path against a fake Redis store."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from watchbadges.store import StoreError

pytestmark = pytest.mark.asyncio

USER = "u1"


class TestCatalogEndpoints:
    """Test public badge definitions."""

    async def test_list_badges(self, client: AsyncClient):
        response = await client.get("/api/v1/badges")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 46
        assert data["badges"][0]["id"] == "binge_bronze"

    async def test_get_badge(self, client: AsyncClient):
        response = await client.get("/api/v1/badges/streak_bronze")
        assert response.status_code == 200
        assert response.json()["requirements"]["days"] == 7

    async def test_unknown_badge_404(self, client: AsyncClient):
        response = await client.get("/api/v1/badges/nope")
        assert response.status_code == 404
        assert response.json() == {"detail": "Badge not found"}


class TestUserBadges:
    """Test per-user badge endpoints."""

    async def test_empty_user(self, client: AsyncClient):
        response = await client.get(f"/api/v1/users/{USER}/badges")
        assert response.status_code == 200
        assert response.json() == {"earned": [], "total_available": 46, "total_earned": 0}

    async def test_check_then_list(self, client: AsyncClient, store):
        await store.set(f"badgeCounters/{USER}/currentStreak", 14)

        response = await client.post(f"/api/v1/users/{USER}/badges/check")
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert [b["id"] for b in data["new_badges"]] == ["streak_bronze", "streak_silver"]

        again = await client.post(f"/api/v1/users/{USER}/badges/check")
        assert again.json()["count"] == 0

        earned = (await client.get(f"/api/v1/users/{USER}/badges")).json()
        assert earned["total_earned"] == 2
        assert earned["earned"][0]["details"] == "14-day streak"

    async def test_recalculate_picks_up_new_data(self, client: AsyncClient, store):
        await client.post(f"/api/v1/users/{USER}/badges/check")
        await store.set(f"friends/{USER}", {"a": 1, "b": 1, "c": 1})

        cached = await client.post(f"/api/v1/users/{USER}/badges/check")
        assert cached.json()["count"] == 0

        response = await client.post(f"/api/v1/users/{USER}/badges/recalculate")
        assert [b["id"] for b in response.json()["new_badges"]] == ["social_bronze"]

    async def test_invalidate(self, client: AsyncClient, store):
        await client.post(f"/api/v1/users/{USER}/badges/check")
        await store.set(f"badgeCounters/{USER}/quickwatchEpisodes", 3)

        response = await client.post(f"/api/v1/users/{USER}/badges/invalidate")
        assert response.status_code == 204

        check = await client.post(f"/api/v1/users/{USER}/badges/check")
        assert [b["id"] for b in check.json()["new_badges"]] == ["quickwatch_bronze"]

    async def test_commit_failure_returns_503(self, client: AsyncClient, store, registry):
        await store.set(f"badgeCounters/{USER}/currentStreak", 7)
        registry.get(USER).earned_repo.save = AsyncMock(side_effect=StoreError("down"))

        response = await client.post(f"/api/v1/users/{USER}/badges/check")
        assert response.status_code == 503
        assert response.json()["unpersisted"] == ["streak_bronze"]


class TestProgressEndpoints:
    """Test progress reporting."""

    async def test_all_progress(self, client: AsyncClient):
        response = await client.get(f"/api/v1/users/{USER}/badges/progress")
        assert response.status_code == 200
        progress = response.json()["progress"]
        assert len(progress) == 46
        assert progress["social_bronze"]["current"] == 0
        assert progress["social_bronze"]["total"] == 3

    async def test_category_filter(self, client: AsyncClient):
        response = await client.get(f"/api/v1/users/{USER}/badges/progress", params={"category": "binge"})
        assert len(response.json()["progress"]) == 9

    async def test_invalid_category(self, client: AsyncClient):
        response = await client.get(f"/api/v1/users/{USER}/badges/progress", params={"category": "nope"})
        assert response.status_code == 422

    async def test_single_progress(self, client: AsyncClient):
        response = await client.get(f"/api/v1/users/{USER}/badges/progress/streak_bronze")
        assert response.status_code == 200
        assert response.json()["total"] == 7

    async def test_single_progress_unknown_404(self, client: AsyncClient):
        response = await client.get(f"/api/v1/users/{USER}/badges/progress/nope")
        assert response.status_code == 404

    async def test_single_progress_earned_404(self, client: AsyncClient, store):
        await store.set(f"badgeCounters/{USER}/currentStreak", 7)
        await client.post(f"/api/v1/users/{USER}/badges/check")
        response = await client.get(f"/api/v1/users/{USER}/badges/progress/streak_bronze")
        assert response.status_code == 404


class TestCounterEndpoints:
    """Test raw counter views."""

    async def test_counters(self, client: AsyncClient, store):
        await store.set(f"badgeCounters/{USER}", {"currentStreak": 2, "itemsAdded": 5})
        response = await client.get(f"/api/v1/users/{USER}/counters")
        assert response.json() == {"counters": {"currentStreak": 2, "itemsAdded": 5}}

    async def test_marathon_stats(self, client: AsyncClient, store):
        await store.set(f"badgeCounters/{USER}/marathonWeeks", {"2024-W10": 4, "2024-W02": 30})
        response = await client.get(f"/api/v1/users/{USER}/counters/marathon")
        data = response.json()
        assert data["current_week_key"] == "2024-W10"
        assert data["current_week_episodes"] == 4
        assert data["best_week_episodes"] == 30


class TestActivityEndpoints:
    """Test activity hooks over HTTP."""

    async def test_binge_session_over_http(self, client: AsyncClient, clock):
        for _ in range(2):
            response = await client.post(f"/api/v1/users/{USER}/activity/episode", json={})
            assert response.json()["count"] == 0
            clock.advance(minutes=40)

        response = await client.post(f"/api/v1/users/{USER}/activity/episode", json={})
        assert [b["id"] for b in response.json()["new_badges"]] == ["binge_bronze"]

        progress = (await client.get(f"/api/v1/users/{USER}/badges/progress/binge_bronze_plus")).json()
        assert progress["current"] == 3
        assert progress["session_active"] is True
        assert progress["time_remaining"] == int(timedelta(hours=10, minutes=-80).total_seconds())

    async def test_release_day_episode(self, client: AsyncClient):
        response = await client.post(
            f"/api/v1/users/{USER}/activity/episode", json={"air_date": "2024-03-06"}
        )
        assert response.status_code == 200
        counters = (await client.get(f"/api/v1/users/{USER}/counters")).json()["counters"]
        assert counters["quickwatchEpisodes"] == 1

    async def test_item_added(self, client: AsyncClient):
        response = await client.post(f"/api/v1/users/{USER}/activity/item", json={"kind": "series"})
        assert response.status_code == 204
        counters = (await client.get(f"/api/v1/users/{USER}/counters")).json()["counters"]
        assert counters["seriesAdded"] == 1

    async def test_friendship_changed(self, client: AsyncClient, store):
        await client.post(f"/api/v1/users/{USER}/badges/check")
        await store.set(f"friends/{USER}", {"a": 1, "b": 1, "c": 1})

        response = await client.post(f"/api/v1/users/{USER}/activity/friendship", json={"friend_id": "a"})
        assert response.status_code == 204

        check = await client.post(f"/api/v1/users/{USER}/badges/check")
        assert [b["id"] for b in check.json()["new_badges"]] == ["social_bronze"]
