"""Badge API endpoints — catalog, per-user badges, progress, counters and activity."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from watchbadges.badges import activity
from watchbadges.badges.catalog import BADGE_DEFINITIONS, find_by_id
from watchbadges.badges.engine import BadgeEngineRegistry
from watchbadges.badges.schemas import (
    Badge,
    BadgeCategory,
    BadgeProgress,
    CatalogResponse,
    CountersResponse,
    EpisodeWatchedRequest,
    FriendshipChangedRequest,
    ItemAddedRequest,
    MarathonStats,
    NewBadgesResponse,
    ProgressResponse,
    UserBadgesResponse,
)
from watchbadges.dependencies import get_registry

router = APIRouter(prefix="/api/v1", tags=["Badges"])


# ── Catalog ──


@router.get("/badges", response_model=CatalogResponse)
async def list_badges():
    """Get all badge definitions."""
    return CatalogResponse(badges=list(BADGE_DEFINITIONS), total=len(BADGE_DEFINITIONS))


@router.get("/badges/{badge_id}", response_model=Badge)
async def get_badge(badge_id: str):
    badge = find_by_id(badge_id)
    if badge is None:
        raise HTTPException(status_code=404, detail="Badge not found")
    return badge


# ── Per-user badges ──


@router.get("/users/{user_id}/badges", response_model=UserBadgesResponse)
async def get_user_badges(user_id: str, registry: BadgeEngineRegistry = Depends(get_registry)):
    """Get the badges a user has earned, oldest first."""
    earned = await registry.get(user_id).get_user_badges()
    return UserBadgesResponse(
        earned=earned,
        total_available=len(BADGE_DEFINITIONS),
        total_earned=len(earned),
    )


@router.post("/users/{user_id}/badges/check", response_model=NewBadgesResponse)
async def check_badges(user_id: str, registry: BadgeEngineRegistry = Depends(get_registry)):
    """Evaluate all unearned badges and persist the ones now earned."""
    new_badges = await registry.get(user_id).check_for_new_badges()
    return NewBadgesResponse(new_badges=new_badges, count=len(new_badges))


@router.post("/users/{user_id}/badges/recalculate", response_model=NewBadgesResponse)
async def recalculate_badges(user_id: str, registry: BadgeEngineRegistry = Depends(get_registry)):
    """Drop cached data and re-run the badge check."""
    new_badges = await registry.get(user_id).recalculate_all_badges()
    return NewBadgesResponse(new_badges=new_badges, count=len(new_badges))


@router.get("/users/{user_id}/badges/progress", response_model=ProgressResponse)
async def get_progress(
    user_id: str,
    category: BadgeCategory | None = Query(None),
    registry: BadgeEngineRegistry = Depends(get_registry),
):
    """Progress toward every unearned badge, optionally for one category."""
    engine = registry.get(user_id)
    if category is None:
        progress = await engine.get_all_badge_progress()
    else:
        progress = await engine.get_category_progress(category)
    return ProgressResponse(progress=progress)


@router.get("/users/{user_id}/badges/progress/{badge_id}", response_model=BadgeProgress)
async def get_single_progress(
    user_id: str, badge_id: str, registry: BadgeEngineRegistry = Depends(get_registry)
):
    progress = await registry.get(user_id).get_badge_progress(badge_id)
    if progress is None:
        raise HTTPException(status_code=404, detail="No progress for this badge")
    return progress


@router.post("/users/{user_id}/badges/invalidate", status_code=204)
async def invalidate_badges(user_id: str, registry: BadgeEngineRegistry = Depends(get_registry)):
    await registry.get(user_id).invalidate_cache()


# ── Counters ──


@router.get("/users/{user_id}/counters", response_model=CountersResponse)
async def get_counters(user_id: str, registry: BadgeEngineRegistry = Depends(get_registry)):
    """Raw badge counters as stored."""
    return CountersResponse(counters=await registry.counters.get_all_counters(user_id))


@router.get("/users/{user_id}/counters/marathon", response_model=MarathonStats)
async def get_marathon_stats(user_id: str, registry: BadgeEngineRegistry = Depends(get_registry)):
    return await registry.counters.get_marathon_stats(user_id, registry.clock())


# ── Activity ──


@router.post("/users/{user_id}/activity/episode", response_model=NewBadgesResponse)
async def episode_watched(
    user_id: str,
    body: EpisodeWatchedRequest,
    registry: BadgeEngineRegistry = Depends(get_registry),
):
    """Record a watched episode and return any badges it unlocked."""
    new_badges = await activity.record_episode_watched(
        registry, user_id, is_rewatch=body.is_rewatch, air_date=body.air_date
    )
    return NewBadgesResponse(new_badges=new_badges, count=len(new_badges))


@router.post("/users/{user_id}/activity/item", status_code=204)
async def item_added(
    user_id: str,
    body: ItemAddedRequest,
    registry: BadgeEngineRegistry = Depends(get_registry),
):
    await activity.record_item_added(registry, user_id, body.kind)


@router.post("/users/{user_id}/activity/friendship", status_code=204)
async def friendship_changed(
    user_id: str,
    body: FriendshipChangedRequest,
    registry: BadgeEngineRegistry = Depends(get_registry),
):
    await activity.record_friendship_changed(registry, user_id, body.friend_id)
