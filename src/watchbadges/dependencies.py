"""Shared FastAPI dependencies."""

from fastapi import Request

from watchbadges.badges.engine import BadgeEngineRegistry


def get_registry(request: Request) -> BadgeEngineRegistry:
    """Return the application's badge engine registry."""
    return request.app.state.badge_registry
