"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from watchbadges.badges.engine import BadgeEngineRegistry
from watchbadges.badges.router import router as badges_router
from watchbadges.badges.week_utils import resolve_timezone
from watchbadges.config import get_settings
from watchbadges.health.router import router as health_router
from watchbadges.middleware import setup_middleware
from watchbadges.redis_client import close_redis, init_redis


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    store = await init_redis(settings)
    app.state.badge_registry = BadgeEngineRegistry.from_settings(
        store, settings, tz=resolve_timezone(settings.default_timezone)
    )

    yield

    app.state.badge_registry.clear()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Watch Badges API",
        description="Achievement badges for series and movie watching activity",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(badges_router)

    return app


app = create_app()
