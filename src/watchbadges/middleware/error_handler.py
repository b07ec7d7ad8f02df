"""Global error handler — consistent JSON error responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from watchbadges.badges.engine import BadgeCommitError
from watchbadges.store import StoreError

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": exc.errors()},
        )

    @app.exception_handler(BadgeCommitError)
    async def badge_commit_handler(request: Request, exc: BadgeCommitError) -> JSONResponse:
        """Earned badges that could not be saved — the client may retry the check."""
        logger.error(
            "badge_commit_error",
            path=request.url.path,
            user_id=exc.user_id,
            failed=[b.id for b in exc.failed],
        )
        return JSONResponse(
            status_code=503,
            content={
                "detail": "Badge store unavailable",
                "unpersisted": [b.id for b in exc.failed],
                "persisted": [b.id for b in exc.persisted],
            },
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("store_error", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=503,
            content={"detail": "Badge store unavailable"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions — always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
