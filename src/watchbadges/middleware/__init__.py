"""Middleware registration."""

from fastapi import FastAPI

from watchbadges.config import Settings
from watchbadges.middleware.error_handler import setup_error_handlers
from watchbadges.middleware.logging import setup_logging
from watchbadges.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure logging, register error handlers and request middleware."""
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
