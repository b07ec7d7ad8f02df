"""Redis connection pool and the document store bound to it."""

import redis.asyncio as redis

from watchbadges.config import Settings
from watchbadges.store import RedisDocumentStore

_pool: redis.Redis | None = None


async def init_redis(settings: Settings) -> RedisDocumentStore:
    """Initialize the Redis connection pool and return the document store on top of it."""
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
    )
    return RedisDocumentStore(
        _pool,
        key_prefix=settings.store_key_prefix,
        max_retries=settings.store_transaction_max_retries,
    )


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
    _pool = None


def get_redis() -> redis.Redis:
    """Get the raw Redis client."""
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool
