"""Shared Redis client (plan locks)."""

import redis.asyncio as redis

from serious_people.core.config import get_settings

_redis: redis.Redis | None = None


async def init_redis(url: str | None = None, client: redis.Redis | None = None) -> None:
    """Connect the shared client, or install ``client`` (e.g. FakeAsyncRedis) as-is."""
    global _redis

    if _redis is not None:
        return

    if client is not None:
        _redis = client
        return

    _redis = redis.from_url(url or get_settings().redis_url, encoding="utf-8", decode_responses=True)
    await _redis.ping()


async def close_redis() -> None:
    global _redis

    if _redis is not None:
        await _redis.aclose()
    _redis = None


async def ping_redis() -> None:
    """Raises if Redis is unreachable or not initialized."""
    await get_redis().ping()


def get_redis() -> redis.Redis:
    """Return the shared client.

    Raises RuntimeError if init_redis() has not been called.
    """
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis
