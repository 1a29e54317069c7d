"""Plan creation lock: single-writer guard around check-then-create, backed by Redis.

This module provides:
- Per-user locks so two requests cannot both create a Serious Plan
- Lock acquisition with bounded wait
- Owner-checked release and automatic expiry (crash safety)
"""

import asyncio
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import redis.asyncio as redis
import structlog

from serious_people.core.exceptions import PlanBusyError
from serious_people.db.redis import get_redis

logger = structlog.get_logger(__name__)


class PlanLock:
    """Manages distributed per-user plan locks using Redis."""

    LOCK_PREFIX = "seriouspeople:plan-lock:"
    DEFAULT_TTL = 30
    POLL_INTERVAL = 0.05

    def __init__(self, client: redis.Redis | None = None, ttl: int | None = None):
        self._client = client
        self.ttl = ttl or self.DEFAULT_TTL

    def _get_redis(self) -> redis.Redis:
        """Return the injected client, falling back to the shared connection."""
        return self._client if self._client is not None else get_redis()

    def _lock_key(self, user_id: str) -> str:
        return f"{self.LOCK_PREFIX}{user_id}"

    async def acquire(self, user_id: str, owner: str) -> bool:
        """Attempt to acquire the lock for a user.

        Args:
            user_id: User whose plan is being created
            owner: Unique token for this acquisition

        Returns:
            True if lock acquired, False if held by another owner
        """
        r = self._get_redis()
        lock_value = f"{owner}:{datetime.now(UTC).isoformat()}"
        result = await r.set(self._lock_key(user_id), lock_value, nx=True, ex=self.ttl)
        return bool(result)

    async def release(self, user_id: str, owner: str) -> bool:
        """Release the lock if it is still owned by ``owner``.

        An expired lock that was re-acquired by someone else is left alone.
        """
        r = self._get_redis()
        key = self._lock_key(user_id)

        current = await r.get(key)
        if current and current.startswith(f"{owner}:"):
            await r.delete(key)
            return True

        return False

    async def is_locked(self, user_id: str) -> bool:
        r = self._get_redis()
        return bool(await r.exists(self._lock_key(user_id)))

    @asynccontextmanager
    async def hold(self, user_id: str, wait_timeout: float = 10.0) -> AsyncGenerator[str, None]:
        """Hold the user's plan lock for the duration of the block.

        Args:
            user_id: User whose plan is being created
            wait_timeout: Maximum seconds to wait for the lock

        Yields:
            The owner token of this acquisition

        Raises:
            PlanBusyError: If the lock is not acquired within wait_timeout
        """
        owner = str(uuid.uuid4())
        loop = asyncio.get_running_loop()
        start = loop.time()
        acquired = False
        try:
            while True:
                acquired = await self.acquire(user_id, owner)
                if acquired:
                    break
                waited = loop.time() - start
                if waited >= wait_timeout:
                    logger.warning("plan_lock_wait_exceeded", user_id=user_id, waited=waited)
                    raise PlanBusyError(user_id, waited)
                await asyncio.sleep(self.POLL_INTERVAL)

            yield owner

        finally:
            if acquired:
                await self.release(user_id, owner)
