"""Daily rate-limit counters behind IRateLimitCounter.

RedisRateLimitCounter shares counts across processes (INCR + EXPIRE in one
pipeline). InMemoryRateLimitCounter is for single-process deployments and
tests; its expiry follows an injectable clock.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

import redis.asyncio as redis

from clientchain.core.config import Settings, get_settings
from clientchain.shared.utils.datetime import Clock, utc_now

logger = logging.getLogger(__name__)


class RedisRateLimitCounter:
    """Redis-backed counter. Call connect() at startup and disconnect() at shutdown.

    Every failure path returns None so the rate-limit guard fails open.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the counter.

        Args:
            redis_client: Optional Redis client for testing or DI.
            settings: Connection settings; defaults to get_settings().
        """
        self.redis = redis_client
        self.settings = settings or get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self.redis is not None:
            return
        try:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=(
                    self.settings.redis_password.get_secret_value()
                    if self.settings.redis_password
                    else None
                ),
                max_connections=self.settings.redis_max_connections,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis rate-limit counter connected: %s:%s",
                self.settings.redis_host,
                self.settings.redis_port,
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Rate limits fail open.", e)
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis rate-limit counter disconnected")

    async def _reconnect(self) -> bool:
        """Drop the current client and connect again. Returns True if reconnected."""
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except redis.RedisError:
                logger.debug("Ignoring error while closing stale Redis client")
        self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    def is_available(self) -> bool:
        return self._connected and self.redis is not None

    async def _incr_with_ttl(self, key: str, ttl_seconds: int) -> int:
        assert self.redis is not None
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, ttl_seconds, nx=True)
            count, _ = await pipe.execute()
        return int(count)

    async def increment(self, key: str, ttl_seconds: int) -> int | None:
        if not self.is_available():
            return None
        try:
            return await self._incr_with_ttl(key, ttl_seconds)
        except (redis.ConnectionError, redis.TimeoutError):
            if await self._reconnect():
                try:
                    return await self._incr_with_ttl(key, ttl_seconds)
                except redis.RedisError:
                    logger.exception("Rate-limit increment failed for %s after reconnect", key)
                    return None
            logger.warning("Rate-limit counter unavailable for %s (Redis disconnected)", key)
            return None
        except redis.RedisError:
            logger.exception("Rate-limit increment failed for %s", key)
            return None


class InMemoryRateLimitCounter:
    """Process-local counter with clock-driven expiry."""

    PURGE_INTERVAL = timedelta(minutes=5)

    def __init__(self, clock: Clock = utc_now) -> None:
        self.clock = clock
        self._counts: dict[str, tuple[int, datetime]] = {}
        self._lock = asyncio.Lock()
        self._next_purge_at: datetime | None = None

    async def increment(self, key: str, ttl_seconds: int) -> int | None:
        async with self._lock:
            now = self.clock()
            self._purge_expired(now)
            count, expires_at = self._counts.get(key, (0, now))
            if expires_at <= now:
                count, expires_at = 0, now + timedelta(seconds=ttl_seconds)
            count += 1
            self._counts[key] = (count, expires_at)
            return count

    def _purge_expired(self, now: datetime) -> None:
        # Day-stamped keys are never incremented again once the day rolls over.
        if self._next_purge_at is not None and now < self._next_purge_at:
            return
        expired = [key for key, (_, expires_at) in self._counts.items() if expires_at <= now]
        for key in expired:
            del self._counts[key]
        self._next_purge_at = now + self.PURGE_INTERVAL
        if expired:
            logger.debug("Purged %d expired rate-limit counters", len(expired))
