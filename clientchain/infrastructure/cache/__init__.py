"""Counters backing the per-subject daily rate limits."""

from clientchain.infrastructure.cache.rate_limit_counter import (
    InMemoryRateLimitCounter,
    RedisRateLimitCounter,
)

__all__ = ["InMemoryRateLimitCounter", "RedisRateLimitCounter"]
