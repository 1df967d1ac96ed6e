"""Cache-then-admission gate in front of an upstream call.

RequestGate.fetch(key, producer) serves a fresh cached value when there is
one, otherwise takes a rate limiter token, awaits the producer and caches a
non-empty result. Either subsystem can be switched off.
"""

from __future__ import annotations

import logging
from collections.abc import Sized
from typing import Any, Awaitable, Callable, Literal, Optional, TypeVar, Union

from core.cache import TTLCache
from core.clock import Clock, system_clock
from core.models import CacheOptions, CacheStats, RateLimiterOptions, RateLimiterStats
from core.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")

Producer = Callable[[], Awaitable[T]]

_MISS = object()

CacheConfig = Union[CacheOptions, TTLCache, Literal[False], None]
RateLimiterConfig = Union[RateLimiterOptions, RateLimiter, Literal[False], None]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, Sized) and len(value) == 0


class RequestGate:
    """Runs one logical request: cache lookup, admission, producer, cache fill.

    Concurrent misses for the same key are not merged: each one takes its own
    token and calls its own producer.
    """

    def __init__(
        self,
        *,
        cache: CacheConfig = None,
        rate_limiter: RateLimiterConfig = None,
        clock: Clock = system_clock,
    ) -> None:
        self._cache = _build_cache(cache, clock)
        self._rate_limiter = _build_rate_limiter(rate_limiter, clock)

    @property
    def cache(self) -> Optional[TTLCache]:
        return self._cache

    @property
    def rate_limiter(self) -> Optional[RateLimiter]:
        return self._rate_limiter

    async def fetch(self, key: str, producer: Producer[T]) -> T:
        if self._cache is not None:
            cached = self._cache.get(key, _MISS)
            if cached is not _MISS:
                logger.debug("gate.cache_hit", extra={"cache_key": key[:64]})
                return cached
            logger.debug("gate.cache_miss", extra={"cache_key": key[:64]})

        # RateLimitExceeded propagates as-is; the producer is never called
        if self._rate_limiter is not None:
            await self._rate_limiter.acquire()

        result = await producer()

        # Empty results are not frozen in the cache; the next call retries
        if self._cache is not None and not _is_empty(result):
            self._cache.set(key, result)

        return result

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    def cache_stats(self) -> CacheStats:
        if self._cache is None:
            return CacheStats(size=0, enabled=False)
        return CacheStats(size=self._cache.size, enabled=True)

    def rate_limiter_stats(self) -> RateLimiterStats:
        if self._rate_limiter is None:
            return RateLimiterStats(available_tokens=0, queue_size=0, enabled=False)
        return RateLimiterStats(
            available_tokens=self._rate_limiter.available_tokens(),
            queue_size=self._rate_limiter.queue_size(),
            enabled=True,
        )

    def dispose(self) -> None:
        """Fail queued callers, stop the refill ticker and drop cached values."""
        if self._rate_limiter is not None:
            self._rate_limiter.dispose()
        self.clear_cache()


def _build_cache(config: CacheConfig, clock: Clock) -> Optional[TTLCache]:
    if config is False:
        return None
    if isinstance(config, TTLCache):
        return config
    options = config or CacheOptions()
    return TTLCache(ttl_seconds=options.ttl_seconds, maxsize=options.max_size, clock=clock)


def _build_rate_limiter(config: RateLimiterConfig, clock: Clock) -> Optional[RateLimiter]:
    if config is False:
        return None
    if isinstance(config, RateLimiter):
        return config
    return RateLimiter.from_options(config or RateLimiterOptions(), clock=clock)
