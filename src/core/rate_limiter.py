"""Token-bucket rate limiter with an optional FIFO wait queue.

The bucket holds up to max_requests tokens and is refilled to capacity once
per elapsed interval. acquire() takes a token or parks the caller on a future
until a refill grants it one; try_acquire() never waits.

A refill only happens when someone calls into the limiter, so while callers
are parked a background ticker task wakes up at each refill boundary to keep
the queue moving. The ticker exists only while the queue is non-empty and
holds a weak reference to the limiter.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections import deque
from typing import Deque, Optional

from core.clock import Clock, system_clock
from core.errors import RateLimitExceeded
from core.models import RateLimiterOptions

logger = logging.getLogger(__name__)


class RateLimiter:
    def __init__(
        self,
        *,
        max_requests: int = 50,
        interval_seconds: float = 1.0,
        queue: bool = True,
        max_queue_size: int = 100,
        clock: Clock = system_clock,
    ) -> None:
        if int(max_requests) < 1:
            raise ValueError("max_requests must be >= 1")
        if float(interval_seconds) <= 0:
            raise ValueError("interval_seconds must be > 0")
        if int(max_queue_size) < 0:
            raise ValueError("max_queue_size must be >= 0")

        self._capacity = int(max_requests)
        self._interval = float(interval_seconds)
        self._should_queue = bool(queue)
        self._max_queue_size = int(max_queue_size)
        self._clock = clock

        self._tokens = self._capacity
        self._last_refill = clock()
        self._queue: Deque["asyncio.Future[None]"] = deque()
        self._refill_task: Optional["asyncio.Task[None]"] = None
        self._disposed = False

    @classmethod
    def from_options(cls, options: RateLimiterOptions, *, clock: Clock = system_clock) -> "RateLimiter":
        return cls(
            max_requests=options.max_requests,
            interval_seconds=options.interval_seconds,
            queue=options.queue,
            max_queue_size=options.max_queue_size,
            clock=clock,
        )

    @property
    def disposed(self) -> bool:
        return self._disposed

    async def acquire(self) -> None:
        """Take a token, waiting in the queue if none is available.

        Raises:
          RateLimitExceeded when queuing is disabled, the queue is full, the
          limiter is disposed, or the limiter is reset/disposed while waiting.
        """
        self._refill()

        if self._tokens > 0:
            self._tokens -= 1
            return

        if not self._should_queue:
            raise RateLimitExceeded(RateLimitExceeded.LIMITED)

        if self._disposed:
            raise RateLimitExceeded(RateLimitExceeded.DISPOSED)

        if len(self._queue) >= self._max_queue_size:
            raise RateLimitExceeded(RateLimitExceeded.QUEUE_FULL)

        fut: "asyncio.Future[None]" = asyncio.get_running_loop().create_future()
        self._queue.append(fut)
        logger.debug("rate_limiter.queued", extra={"queue_size": len(self._queue)})

        self._start_refill_task()

        try:
            await fut
        except asyncio.CancelledError:
            self._abandon(fut)
            raise

    def try_acquire(self) -> bool:
        self._refill()

        if self._tokens > 0:
            self._tokens -= 1
            return True

        return False

    def available_tokens(self) -> int:
        self._refill()
        return self._tokens

    def queue_size(self) -> int:
        return len(self._queue)

    def reset(self) -> None:
        """Refill the bucket and fail every queued caller."""
        self._reset(RateLimitExceeded.RESET)

    def dispose(self) -> None:
        """Reset and stop the ticker for good. Safe to call more than once."""
        if self._disposed:
            return
        self._disposed = True
        self._reset(RateLimitExceeded.DISPOSED)

    # --- internals ---

    def _reset(self, reason: str) -> None:
        self._tokens = self._capacity
        self._last_refill = self._clock()
        self._stop_refill_task()

        rejected = 0
        while self._queue:
            fut = self._queue.popleft()
            if not fut.done():
                fut.set_exception(RateLimitExceeded(reason))
                rejected += 1

        logger.debug("rate_limiter.reset", extra={"reason": reason, "rejected": rejected})

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill

        if elapsed >= self._interval:
            intervals = int(elapsed // self._interval)
            self._tokens = min(self._capacity, self._tokens + intervals * self._capacity)
            # Advance the anchor by whole intervals to keep fractional progress
            self._last_refill += intervals * self._interval

        self._drain()

    def _drain(self) -> None:
        # FIFO: the head of the queue is always served first
        while self._queue and self._tokens > 0:
            fut = self._queue.popleft()
            if fut.done():
                continue
            self._tokens -= 1
            fut.set_result(None)
            logger.debug("rate_limiter.granted", extra={"queue_size": len(self._queue)})

        if not self._queue:
            self._stop_refill_task()

    def _abandon(self, fut: "asyncio.Future[None]") -> None:
        # The waiting task was cancelled: either still queued, or granted a
        # token it will never use.
        if fut.cancelled():
            if fut in self._queue:
                self._queue.remove(fut)
            if not self._queue:
                self._stop_refill_task()
        elif fut.exception() is None:
            self._tokens = min(self._capacity, self._tokens + 1)
            self._drain()

    def _next_refill_delay(self) -> float:
        return max(0.0, self._last_refill + self._interval - self._clock())

    def _start_refill_task(self) -> None:
        if self._refill_task is not None or self._disposed:
            return
        loop = asyncio.get_running_loop()
        self._refill_task = loop.create_task(_refill_ticker(weakref.ref(self)))

    def _stop_refill_task(self) -> None:
        task = self._refill_task
        if task is None:
            return
        self._refill_task = None

        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None

        # A ticker stopping itself just returns on its next check
        if task is not current and not task.done():
            task.cancel()


async def _refill_ticker(ref: "weakref.ReferenceType[RateLimiter]") -> None:
    # Runs refill at every interval boundary until the queue is empty or the
    # ticker has been replaced/stopped by its limiter.
    me = asyncio.current_task()
    while True:
        limiter = ref()
        if limiter is None or limiter._refill_task is not me:
            return
        delay = limiter._next_refill_delay()
        del limiter

        await asyncio.sleep(delay)

        limiter = ref()
        if limiter is None or limiter._refill_task is not me:
            return
        limiter._refill()
        del limiter
