import asyncio

import pytest

from core.cache import TTLCache
from core.errors import RateLimitExceeded
from core.gate import RequestGate
from core.models import CacheOptions, CacheStats, RateLimiterOptions, RateLimiterStats
from core.rate_limiter import RateLimiter


class CountingProducer:
    def __init__(self, result):
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return self.result


@pytest.mark.asyncio
async def test_fetch_serves_repeated_key_from_cache(clock):
    gate = RequestGate(clock=clock)
    producer = CountingProducer(["result"])

    assert await gate.fetch("k1", producer) == ["result"]
    assert await gate.fetch("k1", producer) == ["result"]
    assert producer.calls == 1

    await gate.fetch("k2", producer)
    assert producer.calls == 2


@pytest.mark.asyncio
async def test_cache_hit_consumes_no_token(clock):
    gate = RequestGate(
        rate_limiter=RateLimiterOptions(max_requests=1, queue=False),
        clock=clock,
    )
    producer = CountingProducer("v")

    await gate.fetch("k", producer)
    assert gate.rate_limiter_stats().available_tokens == 0

    # Would raise RateLimitExceeded if it needed a token
    assert await gate.fetch("k", producer) == "v"
    assert producer.calls == 1


@pytest.mark.asyncio
async def test_fetch_calls_producer_again_after_ttl(clock):
    gate = RequestGate(cache=CacheOptions(ttl_seconds=10.0, max_size=10), clock=clock)
    producer = CountingProducer("v")

    await gate.fetch("k", producer)
    clock.advance(10.0)
    await gate.fetch("k", producer)

    assert producer.calls == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("empty", [[], None, "", {}])
async def test_empty_results_are_not_cached(clock, empty):
    gate = RequestGate(clock=clock)
    producer = CountingProducer(empty)

    assert await gate.fetch("k", producer) == empty
    await gate.fetch("k", producer)

    assert producer.calls == 2
    assert gate.cache_stats().size == 0


@pytest.mark.asyncio
async def test_producer_error_propagates_and_nothing_is_cached(clock):
    gate = RequestGate(clock=clock)

    class Boom(Exception):
        pass

    async def failing():
        raise Boom("upstream down")

    with pytest.raises(Boom):
        await gate.fetch("k", failing)

    assert gate.cache_stats().size == 0


@pytest.mark.asyncio
async def test_rate_limit_error_skips_producer(clock):
    gate = RequestGate(
        rate_limiter=RateLimiterOptions(max_requests=1, queue=False),
        clock=clock,
    )
    producer = CountingProducer("v")

    await gate.fetch("a", producer)
    with pytest.raises(RateLimitExceeded):
        await gate.fetch("b", producer)

    assert producer.calls == 1


@pytest.mark.asyncio
async def test_disabled_cache_always_calls_producer(clock):
    gate = RequestGate(cache=False, clock=clock)
    producer = CountingProducer("v")

    await gate.fetch("k", producer)
    await gate.fetch("k", producer)

    assert producer.calls == 2
    assert gate.cache is None
    assert gate.cache_stats() == CacheStats(size=0, enabled=False)


@pytest.mark.asyncio
async def test_disabled_rate_limiter_never_throttles(clock):
    gate = RequestGate(cache=False, rate_limiter=False, clock=clock)
    producer = CountingProducer("v")

    for _ in range(100):
        await gate.fetch("k", producer)

    assert producer.calls == 100
    assert gate.rate_limiter_stats() == RateLimiterStats(available_tokens=0, queue_size=0, enabled=False)


@pytest.mark.asyncio
async def test_concurrent_misses_for_same_key_each_call_producer(clock):
    gate = RequestGate(clock=clock)
    calls = []

    async def slow():
        calls.append(1)
        await asyncio.sleep(0)
        return "v"

    results = await asyncio.gather(gate.fetch("k", slow), gate.fetch("k", slow))

    assert results == ["v", "v"]
    assert len(calls) == 2
    assert gate.rate_limiter_stats().available_tokens == 48


@pytest.mark.asyncio
async def test_gate_accepts_prebuilt_instances(clock):
    cache = TTLCache(ttl_seconds=5.0, maxsize=2, clock=clock)
    limiter = RateLimiter(max_requests=3, clock=clock)
    gate = RequestGate(cache=cache, rate_limiter=limiter)

    await gate.fetch("k", CountingProducer("v"))

    assert gate.cache is cache
    assert gate.rate_limiter is limiter
    assert cache.get("k") == "v"
    assert limiter.available_tokens() == 2


@pytest.mark.asyncio
async def test_stats_and_clear_cache(clock):
    gate = RequestGate(clock=clock)

    await gate.fetch("a", CountingProducer("1"))
    await gate.fetch("b", CountingProducer("2"))

    assert gate.cache_stats() == CacheStats(size=2, enabled=True)
    assert gate.rate_limiter_stats() == RateLimiterStats(available_tokens=48, queue_size=0, enabled=True)

    gate.clear_cache()
    assert gate.cache_stats().size == 0


@pytest.mark.asyncio
async def test_dispose_twice_is_harmless(clock):
    gate = RequestGate(
        rate_limiter=RateLimiterOptions(max_requests=1, interval_seconds=1.0),
        clock=clock,
    )
    await gate.fetch("a", CountingProducer("1"))
    pending = asyncio.create_task(gate.fetch("b", CountingProducer("2")))
    await asyncio.sleep(0)

    gate.dispose()
    gate.dispose()

    with pytest.raises(RateLimitExceeded):
        await pending
    assert gate.cache_stats().size == 0
    assert gate.rate_limiter.disposed is True
