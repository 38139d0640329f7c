import asyncio

import pytest

from app.core.exceptions import SearchThrottledError
from app.models.schemas import Itinerary
from app.services.search_guard import RequestThrottle, SearchCache

UNREACHABLE_REDIS = "redis://127.0.0.1:1/0"


def test_throttle_allows_up_to_limit_then_blocks(fake_redis):
    throttle = RequestThrottle(max_requests=5, window_seconds=60, redis_client=fake_redis)

    async def run():
        for _ in range(5):
            await throttle.check("10.0.0.1")
        with pytest.raises(SearchThrottledError) as excinfo:
            await throttle.check("10.0.0.1")
        return excinfo.value.retry_after, await fake_redis.ttl("throttle:10.0.0.1")

    retry_after, ttl = asyncio.run(run())

    assert 0 < retry_after <= 60
    assert 0 < ttl <= 60


def test_throttle_window_resets_when_key_expires(fake_redis):
    throttle = RequestThrottle(max_requests=1, window_seconds=60, redis_client=fake_redis)

    async def run():
        await throttle.check("client")
        with pytest.raises(SearchThrottledError):
            await throttle.check("client")
        await fake_redis.delete(throttle.key("client"))
        await throttle.check("client")

    asyncio.run(run())


def test_throttle_tracks_clients_separately(fake_redis):
    throttle = RequestThrottle(max_requests=1, window_seconds=60, redis_client=fake_redis)

    async def run():
        await throttle.check("a")
        await throttle.check("b")
        with pytest.raises(SearchThrottledError):
            await throttle.check("a")

    asyncio.run(run())


def test_throttle_repairs_key_without_expiry(fake_redis):
    throttle = RequestThrottle(max_requests=1, window_seconds=60, redis_client=fake_redis)

    async def run():
        await fake_redis.set(throttle.key("client"), 1)
        with pytest.raises(SearchThrottledError) as excinfo:
            await throttle.check("client")
        return excinfo.value.retry_after, await fake_redis.ttl(throttle.key("client"))

    retry_after, ttl = asyncio.run(run())

    assert retry_after == 60
    assert 0 < ttl <= 60


def test_cache_stores_itinerary_with_ttl(fake_redis, make_segment):
    cache = SearchCache(ttl_seconds=600, redis_client=fake_redis)
    itinerary = Itinerary(price=321.5, route=[make_segment("LAX", "JFK", 0, 5)])
    key = cache.key("LAX", "JFK", "one-way", None)

    async def run():
        stored = await cache.set(key, itinerary)
        return stored, await cache.get(key), await fake_redis.ttl(key)

    stored, cached, ttl = asyncio.run(run())

    assert stored is True
    assert cached == itinerary
    assert 0 < ttl <= 600


def test_cache_miss_and_unreadable_entry(fake_redis):
    cache = SearchCache(redis_client=fake_redis)
    key = cache.key("LAX", "JFK", "one-way", None)

    async def run():
        missing = await cache.get(key)
        await fake_redis.set(key, '{"price": "free"}')
        return missing, await cache.get(key)

    assert asyncio.run(run()) == (None, None)


def test_cache_key_normalizes_codes():
    assert SearchCache.key(" lax", "jfk", "one-way", None) == "search:LAX:JFK:one-way:anytime"
    assert SearchCache.key("LAX", "JFK", "one-way", "2026-01-01") != SearchCache.key(
        "LAX", "JFK", "round-trip", "2026-01-01"
    )


def test_unreachable_redis_disables_throttle_and_cache(make_segment):
    throttle = RequestThrottle(max_requests=1, redis_url=UNREACHABLE_REDIS)
    cache = SearchCache(redis_url=UNREACHABLE_REDIS)
    itinerary = Itinerary(price=100, route=[make_segment("LAX", "JFK", 0, 5)])
    key = cache.key("LAX", "JFK", "one-way", None)

    async def run():
        for _ in range(3):
            await throttle.check("client")
        stored = await cache.set(key, itinerary)
        return stored, await cache.get(key)

    assert asyncio.run(run()) == (False, None)


def test_close_releases_connection(fake_redis):
    cache = SearchCache(redis_client=fake_redis)

    async def run():
        await cache.close()
        await cache.close()

    asyncio.run(run())

    assert cache._redis is None
