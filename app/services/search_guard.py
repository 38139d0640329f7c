"""Redis-backed per-client search throttling and short-lived result caching.

Both objects degrade to a no-op when Redis cannot be reached: searches are
then neither throttled nor cached.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from app.core.config import settings
from app.core.exceptions import SearchThrottledError
from app.models.schemas import Itinerary

logger = logging.getLogger(__name__)

_REDIS_ERRORS = (RedisError, OSError)


class _RedisBacked:
    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        redis_url: Optional[str] = None,
    ):
        self._redis = redis_client
        self._redis_url = redis_url

    async def _get_redis(self) -> Optional[redis.Redis]:
        if self._redis is None:
            try:
                self._redis = redis.from_url(
                    self._redis_url or settings.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_connect_timeout=1,
                )
                await self._redis.ping()
            except _REDIS_ERRORS as exc:
                logger.warning("Redis unavailable, %s disabled: %s", type(self).__name__, exc)
                self._redis = None
        return self._redis

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


class RequestThrottle(_RedisBacked):
    """Fixed-window limit on searches per client."""

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: int = 60,
        redis_client: Optional[redis.Redis] = None,
        redis_url: Optional[str] = None,
    ):
        super().__init__(redis_client, redis_url)
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    @staticmethod
    def key(client_key: str) -> str:
        return f"throttle:{client_key}"

    async def check(self, client_key: str) -> None:
        """Record a request for ``client_key`` or raise if its window is full."""

        r = await self._get_redis()
        if r is None:
            return

        key = self.key(client_key)
        try:
            count = await r.incr(key)
            if count == 1:
                await r.expire(key, self.window_seconds)
            if count <= self.max_requests:
                return
            retry_after = await r.ttl(key)
            # A key left without an expiry would block the client for good.
            if retry_after < 0:
                await r.expire(key, self.window_seconds)
                retry_after = self.window_seconds
        except _REDIS_ERRORS as exc:
            logger.warning("Throttle check failed for %s: %s", client_key, exc)
            return

        logger.warning("Client %s exceeded %s searches", client_key, self.max_requests)
        raise SearchThrottledError(retry_after)


class SearchCache(_RedisBacked):
    """Remember the result of identical searches for ``ttl_seconds``."""

    def __init__(
        self,
        ttl_seconds: int = 600,
        redis_client: Optional[redis.Redis] = None,
        redis_url: Optional[str] = None,
    ):
        super().__init__(redis_client, redis_url)
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def key(origin: str, destination: str, trip_type: str, date: Optional[str]) -> str:
        return (
            f"search:{origin.strip().upper()}:{destination.strip().upper()}:"
            f"{trip_type}:{date or 'anytime'}"
        )

    async def get(self, key: str) -> Optional[Itinerary]:
        r = await self._get_redis()
        if r is None:
            return None

        try:
            raw = await r.get(key)
        except _REDIS_ERRORS as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None

        try:
            return Itinerary.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable cache entry %s", key)
            return None

    async def set(self, key: str, itinerary: Itinerary) -> bool:
        r = await self._get_redis()
        if r is None:
            return False

        try:
            await r.set(key, itinerary.model_dump_json(), ex=self.ttl_seconds)
        except _REDIS_ERRORS as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)
            return False
        return True
