from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

_USER_AGENT = "cheapest-flight-finder/0.1"


@dataclass
class ClientState:
    """Container holding the shared HTTP client for the schedule provider."""

    client: Optional[httpx.AsyncClient] = None
    request_count: int = 0

    @property
    def healthy(self) -> bool:
        return self.client is not None and not self.client.is_closed


_state = ClientState()
_startup_lock = asyncio.Lock()


def _build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=f"https://{settings.rapidapi_host}",
        timeout=settings.schedule_timeout_seconds,
        headers={
            "x-rapidapi-key": settings.rapidapi_key,
            "x-rapidapi-host": settings.rapidapi_host,
            "user-agent": _USER_AGENT,
        },
    )


async def startup_client() -> None:
    """Open the shared schedule client."""

    async with _startup_lock:
        if _state.healthy:
            return
        _state.client = _build_client()
        _state.request_count = 0
        logger.info("Schedule client started for %s.", settings.rapidapi_host)


async def shutdown_client() -> None:
    """Close the shared schedule client."""

    async with _startup_lock:
        if _state.client is not None:
            await _state.client.aclose()
            logger.info(
                "Schedule client closed after %s requests.", _state.request_count
            )
        _state.client = None


@asynccontextmanager
async def acquire_client() -> AsyncIterator[httpx.AsyncClient]:
    """Yield the shared client, reopening it if it was closed underneath us."""

    if not _state.healthy:
        await startup_client()

    _state.request_count += 1
    yield _state.client
