import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from app.api.routes import router
from app.core.config import settings
from app.services.client_manager import shutdown_client, startup_client
from app.services.search_guard import RequestThrottle, SearchCache


@asynccontextmanager
async def lifespan(application: FastAPI):
    await startup_client()
    try:
        yield
    finally:
        await shutdown_client()
        await application.state.throttle.close()
        await application.state.search_cache.close()


def create_app(
    throttle: Optional[RequestThrottle] = None,
    search_cache: Optional[SearchCache] = None,
) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    )
    application = FastAPI(
        title="Cheapest Flight Finder",
        description="Find the cheapest direct or one-stop itinerary between two airports.",
        lifespan=lifespan,
    )
    application.state.throttle = throttle or RequestThrottle(
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    application.state.search_cache = search_cache or SearchCache(
        ttl_seconds=settings.search_cache_ttl_seconds
    )
    application.include_router(router)

    return application


app = create_app()
