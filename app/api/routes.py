import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from app.core.config import settings
from app.core.exceptions import (
    ScheduleProviderError,
    SearchThrottledError,
    UpstreamRateLimitedError,
)
from app.models.schemas import ErrorDetail, HealthResponse, SearchResponse
from app.services.flight_service import build_search_results
from app.services.schedule_client import MockScheduleProvider
from app.services.search_guard import RequestThrottle, SearchCache

logger = logging.getLogger(__name__)

router = APIRouter()


def get_throttle(request: Request) -> RequestThrottle:
    return request.app.state.throttle


def get_search_cache(request: Request) -> SearchCache:
    return request.app.state.search_cache


def _error(status_code: int, code: str, message: str, headers=None) -> HTTPException:
    detail = ErrorDetail(code=code, message=message).model_dump()
    return HTTPException(status_code=status_code, detail=detail, headers=headers)


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get("/search", response_model=SearchResponse)
async def search_endpoint(
    request: Request,
    origin: str = Query(..., description="Origin airport IATA code."),
    destination: str = Query(..., description="Destination airport or city IATA code."),
    trip_type: str = Query("one-way", description="Either one-way or round-trip."),
    date: Optional[str] = Query(None, description="Departure date in YYYY-MM-DD format."),
    throttle: RequestThrottle = Depends(get_throttle),
    search_cache: SearchCache = Depends(get_search_cache),
) -> SearchResponse:
    cache_key = search_cache.key(origin, destination, trip_type, date)
    cached = await search_cache.get(cache_key)
    if cached is not None:
        return SearchResponse(itinerary=cached, cached=True)

    client_key = request.client.host if request.client else "anonymous"
    try:
        await throttle.check(client_key)
    except SearchThrottledError as exc:
        raise _error(
            429, "RATE_LIMITED", str(exc), headers={"Retry-After": str(int(exc.retry_after) + 1)}
        ) from exc

    try:
        try:
            itinerary = await build_search_results(
                origin=origin, destination=destination, trip_type=trip_type, date=date
            )
        except UpstreamRateLimitedError:
            if not settings.mock_on_rate_limit:
                raise
            logger.warning("Schedule provider is rate limiting; serving mock itineraries.")
            itinerary = await build_search_results(
                origin=origin,
                destination=destination,
                trip_type=trip_type,
                date=date,
                provider=MockScheduleProvider(destination=destination.strip().upper()),
            )
    except ValueError as exc:
        raise _error(400, "INVALID_INPUT", str(exc)) from exc
    except UpstreamRateLimitedError as exc:
        raise _error(
            429, "RATE_LIMITED", "Flight data service is busy. Please try again shortly."
        ) from exc
    except ScheduleProviderError as exc:
        logger.error("Schedule provider failure: %s", exc)
        raise _error(502, "UPSTREAM_ERROR", "Flight data service is unavailable.") from exc
    except Exception as exc:
        logger.exception("Unexpected error searching %s -> %s", origin, destination)
        raise _error(500, "INTERNAL_ERROR", "An unexpected error occurred.") from exc

    if itinerary is None:
        raise _error(404, "NO_RESULTS", "No flights found for this route.")

    await search_cache.set(cache_key, itinerary)
    return SearchResponse(itinerary=itinerary)
