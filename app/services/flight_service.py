import asyncio
import datetime
import logging
import random
import re
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from app.core.config import settings
from app.core.constants import (
    CITY_CODE_ALIASES,
    MAX_HUB_CANDIDATES,
    MIN_HUB_CONNECTION_SECONDS,
    TRIP_TYPES,
)
from app.core.exceptions import (
    ScheduleNotFoundError,
    UpstreamRateLimitedError,
)
from app.models.schemas import FlightSegment, Itinerary, TripType
from app.services.find_cheapest import find_cheapest
from app.services.hub_ranker import get_relevant_hubs, prioritize_hubs
from app.services.itinerary_builder import combine_segments
from app.services.schedule_client import get_schedule_provider

logger = logging.getLogger(__name__)

FetchDepartures = Callable[[str, Optional[str]], Awaitable[List[FlightSegment]]]

_IATA_RE = re.compile(r"^[A-Z]{3}$")


def validate_search(origin: str, destination: str) -> Tuple[str, str]:
    """Normalize and validate a pair of IATA codes."""

    clean_origin = (origin or "").strip().upper()
    clean_destination = (destination or "").strip().upper()

    if len(clean_origin) != 3:
        raise ValueError("Origin must be a 3-letter IATA code.")
    if len(clean_destination) != 3:
        raise ValueError("Destination must be a 3-letter IATA code.")
    if clean_origin == clean_destination:
        raise ValueError("Origin and destination must be different.")
    if not _IATA_RE.match(clean_origin):
        raise ValueError("Origin must contain only letters.")
    if not _IATA_RE.match(clean_destination):
        raise ValueError("Destination must contain only letters.")

    return clean_origin, clean_destination


def validate_trip_options(trip_type: str, date: Optional[str]) -> None:
    if trip_type not in TRIP_TYPES:
        raise ValueError(f"Invalid trip type: {trip_type}. Must be one of {list(TRIP_TYPES)}")

    if date:
        try:
            datetime.datetime.strptime(date, "%Y-%m-%d")
        except ValueError as exc:
            raise ValueError("Date must be a valid calendar date in YYYY-MM-DD format.") from exc


def matches_destination(airport: str, destination: str) -> bool:
    """True if ``airport`` is the destination or one of its city-code members."""

    return airport == destination or airport in CITY_CODE_ALIASES.get(destination, ())


def _discover_hub_legs(
    origin: str,
    destination: str,
    origin_flights: Sequence[FlightSegment],
    rank_hubs: bool,
    max_hub_candidates: int,
) -> List[FlightSegment]:
    """First leg per hub reachable from the origin, in discovery order unless ranked."""

    relevant_hubs = set(get_relevant_hubs(origin, destination))
    first_legs: Dict[str, FlightSegment] = {}
    for segment in origin_flights:
        if segment.destination in relevant_hubs and segment.destination not in first_legs:
            first_legs[segment.destination] = segment

    hubs = list(first_legs)
    if rank_hubs:
        hubs = prioritize_hubs(origin, destination, hubs)

    return [first_legs[hub] for hub in hubs[:max_hub_candidates]]


def _first_onward_flight(
    first_leg: FlightSegment,
    hub_flights: Sequence[FlightSegment],
    destination: str,
    min_connection_seconds: int,
) -> Optional[FlightSegment]:
    earliest_departure = first_leg.arrival_time_utc + min_connection_seconds
    return next(
        (
            flight
            for flight in hub_flights
            if matches_destination(flight.destination, destination)
            and flight.departure_time_utc >= earliest_departure
        ),
        None,
    )


async def search_itineraries(
    origin: str,
    destination: str,
    origin_flights: Sequence[FlightSegment],
    fetch_departures: FetchDepartures,
    trip_type: TripType = "one-way",
    date: Optional[str] = None,
    rng: Optional[random.Random] = None,
    rank_hubs: bool = False,
    max_hub_candidates: int = MAX_HUB_CANDIDATES,
    min_hub_connection_seconds: int = MIN_HUB_CONNECTION_SECONDS,
) -> List[Itinerary]:
    """Build every candidate itinerary for the route.

    Direct flights come first. Only when there are none are one-stop
    itineraries synthesized through hubs served from the origin; their
    departures are fetched concurrently. A hub whose lookup fails is dropped,
    but a rate limit from the provider aborts the search.
    """

    candidates: List[Itinerary] = []
    for segment in origin_flights:
        if matches_destination(segment.destination, destination):
            itinerary = combine_segments([segment], trip_type, rng)
            if itinerary is not None:
                candidates.append(itinerary)

    if candidates:
        logger.info("Found %s direct candidates %s -> %s", len(candidates), origin, destination)
        return candidates

    first_legs = _discover_hub_legs(
        origin, destination, origin_flights, rank_hubs, max_hub_candidates
    )
    if not first_legs:
        logger.info("No direct flights or hub connections from %s", origin)
        return candidates

    logger.info(
        "No direct flights %s -> %s; trying hubs %s",
        origin,
        destination,
        [leg.destination for leg in first_legs],
    )

    results = await asyncio.gather(
        *(fetch_departures(leg.destination, date) for leg in first_legs),
        return_exceptions=True,
    )

    for first_leg, result in zip(first_legs, results):
        hub = first_leg.destination
        if isinstance(result, UpstreamRateLimitedError):
            logger.warning("Rate limited while fetching departures from %s", hub)
            raise result
        if isinstance(result, Exception):
            logger.warning("Dropping hub %s: %r", hub, result)
            continue
        if isinstance(result, BaseException):
            raise result

        onward = _first_onward_flight(first_leg, result, destination, min_hub_connection_seconds)
        if onward is None:
            logger.debug("No onward flight from %s to %s", hub, destination)
            continue

        itinerary = combine_segments([first_leg, onward], trip_type, rng)
        if itinerary is not None:
            candidates.append(itinerary)

    logger.info(
        "Built %s one-stop candidates %s -> %s", len(candidates), origin, destination
    )
    return candidates


async def build_search_results(
    origin: str,
    destination: str,
    trip_type: str = "one-way",
    date: Optional[str] = None,
    provider=None,
    rng: Optional[random.Random] = None,
) -> Optional[Itinerary]:
    """Run one search end to end and return the cheapest itinerary, if any."""

    origin_code, destination_code = validate_search(origin, destination)
    validate_trip_options(trip_type, date)

    if provider is None:
        provider = get_schedule_provider(destination_code)

    logger.info(
        "Searching flights: %s -> %s, tripType: %s, date: %s",
        origin_code,
        destination_code,
        trip_type,
        date or "anytime",
    )

    try:
        origin_flights = await provider.fetch_departures(origin_code, date)
    except ScheduleNotFoundError as exc:
        logger.info("No departures available: %s", exc)
        return None

    candidates = await search_itineraries(
        origin=origin_code,
        destination=destination_code,
        origin_flights=origin_flights,
        fetch_departures=provider.fetch_departures,
        trip_type=trip_type,
        date=date,
        rng=rng,
        rank_hubs=settings.rank_hubs,
        max_hub_candidates=settings.max_hub_candidates,
        min_hub_connection_seconds=settings.min_hub_connection_seconds,
    )

    return find_cheapest(candidates)
