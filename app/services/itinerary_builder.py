import logging
import math
import random
from typing import List, Optional, Sequence

from app.core.constants import (
    BOOKING_SEARCH_URL,
    CONNECTION_FEE,
    MAX_LAYOVER_SECONDS,
    MIN_LAYOVER_SECONDS,
    PRICE_PER_HOUR,
    PRICE_VARIANCE,
    ROUND_TRIP_MULTIPLIER,
    SEGMENT_BASE_PRICE,
)
from app.models.schemas import (
    ConnectionResult,
    FlightSegment,
    Itinerary,
    Layover,
    TripType,
)

logger = logging.getLogger(__name__)


def validate_connection(first: FlightSegment, second: FlightSegment) -> ConnectionResult:
    """Check whether ``second`` can be boarded after landing on ``first``."""

    if first.destination != second.origin:
        return ConnectionResult(
            is_valid=False,
            reason=f"Airports don't match ({first.destination} -> {second.origin})",
        )

    layover_seconds = second.departure_time_utc - first.arrival_time_utc

    if layover_seconds < MIN_LAYOVER_SECONDS:
        return ConnectionResult(
            is_valid=False,
            layover_seconds=layover_seconds,
            reason=f"Layover too short ({layover_seconds // 60} minutes)",
        )

    if layover_seconds > MAX_LAYOVER_SECONDS:
        return ConnectionResult(
            is_valid=False,
            layover_seconds=layover_seconds,
            reason=f"Layover too long ({layover_seconds // 3600} hours)",
        )

    return ConnectionResult(is_valid=True, layover_seconds=layover_seconds)


def estimate_price(
    segments: Sequence[FlightSegment],
    layover_count: int,
    trip_type: TripType = "one-way",
    rng: Optional[random.Random] = None,
) -> int:
    """Synthesize a fare from flight time; there is no live price feed behind it."""

    source = rng or random
    base_price = 0.0
    for segment in segments:
        hours = (segment.arrival_time_utc - segment.departure_time_utc) / 3600
        base_price += SEGMENT_BASE_PRICE + hours * PRICE_PER_HOUR + source.random() * PRICE_VARIANCE

    price = math.floor(base_price + layover_count * CONNECTION_FEE)

    if trip_type == "round-trip":
        price = math.floor(price * ROUND_TRIP_MULTIPLIER + source.random() * PRICE_VARIANCE)

    return price


def build_booking_link(segments: Sequence[FlightSegment]) -> str:
    route_description = "+".join(f"{s.origin}-{s.destination}" for s in segments)
    return f"{BOOKING_SEARCH_URL}{route_description}"


def combine_segments(
    segments: Sequence[FlightSegment],
    trip_type: TripType = "one-way",
    rng: Optional[random.Random] = None,
) -> Optional[Itinerary]:
    """Join ordered segments into a priced itinerary, or None if any connection is illegal."""

    if not segments:
        return None

    layovers: List[Layover] = []
    for index, (current, following) in enumerate(zip(segments, segments[1:])):
        connection = validate_connection(current, following)
        if not connection.is_valid:
            logger.debug(
                "Invalid connection between segment %s and %s: %s",
                index,
                index + 1,
                connection.reason,
            )
            return None

        layovers.append(
            Layover(
                airport=current.destination,
                arrival_time_utc=current.arrival_time_utc,
                departure_time_utc=following.departure_time_utc,
                duration_seconds=connection.layover_seconds,
            )
        )

    return Itinerary(
        price=estimate_price(segments, len(layovers), trip_type, rng),
        route=list(segments),
        layovers=layovers or None,
        trip_type=trip_type,
        booking_link=build_booking_link(segments),
    )
