import random

import pytest

from app.core.constants import MAX_LAYOVER_SECONDS, MIN_LAYOVER_SECONDS
from app.models.schemas import FlightSegment
from app.services.itinerary_builder import (
    build_booking_link,
    combine_segments,
    estimate_price,
    validate_connection,
)

from conftest import BASE_TIME, HOUR


def _connecting_pair(layover_seconds):
    first = FlightSegment(
        origin="LAX",
        destination="DXB",
        airline_name="Emirates",
        departure_time_utc=BASE_TIME,
        arrival_time_utc=BASE_TIME + 16 * HOUR,
    )
    departure = first.arrival_time_utc + layover_seconds
    second = FlightSegment(
        origin="DXB",
        destination="JFK",
        airline_name="Emirates",
        departure_time_utc=departure,
        arrival_time_utc=departure + 14 * HOUR,
    )
    return first, second


def test_validate_connection_rejects_airport_mismatch(make_segment):
    first = make_segment("LAX", "DXB", 0, 16)
    second = make_segment("DOH", "JFK", 20, 14)

    result = validate_connection(first, second)

    assert result.is_valid is False
    assert result.layover_seconds is None
    assert "match" in result.reason


@pytest.mark.parametrize(
    "layover_seconds, expected",
    [
        (MIN_LAYOVER_SECONDS - 1, False),
        (MIN_LAYOVER_SECONDS, True),
        (2 * HOUR, True),
        (MAX_LAYOVER_SECONDS, True),
        (MAX_LAYOVER_SECONDS + 1, False),
    ],
)
def test_validate_connection_layover_bounds(layover_seconds, expected):
    first, second = _connecting_pair(layover_seconds)

    result = validate_connection(first, second)

    assert result.is_valid is expected
    assert result.layover_seconds == layover_seconds


def test_validate_connection_treats_negative_layover_as_too_short():
    first, second = _connecting_pair(-3 * HOUR)

    result = validate_connection(first, second)

    assert result.is_valid is False
    assert result.layover_seconds == -3 * HOUR
    assert "too short" in result.reason


def test_combine_segments_empty_returns_none():
    assert combine_segments([]) is None


def test_combine_segments_builds_one_stop_structure():
    first, second = _connecting_pair(2 * HOUR)

    itinerary = combine_segments([first, second], rng=random.Random(7))

    assert len(itinerary.route) == 2
    assert itinerary.stops == 1
    assert len(itinerary.layovers) == 1
    layover = itinerary.layovers[0]
    assert layover.airport == first.destination == second.origin
    assert layover.duration_seconds == 2 * HOUR
    assert layover.arrival_time_utc == first.arrival_time_utc
    assert layover.departure_time_utc == second.departure_time_utc
    assert itinerary.total_duration_seconds == second.arrival_time_utc - first.departure_time_utc


def test_combine_segments_direct_has_no_layovers(make_segment):
    itinerary = combine_segments([make_segment("LAX", "JFK", 0, 5)])

    assert itinerary.stops == 0
    assert itinerary.layovers is None
    assert itinerary.total_duration_seconds == 5 * HOUR


def test_combine_segments_discards_invalid_connection():
    first, second = _connecting_pair(30 * 60)

    assert combine_segments([first, second]) is None


def test_combine_segments_exact_price_with_fixed_random(make_segment, fixed_random):
    first, second = _connecting_pair(2 * HOUR)

    itinerary = combine_segments([first, second], rng=fixed_random(0.0))

    # (150 + 16 * 30) + (150 + 14 * 30) + one connection fee
    assert itinerary.price == 1250


def test_direct_one_way_price_range(make_segment):
    segment = make_segment("LAX", "JFK", 0, 5)
    rng = random.Random(42)

    for _ in range(200):
        itinerary = combine_segments([segment], "one-way", rng)
        assert 300 <= itinerary.price < 400


def test_direct_round_trip_price_range(make_segment):
    segment = make_segment("LAX", "JFK", 0, 5)
    rng = random.Random(1234)

    for _ in range(200):
        itinerary = combine_segments([segment], "round-trip", rng)
        assert itinerary.trip_type == "round-trip"
        assert 300 * 1.85 <= itinerary.price < 400 * 1.85 + 100


def test_round_trip_price_with_fixed_random(make_segment, fixed_random):
    segment = make_segment("LAX", "JFK", 0, 5)

    assert estimate_price([segment], 0, "one-way", fixed_random(0.5)) == 350
    assert estimate_price([segment], 0, "round-trip", fixed_random(0.5)) == 697


def test_booking_link_lists_every_leg():
    first, second = _connecting_pair(2 * HOUR)

    link = build_booking_link([first, second])

    assert link.startswith("https://")
    assert link.endswith("LAX-DXB+DXB-JFK")
