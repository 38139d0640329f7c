import fakeredis
import pytest

from app.models.schemas import FlightSegment

HOUR = 3600
# 2026-01-01T00:00:00Z
BASE_TIME = 1_767_225_600


class FixedRandom:
    """Random source that always draws the same value."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


class FakeScheduleProvider:
    def __init__(self, schedules=None, errors=None):
        self.schedules = schedules or {}
        self.errors = errors or {}
        self.calls = []

    async def fetch_departures(self, airport, date=None):
        self.calls.append((airport, date))
        if airport in self.errors:
            raise self.errors[airport]
        return list(self.schedules.get(airport, []))


def _make_segment(
    origin,
    destination,
    depart_hours=0.0,
    duration_hours=2.0,
    airline="Test Air",
    flight_number=None,
):
    departure = BASE_TIME + int(depart_hours * HOUR)
    return FlightSegment(
        origin=origin,
        destination=destination,
        airline_name=airline,
        departure_time_utc=departure,
        arrival_time_utc=departure + int(duration_hours * HOUR),
        flight_number=flight_number,
    )


@pytest.fixture
def make_segment():
    return _make_segment


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def fake_provider():
    return FakeScheduleProvider


@pytest.fixture
def fake_redis():
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
