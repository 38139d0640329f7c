"""Departure schedules from AeroDataBox (RapidAPI) or a deterministic mock."""

import datetime
import hashlib
import logging
import math
import random
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.constants import CITY_CODE_ALIASES, HUB_AIRPORTS
from app.core.exceptions import (
    ScheduleNotFoundError,
    ScheduleProviderError,
    UpstreamRateLimitedError,
)
from app.models.schemas import FlightSegment
from app.services.client_manager import acquire_client

logger = logging.getLogger(__name__)

DEPARTURES_PATH = "/flights/airports/iata/{airport}"

_STATIC_PARAMS = {
    "withLeg": "true",
    "direction": "Departure",
    "withCancelled": "false",
    "withCodeshared": "false",
    "withCargo": "false",
    "withPrivate": "false",
    "withLocation": "false",
}


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def parse_utc_timestamp(value: Optional[str]) -> Optional[int]:
    """Convert provider UTC strings such as ``2025-05-01 10:05Z`` to epoch seconds."""

    if not value:
        return None

    normalized = value.strip().replace("Z", "+00:00")

    try:
        parsed = datetime.datetime.fromisoformat(normalized)
    except ValueError:
        try:
            parsed = datetime.datetime.strptime(normalized, "%Y-%m-%d %H:%M%z")
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)

    return int(parsed.timestamp())


def schedule_window(
    date: Optional[str],
    now: datetime.datetime,
    window_minutes: Optional[int] = None,
) -> Tuple[int, int]:
    """Return (offsetMinutes, durationMinutes) for a departures query.

    With a date the window is centred on noon UTC of that day.
    """

    if window_minutes is None:
        window_minutes = settings.schedule_window_minutes

    if not date:
        return 0, window_minutes

    target = datetime.datetime.strptime(date, "%Y-%m-%d").replace(
        hour=12, tzinfo=datetime.timezone.utc
    )
    offset_minutes = math.floor((target - now).total_seconds() / 60)
    offset_minutes -= window_minutes // 2

    return offset_minutes, window_minutes


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _airport_code(side: Dict[str, Any]) -> Optional[str]:
    code = _as_dict(side.get("airport")).get("iata")
    return code.strip().upper() if isinstance(code, str) and code.strip() else None


def _scheduled_utc(side: Dict[str, Any]) -> Optional[int]:
    value = _as_dict(side.get("scheduledTime")).get("utc")
    return parse_utc_timestamp(value) if isinstance(value, str) else None


def parse_departure(raw: Dict[str, Any], airport: str) -> Optional[FlightSegment]:
    """Project one provider departure onto a segment; None when it cannot be used."""

    departure = _as_dict(raw.get("departure"))
    arrival = _as_dict(raw.get("arrival"))

    origin = _airport_code(departure) or airport.upper()
    destination = _airport_code(arrival)
    departure_time = _scheduled_utc(departure)
    arrival_time = _scheduled_utc(arrival)

    if not destination or departure_time is None or arrival_time is None:
        return None

    airline_name = _as_dict(raw.get("airline")).get("name")
    if not isinstance(airline_name, str) or not airline_name:
        airline_name = "Unknown airline"
    flight_number = raw.get("number")

    try:
        return FlightSegment(
            origin=origin,
            destination=destination,
            airline_name=airline_name,
            departure_time_utc=departure_time,
            arrival_time_utc=arrival_time,
            flight_number=flight_number if isinstance(flight_number, str) else None,
        )
    except ValidationError:
        return None


class AeroDataBoxScheduleProvider:
    """Fetch scheduled departures for an airport from AeroDataBox."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        now: Callable[[], datetime.datetime] = _utc_now,
    ):
        self._client = client
        self._now = now

    async def fetch_departures(
        self, airport: str, date: Optional[str] = None
    ) -> List[FlightSegment]:
        offset_minutes, duration_minutes = schedule_window(date, self._now())
        params = {
            "offsetMinutes": offset_minutes,
            "durationMinutes": duration_minutes,
            **_STATIC_PARAMS,
        }
        logger.info(
            "Fetching departures from %s (offsetMinutes=%s, durationMinutes=%s)",
            airport,
            offset_minutes,
            duration_minutes,
        )

        path = DEPARTURES_PATH.format(airport=airport)
        try:
            if self._client is not None:
                response = await self._client.get(path, params=params)
            else:
                async with acquire_client() as client:
                    response = await client.get(path, params=params)
        except httpx.RequestError as exc:
            raise ScheduleProviderError(
                f"Schedule request for {airport} failed: {exc}"
            ) from exc

        return self._parse_response(response, airport)

    def _parse_response(self, response: httpx.Response, airport: str) -> List[FlightSegment]:
        status = response.status_code
        if status == 429:
            raise UpstreamRateLimitedError(
                f"Schedule provider rate limited the request for {airport}."
            )
        if status in (204, 404):
            raise ScheduleNotFoundError(f"No schedule data for {airport}.")
        if status >= 400:
            raise ScheduleProviderError(
                f"Schedule provider responded with HTTP {status} for {airport}: {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ScheduleProviderError(
                f"Unable to parse schedule response for {airport}."
            ) from exc

        if not isinstance(payload, dict):
            raise ScheduleProviderError(f"Unexpected schedule payload for {airport}.")

        departures = payload.get("departures")
        if not isinstance(departures, list):
            departures = []
        segments = []
        for raw in departures:
            segment = parse_departure(raw, airport) if isinstance(raw, dict) else None
            if segment is None:
                logger.debug("Skipping unusable departure from %s: %s", airport, raw)
                continue
            segments.append(segment)

        logger.info(
            "Found %s departures from %s, %s usable", len(departures), airport, len(segments)
        )
        return segments


_MOCK_AIRLINES = (
    "Qantas",
    "Emirates",
    "Qatar Airways",
    "Singapore Airlines",
    "Lufthansa",
    "Delta Air Lines",
    "United Airlines",
    "Turkish Airlines",
)


class MockScheduleProvider:
    """Deterministic departures for development and as a rate-limit fallback.

    Results depend only on the airport, the date and the destination hint, so
    repeated searches see the same flights. Hubs always fly on to the hint;
    other airports only sometimes do, which leaves the hub fallback reachable.
    """

    def __init__(
        self,
        destination: Optional[str] = None,
        now: Callable[[], datetime.datetime] = _utc_now,
    ):
        self._destination = destination
        self._now = now

    async def fetch_departures(
        self, airport: str, date: Optional[str] = None
    ) -> List[FlightSegment]:
        day = date or self._now().strftime("%Y-%m-%d")
        seed_str = f"{airport}{day}{self._destination or ''}"
        seed = int(hashlib.md5(seed_str.encode()).hexdigest()[:8], 16)
        rng = random.Random(seed)

        noon = int(
            datetime.datetime.strptime(day, "%Y-%m-%d")
            .replace(hour=12, tzinfo=datetime.timezone.utc)
            .timestamp()
        )

        targets = [hub for hub in HUB_AIRPORTS if hub != airport]
        rng.shuffle(targets)
        targets = targets[: rng.randint(4, 8)]

        arrival_code = self._mock_arrival_code(self._destination) if self._destination else None
        if arrival_code and arrival_code != airport:
            if airport in HUB_AIRPORTS or rng.random() < 0.5:
                targets.extend([arrival_code] * rng.randint(1, 3))

        segments = []
        for index, target in enumerate(targets):
            # Five minute steps from 06:00 to 18:00 UTC the next day.
            departure = noon - 6 * 3600 + rng.randint(0, 30 * 12) * 300
            duration = rng.randint(60, 14 * 60) * 60
            airline = rng.choice(_MOCK_AIRLINES)
            segments.append(
                FlightSegment(
                    origin=airport,
                    destination=target,
                    airline_name=airline,
                    departure_time_utc=departure,
                    arrival_time_utc=departure + duration,
                    flight_number=f"{airline[:2].upper()} {100 + index * 7 + rng.randint(0, 6)}",
                )
            )

        segments.sort(key=lambda segment: segment.departure_time_utc)
        return segments

    @staticmethod
    def _mock_arrival_code(destination: str) -> str:
        members = CITY_CODE_ALIASES.get(destination)
        return sorted(members)[0] if members else destination


def get_schedule_provider(destination: Optional[str] = None):
    """Return the configured provider; the mock one when no RapidAPI key is set."""

    if settings.use_mock_provider:
        return MockScheduleProvider(destination=destination)
    return AeroDataBoxScheduleProvider()
