from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from app.core.constants import MAX_LAYOVER_SECONDS, MIN_LAYOVER_SECONDS

IATA_PATTERN = r"^[A-Z]{3}$"

TripType = Literal["one-way", "round-trip"]
ErrorCode = Literal[
    "INVALID_INPUT", "NO_RESULTS", "RATE_LIMITED", "UPSTREAM_ERROR", "INTERNAL_ERROR"
]


class HealthResponse(BaseModel):
    status: str = Field(default="ok", description="Service status indicator")


class FlightSegment(BaseModel):
    """One non-stop flight leg as reported by the schedule provider."""

    model_config = ConfigDict(frozen=True)

    origin: str = Field(..., pattern=IATA_PATTERN)
    destination: str = Field(..., pattern=IATA_PATTERN)
    airline_name: str
    departure_time_utc: int
    arrival_time_utc: int
    flight_number: Optional[str] = None
    duration_seconds: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _derive_duration(cls, data):
        if isinstance(data, dict) and data.get("duration_seconds") is None:
            departure = data.get("departure_time_utc")
            arrival = data.get("arrival_time_utc")
            if isinstance(departure, int) and isinstance(arrival, int):
                data = {**data, "duration_seconds": arrival - departure}
        return data

    @model_validator(mode="after")
    def _check_times(self) -> "FlightSegment":
        if self.arrival_time_utc <= self.departure_time_utc:
            raise ValueError("Segment must arrive after it departs.")
        return self


class Layover(BaseModel):
    model_config = ConfigDict(frozen=True)

    airport: str = Field(..., pattern=IATA_PATTERN)
    arrival_time_utc: int
    departure_time_utc: int
    duration_seconds: int


class ConnectionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    layover_seconds: Optional[int] = None
    reason: Optional[str] = None


class Itinerary(BaseModel):
    """A priced journey of one or more connected segments."""

    model_config = ConfigDict(frozen=True)

    price: float = Field(..., ge=0)
    route: List[FlightSegment] = Field(..., min_length=1)
    layovers: Optional[List[Layover]] = None
    trip_type: TripType = "one-way"
    booking_link: Optional[str] = None

    @computed_field
    @property
    def stops(self) -> int:
        return len(self.route) - 1

    @computed_field
    @property
    def total_duration_seconds(self) -> int:
        return self.route[-1].arrival_time_utc - self.route[0].departure_time_utc

    @model_validator(mode="after")
    def _check_connections(self) -> "Itinerary":
        expected_layovers = len(self.route) - 1
        if expected_layovers == 0:
            if self.layovers:
                raise ValueError("A direct itinerary cannot have layovers.")
            return self

        if self.layovers is None or len(self.layovers) != expected_layovers:
            raise ValueError(
                f"Expected {expected_layovers} layovers for {len(self.route)} segments."
            )

        for current, following in zip(self.route, self.route[1:]):
            if current.destination != following.origin:
                raise ValueError(
                    f"Segment arriving at {current.destination} cannot connect to "
                    f"a segment departing {following.origin}."
                )
            gap = following.departure_time_utc - current.arrival_time_utc
            if not MIN_LAYOVER_SECONDS <= gap <= MAX_LAYOVER_SECONDS:
                raise ValueError(f"Layover of {gap}s at {current.destination} is out of bounds.")

        return self


class SearchResponse(BaseModel):
    status: Literal["ok"] = "ok"
    itinerary: Itinerary
    cached: bool = False


class ErrorDetail(BaseModel):
    status: Literal["error"] = "error"
    code: ErrorCode
    message: str
