import argparse
import asyncio
import logging
from typing import Optional

from app.core.exceptions import ScheduleProviderError, UpstreamRateLimitedError
from app.services.client_manager import shutdown_client
from app.services.flight_service import build_search_results
from app.utils.format import format_currency, format_duration, format_time


def describe(itinerary) -> str:
    lines = [
        f"{format_currency(itinerary.price)} {itinerary.trip_type}, "
        f"{itinerary.stops} stop(s), {format_duration(itinerary.total_duration_seconds)}"
    ]
    for segment in itinerary.route:
        lines.append(
            f"  {segment.origin} {format_time(segment.departure_time_utc)} -> "
            f"{segment.destination} {format_time(segment.arrival_time_utc)}  "
            f"{segment.airline_name} {segment.flight_number or ''}".rstrip()
        )
    for layover in itinerary.layovers or []:
        lines.append(f"  layover at {layover.airport}: {format_duration(layover.duration_seconds)}")
    if itinerary.booking_link:
        lines.append(f"  book: {itinerary.booking_link}")
    return "\n".join(lines)


async def main(origin: str, destination: str, trip_type: str, date: Optional[str] = None) -> int:
    try:
        itinerary = await build_search_results(
            origin=origin, destination=destination, trip_type=trip_type, date=date
        )
    except ValueError as exc:
        print(f"Invalid search: {exc}")
        return 2
    except UpstreamRateLimitedError:
        print("Flight data service is busy. Please try again shortly.")
        return 3
    except ScheduleProviderError as exc:
        print(f"Flight data service is unavailable: {exc}")
        return 1
    finally:
        await shutdown_client()

    if itinerary is None:
        print("No flights found for this route.")
        return 1

    print(describe(itinerary))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Find the cheapest flight between two airports.")
    parser.add_argument("origin")
    parser.add_argument("destination")
    parser.add_argument("--trip-type", choices=["one-way", "round-trip"], default="one-way")
    parser.add_argument("--date", help="Departure date in YYYY-MM-DD format.")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    raise SystemExit(asyncio.run(main(args.origin, args.destination, args.trip_type, args.date)))
