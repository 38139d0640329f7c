"""Pick and order the hub airports worth trying for a one-stop connection."""

from typing import Iterable, List

from app.core.constants import (
    ASIAN_HUBS,
    EUROPEAN_HUBS,
    HUB_AIRPORTS,
    MAJOR_HUBS,
    MIDDLE_EAST_HUBS,
    US_HUBS,
)


def get_relevant_hubs(origin: str, destination: str) -> List[str]:
    return [hub for hub in HUB_AIRPORTS if hub not in (origin, destination)]


def calculate_hub_priority(origin: str, hub: str, destination: str) -> int:
    """Score a hub for the origin/destination pair.

    The geography is approximated from airport code prefixes rather than real
    coordinates: a European hub gets a boost when either endpoint code starts
    with ``L`` or ``E``. The US, Asian and Middle East groupings are recognised
    but carry no weight yet.
    """

    score = 10 if hub in MAJOR_HUBS else 5

    region = _hub_region(hub)
    if region == "europe":
        if any(code.startswith(("L", "E")) for code in (origin, destination)):
            score += 5

    return score


def prioritize_hubs(origin: str, destination: str, hubs: Iterable[str]) -> List[str]:
    # sorted() is stable, so equal scores keep their input order.
    return sorted(
        hubs,
        key=lambda hub: calculate_hub_priority(origin, hub, destination),
        reverse=True,
    )


def _hub_region(hub: str) -> str:
    if hub in EUROPEAN_HUBS:
        return "europe"
    if hub in US_HUBS:
        return "us"
    if hub in ASIAN_HUBS:
        return "asia"
    if hub in MIDDLE_EAST_HUBS:
        return "middle_east"
    return "other"
