import logging
from collections.abc import Mapping, Sequence
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)


def _candidate_price(candidate: Any) -> Optional[float]:
    """Price of a well-formed candidate; None when price or route is missing."""

    if isinstance(candidate, Mapping):
        price = candidate.get("price")
        route = candidate.get("route")
    else:
        price = getattr(candidate, "price", None)
        route = getattr(candidate, "route", None)

    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return None
    if isinstance(route, (str, bytes)) or not isinstance(route, Sequence) or not route:
        return None

    return price


def find_cheapest(candidates: Optional[Iterable[Any]]) -> Optional[Any]:
    """Return the lowest priced candidate; the earliest one wins a tie.

    Candidates are ``Itinerary`` instances or plain mappings with ``price`` and
    ``route``. The winner is returned as given, never copied or modified.
    """

    if not candidates:
        return None

    cheapest = None
    cheapest_price = None
    skipped = 0
    for candidate in candidates:
        price = _candidate_price(candidate)
        if price is None:
            skipped += 1
            continue

        if cheapest_price is None or price < cheapest_price:
            cheapest = candidate
            cheapest_price = price

    if skipped:
        logger.debug("Skipped %s malformed itinerary candidates.", skipped)

    return cheapest
