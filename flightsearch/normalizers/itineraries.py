import logging
import math
from typing import Any, Callable, Optional

from flightsearch.models.flights import (
    UNKNOWN,
    Itinerary,
    Leg,
    LegEndpoint,
    ProvidingAgent,
    SearchContext,
    SearchResult,
    SearchStatus,
)
from flightsearch.stats import aggregate

logger = logging.getLogger(__name__)

INCOMPLETE_STATUS = "incomplete"


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _first_dict(value: Any) -> dict:
    """First element of a list if it is a mapping, else an empty mapping."""
    if isinstance(value, list) and value:
        return _as_dict(value[0])
    return {}


def _text(value: Any, default: str = "") -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _minutes(value: Any) -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value) and value > 0:
        return int(value)
    return 0


# Itinerary list extractors, tried in order; the first non-empty list wins.
def _nested_itineraries(payload: dict) -> Optional[list]:
    itineraries = _as_dict(payload.get("data")).get("itineraries")
    return itineraries if isinstance(itineraries, list) else None


def _flat_itineraries(payload: dict) -> Optional[list]:
    itineraries = payload.get("itineraries")
    return itineraries if isinstance(itineraries, list) else None


def _generic_results(payload: dict) -> Optional[list]:
    results = payload.get("results")
    return results if isinstance(results, list) else None


ITINERARY_EXTRACTORS: tuple[Callable[[dict], Optional[list]], ...] = (
    _nested_itineraries,
    _flat_itineraries,
    _generic_results,
)


def extract_itineraries(payload: dict) -> list:
    for extractor in ITINERARY_EXTRACTORS:
        itineraries = extractor(payload)
        if itineraries:
            return itineraries
    return []


def extract_search_id(payload: dict) -> str:
    data = _as_dict(payload.get("data"))
    return _text(
        payload.get("searchId")
        or data.get("searchId")
        or _as_dict(data.get("context")).get("sessionId")
    )


def extract_status(payload: dict) -> SearchStatus:
    if payload.get("status") is False:
        return SearchStatus.FAILED
    for context in (
        _as_dict(_as_dict(payload.get("data")).get("context")),
        _as_dict(payload.get("context")),
    ):
        if context.get("status") == INCOMPLETE_STATUS:
            return SearchStatus.INCOMPLETE
    return SearchStatus.SUCCESS


def _normalize_endpoint(raw: Any) -> Optional[LegEndpoint]:
    raw = _as_dict(raw)
    endpoint_id = _text(raw.get("id")) or _text(raw.get("displayCode"))
    if not endpoint_id:
        return None
    return LegEndpoint(
        id=endpoint_id,
        name=_text(raw.get("name")),
        city=_text(raw.get("city")),
        country=_text(raw.get("country")),
    )


def normalize_leg(raw: Any) -> Optional[Leg]:
    """Normalize one raw leg; None when it lacks endpoints or timestamps."""
    raw = _as_dict(raw)
    origin = _normalize_endpoint(raw.get("origin"))
    destination = _normalize_endpoint(raw.get("destination"))
    departure = _text(raw.get("departure"))
    arrival = _text(raw.get("arrival"))
    if origin is None or destination is None or not departure or not arrival:
        return None

    carrier = _first_dict(_as_dict(raw.get("carriers")).get("marketing"))
    segment = _first_dict(raw.get("segments"))

    return Leg(
        id=_text(raw.get("id")) or f"{origin.id}-{destination.id}",
        origin=origin,
        destination=destination,
        departure=departure,
        arrival=arrival,
        duration_minutes=_minutes(raw.get("durationInMinutes")),
        airline_name=_text(carrier.get("name"), UNKNOWN),
        airline_logo_url=_text(carrier.get("logoUrl")),
        airline_code=_text(carrier.get("iata")) or _text(carrier.get("alternateId")),
        aircraft_name=_text(_as_dict(raw.get("operatingCarrier")).get("name"), UNKNOWN),
        flight_number=_text(raw.get("flightNumber")) or _text(segment.get("flightNumber")),
    )


def normalize_itinerary(raw: Any) -> Optional[Itinerary]:
    """Normalize one raw itinerary; None when it or any of its legs is invalid."""
    raw = _as_dict(raw)
    itinerary_id = _text(raw.get("id"))
    raw_legs = raw.get("legs")
    price = _as_dict(raw.get("price"))
    amount = price.get("raw")

    if not itinerary_id or not isinstance(raw_legs, list) or not raw_legs:
        return None
    if not isinstance(amount, (int, float)) or isinstance(amount, bool) or not math.isfinite(amount):
        return None

    legs = []
    for raw_leg in raw_legs:
        leg = normalize_leg(raw_leg)
        if leg is None:
            logger.debug(f"Dropping itinerary {itinerary_id}: invalid leg")
            return None
        legs.append(leg)

    currency = _text(price.get("currency"), "USD")
    purchase_link = _first_dict(raw.get("purchaseLinks"))

    return Itinerary(
        id=itinerary_id,
        legs=legs,
        price_amount=max(float(amount), 0.0),
        price_currency=currency,
        price_formatted=_text(price.get("formatted")) or f"{amount} {currency}",
        booking_deep_link=_text(purchase_link.get("url")),
        providing_agent=ProvidingAgent(
            name=_text(purchase_link.get("providerId"), UNKNOWN),
            is_airline=purchase_link.get("isAirline") is True,
        ),
    )


def normalize_search_payload(payload: Any) -> SearchResult:
    """Normalize a raw flight search payload into a SearchResult.

    Never raises for malformed data: bad itineraries are dropped and an
    unusable payload yields an empty, well-formed result.
    """
    if not isinstance(payload, dict):
        logger.warning("Flight search payload is not an object")
        return SearchResult()

    search_id = extract_search_id(payload)
    status = extract_status(payload)
    if status is SearchStatus.FAILED:
        return SearchResult(
            status=status,
            context=SearchContext(search_id=search_id),
            provider_message=_text(payload.get("message")),
        )

    raw_itineraries = extract_itineraries(payload)
    normalized = []
    for raw in raw_itineraries:
        itinerary = normalize_itinerary(raw)
        if itinerary is not None:
            normalized.append(itinerary)

    dropped = len(raw_itineraries) - len(normalized)
    if dropped:
        logger.info(f"Dropped {dropped} malformed itineraries of {len(raw_itineraries)}")

    valid = [i for i in normalized if i.total_duration_minutes > 0 and i.price_amount > 0]

    return SearchResult(
        itineraries=valid,
        status=status,
        filter_stats=aggregate(valid),
        context=SearchContext(
            total_results_before_filtering=len(normalized),
            search_id=search_id,
        ),
    )
