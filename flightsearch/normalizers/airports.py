import logging
import re
from typing import Any, Iterable, Optional

from flightsearch.models.airports import Airport

logger = logging.getLogger(__name__)

IATA_RE = re.compile(r"^[A-Z]{3}$")
LEADING_COMMA_RE = re.compile(r"^,\s*")


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _first_text(*values: Any) -> str:
    """Return the first non-empty string among values, stripped."""
    for value in values:
        # entity ids sometimes arrive as numbers
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def normalize_airport(raw: Any) -> Optional[Airport]:
    """Turn one raw airport record into an Airport, or None if malformed."""
    if not isinstance(raw, dict):
        return None

    presentation = _as_dict(raw.get("presentation"))
    navigation = _as_dict(raw.get("navigation"))
    flight_params = _as_dict(navigation.get("relevantFlightParams"))

    code = _first_text(
        raw.get("skyId"), flight_params.get("skyId"), raw.get("iata"), raw.get("code")
    )
    if not IATA_RE.match(code):
        return None

    name = _first_text(
        presentation.get("title"), navigation.get("localizedName"), raw.get("name")
    )
    name = LEADING_COMMA_RE.sub("", name).strip()
    if not name:
        return None

    city = _first_text(raw.get("city"), raw.get("cityName"))
    country = _first_text(raw.get("country"), raw.get("countryName"))

    subtitle = _first_text(presentation.get("subtitle"))
    if "," in subtitle:
        parts = [part.strip() for part in subtitle.split(",")]
        city = city or parts[0]
        country = country or parts[1]
    elif subtitle and not city and not country:
        city = subtitle

    return Airport(
        iata_code=code.upper(),
        display_name=name,
        city=city,
        country=country,
        provider_airport_id=_first_text(raw.get("skyId"), flight_params.get("skyId")) or None,
        provider_entity_id=_first_text(flight_params.get("entityId"), raw.get("entityId"))
        or None,
    )


def normalize_airports(records: Iterable[Any]) -> list[Airport]:
    """Normalize raw airport records, silently dropping malformed ones."""
    airports = []
    for record in records:
        airport = normalize_airport(record)
        if airport is None:
            logger.debug(f"Dropping malformed airport record: {record!r}")
            continue
        airports.append(airport)
    return airports
