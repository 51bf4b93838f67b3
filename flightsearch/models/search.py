import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from flightsearch.config import (
    DEFAULT_CABIN_CLASS,
    DEFAULT_COUNTRY_CODE,
    DEFAULT_CURRENCY,
    DEFAULT_MARKET,
    DEFAULT_SORT_BY,
)

CabinClass = Literal["economy", "premium_economy", "business", "first"]
SortBy = Literal["price_low", "duration", "departure"]


class SearchParams(BaseModel):
    """Caller-supplied flight query.

    Identifiers and the date may be left empty here; the orchestrator rejects
    such queries with INVALID_PARAMS so callers get a classified error.
    """

    model_config = ConfigDict(frozen=True)

    origin_sky_id: str = Field("", description="Origin sky id / IATA code")
    destination_sky_id: str = Field("", description="Destination sky id / IATA code")
    origin_entity_id: Optional[str] = Field(None, description="Origin entity id refinement")
    destination_entity_id: Optional[str] = Field(
        None, description="Destination entity id refinement"
    )
    date: Optional[datetime.date] = Field(None, description="Departure date")
    return_date: Optional[datetime.date] = Field(None, description="Return date if round trip")
    cabin_class: CabinClass = DEFAULT_CABIN_CLASS
    adults: int = Field(1, ge=1, le=9)
    children: int = Field(0, ge=0, le=8)
    infants: int = Field(0, ge=0, le=8)
    sort_by: SortBy = DEFAULT_SORT_BY
    currency: str = DEFAULT_CURRENCY
    market: str = DEFAULT_MARKET
    country_code: str = DEFAULT_COUNTRY_CODE

    def to_query(self) -> dict:
        """Query-string parameters for the flight search endpoint."""
        query = {
            "originSkyId": self.origin_sky_id,
            "destinationSkyId": self.destination_sky_id,
            "originEntityId": self.origin_entity_id,
            "destinationEntityId": self.destination_entity_id,
            "date": self.date.isoformat() if self.date else None,
            "returnDate": self.return_date.isoformat() if self.return_date else None,
            "cabinClass": self.cabin_class,
            "adults": self.adults,
            "children": self.children,
            "infants": self.infants,
            "sortBy": self.sort_by,
            "currency": self.currency,
            "market": self.market,
            "countryCode": self.country_code,
        }
        return {key: value for key, value in query.items() if value is not None}
