from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

UNKNOWN = "Unknown"


class LegEndpoint(BaseModel):
    """Origin or destination of a single leg."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Airport identifier (usually IATA)")
    name: str = Field("", description="Airport name")
    city: str = Field("", description="City name")
    country: str = Field("", description="Country name")


class Leg(BaseModel):
    """One non-stop flight segment."""

    model_config = ConfigDict(frozen=True)

    id: str
    origin: LegEndpoint
    destination: LegEndpoint
    departure: str = Field(min_length=1, description="Departure timestamp as sent by the provider")
    arrival: str = Field(min_length=1, description="Arrival timestamp as sent by the provider")
    duration_minutes: int = Field(0, ge=0)
    airline_name: str = UNKNOWN
    airline_logo_url: str = ""
    airline_code: str = ""
    aircraft_name: str = UNKNOWN
    flight_number: str = ""


class ProvidingAgent(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = UNKNOWN
    is_airline: bool = False


class Itinerary(BaseModel):
    """A bookable combination of legs with a single price.

    Duration, stop count and the direct flag are always derived from the legs.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    legs: list[Leg] = Field(min_length=1, description="Legs in departure order")
    price_amount: float = Field(ge=0)
    price_currency: str = "USD"
    price_formatted: str = ""
    booking_deep_link: str = ""
    providing_agent: ProvidingAgent = Field(default_factory=ProvidingAgent)

    @computed_field
    @property
    def total_duration_minutes(self) -> int:
        return sum(leg.duration_minutes for leg in self.legs)

    @computed_field
    @property
    def stop_count(self) -> int:
        return len(self.legs) - 1

    @computed_field
    @property
    def is_direct(self) -> bool:
        return self.stop_count == 0


class FilterStats(BaseModel):
    """Ranges and distinct values used to build the filter widgets."""

    model_config = ConfigDict(frozen=True)

    duration_range: tuple[int, int] = (0, 0)
    price_range: tuple[float, float] = (0.0, 0.0)
    airlines: list[str] = Field(default_factory=list)
    stop_counts: list[int] = Field(default_factory=list)


class SearchStatus(str, Enum):
    SUCCESS = "success"
    INCOMPLETE = "incomplete"
    FAILED = "failed"


class SearchContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_results_before_filtering: int = Field(0, ge=0)
    search_id: str = ""


class SearchResult(BaseModel):
    """Normalized flight search response; returned even when empty."""

    model_config = ConfigDict(frozen=True)

    itineraries: list[Itinerary] = Field(default_factory=list)
    status: SearchStatus = SearchStatus.SUCCESS
    filter_stats: FilterStats = Field(default_factory=FilterStats)
    context: SearchContext = Field(default_factory=SearchContext)
    provider_message: str = Field("", description="Message sent along a provider failure")
