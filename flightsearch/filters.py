from typing import Sequence

from pydantic import BaseModel, Field

from flightsearch.models.flights import Itinerary
from flightsearch.models.search import SortBy


class ResultFilters(BaseModel):
    """User-selected filters; empty lists mean no constraint."""

    price_range: tuple[float, float] = (0, 10000)
    duration_range: tuple[int, int] = (0, 1440)
    airlines: list[str] = Field(default_factory=list)
    stop_counts: list[int] = Field(default_factory=list)


def _matches(itinerary: Itinerary, filters: ResultFilters) -> bool:
    min_price, max_price = filters.price_range
    if not min_price <= itinerary.price_amount <= max_price:
        return False

    min_duration, max_duration = filters.duration_range
    if not min_duration <= itinerary.total_duration_minutes <= max_duration:
        return False

    if filters.stop_counts and itinerary.stop_count not in filters.stop_counts:
        return False

    if filters.airlines:
        names = {leg.airline_name for leg in itinerary.legs}
        if names.isdisjoint(filters.airlines):
            return False

    return True


def apply_filters(itineraries: Sequence[Itinerary], filters: ResultFilters) -> list[Itinerary]:
    return [itinerary for itinerary in itineraries if _matches(itinerary, filters)]


def sort_itineraries(itineraries: Sequence[Itinerary], sort_by: SortBy) -> list[Itinerary]:
    if sort_by == "price_low":
        return sorted(itineraries, key=lambda i: i.price_amount)
    if sort_by == "duration":
        return sorted(itineraries, key=lambda i: i.total_duration_minutes)
    if sort_by == "departure":
        return sorted(itineraries, key=lambda i: i.legs[0].departure)
    return list(itineraries)


def format_duration(minutes: int) -> str:
    """Format minutes as '7h 45m' (or '2h' for whole hours)."""
    hours, mins = divmod(max(minutes, 0), 60)
    return f"{hours}h {mins}m" if mins else f"{hours}h"
