from typing import Sequence

from flightsearch.models.flights import UNKNOWN, FilterStats, Itinerary


def _value_range(values: list) -> tuple:
    positive = [value for value in values if value > 0]
    if not positive:
        return (0, 0)
    return (min(positive), max(positive))


def aggregate(itineraries: Sequence[Itinerary]) -> FilterStats:
    """Derive filter ranges and distinct values from normalized itineraries."""
    if not itineraries:
        return FilterStats()

    airlines: dict[str, None] = {}
    stop_counts: dict[int, None] = {}
    for itinerary in itineraries:
        for leg in itinerary.legs:
            if leg.airline_name and leg.airline_name != UNKNOWN:
                airlines.setdefault(leg.airline_name)
        stop_counts.setdefault(itinerary.stop_count)

    return FilterStats(
        duration_range=_value_range([i.total_duration_minutes for i in itineraries]),
        price_range=_value_range([i.price_amount for i in itineraries]),
        airlines=list(airlines),
        stop_counts=list(stop_counts),
    )
