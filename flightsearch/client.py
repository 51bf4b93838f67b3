import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from flightsearch.config import AIRPORT_SEARCH_PATH, MIN_AIRPORT_QUERY_LENGTH, Settings
from flightsearch.errors import ErrorKind, FlightApiError
from flightsearch.models.airports import Airport
from flightsearch.models.flights import SearchResult
from flightsearch.models.search import SearchParams
from flightsearch.normalizers.airports import normalize_airports
from flightsearch.observability import get_tracer, setup_tracing
from flightsearch.orchestrator import SearchOrchestrator
from flightsearch.transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)
setup_tracing()
tracer = get_tracer(__name__)

POPULAR_DESTINATIONS_PATH = Path(__file__).parent / "data" / "popular_destinations.yaml"


def load_popular_destinations() -> list[Airport]:
    with open(POPULAR_DESTINATIONS_PATH, "r") as f:
        records = yaml.safe_load(f)
    return [Airport(**record) for record in records]


class FlightApiService:
    """Entry point used by the UI: airport lookup, flight search, suggestions."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[Transport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings or Settings.from_env()
        self.transport = transport or RequestsTransport(self.settings)
        self.orchestrator = SearchOrchestrator(
            self.transport, self.settings, sleep=sleep, clock=clock
        )

    async def search_airports(self, query: str) -> list[Airport]:
        """
        Look up airports matching free text.

        Args:
            query: At least two characters of an airport, city or code.

        Returns:
            Normalized airports; malformed provider records are skipped.
        """
        query = (query or "").strip()
        if len(query) < MIN_AIRPORT_QUERY_LENGTH:
            raise FlightApiError("Query too short", ErrorKind.INVALID_QUERY, 400)

        with tracer.start_as_current_span("airport_search") as span:
            span.set_attribute("airport.query", query)
            try:
                payload = await self.transport.get(AIRPORT_SEARCH_PATH, {"query": query})
            except FlightApiError:
                raise
            except Exception as e:
                logger.error(f"Airport search failed: {e}", exc_info=True)
                raise FlightApiError("Search failed", ErrorKind.SEARCH_ERROR) from e

            records = payload.get("data") if isinstance(payload, dict) else None
            if not isinstance(records, list):
                raise FlightApiError("Invalid response", ErrorKind.INVALID_RESPONSE)

            airports = normalize_airports(records)
            span.set_attribute("airport.results", len(airports))
            logger.info(f"Airport search '{query}' returned {len(airports)} of {len(records)} records")
            return airports

    async def search_flights(
        self, params: Union[SearchParams, Mapping[str, Any]]
    ) -> SearchResult:
        """Search flights; always returns a SearchResult or raises FlightApiError."""
        if not isinstance(params, SearchParams):
            try:
                params = SearchParams.model_validate(dict(params))
            except ValidationError as e:
                logger.warning(f"Invalid search parameters: {e}")
                raise FlightApiError(
                    "Invalid search parameters.", ErrorKind.INVALID_PARAMS, 400
                ) from e
        return await self.orchestrator.search(params)

    def get_popular_destinations(self) -> list[Airport]:
        return load_popular_destinations()

    async def validate_api_key(self) -> bool:
        """False only when the provider rejects the configured key."""
        try:
            await self.search_airports("test")
            return True
        except FlightApiError as e:
            return e.kind is not ErrorKind.UNAUTHORIZED

    async def health_check(self) -> dict:
        try:
            self.get_popular_destinations()
            status = "healthy"
        except (OSError, yaml.YAMLError, ValidationError) as e:
            logger.error(f"Health check failed: {e}")
            status = "unhealthy"
        return {"status": status, "timestamp": datetime.now().isoformat()}
