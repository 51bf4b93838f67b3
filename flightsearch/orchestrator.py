import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Awaitable, Callable, Optional

from flightsearch.config import (
    ENTITY_ID_SUFFIX,
    FALLBACK_DATE_SHIFT_DAYS,
    FLIGHT_SEARCH_PATH,
    Settings,
)
from flightsearch.errors import USER_MESSAGES, ErrorKind, FlightApiError
from flightsearch.models.flights import SearchResult, SearchStatus
from flightsearch.models.search import SearchParams
from flightsearch.normalizers.itineraries import normalize_search_payload
from flightsearch.observability import get_tracer
from flightsearch.transport import Transport

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


def to_entity_id(sky_id: str) -> str:
    """Coerce a three-letter code into the provider's entity form (NYC -> NYCA)."""
    value = sky_id.strip().upper()
    if len(value) == 3:
        return f"{value}{ENTITY_ID_SUFFIX}"
    return value


def fallback_variants(params: SearchParams, now: datetime) -> list[tuple[str, SearchParams]]:
    """Alternative parameter sets tried, in order, after an empty primary search."""
    entity_form = params.model_copy(
        update={
            "origin_entity_id": to_entity_id(params.origin_sky_id),
            "destination_entity_id": to_entity_id(params.destination_sky_id),
        }
    )
    code_only = params.model_copy(
        update={"origin_entity_id": None, "destination_entity_id": None}
    )

    shifted = params
    departure = datetime.combine(params.date, time.min)
    if departure - now < timedelta(days=1):
        new_date = (now + timedelta(days=FALLBACK_DATE_SHIFT_DAYS)).date()
        update = {"date": new_date}
        if params.return_date:
            update["return_date"] = params.return_date + (new_date - params.date)
        shifted = params.model_copy(update=update)

    return [
        ("entity_suffix", entity_form),
        ("code_only", code_only),
        ("shifted_date", shifted),
    ]


class SearchOrchestrator:
    """Drives a flight search: validation, retries on incomplete searches and fallbacks."""

    def __init__(
        self,
        transport: Transport,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.transport = transport
        self.settings = settings or Settings()
        self.sleep = sleep
        self.clock = clock

    def validate(self, params: SearchParams) -> None:
        if (
            not params.origin_sky_id.strip()
            or not params.destination_sky_id.strip()
            or params.date is None
        ):
            raise FlightApiError(
                "Missing required search parameters.", ErrorKind.INVALID_PARAMS, 400
            )
        if params.date < self.clock().date():
            raise FlightApiError(
                "Departure date cannot be in the past.", ErrorKind.INVALID_DATE, 400
            )
        if params.return_date and params.return_date < params.date:
            raise FlightApiError(
                "Return date must be on or after the departure date.",
                ErrorKind.INVALID_PARAMS,
                400,
            )

    async def _attempt(self, params: SearchParams) -> SearchResult:
        try:
            payload = await self.transport.get(FLIGHT_SEARCH_PATH, params.to_query())
        except FlightApiError:
            raise
        except Exception as e:
            logger.error(f"Unexpected transport failure: {e}", exc_info=True)
            raise FlightApiError(
                "Flight search failed. Please try again.", ErrorKind.SEARCH_ERROR
            ) from e
        return normalize_search_payload(payload)

    async def _backoff(self, attempt: int) -> None:
        delay = attempt * self.settings.backoff_seconds
        logger.info(f"Waiting {delay:.1f}s before search attempt {attempt + 1}")
        await self.sleep(delay)

    async def search(self, params: SearchParams) -> SearchResult:
        """
        Search flights, retrying incomplete searches and falling back to
        alternative parameters when the primary search finds nothing.

        Raises:
            FlightApiError: when no strategy produced a usable result.
        """
        with tracer.start_as_current_span("flight_search") as span:
            span.set_attribute("flight.origin", params.origin_sky_id)
            span.set_attribute("flight.destination", params.destination_sky_id)

            self.validate(params)
            logger.info(
                f"Searching flights {params.origin_sky_id} -> {params.destination_sky_id} on {params.date}"
            )

            result, primary_error = await self._search_primary(params)
            if result is not None:
                span.set_attribute("search.outcome", "succeeded")
                span.set_attribute("search.itineraries", len(result.itineraries))
                return result

            span.set_attribute("search.outcome", "fallback")
            return await self._search_fallback(params, primary_error)

    async def _search_primary(
        self, params: SearchParams
    ) -> tuple[Optional[SearchResult], Optional[FlightApiError]]:
        """Run the primary attempts.

        Returns the result when one has itineraries, otherwise None together
        with the last transport error, if the final outcome was an error.
        """
        max_attempts = self.settings.max_attempts
        last_error = None

        for attempt in range(1, max_attempts + 1):
            with tracer.start_as_current_span("search_attempt") as span:
                span.set_attribute("search.attempt", attempt)
                try:
                    result = await self._attempt(params)
                except FlightApiError as e:
                    span.set_attribute("error.type", e.kind.value)
                    logger.warning(f"Search attempt {attempt}/{max_attempts} failed: {e.message}")
                    last_error = e
                    result = None
                else:
                    last_error = None
                    span.set_attribute("search.status", result.status.value)
                    span.set_attribute("search.itineraries", len(result.itineraries))

            if result is None:
                if attempt < max_attempts:
                    await self._backoff(attempt)
                continue

            if result.status is SearchStatus.FAILED:
                logger.warning(f"Provider reported a failed search: {result.provider_message}")
                raise FlightApiError(
                    result.provider_message or USER_MESSAGES[ErrorKind.NO_FLIGHTS_FOUND],
                    ErrorKind.NO_FLIGHTS_FOUND,
                )

            if result.itineraries:
                logger.info(
                    f"Found {len(result.itineraries)} itineraries on attempt {attempt}"
                )
                return result, None

            if result.status is SearchStatus.INCOMPLETE:
                if attempt < max_attempts:
                    logger.info(f"Search still running after attempt {attempt}, retrying")
                    await self._backoff(attempt)
                    continue
                raise FlightApiError(
                    USER_MESSAGES[ErrorKind.SEARCH_INCOMPLETE],
                    ErrorKind.SEARCH_INCOMPLETE,
                    202,
                )

            logger.info("Primary search returned no itineraries")
            return None, None

        return None, last_error

    async def _search_fallback(
        self, params: SearchParams, primary_error: Optional[FlightApiError]
    ) -> SearchResult:
        for name, variant in fallback_variants(params, self.clock()):
            with tracer.start_as_current_span("search_fallback") as span:
                span.set_attribute("fallback.variant", name)
                logger.info(f"Trying fallback variant '{name}'")
                try:
                    result = await self._attempt(variant)
                except FlightApiError as e:
                    span.set_attribute("error.type", e.kind.value)
                    logger.warning(f"Fallback variant '{name}' failed: {e.message}")
                    continue

                span.set_attribute("search.itineraries", len(result.itineraries))
                if result.itineraries:
                    logger.info(f"Fallback variant '{name}' found {len(result.itineraries)} itineraries")
                    return result

        if primary_error is not None:
            raise primary_error

        raise FlightApiError(
            "No flights found for this route. Try different dates or nearby airports.",
            ErrorKind.NO_FLIGHTS_FOUND,
            404,
        )
