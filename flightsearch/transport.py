import asyncio
import logging
from typing import Any, Optional, Protocol

import requests

from flightsearch.config import Settings
from flightsearch.errors import ErrorKind, FlightApiError, classify_error

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Issues a GET against the flights API and returns the decoded JSON body.

    Implementations raise FlightApiError for every failure.
    """

    async def get(self, path: str, params: dict) -> Any: ...


def build_headers(settings: Settings) -> dict:
    return {
        "Accept": "application/json",
        "X-RapidAPI-Key": settings.rapidapi_key or "",
        "X-RapidAPI-Host": settings.rapidapi_host,
    }


class RequestsTransport:
    """Transport backed by a requests session, run off the event loop."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        if not settings.rapidapi_key:
            raise ValueError("RAPIDAPI_KEY environment variable is required")

        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers.update(build_headers(settings))

    def _get_sync(self, url: str, params: dict) -> Any:
        response = self.session.get(url, params=params, timeout=self.settings.timeout_seconds)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError:
            raise FlightApiError(
                "Flights API response was not valid JSON.",
                ErrorKind.INVALID_RESPONSE,
                response.status_code,
            )

    async def get(self, path: str, params: dict) -> Any:
        url = f"{self.settings.base_url}{path}"
        logger.info(f"GET {path}")
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(None, lambda: self._get_sync(url, params)),
                timeout=self.settings.timeout_seconds,
            )
        except FlightApiError:
            raise
        except (asyncio.TimeoutError, requests.RequestException) as e:
            error = classify_error(e)
            logger.error(f"Request to {path} failed: {error.kind.value} {error.message}")
            raise error from e

    def close(self) -> None:
        self.session.close()
