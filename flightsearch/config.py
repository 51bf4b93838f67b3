import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# API configuration
RAPIDAPI_HOST = "sky-scrapper.p.rapidapi.com"
API_BASE_URL = f"https://{RAPIDAPI_HOST}"
AIRPORT_SEARCH_PATH = "/api/v1/flights/searchAirport"
FLIGHT_SEARCH_PATH = "/api/v2/flights/searchFlights"
API_TIMEOUT = 30.0

# Retry policy
MAX_SEARCH_ATTEMPTS = 3
BACKOFF_SECONDS = 2.0

# Query defaults
DEFAULT_CABIN_CLASS = "economy"
DEFAULT_SORT_BY = "price_low"
DEFAULT_CURRENCY = "USD"
DEFAULT_MARKET = "US"
DEFAULT_COUNTRY_CODE = "US"

# Fallback search
ENTITY_ID_SUFFIX = "A"
FALLBACK_DATE_SHIFT_DAYS = 8

MIN_AIRPORT_QUERY_LENGTH = 2


class Settings(BaseModel):
    """Runtime configuration for the Sky Scrapper client."""

    rapidapi_key: Optional[str] = Field(None, description="RapidAPI key")
    rapidapi_host: str = Field(RAPIDAPI_HOST, description="RapidAPI host header")
    base_url: str = Field(API_BASE_URL, description="Base URL of the flights API")
    timeout_seconds: float = Field(API_TIMEOUT, gt=0, description="Per-request timeout")
    max_attempts: int = Field(
        MAX_SEARCH_ATTEMPTS, ge=1, description="Primary search attempts"
    )
    backoff_seconds: float = Field(
        BACKOFF_SECONDS,
        ge=0,
        description="Backoff step; attempt n waits n * backoff_seconds",
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment (and a .env file if present)."""
        load_dotenv()

        values = {
            "rapidapi_key": os.getenv("RAPIDAPI_KEY"),
            "rapidapi_host": os.getenv("RAPIDAPI_HOST"),
            "base_url": os.getenv("FLIGHTSEARCH_BASE_URL"),
            "timeout_seconds": os.getenv("FLIGHTSEARCH_TIMEOUT_SECONDS"),
            "max_attempts": os.getenv("FLIGHTSEARCH_MAX_ATTEMPTS"),
            "backoff_seconds": os.getenv("FLIGHTSEARCH_BACKOFF_SECONDS"),
        }
        return cls(**{key: value for key, value in values.items() if value})
