import os
from datetime import date, datetime

import pytest

from flightsearch.config import Settings
from flightsearch.models.search import SearchParams

NOW = datetime(2026, 10, 16, 9, 0)


class FakeTransport:
    """Replays canned payloads (or raises canned errors) and records requests."""

    def __init__(self, responses=None, events=None):
        self.responses = list(responses or [])
        self.calls = []
        self.events = events

    async def get(self, path, params):
        self.calls.append((path, dict(params)))
        if self.events is not None:
            self.events.append("request")
        if not self.responses:
            raise AssertionError(f"Unexpected request to {path}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def fake_transport():
    """Factory for FakeTransport instances."""
    return FakeTransport


@pytest.fixture
def settings():
    return Settings(rapidapi_key="test-key", backoff_seconds=2.0)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def sleep_calls():
    return []


@pytest.fixture
def fake_sleep(sleep_calls):
    async def _sleep(delay):
        sleep_calls.append(delay)

    return _sleep


@pytest.fixture
def search_params():
    return SearchParams(
        origin_sky_id="LHR",
        destination_sky_id="CDG",
        origin_entity_id="95565050",
        destination_entity_id="95565041",
        date=date(2026, 11, 1),
    )


@pytest.fixture
def make_leg():
    """Factory for raw Sky Scrapper legs."""

    def _make_leg(
        origin="LHR",
        destination="CDG",
        departure="2026-11-01T08:30:00",
        arrival="2026-11-01T10:40:00",
        duration=70,
        airline="British Airways",
        **overrides,
    ):
        leg = {
            "id": f"{origin}-{destination}-{departure}",
            "origin": {
                "id": origin,
                "name": f"{origin} Airport",
                "displayCode": origin,
                "city": "London",
                "country": "United Kingdom",
            },
            "destination": {
                "id": destination,
                "name": f"{destination} Airport",
                "displayCode": destination,
                "city": "Paris",
                "country": "France",
            },
            "durationInMinutes": duration,
            "departure": departure,
            "arrival": arrival,
            "carriers": {
                "marketing": [
                    {
                        "id": -32090,
                        "logoUrl": "https://logos.skyscnr.com/images/airlines/favicon/BA.png",
                        "name": airline,
                        "alternateId": "BA",
                    }
                ]
            },
            "segments": [{"flightNumber": "304"}],
        }
        leg.update(overrides)
        return leg

    return _make_leg


@pytest.fixture
def make_itinerary(make_leg):
    """Factory for raw Sky Scrapper itineraries."""

    def _make_itinerary(itinerary_id="itin-1", price=129.5, legs=None, **overrides):
        price_info = {"raw": price}
        if isinstance(price, (int, float)):
            price_info["formatted"] = f"${price:.0f}"
        itinerary = {
            "id": itinerary_id,
            "price": price_info,
            "legs": legs if legs is not None else [make_leg()],
            "purchaseLinks": [
                {"url": "https://book.example.com/ba304", "providerId": "ba", "isAirline": True}
            ],
        }
        itinerary.update(overrides)
        return itinerary

    return _make_itinerary


@pytest.fixture
def make_payload():
    """Factory for raw flight search payloads."""

    def _make_payload(itineraries=(), status="complete", search_id="search-123"):
        return {
            "status": True,
            "data": {
                "context": {"status": status, "sessionId": "session-1"},
                "itineraries": list(itineraries),
            },
            "searchId": search_id,
        }

    return _make_payload


@pytest.fixture
def mock_rapidapi_env():
    """Mock RapidAPI key environment variable."""
    original_key = os.environ.get("RAPIDAPI_KEY")
    os.environ["RAPIDAPI_KEY"] = "test-api-key"
    yield
    if original_key:
        os.environ["RAPIDAPI_KEY"] = original_key
    else:
        os.environ.pop("RAPIDAPI_KEY", None)
