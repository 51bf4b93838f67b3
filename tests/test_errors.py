import asyncio
from unittest.mock import Mock

import pytest
import requests

from flightsearch.errors import ErrorKind, FlightApiError, classify_error, get_error_message


def make_response(status_code: int, body: bytes = b"{}") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body
    response.url = "https://sky-scrapper.p.rapidapi.com/api/v2/flights/searchFlights"
    return response


def http_error(status_code: int, body: bytes = b"{}") -> requests.HTTPError:
    return requests.HTTPError(f"{status_code} error", response=make_response(status_code, body))


class TestClassifyError:
    """Test suite for the error classifier."""

    @pytest.mark.parametrize(
        "status_code,kind",
        [
            (401, ErrorKind.UNAUTHORIZED),
            (403, ErrorKind.FORBIDDEN),
            (429, ErrorKind.RATE_LIMIT),
            (500, ErrorKind.SERVER_ERROR),
        ],
    )
    def test_fixed_status_mapping(self, status_code, kind):
        """Test statuses with a fixed kind and message."""
        error = classify_error(http_error(status_code, b'{"message": "ignored"}'))
        assert error.kind is kind
        assert error.status == status_code
        assert error.message != "ignored"

    def test_other_status_uses_provider_message(self):
        """Test that the provider message is carried for other statuses."""
        error = classify_error(http_error(404, b'{"message": "Endpoint not found"}'))
        assert error.kind is ErrorKind.API_ERROR
        assert error.status == 404
        assert error.message == "Endpoint not found"

    def test_other_status_without_message(self):
        """Test the generated message when the body has none."""
        error = classify_error(http_error(502, b"<html>Bad gateway</html>"))
        assert error.kind is ErrorKind.API_ERROR
        assert error.message == "API error: 502"

    def test_connection_error(self):
        """Test that a request without response is a network error."""
        error = classify_error(requests.ConnectionError("Connection refused", request=Mock()))
        assert error.kind is ErrorKind.NETWORK_ERROR
        assert error.status is None
        assert "Connection refused" in error.message

    def test_request_timeout(self):
        """Test that transport timeouts are network errors."""
        assert classify_error(requests.Timeout("read timed out")).kind is ErrorKind.NETWORK_ERROR

    def test_asyncio_timeout(self):
        """Test that an asyncio timeout is a network error."""
        error = classify_error(asyncio.TimeoutError())
        assert error.kind is ErrorKind.NETWORK_ERROR
        assert "request timed out" in error.message

    def test_request_not_constructed(self):
        """Test that failures before sending are unknown errors."""
        error = classify_error(requests.exceptions.MissingSchema("No scheme supplied"))
        assert error.kind is ErrorKind.UNKNOWN_ERROR
        assert error.message.startswith("Unexpected error")

    def test_arbitrary_exception(self):
        """Test that anything else is an unknown error."""
        assert classify_error(ValueError("bad")).kind is ErrorKind.UNKNOWN_ERROR

    def test_classified_error_passes_through(self):
        """Test that an already classified error is returned unchanged."""
        original = FlightApiError("Query too short", ErrorKind.INVALID_QUERY, 400)
        assert classify_error(original) is original


class TestGetErrorMessage:
    """Test suite for user-facing messages."""

    def test_incomplete_suggests_dates(self):
        """Test that an incomplete search suggests different dates."""
        error = FlightApiError("timeout", ErrorKind.SEARCH_INCOMPLETE, 202)
        assert "different dates" in get_error_message(error)

    @pytest.mark.parametrize(
        "kind",
        [
            ErrorKind.NO_FLIGHTS_FOUND,
            ErrorKind.INVALID_DATE,
            ErrorKind.INVALID_PARAMS,
            ErrorKind.RATE_LIMIT,
            ErrorKind.NETWORK_ERROR,
            ErrorKind.UNAUTHORIZED,
        ],
    )
    def test_mapped_kinds(self, kind):
        """Test that mapped kinds do not echo the raw provider text."""
        message = get_error_message(FlightApiError("raw provider text", kind))
        assert "raw provider text" not in message

    def test_unmapped_kind_uses_template(self):
        """Test the generic fallback message."""
        error = FlightApiError("Endpoint not found", ErrorKind.API_ERROR, 404)
        assert get_error_message(error) == "Search failed: Endpoint not found"
