import asyncio
import logging
from enum import Enum
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Closed set of failure kinds reported by the client."""

    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMIT = "RATE_LIMIT"
    SERVER_ERROR = "SERVER_ERROR"
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    INVALID_QUERY = "INVALID_QUERY"
    INVALID_PARAMS = "INVALID_PARAMS"
    INVALID_DATE = "INVALID_DATE"
    NO_FLIGHTS_FOUND = "NO_FLIGHTS_FOUND"
    SEARCH_INCOMPLETE = "SEARCH_INCOMPLETE"
    SEARCH_ERROR = "SEARCH_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"


class FlightApiError(Exception):
    def __init__(self, message: str, kind: ErrorKind, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status = status

    def __repr__(self) -> str:
        return f"FlightApiError(kind={self.kind.value}, status={self.status}, message={self.message!r})"


STATUS_ERRORS: dict[int, tuple[ErrorKind, str]] = {
    401: (ErrorKind.UNAUTHORIZED, "Invalid API key - please check your RAPIDAPI_KEY"),
    403: (ErrorKind.FORBIDDEN, "API access forbidden - check your subscription"),
    429: (ErrorKind.RATE_LIMIT, "Rate limit exceeded - wait before retrying"),
    500: (ErrorKind.SERVER_ERROR, "Server error - try again later"),
}

USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NO_FLIGHTS_FOUND: "No flights found. Try different dates or nearby airports.",
    ErrorKind.SEARCH_INCOMPLETE: (
        "Search timed out. The route might have limited options - try different dates."
    ),
    ErrorKind.INVALID_DATE: "Please select a valid departure date.",
    ErrorKind.INVALID_PARAMS: "Please fill in all required fields.",
    ErrorKind.INVALID_QUERY: "Please type at least two characters to search airports.",
    ErrorKind.UNAUTHORIZED: "Service temporarily unavailable. Please try again.",
    ErrorKind.FORBIDDEN: "Service temporarily unavailable. Please try again.",
    ErrorKind.RATE_LIMIT: "Too many searches. Please wait a moment.",
    ErrorKind.NETWORK_ERROR: "Connection problem. Check your internet and retry.",
}


def _provider_message(response: requests.Response) -> Optional[str]:
    try:
        details = response.json()
    except ValueError:
        return None
    if isinstance(details, dict):
        message = details.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


def classify_error(error: BaseException) -> FlightApiError:
    """Map a failed HTTP exchange onto a FlightApiError.

    Never raises; the caller decides whether to raise the returned error.
    """
    if isinstance(error, FlightApiError):
        return error

    response = getattr(error, "response", None)
    if isinstance(response, requests.Response):
        status = response.status_code
        logger.warning(f"API error response: status={status}")
        if status in STATUS_ERRORS:
            kind, message = STATUS_ERRORS[status]
            return FlightApiError(message, kind, status)
        message = _provider_message(response) or f"API error: {status}"
        return FlightApiError(message, ErrorKind.API_ERROR, status)

    request_sent = getattr(error, "request", None) is not None
    if request_sent or isinstance(
        error,
        (
            asyncio.TimeoutError,
            requests.exceptions.ConnectionError,
            requests.exceptions.Timeout,
        ),
    ):
        return FlightApiError(
            f"Network error: {str(error) or 'request timed out'}. Check your internet connection.",
            ErrorKind.NETWORK_ERROR,
        )

    return FlightApiError(f"Unexpected error: {error}", ErrorKind.UNKNOWN_ERROR)


def get_error_message(error: FlightApiError) -> str:
    """Human-readable, action-oriented message for an error."""
    return USER_MESSAGES.get(error.kind, f"Search failed: {error.message}")
