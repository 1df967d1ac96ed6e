from __future__ import annotations

from typing import Optional


class GeocoderError(Exception):
    """Base error for the geocode server."""


class ValidationError(GeocoderError):
    """Raised when user input is invalid."""


class RateLimitExceeded(GeocoderError):
    """Raised when the rate limiter refuses or abandons an admission."""

    LIMITED = "limited"
    QUEUE_FULL = "queue_full"
    RESET = "reset"
    DISPOSED = "disposed"

    _MESSAGES = {
        LIMITED: "Rate limit exceeded",
        QUEUE_FULL: "Rate limit queue is full",
        RESET: "Rate limiter was reset",
        DISPOSED: "Rate limiter was disposed",
    }

    def __init__(self, reason: str = LIMITED, message: Optional[str] = None) -> None:
        super().__init__(message or self._MESSAGES.get(reason, "Rate limit exceeded"))
        self.reason = reason


class ExternalServiceError(GeocoderError):
    """Raised when the upstream HTTP call fails (network, timeout, HTTP status)."""


class GeocodingError(GeocoderError):
    """Raised when the Geocoding API answers with a non-OK status."""

    def __init__(self, message: str, status: str) -> None:
        super().__init__(message)
        self.status = status


class ApiKeyError(GeocodingError):
    """Raised when the API key is rejected or its quota is exhausted."""


class InvalidRequestError(GeocodingError):
    """Raised when the Geocoding API rejects the request parameters."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "INVALID_REQUEST")
