"""Failure types shared by the geocoder, the OpenStates client and the gateway."""
from __future__ import annotations

from typing import Any


class CivicError(Exception):
    """Base class for lookup failures."""

    error_code = "CIVIC_ERROR"
    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(CivicError):
    """Raised for malformed postal codes or missing coordinates."""

    error_code = "INVALID_INPUT"
    http_status = 400


class NotFound(CivicError):
    """Raised when a ZIP has no places or a point has no jurisdiction."""

    error_code = "NOT_FOUND"
    http_status = 404


class InvalidUpstreamData(CivicError):
    """Raised when a successful response lacks a field we depend on."""

    error_code = "INVALID_UPSTREAM_DATA"
    http_status = 500


class ConfigurationError(CivicError):
    """Raised when the server is missing its OpenStates credential."""

    error_code = "CONFIG_ERROR"
    http_status = 500


class UpstreamError(CivicError):
    """Raised for a non-success response, a timeout or a transport failure.

    ``stage`` names the call that failed (``geocode``, ``events``,
    ``jurisdiction-lookup``, ``timeout`` ...). ``status`` is ``None`` when no
    response was received at all.
    """

    error_code = "UPSTREAM_ERROR"
    http_status = 502

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: Any = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body
        self.stage = stage


__all__ = [
    "CivicError",
    "ConfigurationError",
    "InvalidInput",
    "InvalidUpstreamData",
    "NotFound",
    "UpstreamError",
]
