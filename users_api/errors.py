"""Errors surfaced to API clients as JSON ``{"error": ...}`` payloads."""

from __future__ import annotations

from typing import Dict

MISSING_FIELDS_MESSAGE = "Name and email are required"
ROUTE_NOT_FOUND_MESSAGE = "Route not found"
GENERIC_FAULT_MESSAGE = "Something went wrong!"


class ServiceError(Exception):
    """Base class for failures with a client-facing message."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> Dict[str, str]:
        return {"error": self.message}


class ValidationError(ServiceError):
    """Raised when a request breaks a business rule, e.g. a missing field."""

    status_code = 400


class RouteNotFound(ServiceError):
    status_code = 404

    def __init__(self, message: str = ROUTE_NOT_FOUND_MESSAGE) -> None:
        super().__init__(message)


__all__ = [
    "GENERIC_FAULT_MESSAGE",
    "MISSING_FIELDS_MESSAGE",
    "ROUTE_NOT_FOUND_MESSAGE",
    "RouteNotFound",
    "ServiceError",
    "ValidationError",
]
