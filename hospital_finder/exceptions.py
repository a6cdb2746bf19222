"""Domain errors raised by the services and rendered by the API layer.

Every error carries the HTTP status it maps to and a short ``error`` label;
the exception handlers in ``hospital_finder.middleware.error_handlers``
turn them into ``{"error": ..., "message": ...}`` JSON bodies.
"""
from __future__ import annotations

from fastapi import status


class HospitalFinderError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal Server Error"

    def __init__(self, message: str, *, error: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error


class ValidationError(HospitalFinderError):
    """Missing or malformed required input."""
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation Error"


class NotFoundError(HospitalFinderError):
    """An id that does not resolve to a record."""
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not Found"


class ConflictError(HospitalFinderError):
    """Invalid state transition, e.g. confirming twice."""
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid Operation"


class CapacityError(HospitalFinderError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "No Beds Available"


class StateError(HospitalFinderError):
    """Operation precondition on the record's status is not met."""
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid Status"
