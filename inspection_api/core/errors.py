"""
Domain error taxonomy.

Services raise these; the API layer renders them with the standard error
envelope (see inspection_api.api.main). None of them is retried.
"""
from __future__ import annotations

from typing import Any, Optional


class InspectionAppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(InspectionAppError):
    """Input failed a domain constraint (reported per field where possible)."""

    status_code = 422
    error_type = "validation_error"


class NotFoundError(InspectionAppError):
    """Lookup by identifier failed."""

    status_code = 404
    error_type = "not_found"


class InspectionLockedError(InspectionAppError):
    """An edit was attempted on a completed (read-only) inspection."""

    status_code = 409
    error_type = "inspection_completed"


class GenerationFailure(InspectionAppError):
    """The generation service failed or returned unusable output."""

    status_code = 502
    error_type = "generation_failure"


class DeviceAccessError(InspectionAppError):
    """A capture device could not be acquired (permission denied or unavailable)."""

    status_code = 503
    error_type = "device_access_error"
