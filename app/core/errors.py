"""
Error taxonomy for the provider directory.

Every error carries a human-readable message plus optional structured
details, and maps to the HTTP status the API answers with.
"""

from typing import Any


class ProviderDirectoryError(Exception):
    """Base class for all domain errors raised by the services."""

    status_code = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(ProviderDirectoryError):
    """Provider or media item does not exist."""

    status_code = 404


class ConflictError(ProviderDirectoryError):
    """Duplicate media url on attach."""

    status_code = 409


class ValidationError(ProviderDirectoryError):
    """Malformed input, e.g. a non-boolean main flag or an unsupported upload."""

    status_code = 422


class StorageError(ProviderDirectoryError):
    """
    Object store call failed.

    Non-fatal inside a purge (counted, not raised). Fatal only for a single
    fetch, where the export sequencer turns it into a per-item notification.
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, details=details)
        self.url = url


class PersistenceError(ProviderDirectoryError):
    """Record store unavailable. Nothing from the current operation is committed."""

    status_code = 503
