"""
Domain errors raised by the services.

Services raise these unchanged; the FastAPI handlers in ``lorehub.main``
translate them into HTTP responses.
"""

from typing import Any, Optional


class LoreHubError(Exception):
    """Base class for all domain errors."""

    code = "error"
    status_code = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __repr__(self):
        return f"<{type(self).__name__}(message={self.message!r})>"


class ValidationError(LoreHubError):
    """Malformed or semantically invalid input."""

    code = "validation_error"
    status_code = 422


class NotFoundError(LoreHubError):
    """A referenced id does not resolve (or is not visible to the caller)."""

    code = "not_found"
    status_code = 404


class ConflictError(LoreHubError):
    """A write would break a uniqueness invariant."""

    code = "conflict"
    status_code = 409


class StoreError(LoreHubError):
    """The underlying database failed. Opaque to callers."""

    code = "store_error"
    status_code = 503
