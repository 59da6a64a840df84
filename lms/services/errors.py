"""Domain error taxonomy.

Services raise these; route handlers turn them into HTTP responses via
``lms.api.errors.http_error``.  Each class carries the status code it maps
to so the mapping lives in one place.  Extra keyword context (e.g.
``available_at``) is kept on ``context`` and rendered into the response
body.
"""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class NotFoundError(ServiceError):
    status_code = 404


class ForbiddenError(ServiceError):
    status_code = 403


class ConflictError(ServiceError):
    """Uniqueness violation: duplicate enrollment or duplicate test."""

    status_code = 409


class OutOfRangeError(ServiceError):
    status_code = 400


class InvalidStateError(ServiceError):
    status_code = 400


class ValidationError(ServiceError):
    """A required field is missing or malformed."""

    status_code = 400


class UpstreamError(ServiceError):
    """Payment gateway returned non-2xx or could not be reached.

    Carries the gateway's status when there is one; a failure with no
    gateway response is a plain 500.
    """

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None, **context: Any):
        super().__init__(message, **context)
        if status_code is not None:
            self.status_code = status_code


class GatewayTimeoutError(UpstreamError):
    status_code = 504


class ConfigurationError(ServiceError):
    status_code = 500
