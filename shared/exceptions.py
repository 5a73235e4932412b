"""
Domain Exceptions
=================

Error taxonomy shared by the catalogue, ledger, evidence store and
coordinator. Every error carries a stable machine-readable code and the
HTTP status it maps to; the API layer renders them as ErrorResponse bodies.

Messages are safe to show to callers: they never contain bucket names,
SQL, or stack traces.

Version: 0.1.0
"""

from typing import Any

from fastapi import status


class AssessmentError(Exception):
    """Base class for all expected assessment engine errors."""

    error_code: str = "assessment_error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    retryable: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.error_code!r}, message={self.message!r})"


class NotFoundError(AssessmentError):
    """Unknown framework, control, practice, domain or assessment id."""

    error_code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(AssessmentError):
    """Cross-organization access attempt."""

    error_code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class ValidationError(AssessmentError):
    """Score out of range, missing field, malformed or disallowed file."""

    error_code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ConflictError(AssessmentError):
    """Uniqueness violation surfaced from a concurrent write."""

    error_code = "conflict"
    status_code = status.HTTP_409_CONFLICT
    retryable = True


class StorageUnavailableError(AssessmentError):
    """Evidence backend unreachable, timed out, or rejected the request."""

    error_code = "storage_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True


class StorageNotConfiguredError(StorageUnavailableError):
    """No evidence backend is configured for this deployment."""

    error_code = "storage_not_configured"
    retryable = False
