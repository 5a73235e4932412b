"""
Shared Models
=============

Pydantic envelopes shared by all routes.
"""

from shared.models.common import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ErrorResponse,
    HealthResponse,
    PaginatedResponse,
)


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "ErrorResponse",
    "HealthResponse",
    "PaginatedResponse",
]
