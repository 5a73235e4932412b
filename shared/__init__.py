"""
BASTION Shared Library
======================

Common utilities shared by the Bastion compliance services.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - auth: JWT caller identity
    - database: Async SQLAlchemy session management
    - storage: Evidence object store (S3, GCS, disabled)
    - notifications: Best-effort assessment events
    - models: Shared Pydantic envelopes
    - exceptions: Error taxonomy with stable error codes

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "Bastion Team"

from shared.config import settings
from shared.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
