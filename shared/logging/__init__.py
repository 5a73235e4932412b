"""
Logging Module
==============

Structured logging using structlog with JSON output for production
and console output for development.

Usage:
    from shared.logging import get_logger, setup_logging

    # Setup at application start
    setup_logging()

    # Get logger for a module
    logger = get_logger(__name__)

    # Log with context
    logger.info("evidence_uploaded", organization_id="org-1", object_name=key)
    logger.error("maturity_rescore_failed", error=str(e), assessment_id=aid)
"""

from shared.logging.logger import bind_context, clear_context, get_logger, setup_logging


__all__ = [
    "bind_context",
    "clear_context",
    "get_logger",
    "setup_logging",
]
