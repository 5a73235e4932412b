"""
Notifications Module
====================

Best-effort outbound events for assessment changes.
"""

from shared.notifications.notifier import (
    AssessmentEvent,
    AssessmentEventType,
    Notifier,
    NullNotifier,
    WebhookNotifier,
    build_notifier,
)


__all__ = [
    "AssessmentEvent",
    "AssessmentEventType",
    "Notifier",
    "NullNotifier",
    "WebhookNotifier",
    "build_notifier",
]
