"""
Assessment Event Notifier
=========================

Fire-and-forget sink for "assessment updated" events. Delivery is best
effort: the coordinator logs and drops any failure raised here.

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, Field
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from shared.config import Settings, settings
from shared.logging import get_logger


logger = get_logger(__name__)


class AssessmentEventType(str, Enum):
    """Outbound event types."""

    CONTROL_ASSESSMENT_UPDATED = "control_assessment.updated"
    MATURITY_ASSESSMENT_UPDATED = "maturity_assessment.updated"


class AssessmentEvent(BaseModel):
    """Event emitted after a ledger change."""

    event_type: AssessmentEventType
    organization_id: str
    subject_id: str = Field(..., description="Control assessment or maturity assessment ID")
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    data: dict[str, Any] = Field(default_factory=dict)


class Notifier(ABC):
    """Abstract event sink."""

    @abstractmethod
    async def notify(self, event: AssessmentEvent) -> None:
        """Deliver an event. May raise; callers treat failures as non-fatal."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        return None


class NullNotifier(Notifier):
    """Drops every event."""

    async def notify(self, event: AssessmentEvent) -> None:
        logger.debug("notification_skipped", event_type=event.event_type.value)


class WebhookNotifier(Notifier):
    """Posts events as JSON to a single webhook URL."""

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(settings.notifications.max_attempts),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            "notification_retry",
            attempt=retry_state.attempt_number,
            wait=retry_state.next_action.sleep,  # type: ignore[union-attr]
        ),
    )
    async def notify(self, event: AssessmentEvent) -> None:
        """Post the event. Connection failures are retried; HTTP error statuses are not."""
        response = await self._client.post(self._url, json=event.model_dump(mode="json"))
        response.raise_for_status()
        logger.info(
            "notification_sent",
            event_type=event.event_type.value,
            status_code=response.status_code,
        )

    async def close(self) -> None:
        await self._client.aclose()


def build_notifier(config: Settings) -> Notifier:
    """Build the notifier selected by configuration."""
    if config.notifications.webhook_url:
        logger.info("webhook_notifier_enabled")
        return WebhookNotifier(
            config.notifications.webhook_url,
            timeout=config.notifications.timeout_seconds,
        )
    return NullNotifier()
