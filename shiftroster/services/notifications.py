"""
Outbound notifications for substitution events.
Delivery is fire-and-forget: failures are logged, never raised.
"""

import logging
import httpx
from abc import ABC, abstractmethod
from typing import Optional

from shiftroster.core.config import settings


logger = logging.getLogger(__name__)


class BaseNotifier(ABC):
    """Abstract base for notification channels."""

    @abstractmethod
    def notify(self, event: str, recipient_ids: list[int], message: str) -> None:
        ...


class LoggingNotifier(BaseNotifier):
    """Used when no webhook is configured."""

    def notify(self, event: str, recipient_ids: list[int], message: str) -> None:
        logger.info(f"[{event}] -> {recipient_ids}: {message}")


class WebhookNotifier(BaseNotifier):
    """POSTs each event as JSON to a configured webhook."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url or settings.NOTIFICATION_WEBHOOK_URL
        if not self.url:
            raise ValueError("NOTIFICATION_WEBHOOK_URL not set")
        self.timeout = timeout if timeout is not None else settings.NOTIFICATION_TIMEOUT_SECONDS

    def notify(self, event: str, recipient_ids: list[int], message: str) -> None:
        payload = {"event": event, "recipients": recipient_ids, "message": message}
        response = httpx.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()


def notify_safely(notifier: Optional[BaseNotifier], event: str, recipient_ids: list[int], message: str) -> bool:
    """Deliver a notification; returns False if delivery failed."""
    if notifier is None:
        return True
    recipients = sorted({r for r in recipient_ids if r is not None})
    try:
        notifier.notify(event, recipients, message)
        return True
    except httpx.HTTPStatusError as e:
        logger.error(f"Notification webhook HTTP error for {event}: {e.response.status_code}")
    except Exception as e:
        logger.error(f"Notification failed for {event}: {e}")
    return False


def get_notifier() -> BaseNotifier:
    """Factory for the configured notification channel."""
    if settings.NOTIFICATION_WEBHOOK_URL:
        return WebhookNotifier()
    return LoggingNotifier()
