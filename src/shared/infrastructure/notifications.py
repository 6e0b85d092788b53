"""Notification dispatcher adapters.

- ``CeleryNotificationDispatcher``: enqueues delivery on the Celery broker.
- ``InMemoryNotificationDispatcher``: keeps published messages in memory
  (development shells and tests).

``get_dispatcher`` builds the adapter named by the
``NOTIFICATION_DISPATCHER`` setting.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, List

import structlog
from django.conf import settings
from django.utils.module_loading import import_string

from shared.domain.notifications import INotificationDispatcher

logger = structlog.get_logger(__name__)

DEFAULT_DISPATCHER = "shared.infrastructure.notifications.CeleryNotificationDispatcher"


@dataclass(frozen=True)
class PublishedNotification:
    recipient: str
    event: str
    payload: Dict[str, Any]


class InMemoryNotificationDispatcher(INotificationDispatcher):
    """Simple in-process dispatcher that records every message."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._published: List[PublishedNotification] = []

    def publish(self, recipient: str, event: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            self._published.append(PublishedNotification(recipient, event, payload))

    @property
    def published(self) -> List[PublishedNotification]:
        with self._lock:
            return list(self._published)

    def for_recipient(self, recipient: str) -> List[PublishedNotification]:
        return [n for n in self.published if n.recipient == recipient]

    def clear(self) -> None:
        with self._lock:
            self._published.clear()


class CeleryNotificationDispatcher(INotificationDispatcher):
    """Hands each message to the ``notifications.deliver`` Celery task."""

    def publish(self, recipient: str, event: str, payload: Dict[str, Any]) -> None:
        from modules.core.tasks import deliver_notification

        deliver_notification.delay(recipient, event, payload)
        logger.info("notification.enqueued", recipient=recipient, notification=event)


def get_dispatcher() -> INotificationDispatcher:
    """Instantiate the dispatcher configured in settings."""
    path = getattr(settings, "NOTIFICATION_DISPATCHER", DEFAULT_DISPATCHER)
    return import_string(path)()
