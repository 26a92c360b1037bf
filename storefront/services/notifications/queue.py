"""
Per-session notification queue.

Holds the toasts the presentation layer has not shown yet. Oldest
entries are dropped once the queue is full; nothing is acknowledged.
"""

import logging
from collections import deque

from storefront.services.notifications.base import Notification, NotificationVariant

logger = logging.getLogger(__name__)


class NotificationQueue:
    """Bounded FIFO of pending notifications."""

    def __init__(self, maxlen: int = 20):
        self._pending: deque[Notification] = deque(maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._pending)

    def push(
        self,
        title: str,
        description: str,
        variant: NotificationVariant = NotificationVariant.DEFAULT,
    ) -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self._pending.append(notification)
        logger.info(f"Notification [{variant.value}] {title}: {description}")
        return notification

    def peek(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        """Return and forget all pending notifications."""
        pending = list(self._pending)
        self._pending.clear()
        return pending
