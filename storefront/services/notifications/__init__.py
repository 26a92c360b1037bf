"""
Notification Service Factory

Returns Mock or Real notification service based on ENV_MODE.
"""

import logging
from functools import lru_cache

from storefront.core.config import get_settings
from storefront.services.notifications.base import (
    BaseNotificationService,
    Notification,
    NotificationResult,
    NotificationVariant,
)
from storefront.services.notifications.mock import MockNotificationService
from storefront.services.notifications.queue import NotificationQueue
from storefront.services.notifications.real import RealNotificationService

logger = logging.getLogger(__name__)


@lru_cache()
def get_notification_service() -> BaseNotificationService:
    """Get the configured notification service."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Notification Service: Using MockNotificationService (development mode)")
        return MockNotificationService(failure_rate=settings.notification_failure_rate)

    logger.info(
        f"Notification Service: Using RealNotificationService ({settings.env_mode.value} mode)"
    )
    return RealNotificationService()


def reset_notification_service() -> None:
    """Clear the cached service instance."""
    get_notification_service.cache_clear()


__all__ = [
    "get_notification_service",
    "reset_notification_service",
    "BaseNotificationService",
    "MockNotificationService",
    "RealNotificationService",
    "Notification",
    "NotificationQueue",
    "NotificationResult",
    "NotificationVariant",
]
