"""
Notification Service Abstract Base Class

Defines the interface for delivering order confirmations by SMS and Email,
plus the in-page notification types shown to the shopper.
Supports both Mock (development) and Real (production) implementations.

Version: 1.0.0
"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from storefront.models import Order


class NotificationVariant(str, enum.Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass
class Notification:
    """A short title + description event shown to the shopper."""
    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "variant": self.variant.value,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class NotificationResult:
    """Result from sending a notification."""
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"


def format_order_summary(order: Order) -> str:
    """One line per item, e.g. ``2x 12oz Soda (Soda: Coke)``."""
    lines = []
    for line in order.items:
        text = f"{line.quantity}x {line.name}"
        if line.customization_summary:
            text += f" ({line.customization_summary})"
        lines.append(text)
    return "\n".join(lines)


class BaseNotificationService(ABC):
    """Abstract base class for notification services."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def send_sms(
        self,
        to_phone: str,
        message: str,
    ) -> NotificationResult:
        """Send an SMS message."""
        pass

    @abstractmethod
    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> NotificationResult:
        """Send an email."""
        pass

    @abstractmethod
    async def send_order_confirmation(self, order: Order) -> NotificationResult:
        """Send order confirmation via email and SMS."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check service connectivity."""
        pass
