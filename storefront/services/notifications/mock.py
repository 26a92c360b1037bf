"""
Mock Notification Service

Simulates SMS and Email sending for development.
No actual messages are sent - just logged.

Version: 1.0.0
"""

import random
import uuid
import logging
from typing import Optional

from storefront.core.config import get_settings
from storefront.models import Order
from storefront.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
    format_order_summary,
)

logger = logging.getLogger(__name__)


class MockNotificationService(BaseNotificationService):
    """Mock notification service for development."""

    def __init__(self, failure_rate: float = 0.0):
        self.failure_rate = failure_rate
        self.sent: list[dict] = []
        logger.info(f"MockNotificationService initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def send_sms(
        self,
        to_phone: str,
        message: str,
    ) -> NotificationResult:
        """Simulate sending SMS."""
        if self._should_fail():
            logger.warning(f"Mock SMS failed (simulated) to {to_phone}")
            return NotificationResult(
                success=False,
                error_message="Simulated SMS failure",
                provider="mock"
            )

        message_id = f"sms_mock_{uuid.uuid4().hex[:12]}"
        self.sent.append({"channel": "sms", "to": to_phone, "body": message})
        logger.info(f"Mock SMS sent to {to_phone}: {message[:50]}... (ID: {message_id})")

        return NotificationResult(
            success=True,
            message_id=message_id,
            provider="mock"
        )

    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> NotificationResult:
        """Simulate sending email."""
        if self._should_fail():
            logger.warning(f"Mock email failed (simulated) to {to_email}")
            return NotificationResult(
                success=False,
                error_message="Simulated email failure",
                provider="mock"
            )

        message_id = f"email_mock_{uuid.uuid4().hex[:12]}"
        self.sent.append({"channel": "email", "to": to_email, "subject": subject})
        logger.info(f"Mock email sent to {to_email}: {subject} (ID: {message_id})")

        return NotificationResult(
            success=True,
            message_id=message_id,
            provider="mock"
        )

    async def send_order_confirmation(self, order: Order) -> NotificationResult:
        """Send order confirmation."""
        settings = get_settings()
        message = (
            f"Hi {order.customer.name}! Your order #{order.id} has been received.\n"
            f"{format_order_summary(order)}\n"
            f"Delivery to: {order.customer.address}\n"
            f"Total: ${order.total:.2f}\n"
            f"Thank you for ordering from {settings.restaurant_name}!"
        )

        sms_result = await self.send_sms(order.customer.phone, message)
        email_result = await self.send_email(
            to_email=order.customer.email,
            subject=f"Order Confirmation #{order.id} - {settings.restaurant_name}",
            body_html=f"<h1>Order Received!</h1><pre>{message}</pre>",
            body_text=message,
        )

        return NotificationResult(
            success=sms_result.success or email_result.success,
            message_id=sms_result.message_id or email_result.message_id,
            error_message=None if (sms_result.success or email_result.success)
            else sms_result.error_message,
            provider="mock"
        )

    async def health_check(self) -> bool:
        """Mock always returns healthy."""
        return True
