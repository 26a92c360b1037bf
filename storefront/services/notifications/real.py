"""
Real Notification Service

Production implementation using:
- Twilio for SMS
- SendGrid for Email

Version: 1.0.0
"""

import logging
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from twilio.base.exceptions import TwilioException
from twilio.rest import Client as TwilioClient

from storefront.core.config import get_settings
from storefront.models import Order
from storefront.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
    format_order_summary,
)

logger = logging.getLogger(__name__)


class RealNotificationService(BaseNotificationService):
    """Production notification service using Twilio and SendGrid."""

    def __init__(self):
        self.settings = get_settings()

        if self.settings.twilio_account_sid and self.settings.twilio_auth_token:
            self.twilio_client = TwilioClient(
                self.settings.twilio_account_sid,
                self.settings.twilio_auth_token
            )
            self.twilio_from_number = self.settings.twilio_phone_number
        else:
            self.twilio_client = None
            logger.warning("Twilio credentials not configured")

        if self.settings.sendgrid_api_key:
            self.sendgrid_client = SendGridAPIClient(self.settings.sendgrid_api_key)
            self.sendgrid_from_email = self.settings.sendgrid_from_email
        else:
            self.sendgrid_client = None
            logger.warning("SendGrid credentials not configured")

        logger.info("RealNotificationService initialized")

    @property
    def provider_name(self) -> str:
        return "real"

    async def send_sms(
        self,
        to_phone: str,
        message: str,
    ) -> NotificationResult:
        """Send SMS via Twilio."""
        if not self.twilio_client:
            return NotificationResult(
                success=False,
                error_message="Twilio not configured",
                provider="twilio"
            )

        try:
            result = self.twilio_client.messages.create(
                body=message,
                from_=self.twilio_from_number,
                to=to_phone
            )

            logger.info(f"SMS sent to {to_phone}: {result.sid}")

            return NotificationResult(
                success=True,
                message_id=result.sid,
                provider="twilio"
            )

        except TwilioException as e:
            logger.error(f"Twilio error: {e}")
            return NotificationResult(
                success=False,
                error_message=str(e),
                provider="twilio"
            )

    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> NotificationResult:
        """Send email via SendGrid."""
        if not self.sendgrid_client:
            return NotificationResult(
                success=False,
                error_message="SendGrid not configured",
                provider="sendgrid"
            )

        try:
            message = Mail(
                from_email=self.sendgrid_from_email,
                to_emails=to_email,
                subject=subject,
                html_content=body_html,
                plain_text_content=body_text
            )

            response = self.sendgrid_client.send(message)

            logger.info(f"Email sent to {to_email}: {response.status_code}")

            return NotificationResult(
                success=response.status_code in [200, 201, 202],
                message_id=response.headers.get("X-Message-Id"),
                provider="sendgrid"
            )

        except Exception as e:
            logger.error(f"SendGrid error: {e}")
            return NotificationResult(
                success=False,
                error_message=str(e),
                provider="sendgrid"
            )

    async def send_order_confirmation(self, order: Order) -> NotificationResult:
        """Send order confirmation via SMS and email."""
        restaurant = self.settings.restaurant_name
        summary = format_order_summary(order)
        eta = order.estimated_delivery.strftime("%I:%M %p")

        message = (
            f"Hi {order.customer.name}! Your order #{order.id} has been received.\n"
            f"Delivery to: {order.customer.address}\n"
            f"Estimated delivery: {eta}\n"
            f"Total: ${order.total:.2f}\n"
            f"Thank you for ordering from {restaurant}!"
        )

        sms_result = await self.send_sms(order.customer.phone, message)

        items_html = "".join(f"<li>{line}</li>" for line in summary.splitlines())
        email_html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h1 style="color: #dc2626;">Order Received!</h1>
            <p>Hi {order.customer.name},</p>
            <p>Your order <strong>#{order.id}</strong> has been received.</p>
            <ul>{items_html}</ul>
            <div style="background: #f8f9fa; padding: 15px; border-radius: 8px; margin: 20px 0;">
                <p><strong>Delivery to: {order.customer.address}</strong></p>
                <p>Estimated delivery: {eta}</p>
                <p>Total: <strong>${order.total:.2f}</strong></p>
            </div>
            <p>Thank you for ordering from {restaurant}!</p>
        </div>
        """
        email_result = await self.send_email(
            to_email=order.customer.email,
            subject=f"Order Received #{order.id} - {restaurant}",
            body_html=email_html,
            body_text=f"{message}\n\n{summary}"
        )

        success = sms_result.success or email_result.success
        return NotificationResult(
            success=success,
            message_id=sms_result.message_id or email_result.message_id,
            error_message=None if success else (
                sms_result.error_message or email_result.error_message
            ),
            provider="real"
        )

    async def health_check(self) -> bool:
        """At least one delivery channel must be configured."""
        return self.twilio_client is not None or self.sendgrid_client is not None
