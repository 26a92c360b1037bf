"""Tests for toasts, the mock notifier and the Twilio/SendGrid notifier."""
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from storefront.core.config import get_settings
from storefront.models import CartLineItem, SodaChoice
from storefront.services.notifications import (
    MockNotificationService,
    NotificationQueue,
    NotificationVariant,
    RealNotificationService,
    get_notification_service,
)
from storefront.services.notifications.base import format_order_summary


class TestNotificationQueue:

    def test_drain_empties(self):
        queue = NotificationQueue()
        queue.push("Added to cart", "12oz Soda has been added to your cart.")
        assert len(queue) == 1

        [notification] = queue.drain()
        assert notification.variant == NotificationVariant.DEFAULT
        assert len(queue) == 0

    def test_oldest_dropped_when_full(self):
        queue = NotificationQueue(maxlen=2)
        for n in range(3):
            queue.push(f"Title {n}", "body")
        assert [n.title for n in queue.peek()] == ["Title 1", "Title 2"]

    def test_to_dict(self):
        notification = NotificationQueue().push("Order Error", "Bad phone", NotificationVariant.DESTRUCTIVE)
        assert notification.to_dict()["variant"] == "destructive"


class TestOrderSummary:

    def test_includes_customizations(self, make_order):
        order = make_order(lines=(
            CartLineItem(item_id="soda", name="12oz Soda", unit_price=Decimal("3"), quantity=2,
                         customization=SodaChoice(soda="Coke")),
            CartLineItem(item_id="cheese-pizza", name='12" Cheese Pizza', unit_price=Decimal("15")),
        ))
        assert format_order_summary(order) == '2x 12oz Soda (Soda: Coke)\n1x 12" Cheese Pizza'


class TestMockNotificationService:

    @pytest.mark.asyncio
    async def test_confirmation_sends_sms_and_email(self, make_order):
        service = MockNotificationService()
        order = make_order()

        result = await service.send_order_confirmation(order)

        assert result.success
        assert result.provider == "mock"
        assert service.sent[0]["channel"] == "sms"
        assert service.sent[0]["to"] == order.customer.phone
        assert order.id in service.sent[0]["body"]
        assert service.sent[1]["to"] == order.customer.email

    @pytest.mark.asyncio
    async def test_simulated_failure(self, make_order):
        service = MockNotificationService(failure_rate=1.0)
        result = await service.send_order_confirmation(make_order())
        assert not result.success
        assert service.sent == []

    def test_factory_uses_mock_in_development(self):
        assert isinstance(get_notification_service(), MockNotificationService)


class TestRealNotificationService:

    @pytest.fixture
    def configured(self, monkeypatch):
        monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")
        monkeypatch.setenv("TWILIO_AUTH_TOKEN", "secret")
        monkeypatch.setenv("TWILIO_PHONE_NUMBER", "+17135550100")
        monkeypatch.setenv("SENDGRID_API_KEY", "SG.test")
        get_settings.cache_clear()

    def test_unconfigured_is_unhealthy(self):
        with patch("storefront.services.notifications.real.TwilioClient") as twilio:
            service = RealNotificationService()
        twilio.assert_not_called()
        assert service.twilio_client is None
        assert service.sendgrid_client is None

    @pytest.mark.asyncio
    async def test_unconfigured_send_fails_softly(self, make_order):
        service = RealNotificationService()
        result = await service.send_order_confirmation(make_order())
        assert not result.success
        assert result.error_message == "Twilio not configured"
        assert not await service.health_check()

    @pytest.mark.asyncio
    async def test_sends_through_twilio_and_sendgrid(self, configured, make_order):
        order = make_order()
        with patch("storefront.services.notifications.real.TwilioClient") as twilio_cls, \
                patch("storefront.services.notifications.real.SendGridAPIClient") as sendgrid_cls:
            twilio_cls.return_value.messages.create.return_value = MagicMock(sid="SM42")
            sendgrid_cls.return_value.send.return_value = MagicMock(
                status_code=202, headers={"X-Message-Id": "msg-1"},
            )
            service = RealNotificationService()

            result = await service.send_order_confirmation(order)

        assert result.success
        assert result.message_id == "SM42"
        twilio_cls.assert_called_once_with("AC123", "secret")
        sms_kwargs = twilio_cls.return_value.messages.create.call_args.kwargs
        assert sms_kwargs["to"] == order.customer.phone
        assert sms_kwargs["from_"] == "+17135550100"
        assert f"#{order.id}" in sms_kwargs["body"]
        sendgrid_cls.return_value.send.assert_called_once()
        assert await service.health_check()

    @pytest.mark.asyncio
    async def test_email_error_is_reported(self, configured):
        with patch("storefront.services.notifications.real.TwilioClient"), \
                patch("storefront.services.notifications.real.SendGridAPIClient") as sendgrid_cls:
            sendgrid_cls.return_value.send.side_effect = RuntimeError("401 Unauthorized")
            service = RealNotificationService()

            result = await service.send_email("jane@example.com", "Hi", "<p>Hi</p>")

        assert not result.success
        assert result.provider == "sendgrid"
        assert "401" in result.error_message
