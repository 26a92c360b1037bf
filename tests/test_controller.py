"""Tests for the view controller's modes and transitions."""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from storefront.catalog import CustomizationError
from storefront.controller import (
    InvalidTransitionError,
    ItemNotFoundError,
    StorefrontController,
    ViewMode,
)
from storefront.models import CustomerInfo, OrderStatus, SodaChoice
from storefront.services.notifications import NotificationVariant
from storefront.services.validation import OrderFormValidator


def reach_checkout(controller: StorefrontController) -> None:
    controller.add_to_cart("cheese-pizza")
    controller.open_cart()
    controller.begin_checkout()


class TestTransitions:

    def test_starts_browsing_with_empty_cart(self, controller):
        assert controller.mode == ViewMode.BROWSING
        assert controller.cart.is_empty
        assert controller.state.order is None

    def test_open_and_close_cart(self, controller):
        controller.open_cart()
        assert controller.mode == ViewMode.CART_OPEN
        controller.close_cart()
        assert controller.mode == ViewMode.BROWSING

    def test_checkout_needs_items(self, controller):
        controller.open_cart()
        with pytest.raises(InvalidTransitionError):
            controller.begin_checkout()
        assert controller.mode == ViewMode.CART_OPEN

    def test_checkout_only_from_cart(self, controller):
        controller.add_to_cart("soda")
        with pytest.raises(InvalidTransitionError):
            controller.begin_checkout()

    def test_back_leaves_checkout_for_menu(self, controller):
        reach_checkout(controller)
        controller.leave_checkout()
        assert controller.mode == ViewMode.BROWSING
        assert controller.cart.item_count == 1

    def test_cart_is_read_only_during_checkout(self, controller):
        reach_checkout(controller)
        line = controller.cart.lines[0]
        with pytest.raises(InvalidTransitionError):
            controller.add_to_cart("soda")
        with pytest.raises(InvalidTransitionError):
            controller.remove_line(line.id)

    def test_new_order_only_from_status(self, controller):
        with pytest.raises(InvalidTransitionError):
            controller.new_order()


class TestCartEdits:

    def test_add_unknown_item(self, controller):
        with pytest.raises(ItemNotFoundError):
            controller.add_to_cart("lasagna")

    def test_add_with_bad_customization(self, controller):
        with pytest.raises(CustomizationError):
            controller.add_to_cart("soda", SodaChoice(soda="Milk"))

    def test_edits_from_open_cart(self, controller):
        line = controller.add_to_cart("soda", SodaChoice(soda="Sprite"))
        controller.open_cart()
        controller.increment_line(line.id)
        controller.update_instructions(line.id, "no ice")
        assert controller.cart.get(line.id).quantity == 2
        assert controller.cart.get(line.id).special_instructions == "no ice"

        controller.change_quantity(line.id, 0)
        assert controller.cart.is_empty

    def test_unknown_line_ignored(self, controller):
        controller.add_to_cart("soda")
        assert controller.remove_line("nope") is False
        assert controller.decrement_line("nope") is None
        assert controller.cart.item_count == 1


class TestSubmitOrder:

    @pytest.mark.asyncio
    async def test_rejected_form_stays_open(self, controller):
        reach_checkout(controller)
        controller.state.notifications.drain()

        result = await controller.submit_order(CustomerInfo(
            name="Jane", phone="123", email="jane@example.com", address="Houston",
        ))

        assert not result.is_valid
        assert controller.mode == ViewMode.CHECKOUT_FORM
        assert controller.state.last_error == "Please enter a valid phone number"
        assert controller.cart.item_count == 1
        [toast] = controller.state.notifications.drain()
        assert toast.title == "Order Error"
        assert toast.variant == NotificationVariant.DESTRUCTIVE

    @pytest.mark.asyncio
    async def test_placed_order(self, controller, valid_customer, clock, notification_service):
        reach_checkout(controller)

        result = await controller.submit_order(valid_customer)

        order = controller.state.order
        assert result.is_valid
        assert controller.mode == ViewMode.ORDER_STATUS
        assert controller.cart.is_empty
        assert order.status == OrderStatus.PENDING
        assert order.total == Decimal("25.00")
        assert order.customer == valid_customer
        assert order.created_at == clock()
        assert controller.state.last_error is None
        titles = [n.title for n in controller.state.notifications.drain()]
        assert titles[-1] == "Order placed successfully!"
        assert [s["channel"] for s in notification_service.sent] == ["sms", "email"]

    @pytest.mark.asyncio
    async def test_order_survives_later_cart_activity(self, controller, valid_customer):
        reach_checkout(controller)
        await controller.submit_order(valid_customer)
        order = controller.state.order

        controller.new_order()
        controller.add_to_cart("fettuccine-alfredo")

        assert [line.item_id for line in order.items] == ["cheese-pizza"]

    @pytest.mark.asyncio
    async def test_confirmation_failure_does_not_fail_order(self, valid_customer, clock, geo_service):
        notifier = MagicMock()
        notifier.send_order_confirmation = AsyncMock(side_effect=RuntimeError("smtp down"))
        controller = StorefrontController(
            validator=OrderFormValidator(geo_service),
            notification_service=notifier,
            clock=clock,
        )
        reach_checkout(controller)

        result = await controller.submit_order(valid_customer)

        assert result.is_valid
        assert controller.mode == ViewMode.ORDER_STATUS
        notifier.send_order_confirmation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_status_follows_clock(self, controller, valid_customer, clock):
        reach_checkout(controller)
        await controller.submit_order(valid_customer)

        assert controller.order_status().status == OrderStatus.PENDING
        clock.advance(9)
        assert controller.order_status().status == OrderStatus.PREPARING

    @pytest.mark.asyncio
    async def test_new_order_resets(self, controller, valid_customer):
        reach_checkout(controller)
        await controller.submit_order(valid_customer)

        controller.new_order()

        assert controller.mode == ViewMode.BROWSING
        assert controller.state.order is None
        assert controller.order_status() is None
        assert controller.cart.is_empty
