"""
View Controller

Top-level mode selector for one shopper's session. Owns the explicit
application state (view mode, cart, current order, pending
notifications) and is the only place it changes.

Modes and transitions:

    browsing      --open_cart------> cart_open
    cart_open     --close_cart-----> browsing
    cart_open     --begin_checkout-> checkout_form   (cart must not be empty)
    checkout_form --leave_checkout-> browsing        (cart kept)
    checkout_form --submit_order---> order_status    (validator accepts; cart cleared)
    order_status  --new_order------> browsing        (order discarded)

Version: 1.0.0
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from storefront.catalog import Catalog, get_catalog
from storefront.core.config import get_settings
from storefront.models import CartLineItem, CustomerInfo, Customization, Order
from storefront.services.cart import CartStore
from storefront.services.lifecycle import LifecycleSnapshot, OrderLifecycle, StatusTimeline
from storefront.services.notifications.base import BaseNotificationService, NotificationVariant
from storefront.services.notifications.queue import NotificationQueue
from storefront.services.validation import OrderFormValidator, ValidationResult

logger = logging.getLogger(__name__)


class ViewMode(str, enum.Enum):
    BROWSING = "browsing"
    CART_OPEN = "cart_open"
    CHECKOUT_FORM = "checkout_form"
    ORDER_STATUS = "order_status"


CART_EDIT_MODES = (ViewMode.BROWSING, ViewMode.CART_OPEN)


class InvalidTransitionError(Exception):
    """Requested action is not possible in the current view mode."""


class ItemNotFoundError(LookupError):
    """No catalog item with the requested id."""


@dataclass
class AppState:
    cart: CartStore
    notifications: NotificationQueue
    mode: ViewMode = ViewMode.BROWSING
    order: Optional[Order] = None
    lifecycle: Optional[OrderLifecycle] = None
    last_error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


class StorefrontController:
    """Drives one session through browsing, cart, checkout and order status."""

    def __init__(
        self,
        validator: OrderFormValidator,
        notification_service: BaseNotificationService,
        catalog: Optional[Catalog] = None,
        timeline: Optional[StatusTimeline] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        settings = get_settings()
        self.catalog = catalog or get_catalog()
        self.validator = validator
        self.notification_service = notification_service
        self.timeline = timeline or StatusTimeline()
        self._clock = clock

        notifications = NotificationQueue(maxlen=settings.notification_queue_size)
        self.state = AppState(
            cart=CartStore(notifications=notifications, delivery_fee=settings.delivery_fee),
            notifications=notifications,
        )

    @property
    def mode(self) -> ViewMode:
        return self.state.mode

    @property
    def cart(self) -> CartStore:
        return self.state.cart

    def _require(self, *modes: ViewMode) -> None:
        if self.state.mode not in modes:
            allowed = ", ".join(m.value for m in modes)
            raise InvalidTransitionError(
                f"Not available while in '{self.state.mode.value}' (needs: {allowed})"
            )

    def _set_mode(self, mode: ViewMode, trigger: str) -> None:
        logger.debug(f"View: {self.state.mode.value} -> {mode.value} (trigger: {trigger})")
        self.state.mode = mode

    # =========================================================================
    # CART
    # =========================================================================

    def add_to_cart(
        self,
        item_id: str,
        customization: Optional[Customization] = None,
        special_instructions: Optional[str] = None,
        quantity: int = 1,
    ) -> CartLineItem:
        """
        Raises:
            ItemNotFoundError: unknown catalog item
            CustomizationError: customization does not fit the item
            InvalidTransitionError: not browsing the menu
        """
        self._require(*CART_EDIT_MODES)
        item = self.catalog.get(item_id)
        if item is None:
            raise ItemNotFoundError(f"Menu item '{item_id}' not found")
        return self.state.cart.add(
            item,
            customization=customization,
            special_instructions=special_instructions,
            quantity=quantity,
        )

    def remove_line(self, line_id: str) -> bool:
        self._require(*CART_EDIT_MODES)
        return self.state.cart.remove(line_id)

    def change_quantity(self, line_id: str, quantity: int) -> Optional[CartLineItem]:
        """Quantity changes from the cart view; zero or less removes the line."""
        self._require(*CART_EDIT_MODES)
        return self.state.cart.set_quantity(line_id, quantity)

    def increment_line(self, line_id: str) -> Optional[CartLineItem]:
        self._require(*CART_EDIT_MODES)
        return self.state.cart.increment(line_id)

    def decrement_line(self, line_id: str) -> Optional[CartLineItem]:
        self._require(*CART_EDIT_MODES)
        return self.state.cart.decrement(line_id)

    def update_instructions(self, line_id: str, special_instructions: str) -> Optional[CartLineItem]:
        self._require(*CART_EDIT_MODES)
        return self.state.cart.update(line_id, special_instructions=special_instructions)

    # =========================================================================
    # VIEW TRANSITIONS
    # =========================================================================

    def open_cart(self) -> None:
        self._require(ViewMode.BROWSING, ViewMode.CART_OPEN)
        self._set_mode(ViewMode.CART_OPEN, "open_cart")

    def close_cart(self) -> None:
        self._require(ViewMode.BROWSING, ViewMode.CART_OPEN)
        self._set_mode(ViewMode.BROWSING, "close_cart")

    def begin_checkout(self) -> None:
        self._require(ViewMode.CART_OPEN)
        if self.state.cart.is_empty:
            raise InvalidTransitionError("Your cart is empty")
        self.state.last_error = None
        self._set_mode(ViewMode.CHECKOUT_FORM, "begin_checkout")

    def leave_checkout(self) -> None:
        self._require(ViewMode.CHECKOUT_FORM)
        self._set_mode(ViewMode.BROWSING, "leave_checkout")

    async def submit_order(self, customer: CustomerInfo) -> ValidationResult:
        """
        Validate the checkout form and place the order.

        On failure the form stays open and the reason is both stored in
        ``last_error`` and pushed as a notification.
        """
        self._require(ViewMode.CHECKOUT_FORM)
        if self.state.cart.is_empty:
            raise InvalidTransitionError("Your cart is empty")

        result = await self.validator.validate(customer)
        if not result.is_valid:
            self.state.last_error = result.error_message
            self.state.notifications.push(
                "Order Error",
                result.error_message or "Please check your information and try again",
                NotificationVariant.DESTRUCTIVE,
            )
            logger.info(f"Checkout rejected: {result.error_code}")
            return result

        settings = get_settings()
        cart = self.state.cart
        order = Order.place(
            lines=cart.lines,
            customer=customer,
            subtotal=cart.subtotal(),
            delivery_fee=cart.delivery_fee(),
            total=cart.total(),
            created_at=self._clock(),
            delivery_minutes=settings.estimated_delivery_minutes,
        )

        self.state.order = order
        self.state.lifecycle = OrderLifecycle(order, self.timeline, clock=self._clock)
        self.state.last_error = None
        cart.clear()
        self._set_mode(ViewMode.ORDER_STATUS, "submit_order")

        self.state.notifications.push(
            "Order placed successfully!",
            "You will receive updates about your order status.",
        )
        logger.info(f"Order #{order.id} placed: {len(order.items)} lines, total ${order.total}")

        await self._send_confirmation(order)
        return result

    async def _send_confirmation(self, order: Order) -> None:
        try:
            confirmation = await self.notification_service.send_order_confirmation(order)
        except Exception as e:
            logger.exception(f"Order #{order.id}: confirmation delivery crashed - {e}")
            return
        if not confirmation.success:
            logger.warning(
                f"Order #{order.id}: confirmation not delivered - {confirmation.error_message}"
            )

    def new_order(self) -> None:
        self._require(ViewMode.ORDER_STATUS)
        if self.state.order is not None:
            logger.info(f"Order #{self.state.order.id} discarded for a new order")
        self.state.order = None
        self.state.lifecycle = None
        self._set_mode(ViewMode.BROWSING, "new_order")

    # =========================================================================
    # PRESENTATION
    # =========================================================================

    def order_status(self, now: Optional[datetime] = None) -> Optional[LifecycleSnapshot]:
        """Current lifecycle snapshot, or None without an order."""
        if self.state.lifecycle is None:
            return None
        return self.state.lifecycle.refresh(now)
