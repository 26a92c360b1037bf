"""
Pydantic Schemas for Request/Response Validation

The presentation boundary: everything a rendering layer needs to draw
the current view (cart contents, totals, validation errors, order
snapshot, lifecycle status, pending notifications).

Version: 1.0.0
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.catalog import CatalogItem
from storefront.controller import StorefrontController, ViewMode
from storefront.models import CartLineItem, CustomerInfo, Customization, Order, OrderStatus
from storefront.services.cart import CartStore
from storefront.services.lifecycle import LifecycleSnapshot
from storefront.services.notifications.base import Notification


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class AddToCartRequest(BaseModel):
    """Add one catalog item to the cart."""
    item_id: str = Field(..., min_length=1, examples=["cheese-pizza"])
    customization: Optional[Customization] = Field(
        None,
        examples=[{"kind": "soda", "soda": "Coke"}],
    )
    special_instructions: Optional[str] = Field(None, max_length=500)
    quantity: int = Field(default=1, ge=1, le=99)


class UpdateCartItemRequest(BaseModel):
    """Change a cart line. A quantity of zero or less removes the line."""
    quantity: Optional[int] = Field(None, examples=[2])
    special_instructions: Optional[str] = Field(None, max_length=500)


class CheckoutRequest(BaseModel):
    """Checkout form fields. Emptiness and format are checked by the validator."""
    name: str = Field(..., max_length=100, examples=["Jane Doe"])
    phone: str = Field(..., max_length=30, examples=["(555) 123-4567"])
    email: str = Field(..., max_length=255, examples=["jane@example.com"])
    address: str = Field(..., max_length=500, examples=["100 Main St, Houston, TX 77002"])

    def to_customer(self) -> CustomerInfo:
        return CustomerInfo(
            name=self.name,
            phone=self.phone,
            email=self.email,
            address=self.address,
        )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class MenuResponse(BaseModel):
    restaurant_name: str
    delivery_fee: Decimal
    items: List[CatalogItem]


class CartLineResponse(BaseModel):
    id: str
    item_id: str
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    special_instructions: Optional[str]
    customization: Customization
    customization_summary: Optional[str]

    @classmethod
    def from_line(cls, line: CartLineItem) -> "CartLineResponse":
        return cls(
            id=line.id,
            item_id=line.item_id,
            name=line.name,
            unit_price=line.unit_price,
            quantity=line.quantity,
            line_total=line.line_total,
            special_instructions=line.special_instructions,
            customization=line.customization,
            customization_summary=line.customization_summary,
        )


class CartResponse(BaseModel):
    lines: List[CartLineResponse]
    item_count: int
    is_empty: bool
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal

    @classmethod
    def from_cart(cls, cart: CartStore) -> "CartResponse":
        return cls(
            lines=[CartLineResponse.from_line(line) for line in cart.lines],
            item_count=cart.item_count,
            is_empty=cart.is_empty,
            subtotal=cart.subtotal(),
            delivery_fee=cart.delivery_fee(),
            total=cart.total(),
        )


class NotificationResponse(BaseModel):
    title: str
    description: str
    variant: str
    created_at: datetime

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            title=notification.title,
            description=notification.description,
            variant=notification.variant.value,
            created_at=notification.created_at,
        )


class StatusStepResponse(BaseModel):
    key: OrderStatus
    label: str
    completed: bool
    current: bool


class OrderStatusResponse(BaseModel):
    """Placed order plus its current lifecycle position."""
    order_id: str
    status: OrderStatus
    label: str
    estimated_minutes: int
    progress_percent: float
    is_complete: bool
    steps: List[StatusStepResponse]
    items: List[CartLineResponse]
    customer: CustomerInfo
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    created_at: datetime
    estimated_delivery: datetime

    @classmethod
    def from_order(cls, order: Order, snapshot: LifecycleSnapshot) -> "OrderStatusResponse":
        return cls(
            order_id=order.id,
            status=snapshot.status,
            label=snapshot.label,
            estimated_minutes=snapshot.estimated_minutes,
            progress_percent=snapshot.progress_percent,
            is_complete=snapshot.is_complete,
            steps=[
                StatusStepResponse(
                    key=step.key,
                    label=step.label,
                    completed=step.completed,
                    current=step.current,
                )
                for step in snapshot.steps
            ],
            items=[CartLineResponse.from_line(line) for line in order.items],
            customer=order.customer,
            subtotal=order.subtotal,
            delivery_fee=order.delivery_fee,
            total=order.total,
            created_at=order.created_at,
            estimated_delivery=order.estimated_delivery,
        )


class ViewStateResponse(BaseModel):
    """Everything needed to render the session's current view."""
    mode: ViewMode
    cart: CartResponse
    order: Optional[OrderStatusResponse] = None
    last_error: Optional[str] = None
    notifications: List[NotificationResponse] = Field(default_factory=list)

    @classmethod
    def from_controller(
        cls,
        controller: StorefrontController,
        now: Optional[datetime] = None,
        drain: bool = True,
    ) -> "ViewStateResponse":
        """
        Build the view state.

        Pending notifications are consumed only when ``drain`` is set;
        otherwise they stay queued for the next render.
        """
        state = controller.state
        pending = state.notifications.drain() if drain else state.notifications.peek()
        order = None
        snapshot = controller.order_status(now)
        if state.order is not None and snapshot is not None:
            order = OrderStatusResponse.from_order(state.order, snapshot)

        return cls(
            mode=state.mode,
            cart=CartResponse.from_cart(state.cart),
            order=order,
            last_error=state.last_error if state.mode == ViewMode.CHECKOUT_FORM else None,
            notifications=[NotificationResponse.from_notification(n) for n in pending],
        )


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    geo_service: str
    notification_service: str
    active_sessions: int
    timestamp: datetime
