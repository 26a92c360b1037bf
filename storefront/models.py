"""
Domain Models

Line items, customer info, orders and the order status workflow.
Everything here lives in memory only; nothing is persisted.

Customizations are a tagged union keyed on ``kind`` so that each catalog
item's choices have one fixed shape:

    none       -> no choices
    pizza_type -> one pizza type
    soda       -> one soda
    soda_pair  -> exactly two sodas
    combo      -> pizza type + exactly two sodas (the opening special)

Version: 1.0.0
"""

import enum
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

CENTS = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    """Round a currency amount to cents."""
    return Decimal(value).quantize(CENTS)


# =============================================================================
# ORDER STATUS
# =============================================================================

class OrderStatus(str, enum.Enum):
    """Order status workflow. Members are declared in lifecycle order."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"

    @property
    def display_name(self) -> str:
        names = {
            "pending": "Order Received",
            "confirmed": "Order Confirmed",
            "preparing": "Preparing Your Order",
            "ready": "Out for Delivery",
            "delivered": "Delivered",
        }
        return names[self.value]

    @property
    def step_label(self) -> str:
        labels = {
            "pending": "Order Received",
            "confirmed": "Confirmed",
            "preparing": "Preparing",
            "ready": "Out for Delivery",
            "delivered": "Delivered",
        }
        return labels[self.value]

    @property
    def index(self) -> int:
        return list(OrderStatus).index(self)

    @property
    def next(self) -> Optional["OrderStatus"]:
        """The following status, or None once delivered."""
        members = list(OrderStatus)
        position = members.index(self)
        if position + 1 < len(members):
            return members[position + 1]
        return None


# =============================================================================
# CUSTOMIZATIONS
# =============================================================================

class NoCustomization(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"

    def summary(self) -> Optional[str]:
        return None


class PizzaTypeChoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["pizza_type"] = "pizza_type"
    pizza_type: str

    def summary(self) -> Optional[str]:
        return f"Pizza: {self.pizza_type}"


class SodaChoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["soda"] = "soda"
    soda: str

    def summary(self) -> Optional[str]:
        return f"Soda: {self.soda}"


class SodaPairChoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["soda_pair"] = "soda_pair"
    sodas: tuple[str, str]

    def summary(self) -> Optional[str]:
        return f"Sodas: {', '.join(self.sodas)}"


class ComboChoice(BaseModel):
    """Pizza type plus two sodas. Either part may be left unselected."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["combo"] = "combo"
    pizza_type: Optional[str] = None
    sodas: Optional[tuple[str, str]] = None

    def summary(self) -> Optional[str]:
        details = []
        if self.pizza_type:
            details.append(f"Pizza: {self.pizza_type}")
        if self.sodas:
            details.append(f"Sodas: {', '.join(self.sodas)}")
        return " • ".join(details) if details else None


Customization = Annotated[
    Union[NoCustomization, PizzaTypeChoice, SodaChoice, SodaPairChoice, ComboChoice],
    Field(discriminator="kind"),
]


# =============================================================================
# CART & ORDER
# =============================================================================

def generate_line_id() -> str:
    return uuid.uuid4().hex


def generate_order_id() -> str:
    return uuid.uuid4().hex[:10].upper()


class CartLineItem(BaseModel):
    """
    One entry in the cart.

    ``name`` and ``unit_price`` are copied from the catalog when the line
    is created; later catalog changes never reach an existing line.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=generate_line_id)
    item_id: str
    name: str
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(default=1, ge=1)
    special_instructions: Optional[str] = None
    customization: Customization = Field(default_factory=NoCustomization)

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)

    @property
    def customization_summary(self) -> Optional[str]:
        return self.customization.summary()


class CustomerInfo(BaseModel):
    """Contact and delivery details entered on the checkout form."""
    name: str
    phone: str
    email: str
    address: str


class Order(BaseModel):
    """
    A placed order.

    Items are a frozen snapshot of the cart at submission. Only the order
    lifecycle changes ``status``.
    """
    id: str = Field(default_factory=generate_order_id)
    items: tuple[CartLineItem, ...]
    customer: CustomerInfo
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime
    estimated_delivery: datetime

    @classmethod
    def place(
        cls,
        lines: tuple[CartLineItem, ...],
        customer: CustomerInfo,
        subtotal: Decimal,
        delivery_fee: Decimal,
        total: Decimal,
        created_at: datetime,
        delivery_minutes: int,
    ) -> "Order":
        return cls(
            items=tuple(line.model_copy(deep=True) for line in lines),
            customer=customer.model_copy(),
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total=total,
            status=OrderStatus.PENDING,
            created_at=created_at,
            estimated_delivery=created_at + timedelta(minutes=delivery_minutes),
        )

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)
