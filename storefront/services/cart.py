"""
Cart Store

In-memory, ordered collection of line items for one shopper.
Append order is display order. Totals are recomputed on every call.

Invariants:
    - subtotal == sum(unit_price * quantity) over present lines
    - total == subtotal + delivery fee, the fee only when subtotal > 0
    - every present line has quantity >= 1

Version: 1.0.0
"""

import logging
from decimal import Decimal
from typing import Optional

from storefront.catalog import CatalogItem
from storefront.core.config import get_settings
from storefront.models import CartLineItem, Customization, to_money
from storefront.services.notifications.queue import NotificationQueue

logger = logging.getLogger(__name__)


class CartStore:
    """
    Shopping cart.

    Example:
        >>> cart = CartStore()
        >>> line = cart.add(get_catalog().get("cheese-pizza"))
        >>> cart.total()
        Decimal('25.00')
    """

    def __init__(
        self,
        notifications: Optional[NotificationQueue] = None,
        delivery_fee: Optional[Decimal] = None,
    ):
        self._lines: list[CartLineItem] = []
        self._notifications = notifications
        self._delivery_fee = to_money(
            delivery_fee if delivery_fee is not None else get_settings().delivery_fee
        )

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def lines(self) -> tuple[CartLineItem, ...]:
        return tuple(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        """Total quantity across all lines (the cart badge)."""
        return sum(line.quantity for line in self._lines)

    def get(self, line_id: str) -> Optional[CartLineItem]:
        return next((line for line in self._lines if line.id == line_id), None)

    def subtotal(self) -> Decimal:
        return to_money(sum((line.unit_price * line.quantity for line in self._lines), Decimal("0")))

    def delivery_fee(self) -> Decimal:
        """Flat fee, waived for an empty cart."""
        return self._delivery_fee if self.subtotal() > 0 else to_money(Decimal("0"))

    def total(self) -> Decimal:
        return to_money(self.subtotal() + self.delivery_fee())

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add(
        self,
        item: CatalogItem,
        customization: Optional[Customization] = None,
        special_instructions: Optional[str] = None,
        quantity: int = 1,
    ) -> CartLineItem:
        """
        Add a catalog item as a new line.

        Name and price are copied from the item now, so later catalog
        changes do not touch this line.

        Raises:
            CustomizationError: customization does not fit the item
        """
        resolved = item.resolve_customization(customization)
        instructions = special_instructions.strip() if special_instructions else None

        line = CartLineItem(
            item_id=item.id,
            name=item.name,
            unit_price=item.price,
            quantity=quantity,
            special_instructions=instructions or None,
            customization=resolved,
        )
        self._lines.append(line)

        logger.info(f"Cart: Added {line.quantity}x {line.name} (line {line.id})")
        if self._notifications is not None:
            self._notifications.push(
                "Added to cart",
                f"{item.name} has been added to your cart.",
            )
        return line

    def remove(self, line_id: str) -> bool:
        """Remove a line. Unknown ids are ignored."""
        for index, line in enumerate(self._lines):
            if line.id == line_id:
                del self._lines[index]
                logger.info(f"Cart: Removed {line.name} (line {line_id})")
                return True
        logger.debug(f"Cart: Remove ignored, no line {line_id}")
        return False

    def update(
        self,
        line_id: str,
        quantity: Optional[int] = None,
        special_instructions: Optional[str] = None,
    ) -> Optional[CartLineItem]:
        """
        Merge the supplied fields into a line.

        Unknown ids are ignored and return None. A quantity below 1 is
        rejected; use ``set_quantity`` to drop a line by decrementing it.

        Raises:
            ValueError: quantity < 1
        """
        line = self.get(line_id)
        if line is None:
            logger.debug(f"Cart: Update ignored, no line {line_id}")
            return None

        if quantity is not None:
            if quantity < 1:
                raise ValueError("Quantity must be at least 1; remove the line instead")
            line.quantity = quantity
        if special_instructions is not None:
            line.special_instructions = special_instructions.strip() or None

        logger.debug(f"Cart: Updated line {line_id} (quantity={line.quantity})")
        return line

    def set_quantity(self, line_id: str, quantity: int) -> Optional[CartLineItem]:
        """Set a quantity, removing the line when it drops to zero or below."""
        if quantity <= 0:
            self.remove(line_id)
            return None
        return self.update(line_id, quantity=quantity)

    def increment(self, line_id: str) -> Optional[CartLineItem]:
        line = self.get(line_id)
        if line is None:
            return None
        return self.set_quantity(line_id, line.quantity + 1)

    def decrement(self, line_id: str) -> Optional[CartLineItem]:
        line = self.get(line_id)
        if line is None:
            return None
        return self.set_quantity(line_id, line.quantity - 1)

    def clear(self) -> None:
        self._lines.clear()
        logger.debug("Cart: Cleared")
