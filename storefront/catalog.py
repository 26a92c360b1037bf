"""
Menu Catalog

Static, read-only list of purchasable items and their customization
schemas. Items are frozen; the catalog never changes at runtime.

Usage:
    from storefront.catalog import get_catalog

    item = get_catalog().get("cheese-pizza")
"""

import enum
from decimal import Decimal
from functools import lru_cache
from typing import Iterable, Iterator, Optional

from pydantic import BaseModel, ConfigDict

from storefront.models import (
    ComboChoice,
    Customization,
    NoCustomization,
    PizzaTypeChoice,
    SodaChoice,
    SodaPairChoice,
)

PIZZA_TYPES = ("Cheese", "Pepperoni")
SODAS = ("Coke", "Sprite", "Dr. Pepper", "Orange Soda")


class CustomizationError(ValueError):
    """Chosen customization does not fit the catalog item."""


class CustomizationKind(str, enum.Enum):
    PIZZA_TYPE = "pizza_type"
    SODA = "soda"
    SODA_PAIR = "soda_pair"
    COMBO = "combo"


class CustomizationSchema(BaseModel):
    """Choice groups a catalog item allows."""
    model_config = ConfigDict(frozen=True)

    kind: CustomizationKind
    pizza_types: tuple[str, ...] = ()
    sodas: tuple[str, ...] = ()

    def _match(self, value: str, allowed: tuple[str, ...], group: str) -> str:
        for choice in allowed:
            if choice.lower() == value.strip().lower():
                return choice
        raise CustomizationError(f"'{value}' is not a valid {group} choice")

    def _match_pair(self, values: tuple[str, str]) -> tuple[str, str]:
        first, second = values
        return (
            self._match(first, self.sodas, "soda"),
            self._match(second, self.sodas, "soda"),
        )

    def resolve(self, customization: Customization) -> Customization:
        """
        Check a customization against this schema.

        Returns the customization with every choice in its catalog spelling.
        ``NoCustomization`` is always accepted: selections are optional.

        Raises:
            CustomizationError: wrong kind or a value outside the choices
        """
        if isinstance(customization, NoCustomization):
            return customization
        if customization.kind != self.kind.value:
            raise CustomizationError(
                f"Expected a '{self.kind.value}' customization, got '{customization.kind}'"
            )

        if isinstance(customization, PizzaTypeChoice):
            return PizzaTypeChoice(
                pizza_type=self._match(customization.pizza_type, self.pizza_types, "pizza type")
            )
        if isinstance(customization, SodaChoice):
            return SodaChoice(soda=self._match(customization.soda, self.sodas, "soda"))
        if isinstance(customization, SodaPairChoice):
            return SodaPairChoice(sodas=self._match_pair(customization.sodas))
        if isinstance(customization, ComboChoice):
            return ComboChoice(
                pizza_type=(
                    self._match(customization.pizza_type, self.pizza_types, "pizza type")
                    if customization.pizza_type else None
                ),
                sodas=self._match_pair(customization.sodas) if customization.sodas else None,
            )
        raise CustomizationError(f"Unsupported customization '{customization.kind}'")


class CatalogItem(BaseModel):
    """A purchasable menu entry."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    price: Decimal
    is_special: bool = False
    customization: Optional[CustomizationSchema] = None

    @property
    def is_customizable(self) -> bool:
        return self.customization is not None

    def resolve_customization(self, customization: Optional[Customization]) -> Customization:
        """Validate a customization for this item (None means no selections)."""
        if customization is None or isinstance(customization, NoCustomization):
            return NoCustomization()
        if self.customization is None:
            raise CustomizationError(f"{self.name} has no customization options")
        return self.customization.resolve(customization)


class Catalog:
    """Ordered, read-only collection of catalog items."""

    def __init__(self, items: Iterable[CatalogItem]):
        self._items = tuple(items)
        self._by_id = {item.id: item for item in self._items}
        if len(self._by_id) != len(self._items):
            raise ValueError("Catalog item ids must be unique")

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> tuple[CatalogItem, ...]:
        return self._items

    def get(self, item_id: str) -> Optional[CatalogItem]:
        return self._by_id.get(item_id)


MENU = (
    CatalogItem(
        id="grand-opening-special",
        name="Grand Opening Special - 2 for $25",
        description=(
            'Baked Fettuccine Alfredo + 12" Pizza (Cheese or Pepperoni) + (2) 12oz Sodas'
        ),
        price=Decimal("25"),
        is_special=True,
        customization=CustomizationSchema(
            kind=CustomizationKind.COMBO,
            pizza_types=PIZZA_TYPES,
            sodas=SODAS,
        ),
    ),
    CatalogItem(
        id="cheese-pizza",
        name='12" Cheese Pizza',
        description="Classic cheese pizza with our signature sauce and fresh mozzarella",
        price=Decimal("15"),
    ),
    CatalogItem(
        id="pepperoni-pizza",
        name='12" Pepperoni Pizza',
        description="Classic pepperoni pizza with our signature sauce and fresh mozzarella",
        price=Decimal("15"),
    ),
    CatalogItem(
        id="fettuccine-alfredo",
        name="Baked Fettuccine Alfredo",
        description="Creamy fettuccine pasta baked to perfection with our rich alfredo sauce",
        price=Decimal("12"),
    ),
    CatalogItem(
        id="soda",
        name="12oz Soda",
        description="Choice of Coke, Sprite, Dr. Pepper, or Orange Soda",
        price=Decimal("3"),
        customization=CustomizationSchema(kind=CustomizationKind.SODA, sodas=SODAS),
    ),
)


@lru_cache()
def get_catalog() -> Catalog:
    """Get the restaurant's menu."""
    return Catalog(MENU)
