"""Unit tests for the cart store."""
from decimal import Decimal

import pytest

from storefront.catalog import CustomizationError
from storefront.models import ComboChoice, SodaChoice
from storefront.services.cart import CartStore
from storefront.services.notifications import NotificationQueue


@pytest.fixture
def queue() -> NotificationQueue:
    return NotificationQueue()


@pytest.fixture
def cart(queue) -> CartStore:
    return CartStore(notifications=queue, delivery_fee=Decimal("10"))


class TestTotals:
    """Subtotal, delivery fee and total."""

    def test_empty_cart_is_free(self, cart):
        assert cart.is_empty
        assert cart.subtotal() == Decimal("0")
        assert cart.delivery_fee() == Decimal("0")
        assert cart.total() == Decimal("0")

    def test_fee_added_once_non_empty(self, cart, catalog):
        cart.add(catalog.get("cheese-pizza"))
        assert cart.subtotal() == Decimal("15")
        assert cart.delivery_fee() == Decimal("10")
        assert cart.total() == Decimal("25")

    def test_subtotal_sums_every_line(self, cart, catalog):
        cart.add(catalog.get("cheese-pizza"), quantity=2)
        cart.add(catalog.get("fettuccine-alfredo"))
        cart.add(catalog.get("soda"), SodaChoice(soda="Coke"), quantity=3)

        expected = sum(line.unit_price * line.quantity for line in cart.lines)
        assert cart.subtotal() == expected == Decimal("51")
        assert cart.total() == Decimal("61")
        assert cart.item_count == 6

    def test_fee_waived_after_last_line_removed(self, cart, catalog):
        line = cart.add(catalog.get("soda"))
        cart.remove(line.id)
        assert cart.total() == Decimal("0")


class TestAdd:
    """Adding catalog items."""

    def test_each_add_is_a_new_line(self, cart, catalog):
        first = cart.add(catalog.get("soda"), SodaChoice(soda="Coke"))
        second = cart.add(catalog.get("soda"), SodaChoice(soda="Coke"))
        assert first.id != second.id
        assert [line.id for line in cart.lines] == [first.id, second.id]

    def test_snapshots_name_and_price(self, cart, catalog):
        item = catalog.get("cheese-pizza")
        line = cart.add(item)
        assert line.name == item.name
        assert line.unit_price == item.price
        assert line.quantity == 1

    def test_price_change_leaves_existing_lines(self, cart, catalog):
        """A repriced item only affects lines added after the change."""
        item = catalog.get("cheese-pizza")
        first = cart.add(item)
        second = cart.add(item.model_copy(update={"price": Decimal("99")}))

        assert first.unit_price == Decimal("15")
        assert second.unit_price == Decimal("99")
        assert cart.lines[0].unit_price == Decimal("15")
        assert cart.subtotal() == Decimal("114")

    def test_strips_instructions(self, cart, catalog):
        line = cart.add(catalog.get("cheese-pizza"), special_instructions="  extra cheese ")
        blank = cart.add(catalog.get("cheese-pizza"), special_instructions="   ")
        assert line.special_instructions == "extra cheese"
        assert blank.special_instructions is None

    def test_resolves_customization(self, cart, catalog):
        line = cart.add(
            catalog.get("grand-opening-special"),
            ComboChoice(pizza_type="cheese", sodas=("coke", "orange soda")),
        )
        assert line.customization_summary == "Pizza: Cheese • Sodas: Coke, Orange Soda"

    def test_bad_customization_adds_nothing(self, cart, catalog):
        with pytest.raises(CustomizationError):
            cart.add(catalog.get("soda"), SodaChoice(soda="Tea"))
        assert cart.is_empty

    def test_pushes_notification(self, cart, catalog, queue):
        cart.add(catalog.get("fettuccine-alfredo"))
        [notification] = queue.drain()
        assert notification.title == "Added to cart"
        assert notification.description == "Baked Fettuccine Alfredo has been added to your cart."


class TestEdits:
    """Remove, update, increment and decrement."""

    def test_remove_unknown_is_noop(self, cart, catalog):
        cart.add(catalog.get("soda"))
        assert cart.remove("missing") is False
        assert len(cart.lines) == 1

    def test_update_unknown_is_noop(self, cart, catalog):
        cart.add(catalog.get("soda"))
        assert cart.update("missing", quantity=4) is None
        assert cart.item_count == 1

    def test_update_merges_fields(self, cart, catalog):
        line = cart.add(catalog.get("cheese-pizza"), special_instructions="well done")
        cart.update(line.id, quantity=3)
        assert cart.get(line.id).quantity == 3
        assert cart.get(line.id).special_instructions == "well done"

        cart.update(line.id, special_instructions="light sauce")
        assert cart.get(line.id).quantity == 3
        assert cart.get(line.id).special_instructions == "light sauce"

    def test_update_rejects_quantity_below_one(self, cart, catalog):
        line = cart.add(catalog.get("cheese-pizza"))
        with pytest.raises(ValueError):
            cart.update(line.id, quantity=0)
        assert cart.get(line.id).quantity == 1

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_set_quantity_at_or_below_zero_removes(self, cart, catalog, quantity):
        line = cart.add(catalog.get("cheese-pizza"))
        assert cart.set_quantity(line.id, quantity) is None
        assert cart.get(line.id) is None

    def test_decrement_from_one_removes(self, cart, catalog):
        line = cart.add(catalog.get("soda"))
        cart.decrement(line.id)
        assert cart.is_empty

    def test_increment(self, cart, catalog):
        line = cart.add(catalog.get("soda"))
        cart.increment(line.id)
        assert cart.get(line.id).quantity == 2
        assert cart.subtotal() == Decimal("6")

    def test_catalog_identity_survives_edits(self, cart, catalog):
        line = cart.add(catalog.get("pepperoni-pizza"))
        cart.increment(line.id)
        cart.update(line.id, special_instructions="no onions")
        edited = cart.get(line.id)
        assert (edited.item_id, edited.name, edited.unit_price) == (
            "pepperoni-pizza",
            '12" Pepperoni Pizza',
            Decimal("15"),
        )

    def test_clear(self, cart, catalog):
        cart.add(catalog.get("soda"))
        cart.clear()
        assert cart.is_empty
