"""E2E tests: a shopper's full visit, through the controller and over HTTP."""
from decimal import Decimal

import pytest

from storefront.controller import ViewMode
from storefront.models import OrderStatus, SodaChoice


class TestFullOrderFlow:
    """Pizza + two sodas, checkout, then the order status timeline."""

    @pytest.mark.asyncio
    async def test_controller_flow(self, controller, valid_customer, clock):
        """
        add pizza ($15) -> add soda ($3) -> increment soda -> open cart ->
        checkout -> submit -> track until delivered
        """
        cart = controller.cart

        controller.add_to_cart("cheese-pizza")
        assert cart.subtotal() == Decimal("15")
        assert cart.total() == Decimal("25")

        soda = controller.add_to_cart("soda", SodaChoice(soda="Coke"))
        controller.increment_line(soda.id)
        assert cart.subtotal() == Decimal("21")
        assert cart.total() == Decimal("31")

        controller.open_cart()
        controller.begin_checkout()
        result = await controller.submit_order(valid_customer)

        order = controller.state.order
        assert result.is_valid
        assert order.status == OrderStatus.PENDING
        assert order.total == Decimal("31")
        assert len(order.items) == 2
        assert order.item_count == 3
        assert controller.mode == ViewMode.ORDER_STATUS

        seen = []
        for _ in range(27):
            seen.append(controller.order_status().status)
            clock.advance(1)
        assert list(dict.fromkeys(seen)) == list(OrderStatus)

        controller.new_order()
        assert controller.mode == ViewMode.BROWSING
        assert cart.is_empty

    def test_http_flow(self, client, clock):
        """Same visit driven through the JSON API with a session cookie."""
        state = client.post("/api/cart/items", json={"item_id": "pepperoni-pizza"}).json()
        assert Decimal(state["cart"]["subtotal"]) == Decimal("15")
        assert Decimal(state["cart"]["total"]) == Decimal("25")

        state = client.post(
            "/api/cart/items",
            json={"item_id": "soda", "customization": {"kind": "soda", "soda": "Sprite"}},
        ).json()
        soda_id = state["cart"]["lines"][-1]["id"]
        state = client.post(f"/api/cart/items/{soda_id}/increment").json()
        assert Decimal(state["cart"]["subtotal"]) == Decimal("21")
        assert Decimal(state["cart"]["total"]) == Decimal("31")
        assert state["cart"]["item_count"] == 3

        client.post("/api/view/cart/open")
        client.post("/api/view/checkout")
        state = client.post("/api/orders", json={
            "name": "Sam Rivera",
            "phone": "713-555-0142",
            "email": "sam@example.com",
            "address": "2800 Kirby Dr, Houston, TX 77098",
        }).json()

        order = state["order"]
        assert state["mode"] == "order_status"
        assert order["status"] == "pending"
        assert Decimal(order["total"]) == Decimal("31")
        assert len(order["items"]) == 2
        assert [n["title"] for n in state["notifications"]][-1] == "Order placed successfully!"

        clock.advance(8)
        assert client.get("/api/orders/current").json()["status"] == "preparing"
