"""Pytest fixtures for the DnD Catering storefront tests."""
from datetime import datetime, timedelta
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from storefront.catalog import Catalog, get_catalog
from storefront.controller import StorefrontController
from storefront.core.config import get_settings
from storefront.models import CartLineItem, CustomerInfo, Order
from storefront.services.geo import KeywordGeoService, reset_geo_service
from storefront.services.notifications import (
    MockNotificationService,
    reset_notification_service,
)
from storefront.services.sessions import SessionRegistry, reset_session_registry
from storefront.services.validation import OrderFormValidator

ENV_VARS = (
    "ENV_MODE",
    "DEBUG",
    "ADDRESS_CHECK_MODE",
    "ADDRESS_KEYWORDS",
    "STATUS_OFFSETS_SECONDS",
    "DELIVERY_FEE",
    "GOOGLE_MAPS_API_KEY",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_PHONE_NUMBER",
    "SENDGRID_API_KEY",
    "NOTIFICATION_FAILURE_RATE",
)


def reset_caches() -> None:
    get_settings.cache_clear()
    reset_geo_service()
    reset_notification_service()
    reset_session_registry()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Every test starts from development defaults with fresh service caches."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENV_MODE", "development")
    reset_caches()
    yield
    reset_caches()


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 14, 18, 30, 0))


@pytest.fixture
def catalog() -> Catalog:
    return get_catalog()


@pytest.fixture
def geo_service() -> KeywordGeoService:
    return KeywordGeoService()


@pytest.fixture
def notification_service() -> MockNotificationService:
    return MockNotificationService()


@pytest.fixture
def validator(geo_service) -> OrderFormValidator:
    return OrderFormValidator(geo_service)


@pytest.fixture
def controller(validator, notification_service, clock) -> StorefrontController:
    """Controller with the keyword address check and a frozen clock."""
    return StorefrontController(
        validator=validator,
        notification_service=notification_service,
        clock=clock,
    )


@pytest.fixture
def valid_customer() -> CustomerInfo:
    return CustomerInfo(
        name="Jane Doe",
        phone="(713) 555-0199",
        email="jane@example.com",
        address="100 Main St, Houston, TX 77002",
    )


@pytest.fixture
def make_order(clock) -> Callable[..., Order]:
    """Factory for a placed order created at the clock's current time."""

    def _make(lines: tuple[CartLineItem, ...] = (), customer: CustomerInfo = None) -> Order:
        if not lines:
            lines = (
                CartLineItem(
                    item_id="cheese-pizza",
                    name='12" Cheese Pizza',
                    unit_price="15",
                ),
            )
        customer = customer or CustomerInfo(
            name="Jane Doe",
            phone="7135550199",
            email="jane@example.com",
            address="Houston, TX",
        )
        subtotal = sum((line.line_total for line in lines), start=0)
        return Order.place(
            lines=lines,
            customer=customer,
            subtotal=subtotal,
            delivery_fee=10,
            total=subtotal + 10,
            created_at=clock(),
            delivery_minutes=45,
        )

    return _make


@pytest.fixture
def registry(notification_service, clock) -> SessionRegistry:
    """Session registry whose controllers share the frozen clock."""

    def factory() -> StorefrontController:
        return StorefrontController(
            validator=OrderFormValidator(KeywordGeoService()),
            notification_service=notification_service,
            clock=clock,
        )

    return SessionRegistry(factory=factory, max_sessions=10)


@pytest.fixture
def client(monkeypatch, registry):
    """TestClient bound to the app, with sessions held in ``registry``."""
    from storefront.main import app

    monkeypatch.setattr("storefront.main.get_session_registry", lambda: registry)
    with TestClient(app) as test_client:
        yield test_client
