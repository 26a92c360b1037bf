"""
Order Form Validator

Checks checkout form input before an order can be placed.
Rules run in order and the first failure wins:

    1. name, phone, email and address are all non-empty (spaces count)
    2. email looks like local@domain.tld
    3. phone has at least 10 digits once non-digits are stripped
    4. the geo service accepts the delivery address

Validation never touches the cart or the catalog.

Version: 1.0.0
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from storefront.core.config import get_settings
from storefront.models import CustomerInfo
from storefront.services.geo.base import BaseGeoService

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PHONE_DIGITS = 10


@dataclass
class ValidationResult:
    """
    Outcome of validating the checkout form.

    Attributes:
        is_valid: Whether the order may be placed
        customer: The validated info, unchanged (on success)
        error_message: Reason to show the customer (on failure)
        error_code: Machine-readable reason
    """
    is_valid: bool
    customer: Optional[CustomerInfo] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, customer: CustomerInfo) -> "ValidationResult":
        return cls(is_valid=True, customer=customer)

    @classmethod
    def fail(cls, message: str, code: str) -> "ValidationResult":
        return cls(is_valid=False, error_message=message, error_code=code)


def phone_digits(phone: str) -> str:
    return re.sub(r"\D", "", phone)


class OrderFormValidator:
    """Validates customer contact details and the delivery address."""

    def __init__(self, geo_service: BaseGeoService):
        self.geo_service = geo_service

    def _address_error(self) -> str:
        settings = get_settings()
        return (
            "Unable to verify delivery address. "
            f"Please ensure you're {settings.delivery_area_message}"
        )

    async def validate(self, customer: CustomerInfo) -> ValidationResult:
        fields = (customer.name, customer.phone, customer.email, customer.address)
        if any(not value for value in fields):
            return ValidationResult.fail("Please fill in all required fields", "missing_fields")

        if not EMAIL_PATTERN.match(customer.email):
            return ValidationResult.fail("Please enter a valid email address", "invalid_email")

        if len(phone_digits(customer.phone)) < MIN_PHONE_DIGITS:
            return ValidationResult.fail("Please enter a valid phone number", "invalid_phone")

        geo_result = await self.geo_service.validate_address(customer.address)
        if not geo_result.is_valid:
            logger.info(
                f"Address rejected by {self.geo_service.provider_name}: "
                f"{geo_result.error_code} - {customer.address}"
            )
            return ValidationResult.fail(
                self._address_error(),
                geo_result.error_code or "outside_delivery_zone",
            )

        return ValidationResult.ok(customer)
