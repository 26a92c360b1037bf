"""
Keyword Geo Service

Coarse stand-in for geocoding used in development mode
(ENV_MODE=development, or ADDRESS_CHECK_MODE=keywords).

Behavior:
    - Lowercases the address
    - Accepts it if any configured keyword appears anywhere in it
      (default: houston, tx, texas, 77)

This is a placeholder, not a deliverability guarantee: it accepts many
addresses far outside the radius and rejects valid ones that mention none
of the keywords (e.g. a bare ZIP code outside 77xxx).

Version: 1.0.0
"""

import logging
from typing import Optional

from storefront.core.config import get_settings
from storefront.services.geo.base import BaseGeoService, GeoValidationResult

logger = logging.getLogger(__name__)


class KeywordGeoService(BaseGeoService):
    """
    Keyword implementation of the geo service.

    Example:
        >>> service = KeywordGeoService()
        >>> result = await service.validate_address("100 Main St, Houston, TX 77002")
        >>> result.matched_keyword
        'houston'
    """

    def __init__(self, keywords: Optional[list[str]] = None):
        settings = get_settings()
        self.keywords = [k.lower() for k in (keywords or settings.address_keywords_list)]

        logger.info(f"KeywordGeoService initialized (keywords={self.keywords})")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "keywords"

    async def validate_address(self, address: str) -> GeoValidationResult:
        """Accept the address if it contains one of the keywords."""
        if not address or not address.strip():
            return GeoValidationResult(
                is_valid=False,
                error_message="Address is required",
                error_code="invalid_address",
            )

        address_lower = address.lower()
        matched = next((k for k in self.keywords if k in address_lower), None)

        if matched is None:
            logger.debug(f"Keywords: No delivery keyword in address - {address}")
            return GeoValidationResult(
                is_valid=False,
                is_in_delivery_zone=False,
                error_message="Address appears to be outside our delivery area",
                error_code="outside_delivery_zone",
            )

        logger.debug(f"Keywords: Address accepted on '{matched}' - {address}")

        return GeoValidationResult(
            is_valid=True,
            formatted_address=address.strip(),
            is_in_delivery_zone=True,
            matched_keyword=matched,
        )

    async def health_check(self) -> bool:
        """Keyword check has no dependencies."""
        return True
