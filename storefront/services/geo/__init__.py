"""
Geo Service Factory

Provides a single entry point for obtaining a geo service instance.
Selects the keyword check or Google Maps based on ENV_MODE, unless
ADDRESS_CHECK_MODE forces one.

Usage:
    from storefront.services.geo import get_geo_service

    geo_service = get_geo_service()
    result = await geo_service.validate_address("100 Main St, Houston, TX 77002")
"""

import logging
from functools import lru_cache

from storefront.core.config import AddressCheckMode, get_settings
from storefront.services.geo.base import (
    BaseGeoService,
    GeoValidationResult,
    haversine_miles,
)
from storefront.services.geo.google import GoogleGeoService
from storefront.services.geo.keywords import KeywordGeoService

logger = logging.getLogger(__name__)


@lru_cache()
def get_geo_service() -> BaseGeoService:
    """
    Get the configured geo service instance.

    Returns:
        BaseGeoService: Configured geo service instance

    Raises:
        ValueError: If distance mode but Google API key not configured
    """
    settings = get_settings()
    mode = settings.effective_address_check_mode

    if mode == AddressCheckMode.KEYWORDS:
        logger.info(f"Geo Service: Using KeywordGeoService ({settings.env_mode.value} mode)")
        return KeywordGeoService()

    logger.info(f"Geo Service: Using GoogleGeoService ({settings.env_mode.value} mode)")
    return GoogleGeoService()


def reset_geo_service() -> None:
    """
    Clear the cached geo service instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_geo_service.cache_clear()


__all__ = [
    "get_geo_service",
    "reset_geo_service",
    "BaseGeoService",
    "GeoValidationResult",
    "GoogleGeoService",
    "KeywordGeoService",
    "haversine_miles",
]
