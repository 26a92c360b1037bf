"""
Geo Service Abstract Base Class

Defines the interface contract for delivery address checks.
Both KeywordGeoService and GoogleGeoService implement these methods.

Use Cases:
    - Address check before order placement
    - Delivery radius verification against the restaurant location

Version: 1.0.0
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

EARTH_RADIUS_MILES = 3959.0


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance between two coordinates, in miles.

    Example:
        >>> round(haversine_miles(29.6844, -95.3137, 29.7604, -95.3698), 1)
        6.2
    """
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


@dataclass
class GeoValidationResult:
    """
    Standardized result from an address check.

    Attributes:
        is_valid: Whether the address is accepted for delivery
        formatted_address: Standardized address (geocoded providers only)
        latitude: GPS latitude coordinate
        longitude: GPS longitude coordinate
        is_in_delivery_zone: Whether address is within the delivery area
        distance_miles: Distance from the restaurant (if calculated)
        matched_keyword: Keyword that accepted the address (keyword check)
        error_message: Error description if validation failed
        error_code: Machine-readable error code
        response_time_ms: Provider response time
    """
    is_valid: bool
    formatted_address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_in_delivery_zone: bool = False
    distance_miles: Optional[float] = None
    matched_keyword: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    response_time_ms: float = 0.0


class BaseGeoService(ABC):
    """
    Abstract base class for address check services.

    Example:
        >>> service = get_geo_service()
        >>> result = await service.validate_address("100 Main St, Houston, TX 77002")
        >>> if result.is_valid:
        ...     print("Address accepted!")
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the geo provider.

        Returns:
            str: Provider name (e.g., "keywords", "google")
        """
        pass

    @abstractmethod
    async def validate_address(self, address: str) -> GeoValidationResult:
        """
        Check that a free-text delivery address is deliverable.

        Args:
            address: Full address as typed by the customer

        Returns:
            GeoValidationResult: Check result, never raises for bad input
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify the geo service is operational.

        Returns:
            bool: True if service is operational
        """
        pass
