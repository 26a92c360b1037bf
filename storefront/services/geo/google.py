"""
Google Maps Geo Service Implementation

Production address check using the Google Maps Geocoding API.
Used when ENV_MODE=production or ENV_MODE=staging, or when
ADDRESS_CHECK_MODE=distance.

The address is geocoded, then the great-circle (haversine) distance to the
restaurant is compared against DELIVERY_RADIUS_MILES.

Requirements:
    - GOOGLE_MAPS_API_KEY must be set in environment
    - Geocoding API must be enabled in Google Cloud Console

API Documentation:
    https://developers.google.com/maps/documentation/geocoding

Version: 1.0.0
"""

import logging
from datetime import datetime

import googlemaps
from googlemaps.exceptions import ApiError, Timeout, TransportError

from storefront.core.config import get_settings
from storefront.services.geo.base import (
    BaseGeoService,
    GeoValidationResult,
    haversine_miles,
)

logger = logging.getLogger(__name__)


class GoogleGeoService(BaseGeoService):
    """
    Production Google Maps geo service implementation.

    Configuration:
        Requires GOOGLE_MAPS_API_KEY environment variable.

    Example:
        >>> service = GoogleGeoService()
        >>> result = await service.validate_address("1600 Smith St, Houston, TX")
        >>> result.distance_miles
        6.1
    """

    def __init__(self, client: googlemaps.Client | None = None):
        """
        Initialize Google Maps client with API key.

        Raises:
            ValueError: If GOOGLE_MAPS_API_KEY is not configured
        """
        settings = get_settings()

        if client is None:
            if not settings.google_maps_api_key:
                raise ValueError(
                    "GOOGLE_MAPS_API_KEY is required for distance address checks. "
                    "Set it in your .env file or environment variables."
                )
            client = googlemaps.Client(key=settings.google_maps_api_key)

        self._client = client
        self.origin = (settings.restaurant_latitude, settings.restaurant_longitude)
        self.radius_miles = settings.delivery_radius_miles

        logger.info(
            f"GoogleGeoService initialized "
            f"(origin={self.origin}, radius={self.radius_miles} mi)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "google"

    def _elapsed_ms(self, start_time: datetime) -> float:
        return (datetime.now() - start_time).total_seconds() * 1000

    async def validate_address(self, address: str) -> GeoValidationResult:
        """
        Geocode an address and check it against the delivery radius.
        """
        start_time = datetime.now()

        if not address or not address.strip():
            return GeoValidationResult(
                is_valid=False,
                error_message="Address is required",
                error_code="invalid_address",
            )

        logger.debug(f"Google: Geocoding address - {address}")

        try:
            # googlemaps is synchronous, but lightweight
            geocode_result = self._client.geocode(address)
            elapsed_ms = self._elapsed_ms(start_time)

            if not geocode_result:
                logger.warning(f"Google: Address not found - {address}")
                return GeoValidationResult(
                    is_valid=False,
                    error_message="Address not found. Please check and try again.",
                    error_code="address_not_found",
                    response_time_ms=elapsed_ms,
                )

            result = geocode_result[0]
            location = result.get("geometry", {}).get("location", {})
            lat = location.get("lat")
            lng = location.get("lng")
            formatted_address = result.get("formatted_address", address)

            if lat is None or lng is None:
                return GeoValidationResult(
                    is_valid=False,
                    formatted_address=formatted_address,
                    error_message="Address could not be located",
                    error_code="address_not_found",
                    response_time_ms=elapsed_ms,
                )

            distance = round(haversine_miles(self.origin[0], self.origin[1], lat, lng), 1)
            in_zone = distance <= self.radius_miles

            if not in_zone:
                logger.info(f"Google: Address outside delivery radius ({distance} mi)")
                return GeoValidationResult(
                    is_valid=False,
                    formatted_address=formatted_address,
                    latitude=lat,
                    longitude=lng,
                    is_in_delivery_zone=False,
                    distance_miles=distance,
                    error_message=(
                        f"Sorry, {formatted_address} is {distance} miles away; "
                        f"we deliver within {self.radius_miles:g} miles"
                    ),
                    error_code="outside_delivery_zone",
                    response_time_ms=elapsed_ms,
                )

            logger.info(f"Google: Address validated - {formatted_address} ({distance} mi)")

            return GeoValidationResult(
                is_valid=True,
                formatted_address=formatted_address,
                latitude=lat,
                longitude=lng,
                is_in_delivery_zone=True,
                distance_miles=distance,
                response_time_ms=elapsed_ms,
            )

        except Timeout:
            logger.error("Google: API timeout")
            return GeoValidationResult(
                is_valid=False,
                error_message="Address validation timed out. Please try again.",
                error_code="timeout",
                response_time_ms=self._elapsed_ms(start_time),
            )

        except ApiError as e:
            logger.error(f"Google: API error - {e}")
            return GeoValidationResult(
                is_valid=False,
                error_message="Address validation service error",
                error_code="api_error",
                response_time_ms=self._elapsed_ms(start_time),
            )

        except TransportError as e:
            logger.error(f"Google: Transport error - {e}")
            return GeoValidationResult(
                is_valid=False,
                error_message="Unable to reach address validation service",
                error_code="transport_error",
                response_time_ms=self._elapsed_ms(start_time),
            )

    async def health_check(self) -> bool:
        """
        Verify Google Maps API connectivity.

        Geocodes the restaurant's own city to verify credentials.
        """
        try:
            result = self._client.geocode("Houston, TX")
            if result:
                logger.debug("Google: Health check passed")
                return True
            return False
        except (ApiError, Timeout, TransportError) as e:
            logger.error(f"Google: Health check failed - {e}")
            return False
