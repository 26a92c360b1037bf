"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports two modes:
    - DEVELOPMENT: Keyword address check and logged notifications
    - PRODUCTION: Google geocoding + haversine radius check, Twilio/SendGrid

The ENV_MODE variable controls which services are instantiated throughout
the application. ADDRESS_CHECK_MODE can force a specific address check
regardless of environment.

Usage:
    from storefront.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Keyword heuristic, mock notifications
    else:
        # Real APIs

Version: 1.0.0
"""

import logging
import sys
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with mock services
        PRODUCTION: Live environment with real API integrations
        STAGING: Pre-production testing with real APIs but test keys
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class AddressCheckMode(str, Enum):
    """How delivery addresses are checked."""
    KEYWORDS = "keywords"
    DISTANCE = "distance"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Sensitive values (API keys) should NEVER be committed to version control.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="DnD Catering Storefront",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8001,
        description="API server port"
    )

    # ==========================================================================
    # SESSIONS
    # ==========================================================================

    max_sessions: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of in-memory browser sessions"
    )
    notification_queue_size: int = Field(
        default=20,
        ge=1,
        description="Pending notifications kept per session"
    )

    # ==========================================================================
    # GOOGLE MAPS
    # ==========================================================================

    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Google Maps Geocoding API key"
    )

    # ==========================================================================
    # TWILIO (SMS)
    # ==========================================================================

    twilio_account_sid: Optional[str] = Field(
        default=None,
        description="Twilio Account SID"
    )
    twilio_auth_token: Optional[str] = Field(
        default=None,
        description="Twilio Auth Token"
    )
    twilio_phone_number: Optional[str] = Field(
        default=None,
        description="Twilio phone number for sending SMS"
    )

    # ==========================================================================
    # SENDGRID (EMAIL)
    # ==========================================================================

    sendgrid_api_key: Optional[str] = Field(
        default=None,
        description="SendGrid API Key"
    )
    sendgrid_from_email: str = Field(
        default="orders@dndcatering.com",
        description="From email address for SendGrid"
    )
    notification_failure_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Simulated failure rate of the mock notification service"
    )

    # ==========================================================================
    # BUSINESS CONFIGURATION
    # ==========================================================================

    restaurant_name: str = Field(
        default="DnD Catering",
        description="Restaurant display name"
    )
    restaurant_address: str = Field(
        default="4515 Dewberry St, Houston, TX 77021",
        description="Restaurant street address"
    )
    restaurant_latitude: float = Field(
        default=29.6844,
        description="Restaurant latitude (delivery origin)"
    )
    restaurant_longitude: float = Field(
        default=-95.3137,
        description="Restaurant longitude (delivery origin)"
    )
    delivery_radius_miles: float = Field(
        default=12.0,
        gt=0,
        description="Maximum delivery distance in miles"
    )
    delivery_fee: Decimal = Field(
        default=Decimal("10.00"),
        ge=0,
        description="Flat delivery fee, charged only on non-empty carts"
    )
    estimated_delivery_minutes: int = Field(
        default=45,
        ge=0,
        description="Estimated delivery time from order placement"
    )

    # ==========================================================================
    # ORDER STATUS TIMELINE
    # ==========================================================================

    status_offsets_seconds: str = Field(
        default="2,8,15,25",
        description=(
            "Comma-separated seconds after placement at which an order becomes "
            "confirmed, preparing, ready and delivered"
        )
    )

    # ==========================================================================
    # DELIVERY ZONE
    # ==========================================================================

    address_check_mode: Optional[AddressCheckMode] = Field(
        default=None,
        description="Force 'keywords' or 'distance' address checking"
    )
    address_keywords: str = Field(
        default="houston,tx,texas,77",
        description="Comma-separated keywords accepted by the keyword address check"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("status_offsets_seconds")
    @classmethod
    def validate_status_offsets(cls, v: str) -> str:
        """Offsets must be four non-decreasing, non-negative numbers."""
        try:
            offsets = [float(part) for part in v.split(",")]
        except ValueError:
            raise ValueError("status_offsets_seconds must be comma-separated numbers")
        if len(offsets) != 4:
            raise ValueError("status_offsets_seconds needs exactly 4 values")
        if any(o < 0 for o in offsets) or offsets != sorted(offsets):
            raise ValueError("status_offsets_seconds must be non-negative and non-decreasing")
        return v

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def use_real_services(self) -> bool:
        """Check if real external services should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def effective_address_check_mode(self) -> AddressCheckMode:
        """Explicit override first, otherwise derived from the environment."""
        if self.address_check_mode is not None:
            return self.address_check_mode
        if self.use_real_services:
            return AddressCheckMode.DISTANCE
        return AddressCheckMode.KEYWORDS

    @property
    def address_keywords_list(self) -> list[str]:
        """Get address keywords as a lowercase list."""
        return [k.strip().lower() for k in self.address_keywords.split(",") if k.strip()]

    @property
    def status_offsets_list(self) -> list[float]:
        """Get status offsets as a list of seconds."""
        return [float(part) for part in self.status_offsets_seconds.split(",")]

    @property
    def delivery_area_message(self) -> str:
        """Human-readable delivery area, shown on the form and in errors."""
        return (
            f"within our {self.delivery_radius_miles:g}-mile delivery radius "
            f"from {self.restaurant_address}"
        )

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if self.use_real_services:
            if (
                self.effective_address_check_mode == AddressCheckMode.DISTANCE
                and not self.google_maps_api_key
            ):
                missing.append("GOOGLE_MAPS_API_KEY")
            if not (self.twilio_account_sid and self.twilio_auth_token):
                missing.append("TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN")
            if not self.sendgrid_api_key:
                missing.append("SENDGRID_API_KEY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and shared for the application lifecycle.

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logging.getLogger("storefront")
