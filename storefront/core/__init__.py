"""
Core module initialization.
Exports configuration and logging utilities.
"""

from storefront.core.config import (
    get_settings,
    setup_logging,
    Settings,
    EnvironmentMode,
    AddressCheckMode,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "AddressCheckMode",
]
