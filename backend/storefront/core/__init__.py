"""
Core module containing configuration and shared utilities.
"""
from storefront.core.config import settings, get_settings, Settings

__all__ = [
    "settings",
    "get_settings",
    "Settings",
]
