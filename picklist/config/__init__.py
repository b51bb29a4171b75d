"""
==============================================================================
Configuration Package
==============================================================================

Centralized configuration management using Pydantic Settings.

Usage:
------
    from picklist.config import get_settings, Settings

    settings = get_settings()
    print(settings.database_url)
    print(settings.free_order_sentinel)

==============================================================================
"""

from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
