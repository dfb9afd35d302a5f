"""
Configuration module - Centralized settings management.

Usage:
    from edgedriver.config import get_settings, load_config
    
    # Get global settings (loaded once)
    settings = get_settings()
    
    # Or load fresh settings with overrides
    settings = load_config(driver={"version": "114.0.1823.43"})

Environment Variables:
    EDGEDRIVER__AUTO_INSTALL=true
    EDGEDRIVER__DRIVER__VERSION=114.0.1823.43
    EDGEDRIVER__DRIVER__TARGET_DIR=/opt/edgedriver
    EDGEDRIVER__LOGGING__LEVEL=DEBUG
"""

from edgedriver.config.settings import (
    Settings,
    DriverSettings,
    LoggingSettings,
)
from edgedriver.config.loader import ConfigLoader, load_config

# Global settings singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).
    
    Settings are loaded once from environment variables and config files.
    Call reset_settings() to reload.
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Reset the global settings (forces reload on next get_settings())."""
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "DriverSettings",
    "LoggingSettings",
    "ConfigLoader",
    "load_config",
    "get_settings",
    "reset_settings",
]
