"""
Settings - Pydantic models for type-safe configuration.

This module defines all configuration settings as Pydantic models,
providing validation, type hints, and automatic environment variable loading.

Example:
    >>> from edgedriver.config import Settings, load_config
    >>> settings = load_config()  # Loads from env, yaml, and defaults
    >>> print(settings.driver.binary_name)
    'msedgedriver'
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DriverSettings(BaseModel):
    """
    Driver acquisition settings.
    
    Attributes:
        download_directory: URL of the release catalog listing
        binary_name: Driver executable name, without the Windows suffix
        target_dir: Directory the driver is extracted into (default: <package>/.bin)
        version: Pinned browser version; detected from the installed browser if unset
        request_timeout: Per-operation HTTP timeout in seconds
        chunk_size: Read/write chunk size for downloads and extraction
    """
    download_directory: str = "https://msedgedriver.azureedge.net/"
    binary_name: str = "msedgedriver"
    target_dir: Optional[str] = None
    version: Optional[str] = None
    request_timeout: float = Field(default=60.0, gt=0, le=600)
    chunk_size: int = Field(default=64 * 1024, ge=1024, le=16 * 1024 * 1024)


class LoggingSettings(BaseModel):
    """
    Logging configuration.
    
    Attributes:
        level: Log level
        format: Log format string
        file: Log file path (None for console only)
        json_format: Use JSON format for logs
    """
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    json_format: bool = False


class Settings(BaseSettings):
    """
    Root settings container - single source of truth for all configuration.
    
    Settings are loaded in this priority order (highest to lowest):
    1. Explicit values passed to constructor
    2. Environment variables (prefixed with EDGEDRIVER__)
    3. Config file (YAML)
    4. Default values
    
    Example:
        >>> settings = Settings()  # Load from env vars
        >>> settings = Settings(driver=DriverSettings(version="114.0.1823.43"))
    """
    
    model_config = SettingsConfigDict(
        env_prefix="EDGEDRIVER__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
    
    driver: DriverSettings = Field(default_factory=DriverSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    
    # Run the acquisition from the auto-install entry point
    auto_install: bool = False
    debug: bool = False
    
    def merge_with(self, overrides: dict) -> "Settings":
        """
        Create a new Settings instance with overrides applied.
        
        Args:
            overrides: Dictionary of values to override
            
        Returns:
            New Settings instance with overrides applied
        """
        current = self.model_dump()
        
        def deep_merge(base: dict, updates: dict) -> dict:
            for key, value in updates.items():
                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    deep_merge(base[key], value)
                else:
                    base[key] = value
            return base
        
        merged = deep_merge(current, overrides)
        return Settings(**merged)
