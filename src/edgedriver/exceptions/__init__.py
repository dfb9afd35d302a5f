"""
Exceptions module - Custom exception hierarchy.

This module defines all custom exceptions used throughout edgedriver,
providing clear error types for different failure scenarios.
"""

from edgedriver.exceptions.base import (
    EdgeDriverError,
    ConfigurationError,
)
from edgedriver.exceptions.driver import (
    DriverError,
    NotFoundError,
    DownloadError,
    StreamError,
    BrowserNotFoundError,
    VersionProbeError,
)
from edgedriver.exceptions.process import (
    ProcessError,
    ProcessExecutionError,
    ExecutableLookupError,
)

__all__ = [
    # Base exceptions
    "EdgeDriverError",
    "ConfigurationError",
    # Driver exceptions
    "DriverError",
    "NotFoundError",
    "DownloadError",
    "StreamError",
    "BrowserNotFoundError",
    "VersionProbeError",
    # Process exceptions
    "ProcessError",
    "ProcessExecutionError",
    "ExecutableLookupError",
]
