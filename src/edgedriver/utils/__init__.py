"""
Utilities module - Common utility functions.
"""

from edgedriver.utils.logging import setup_logging, configure_from_settings
from edgedriver.utils.concurrency import CompletionBarrier

__all__ = [
    "setup_logging",
    "configure_from_settings",
    "CompletionBarrier",
]
