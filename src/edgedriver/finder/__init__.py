"""
Finder module - Locate installed browser executables.
"""

from edgedriver.finder.locator import (
    ExecutableLocator,
    PriorityRule,
    sort_by_priority,
    uniq,
)
from edgedriver.finder.edge import EdgeFinder

__all__ = [
    "ExecutableLocator",
    "PriorityRule",
    "EdgeFinder",
    "sort_by_priority",
    "uniq",
]
