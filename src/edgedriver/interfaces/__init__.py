"""
Interfaces module - Abstract base classes for injected collaborators.

This module defines the contracts that process runners and document
query engines must implement to be used by the driver core.
"""

from edgedriver.interfaces.process import IProcessRunner
from edgedriver.interfaces.document import IDocumentQuery

__all__ = [
    "IProcessRunner",
    "IDocumentQuery",
]
