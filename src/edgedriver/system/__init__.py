"""
System module - Host-backed implementations of the collaborator interfaces.
"""

from edgedriver.system.process import SubprocessRunner
from edgedriver.system.documents import LxmlDocumentQuery

__all__ = [
    "SubprocessRunner",
    "LxmlDocumentQuery",
]
