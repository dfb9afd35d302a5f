"""
edgedriver - Download and locate Microsoft Edge WebDriver binaries.

This package resolves the msedgedriver release matching an installed (or
requested) Microsoft Edge version, downloads it for the host platform, and
finds Microsoft Edge installations on the host.

Example:
    >>> from edgedriver import DriverInstaller
    >>> installer = DriverInstaller()
    >>> await installer.acquire()
    PosixPath('.../edgedriver/.bin/msedgedriver')
"""

__version__ = "0.1.0"

# Public API exports
from edgedriver.config.settings import Settings
from edgedriver.driver.installer import DriverInstaller
from edgedriver.driver.catalog import CatalogResolver, ReleaseEntry
from edgedriver.driver.archive import ArchiveFetcher
from edgedriver.driver.profiler import PlatformProfile, profile
from edgedriver.finder.locator import ExecutableLocator, PriorityRule
from edgedriver.finder.edge import EdgeFinder

__all__ = [
    "DriverInstaller",
    "CatalogResolver",
    "ReleaseEntry",
    "ArchiveFetcher",
    "PlatformProfile",
    "profile",
    "ExecutableLocator",
    "PriorityRule",
    "EdgeFinder",
    "Settings",
    "__version__",
]
