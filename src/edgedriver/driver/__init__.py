"""
Driver module - Resolve, download and install msedgedriver.
"""

from edgedriver.driver.profiler import OSFamily, PlatformProfile, profile
from edgedriver.driver.catalog import CatalogResolver, ReleaseEntry, version_sort_key
from edgedriver.driver.archive import ArchiveFetcher
from edgedriver.driver.installer import DriverInstaller, binary_file_name

__all__ = [
    "OSFamily",
    "PlatformProfile",
    "profile",
    "CatalogResolver",
    "ReleaseEntry",
    "version_sort_key",
    "ArchiveFetcher",
    "DriverInstaller",
    "binary_file_name",
]
