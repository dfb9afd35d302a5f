"""
Catalog Resolver - Find the driver release for a browser version.

The release catalog is an Azure blob listing. Every blob is named
``<version>/<asset>`` (``114.0.1823.43/edgedriver_win64.zip``), so one
catalog document describes every platform build of every release.

Example:
    >>> resolver = CatalogResolver()
    >>> entry = await resolver.resolve("114.0.1823.43")
    >>> entry.download_url
    'https://msedgedriver.azureedge.net/114.0.1823.43/edgedriver_linux64.zip'
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Dict, Iterable, List, Optional, Tuple, Union

import httpx

from edgedriver.config.settings import DriverSettings
from edgedriver.driver.http import open_client
from edgedriver.driver.profiler import PlatformProfile, profile as detect_profile
from edgedriver.exceptions.driver import DownloadError, DriverError, NotFoundError
from edgedriver.interfaces.document import IDocumentQuery
from edgedriver.system.documents import LxmlDocumentQuery

logger = logging.getLogger(__name__)

CATALOG_ROOT = "/EnumerationResults/Blobs/Blob"
CATALOG_FIELDS = {
    "name": "Name",
    "url": "Url",
    "last_modified": "Properties/Last-Modified",
}

# Versions listed in NotFoundError
MAX_SUGGESTED_VERSIONS = 10

_NUMBER_RUN = re.compile(r"([0-9]+)")


@dataclass(frozen=True)
class ReleaseEntry:
    """
    One downloadable driver build.
    
    Attributes:
        asset_name: Archive file name, e.g. "edgedriver_win64.zip"
        version: Browser/driver version, e.g. "114.0.1823.43"
        download_url: Where the archive can be downloaded from
        last_modified: When the blob was last modified, if known
    """
    asset_name: str
    version: str
    download_url: str
    last_modified: Optional[datetime] = None


def version_sort_key(version: str) -> Tuple[Tuple[int, Union[int, str]], ...]:
    """
    Sort key comparing digit runs as numbers and everything else as text.
    
    ``"114.0"`` sorts above ``"9.10"``, which sorts above ``"9.0"``.
    """
    key = []
    for part in _NUMBER_RUN.split(version):
        if not part:
            continue
        if _NUMBER_RUN.fullmatch(part):
            key.append((0, int(part)))
        else:
            key.append((1, part.lower()))
    return tuple(key)


def parse_last_modified(value: str) -> Optional[datetime]:
    """Parse an RFC 1123 date (``Tue, 13 Jun 2023 21:13:16 GMT``)."""
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring unparsable Last-Modified value {value!r}")
        return None


def parse_release(record: Dict[str, str]) -> Optional[ReleaseEntry]:
    """
    Build a ReleaseEntry from a catalog record.
    
    Returns None for blobs that are not ``<version>/<asset>`` pairs, such as
    the ``LATEST_STABLE`` marker files at the root of the listing.
    """
    version, separator, asset_name = record.get("name", "").partition("/")
    if not separator or not version or not asset_name:
        return None
    return ReleaseEntry(
        asset_name=asset_name,
        version=version,
        download_url=record.get("url", ""),
        last_modified=parse_last_modified(record.get("last_modified", "")),
    )


def sort_releases(entries: Iterable[ReleaseEntry]) -> List[ReleaseEntry]:
    """
    Order entries by version, newest first.
    
    Entries sharing a version keep their catalog order.
    """
    by_version: Dict[str, List[ReleaseEntry]] = {}
    for entry in entries:
        by_version.setdefault(entry.version, []).append(entry)
    
    ordered = sorted(by_version, key=version_sort_key, reverse=True)
    return [entry for version in ordered for entry in by_version[version]]


def latest_versions(releases: Iterable[ReleaseEntry], limit: Optional[int] = None) -> List[str]:
    """Distinct versions of already sorted releases, in order."""
    versions = list(dict.fromkeys(entry.version for entry in releases))
    return versions if limit is None else versions[:limit]


def select_release(
    releases: Iterable[ReleaseEntry],
    version: str,
    platform_profile: PlatformProfile,
) -> Optional[ReleaseEntry]:
    """First release with exactly ``version`` built for ``platform_profile``."""
    for entry in releases:
        if entry.version == version and platform_profile.matches(entry.asset_name):
            return entry
    return None


class CatalogResolver:
    """
    Fetches the release catalog and picks the build for a version.
    
    There is no nearest-version fallback: the requested version must be
    published for the host platform.
    """
    
    def __init__(
        self,
        settings: Optional[DriverSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        document_query: Optional[IDocumentQuery] = None,
    ):
        """
        Initialize the resolver.
        
        Args:
            settings: Driver settings (catalog URL, timeouts)
            client: HTTP client to use; a short-lived one is created per fetch if None
            document_query: Query engine for the catalog document
        """
        self._settings = settings or DriverSettings()
        self._client = client
        self._query = document_query or LxmlDocumentQuery()
    
    @property
    def catalog_url(self) -> str:
        return self._settings.download_directory
    
    async def fetch_catalog(self) -> bytes:
        """Download the raw catalog document."""
        url = self.catalog_url
        logger.debug(f"Fetching release catalog from {url}")
        
        async with open_client(self._client, self._settings.request_timeout) as client:
            try:
                response = await client.get(url)
            except httpx.HTTPError as e:
                raise DownloadError(f"Failed to fetch release catalog: {e}", url=url) from e
        
        if not response.is_success:
            raise DownloadError(
                f"Failed to fetch release catalog (statusCode {response.status_code})",
                url=url,
                status_code=response.status_code,
            )
        return response.content
    
    async def fetch_releases(self) -> List[ReleaseEntry]:
        """
        Fetch and parse the catalog.
        
        Returns:
            All releases, newest version first
        """
        document = await self.fetch_catalog()
        
        try:
            records = self._query.query(document, CATALOG_ROOT, CATALOG_FIELDS)
        except ValueError as e:
            raise DriverError(f"Release catalog could not be parsed: {e}") from e
        
        releases = [entry for entry in map(parse_release, records) if entry is not None]
        logger.debug(f"Catalog lists {len(releases)} release assets")
        return sort_releases(releases)
    
    async def available_versions(self, limit: Optional[int] = None) -> List[str]:
        """Distinct published versions, newest first."""
        return latest_versions(await self.fetch_releases(), limit)
    
    async def resolve(
        self,
        requested_version: str,
        platform_profile: Optional[PlatformProfile] = None,
    ) -> ReleaseEntry:
        """
        Find the release of ``requested_version`` for a platform.
        
        Args:
            requested_version: Exact version, e.g. "114.0.1823.43"
            platform_profile: Target platform (default: this host)
            
        Returns:
            The matching ReleaseEntry
            
        Raises:
            NotFoundError: If the version is not published for the platform
            DownloadError: If the catalog cannot be fetched
        """
        platform_profile = platform_profile or detect_profile()
        releases = await self.fetch_releases()
        
        entry = select_release(releases, requested_version, platform_profile)
        if entry is None:
            raise NotFoundError(
                requested_version,
                latest_versions(releases, MAX_SUGGESTED_VERSIONS),
            )
        
        logger.debug(
            f"Resolved {requested_version} ({platform_profile.identifier}) to {entry.asset_name}"
        )
        return entry
