"""
Driver Installer - Acquire the msedgedriver binary for this host.

The installer is idempotent: once the binary exists in the target
directory it is returned without touching the network. Otherwise the
browser version is detected (unless given), the matching release is
resolved from the catalog, downloaded and extracted, and the binary is
made executable.

Only one acquisition should run per target directory at a time;
concurrent acquisitions write the same files without coordination.

Example:
    >>> installer = DriverInstaller()
    >>> path = await installer.acquire()            # version of installed Edge
    >>> path = await installer.acquire("114.0.1823.43")
"""

import logging
import os
import re
from pathlib import Path
from typing import Awaitable, Callable, Optional

import aiofiles.os
import httpx

from edgedriver.config.settings import DriverSettings
from edgedriver.driver.archive import ArchiveFetcher
from edgedriver.driver.catalog import CatalogResolver
from edgedriver.driver.profiler import OSFamily, PlatformProfile, os_family, profile
from edgedriver.exceptions.driver import DriverError, VersionProbeError
from edgedriver.finder.edge import EdgeFinder
from edgedriver.interfaces.process import IProcessRunner
from edgedriver.system.process import SubprocessRunner

logger = logging.getLogger(__name__)

DEFAULT_TARGET_DIR = Path(__file__).resolve().parent.parent / ".bin"

_VERSION = re.compile(r"^\d+(\.\d+)*$")

_chmod = aiofiles.os.wrap(os.chmod)

BrowserFinder = Callable[[], Awaitable[str]]


def binary_file_name(name: str = "msedgedriver", family: Optional[OSFamily] = None) -> str:
    """Driver file name, with ``.exe`` on Windows."""
    family = family or os_family()
    return name + (".exe" if family is OSFamily.WIN else "")


def parse_browser_version(output: str) -> Optional[str]:
    """
    Version from ``--version`` output.

    ``"Microsoft Edge 114.0.1823.43 \\n"`` yields ``"114.0.1823.43"``.
    """
    tokens = output.split()
    if not tokens or not _VERSION.match(tokens[-1]):
        return None
    return tokens[-1]


class DriverInstaller:
    """
    Top-level driver acquisition flow.

    Collaborators are injectable; by default the installer talks to the
    real catalog, runs real processes and searches the host for Edge.
    """

    def __init__(
        self,
        settings: Optional[DriverSettings] = None,
        resolver: Optional[CatalogResolver] = None,
        fetcher: Optional[ArchiveFetcher] = None,
        runner: Optional[IProcessRunner] = None,
        browser_finder: Optional[BrowserFinder] = None,
        client: Optional[httpx.AsyncClient] = None,
        platform_profile: Optional[PlatformProfile] = None,
    ):
        """
        Initialize the installer.

        Args:
            settings: Driver settings
            resolver: Catalog resolver (built from settings if None)
            fetcher: Archive fetcher (built from settings if None)
            runner: Process runner for the browser version probe
            browser_finder: Coroutine function returning the Edge executable path
            client: HTTP client shared by the default resolver and fetcher
            platform_profile: Platform to download for (default: this host)
        """
        self._settings = settings or DriverSettings()
        self._runner = runner or SubprocessRunner()
        self._resolver = resolver or CatalogResolver(self._settings, client=client)
        self._fetcher = fetcher or ArchiveFetcher(
            client=client,
            timeout=self._settings.request_timeout,
            chunk_size=self._settings.chunk_size,
        )
        self._browser_finder = browser_finder or EdgeFinder(self._runner).find_edge_path
        self._platform_profile = platform_profile

    @property
    def target_dir(self) -> Path:
        if self._settings.target_dir:
            return Path(self._settings.target_dir).expanduser().resolve()
        return DEFAULT_TARGET_DIR

    @property
    def binary_path(self) -> Path:
        """Canonical location of the driver binary."""
        family = self._platform_profile.os_family if self._platform_profile else None
        return self.target_dir / binary_file_name(self._settings.binary_name, family)

    async def is_installed(self) -> bool:
        return await aiofiles.os.access(self.binary_path, os.F_OK)

    async def detect_browser_version(self) -> str:
        """
        Ask the installed browser for its version.

        Raises:
            BrowserNotFoundError: If no browser is installed
            ProcessExecutionError: If the browser exits with an error
            VersionProbeError: If the output has no version
        """
        edge_path = await self._browser_finder()
        logger.info(f"Trying to detect Microsoft Edge version from binary found at {edge_path}")

        output = await self._runner.run_and_capture_output(edge_path, ["--version"])
        version = parse_browser_version(output)
        if version is None:
            raise VersionProbeError(
                f"Couldn't parse a version from the output of {edge_path} --version",
                path=edge_path,
                output=output.strip(),
            )

        logger.info(f"Detected Microsoft Edge v{version}")
        return version

    async def acquire(self, version: Optional[str] = None) -> Path:
        """
        Make the driver binary available.

        Args:
            version: Browser version to fetch the driver for (default: the
                configured version, else the installed browser's)

        Returns:
            Path to the driver binary
        """
        binary_path = self.binary_path
        if await self.is_installed():
            logger.debug(f"Edgedriver already available at {binary_path}")
            return binary_path

        version = version or self._settings.version
        if not version:
            version = await self.detect_browser_version()

        platform_profile = self._platform_profile or profile()
        release = await self._resolver.resolve(version, platform_profile)
        await self._fetcher.fetch_and_extract(release.download_url, self.target_dir)

        if not await self.is_installed():
            raise DriverError(
                f"Release {release.asset_name} does not contain {binary_path.name}",
                {"url": release.download_url},
            )

        await _chmod(binary_path, 0o755)
        logger.info(f"Edgedriver {release.version} installed at {binary_path}")
        return binary_path
