"""
Edge Finder - Locate Microsoft Edge installations on this host.

Linux installs are found through launcher (.desktop) files and PATH,
macOS and Windows installs through their well-known install locations.
Stable builds rank above beta, dev and canary builds.
"""

import logging
import os
import shlex
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

import aiofiles
import aiofiles.os

from edgedriver.driver.profiler import OSFamily, os_family
from edgedriver.exceptions.driver import BrowserNotFoundError
from edgedriver.finder.locator import (
    ExecutableLocator,
    PriorityRule,
    is_readable,
    sort_by_priority,
    uniq,
)
from edgedriver.interfaces.process import IProcessRunner

logger = logging.getLogger(__name__)

LINUX_EXECUTABLES = [
    "microsoft-edge",
    "microsoft-edge-stable",
    "microsoft-edge-beta",
    "microsoft-edge-dev",
]

LINUX_PRIORITIES = [
    PriorityRule.of(r"microsoft-edge(-stable)?$", 50),
    PriorityRule.of(r"microsoft-edge-beta$", 40),
    PriorityRule.of(r"microsoft-edge-dev$", 30),
]

MAC_APPLICATIONS = [
    "Microsoft Edge",
    "Microsoft Edge Beta",
    "Microsoft Edge Dev",
    "Microsoft Edge Canary",
]

MAC_PRIORITIES = [
    PriorityRule.of(r"/Microsoft Edge\.app/", 50),
    PriorityRule.of(r"/Microsoft Edge Beta\.app/", 40),
    PriorityRule.of(r"/Microsoft Edge Dev\.app/", 30),
    PriorityRule.of(r"/Microsoft Edge Canary\.app/", 20),
]

WINDOWS_CHANNELS = ["Edge", "Edge Beta", "Edge Dev", "Edge SxS"]

WINDOWS_PREFIX_VARIABLES = ["LOCALAPPDATA", "PROGRAMFILES", "PROGRAMFILES(X86)"]

WINDOWS_PRIORITIES = [
    PriorityRule.of(r"[\\/]Edge[\\/]Application", 50),
    PriorityRule.of(r"[\\/]Edge Beta[\\/]", 40),
    PriorityRule.of(r"[\\/]Edge Dev[\\/]", 30),
    PriorityRule.of(r"[\\/]Edge SxS[\\/]", 20),
]


def desktop_file_executable(content: str) -> Optional[str]:
    """Executable of the first ``Exec=`` line of a .desktop launcher."""
    for line in content.splitlines():
        line = line.strip()
        if not line.startswith("Exec="):
            continue
        try:
            command = shlex.split(line[len("Exec="):])
        except ValueError:
            return None
        return command[0] if command else None
    return None


class EdgeFinder:
    """
    Finds Microsoft Edge executables, best candidate first.
    
    Example:
        >>> finder = EdgeFinder(SubprocessRunner())
        >>> await finder.find_edge_path()
        '/usr/bin/microsoft-edge'
    """
    
    def __init__(
        self,
        runner: IProcessRunner,
        system: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        home: Optional[Path] = None,
        desktop_dirs: Optional[Sequence[Path]] = None,
    ):
        """
        Initialize the finder.
        
        Args:
            runner: Process runner used for PATH lookups
            system: OS name to search for instead of the host's
            environ: Environment used to expand Windows install prefixes
            home: Home directory (default: the current user's)
            desktop_dirs: Directories searched for Linux .desktop launchers
        """
        self._locator = ExecutableLocator(runner)
        self._os_family = os_family(system)
        self._environ = environ if environ is not None else os.environ
        self._home = home or Path.home()
        self._desktop_dirs = list(desktop_dirs) if desktop_dirs is not None else [
            self._home / ".local" / "share" / "applications",
            Path("/usr/share/applications"),
        ]
    
    async def find_installations(self) -> List[str]:
        """All Edge installations found, best candidate first."""
        if self._os_family is OSFamily.MAC:
            return await self._darwin()
        if self._os_family is OSFamily.WIN:
            return await self._windows()
        return await self._linux()
    
    async def find_edge_path(self) -> str:
        """
        Best Edge installation.
        
        Raises:
            BrowserNotFoundError: If Edge is not installed
        """
        installations = await self.find_installations()
        if not installations:
            raise BrowserNotFoundError(
                f"Couldn't find a Microsoft Edge installation on {self._os_family.value}"
            )
        logger.debug(f"Found Edge installations: {installations}")
        return installations[0]
    
    async def _linux(self) -> List[str]:
        installations = []
        for folder in self._desktop_dirs:
            installations.extend(await self._desktop_executables(folder))
        installations.extend(await self._locator.locate(LINUX_EXECUTABLES, LINUX_PRIORITIES))
        return sort_by_priority(uniq(installations), LINUX_PRIORITIES)
    
    async def _desktop_executables(self, folder: Path) -> List[str]:
        if not await aiofiles.os.path.isdir(folder):
            return []
        
        executables = []
        for name in sorted(await aiofiles.os.listdir(folder)):
            if "microsoft-edge" not in name or not name.endswith(".desktop"):
                continue
            try:
                async with aiofiles.open(folder / name, "r", errors="replace") as f:
                    executable = desktop_file_executable(await f.read())
            except OSError as e:
                logger.debug(f"Skipping launcher {name}: {e}")
                continue
            if executable and os.path.isabs(executable) and await is_readable(executable):
                executables.append(executable)
        return executables
    
    async def _darwin(self) -> List[str]:
        installations = []
        for applications in (Path("/Applications"), self._home / "Applications"):
            for app in MAC_APPLICATIONS:
                path = applications / f"{app}.app" / "Contents" / "MacOS" / app
                if await is_readable(str(path)):
                    installations.append(str(path))
        return sort_by_priority(uniq(installations), MAC_PRIORITIES)
    
    async def _windows(self) -> List[str]:
        installations = []
        for variable in WINDOWS_PREFIX_VARIABLES:
            prefix = self._environ.get(variable)
            if not prefix:
                continue
            for channel in WINDOWS_CHANNELS:
                path = os.path.join(prefix, "Microsoft", channel, "Application", "msedge.exe")
                if await is_readable(path):
                    installations.append(path)
        return sort_by_priority(uniq(installations), WINDOWS_PRIORITIES)
