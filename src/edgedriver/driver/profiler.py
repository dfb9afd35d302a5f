"""
Platform Profiler - Derive the host identifier used to pick a driver asset.

Release assets are named after the platform they run on
(``edgedriver_win64.zip``, ``edgedriver_mac64_m1.zip``,
``edgedriver_linux64.zip``). The profile computed here yields the suffix
an asset name must end with to run on this host.
"""

import platform
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OSFamily(str, Enum):
    """Operating system families used in asset names."""
    WIN = "win"
    MAC = "mac"
    LINUX = "linux"


# CPU families with a 64-bit driver build
ARCH_64_BIT = frozenset({"arm64", "ppc64", "x64", "s390x"})

_MACHINE_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "aarch64_be": "arm64",
    "arm64": "arm64",
    "armv8b": "arm64",
    "armv8l": "arm64",
    "i386": "ia32",
    "i486": "ia32",
    "i586": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "ia32": "ia32",
    "ppc64": "ppc64",
    "ppc64le": "ppc64",
    "s390x": "s390x",
}


@dataclass(frozen=True)
class PlatformProfile:
    """
    Host platform as spelled in release asset names.

    Attributes:
        os_family: Operating system family
        arch_suffix: "64", "64_m1" (Apple silicon) or "32"
    """
    os_family: OSFamily
    arch_suffix: str

    @property
    def identifier(self) -> str:
        """Asset suffix without the leading underscore, e.g. ``mac64_m1``."""
        return f"{self.os_family.value}{self.arch_suffix}"

    def matches(self, asset_name: str) -> bool:
        """
        Check whether an asset is built for this platform.

        Only the part of the name before the first dot is considered, so
        ``edgedriver_linux64.zip`` matches the ``linux64`` profile.
        """
        stem = asset_name.split(".")[0].lower()
        return stem.endswith(f"_{self.identifier}")


def normalize_arch(machine: str) -> str:
    """Map a machine name (``x86_64``, ``aarch64``...) to its CPU family."""
    machine = machine.strip().lower()
    if machine.startswith("armv") and machine not in _MACHINE_ALIASES:
        return "arm"
    return _MACHINE_ALIASES.get(machine, machine)


def os_family(system: Optional[str] = None) -> OSFamily:
    """Map ``platform.system()`` output to an OSFamily."""
    system = (system if system is not None else platform.system()).lower()
    if system in ("windows", "win32") or system.startswith(("cygwin", "msys")):
        return OSFamily.WIN
    if system in ("darwin", "macos"):
        return OSFamily.MAC
    return OSFamily.LINUX


def profile(system: Optional[str] = None, machine: Optional[str] = None) -> PlatformProfile:
    """
    Build the platform profile of the host.

    Args:
        system: OS name to use instead of ``platform.system()``
        machine: Machine name to use instead of ``platform.machine()``

    Returns:
        PlatformProfile for the host (or the simulated host)
    """
    family = os_family(system)
    arch = normalize_arch(machine if machine is not None else platform.machine())

    if arch in ARCH_64_BIT:
        if family is OSFamily.MAC and arch == "arm64":
            arch_suffix = "64_m1"
        else:
            arch_suffix = "64"
    else:
        arch_suffix = "32"

    return PlatformProfile(os_family=family, arch_suffix=arch_suffix)
