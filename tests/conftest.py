"""
Pytest configuration and fixtures.
"""

import io
import zipfile
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import httpx
import pytest

from edgedriver.exceptions import ExecutableLookupError, ProcessExecutionError
from edgedriver.interfaces.process import IProcessRunner


# =============================================================================
# FAKE PROCESS RUNNER
# =============================================================================

class FakeProcessRunner(IProcessRunner):
    """Process runner answering from canned tables."""

    def __init__(
        self,
        paths: Optional[Dict[str, str]] = None,
        outputs: Optional[Dict[str, str]] = None,
        failures: Optional[Dict[str, int]] = None,
    ):
        self.paths = paths or {}
        self.outputs = outputs or {}
        self.failures = failures or {}
        self.runs: List[Tuple[str, List[str]]] = []
        self.lookups: List[str] = []

    async def run_and_capture_output(self, path: str, args: Sequence[str] = ()) -> str:
        self.runs.append((path, list(args)))
        if path in self.failures:
            raise ProcessExecutionError([path, *args], self.failures[path], "boom")
        return self.outputs.get(path, "")

    async def find_on_path(self, name: str) -> str:
        self.lookups.append(name)
        if name not in self.paths:
            raise ExecutableLookupError(name)
        return self.paths[name]


# =============================================================================
# CATALOG AND ARCHIVE BUILDERS
# =============================================================================

BASE_URL = "https://msedgedriver.azureedge.net"


def build_catalog(names: Sequence[str]) -> bytes:
    """Azure blob listing with one blob per name."""
    blobs = "".join(
        f"<Blob><Name>{name}</Name><Url>{BASE_URL}/{name}</Url>"
        f"<Properties><Last-Modified>Tue, 13 Jun 2023 21:13:16 GMT</Last-Modified>"
        f"<Content-Length>8519346</Content-Length></Properties></Blob>"
        for name in names
    )
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<EnumerationResults ContainerName="{BASE_URL}/"><Blobs>{blobs}</Blobs>'
        "<NextMarker /></EnumerationResults>"
    ).encode("utf-8")


def build_zip(entries: Dict[str, bytes]) -> bytes:
    """Zip archive holding ``entries``; names ending in / become directories."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, payload in entries.items():
            archive.writestr(name, payload)
    return buffer.getvalue()


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient served by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def fake_runner():
    """Provide an empty fake process runner."""
    return FakeProcessRunner()


@pytest.fixture
def catalog_xml():
    """Provide a catalog with a few releases for every platform."""
    names = ["LATEST_STABLE", "LATEST_BETA"]
    for version in ["9.0.1.0", "114.0.1823.43", "9.10.2.0", "113.0.1774.57"]:
        for asset in [
            "edgedriver_arm64.zip",
            "edgedriver_linux64.zip",
            "edgedriver_mac64.zip",
            "edgedriver_mac64_m1.zip",
            "edgedriver_win32.zip",
            "edgedriver_win64.zip",
        ]:
            names.append(f"{version}/{asset}")
    return build_catalog(names)


@pytest.fixture
def settings(tmp_path):
    """Provide test settings pointing at a temporary target directory."""
    from edgedriver.config import Settings, DriverSettings

    return Settings(
        driver=DriverSettings(
            target_dir=str(tmp_path / "bin"),
            request_timeout=5,
        ),
    )
