"""
Tests for the driver installer.
"""

import os
import stat
import sys

import httpx
import pytest

from edgedriver.driver.installer import DriverInstaller, binary_file_name, parse_browser_version
from edgedriver.driver.profiler import OSFamily, PlatformProfile
from edgedriver.exceptions import (
    BrowserNotFoundError,
    DriverError,
    NotFoundError,
    ProcessExecutionError,
    VersionProbeError,
)
from edgedriver.finder.edge import EdgeFinder

from conftest import BASE_URL, FakeProcessRunner, build_zip, mock_client

EDGE_PATH = "/usr/bin/microsoft-edge"
LINUX64 = PlatformProfile(OSFamily.LINUX, "64")


async def find_edge() -> str:
    return EDGE_PATH


class FakeDriverHost:
    """Serves the catalog and a driver archive, recording requests."""
    
    def __init__(self, catalog: bytes, archive: bytes):
        self.catalog = catalog
        self.archive = archive
        self.requests = []
    
    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        if str(request.url) == f"{BASE_URL}/":
            return httpx.Response(200, content=self.catalog)
        if str(request.url).endswith(".zip"):
            return httpx.Response(200, content=self.archive)
        return httpx.Response(404)


@pytest.fixture
def host(catalog_xml):
    archive = build_zip({
        "msedgedriver": b"\x7fELF driver",
        "Driver_Notes/credits.html": b"<html></html>",
    })
    return FakeDriverHost(catalog_xml, archive)


@pytest.fixture
def runner():
    return FakeProcessRunner(outputs={EDGE_PATH: "Microsoft Edge 114.0.1823.43 \n"})


@pytest.fixture
def installer(settings, host, runner):
    return DriverInstaller(
        settings.driver,
        runner=runner,
        browser_finder=find_edge,
        client=mock_client(host),
        platform_profile=LINUX64,
    )


class TestHelpers:
    """Test module-level helpers."""
    
    def test_binary_file_name(self):
        assert binary_file_name(family=OSFamily.LINUX) == "msedgedriver"
        assert binary_file_name(family=OSFamily.MAC) == "msedgedriver"
        assert binary_file_name(family=OSFamily.WIN) == "msedgedriver.exe"
    
    @pytest.mark.parametrize("output,expected", [
        ("Microsoft Edge 114.0.1823.43 \n", "114.0.1823.43"),
        ("Microsoft Edge 115.0.1901.7 beta\n", None),
        ("114.0.1823.43", "114.0.1823.43"),
        ("", None),
    ])
    def test_parse_browser_version(self, output, expected):
        assert parse_browser_version(output) == expected


class TestDriverInstaller:
    """Test the acquisition flow."""
    
    def test_binary_path(self, installer, settings, tmp_path):
        assert installer.target_dir == (tmp_path / "bin").resolve()
        assert installer.binary_path == (tmp_path / "bin" / "msedgedriver").resolve()
    
    def test_windows_binary_path(self, settings):
        installer = DriverInstaller(
            settings.driver,
            runner=FakeProcessRunner(),
            platform_profile=PlatformProfile(OSFamily.WIN, "64"),
        )
        assert installer.binary_path.name == "msedgedriver.exe"
    
    @pytest.mark.asyncio
    async def test_acquire_detected_version(self, installer, host, runner):
        """Test the installed browser version selects the download."""
        binary_path = await installer.acquire()
        
        assert binary_path.read_bytes() == b"\x7fELF driver"
        assert runner.runs == [(EDGE_PATH, ["--version"])]
        assert host.requests == [
            f"{BASE_URL}/",
            f"{BASE_URL}/114.0.1823.43/edgedriver_linux64.zip",
        ]
    
    @pytest.mark.asyncio
    async def test_acquire_explicit_version(self, installer, host, runner):
        """Test an explicit version skips browser detection."""
        await installer.acquire("113.0.1774.57")
        
        assert runner.runs == []
        assert host.requests[-1] == f"{BASE_URL}/113.0.1774.57/edgedriver_linux64.zip"
    
    @pytest.mark.asyncio
    async def test_acquire_configured_version(self, settings, host, runner):
        settings.driver.version = "9.10.2.0"
        installer = DriverInstaller(
            settings.driver,
            runner=runner,
            browser_finder=find_edge,
            client=mock_client(host),
            platform_profile=LINUX64,
        )
        
        await installer.acquire()
        
        assert runner.runs == []
        assert host.requests[-1] == f"{BASE_URL}/9.10.2.0/edgedriver_linux64.zip"
    
    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    async def test_binary_is_executable(self, installer):
        binary_path = await installer.acquire()
        
        assert stat.S_IMODE(os.stat(binary_path).st_mode) == 0o755
    
    @pytest.mark.asyncio
    async def test_acquire_is_idempotent(self, installer, host, runner):
        """Test a second acquisition does no network or process work."""
        first = await installer.acquire()
        host.requests.clear()
        runner.runs.clear()
        
        second = await installer.acquire()
        
        assert second == first
        assert host.requests == []
        assert runner.runs == []
    
    @pytest.mark.asyncio
    async def test_existing_binary_short_circuits(self, installer, host):
        installer.target_dir.mkdir(parents=True)
        installer.binary_path.write_bytes(b"already here")
        
        assert await installer.acquire() == installer.binary_path
        assert host.requests == []
    
    @pytest.mark.asyncio
    async def test_unknown_version(self, installer):
        with pytest.raises(NotFoundError) as exc_info:
            await installer.acquire("1.2.3.4")
        
        assert exc_info.value.available_versions[0] == "114.0.1823.43"
    
    @pytest.mark.asyncio
    async def test_archive_without_binary(self, settings, catalog_xml):
        """Test an archive lacking the driver binary is an error."""
        host = FakeDriverHost(catalog_xml, build_zip({"README": b"nothing"}))
        installer = DriverInstaller(
            settings.driver,
            runner=FakeProcessRunner(),
            client=mock_client(host),
            platform_profile=LINUX64,
        )
        
        with pytest.raises(DriverError, match="does not contain msedgedriver"):
            await installer.acquire("114.0.1823.43")
    
    @pytest.mark.asyncio
    async def test_browser_exits_with_error(self, settings, host):
        """Test a failing version probe propagates."""
        runner = FakeProcessRunner(failures={EDGE_PATH: 1})
        installer = DriverInstaller(
            settings.driver,
            runner=runner,
            browser_finder=find_edge,
            client=mock_client(host),
            platform_profile=LINUX64,
        )
        
        with pytest.raises(ProcessExecutionError) as exc_info:
            await installer.acquire()
        
        assert exc_info.value.returncode == 1
        assert host.requests == []
    
    @pytest.mark.asyncio
    async def test_unparsable_version_output(self, settings, host):
        runner = FakeProcessRunner(outputs={EDGE_PATH: "something unexpected"})
        installer = DriverInstaller(
            settings.driver,
            runner=runner,
            browser_finder=find_edge,
            client=mock_client(host),
            platform_profile=LINUX64,
        )
        
        with pytest.raises(VersionProbeError) as exc_info:
            await installer.acquire()
        
        assert exc_info.value.output == "something unexpected"
    
    @pytest.mark.asyncio
    async def test_browser_not_installed(self, settings, host, tmp_path):
        """Test a missing browser stops the flow before any download."""
        finder = EdgeFinder(FakeProcessRunner(), system="Linux", home=tmp_path, desktop_dirs=[])
        installer = DriverInstaller(
            settings.driver,
            runner=FakeProcessRunner(),
            browser_finder=finder.find_edge_path,
            client=mock_client(host),
            platform_profile=LINUX64,
        )
        
        with pytest.raises(BrowserNotFoundError):
            await installer.acquire()
        
        assert host.requests == []
