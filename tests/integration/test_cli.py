"""
Integration tests for the CLI commands.
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from typer.testing import CliRunner

from edgedriver import __version__
from edgedriver.config import reset_settings
from edgedriver.exceptions import DownloadError, NotFoundError


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run every command from an empty directory with fresh settings."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("edgedriver.main.configure_from_settings", lambda *args, **kwargs: None)
    reset_settings()
    yield
    reset_settings()


def patch_class(monkeypatch, name, **methods):
    """Replace edgedriver.main.<name> with a mock whose instances have async ``methods``."""
    instance = MagicMock()
    for method, mock in methods.items():
        setattr(instance, method, mock)
    factory = MagicMock(return_value=instance)
    monkeypatch.setattr(f"edgedriver.main.{name}", factory)
    return factory


class TestCLIVersion:
    """Test the global options."""
    
    def test_version(self, runner):
        from edgedriver.main import app
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"edgedriver {__version__}" in result.stdout
    
    def test_help_lists_commands(self, runner):
        from edgedriver.main import app
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ["install", "versions", "locate", "platform"]:
            assert command in result.stdout


class TestCLIInstall:
    """Test the 'install' CLI command."""
    
    def test_install_help(self, runner):
        from edgedriver.main import app
        result = runner.invoke(app, ["install", "--help"])
        assert result.exit_code == 0
        assert "--driver-version" in result.stdout
    
    def test_install(self, runner, monkeypatch):
        """Test the installed binary path is printed."""
        from edgedriver.main import app
        acquire = AsyncMock(return_value=Path("/opt/bin/msedgedriver"))
        patch_class(monkeypatch, "DriverInstaller", acquire=acquire)
        
        result = runner.invoke(app, ["install", "-V", "114.0.1823.43"])
        
        assert result.exit_code == 0
        assert "Edgedriver available at" in result.stdout
        assert "/opt/bin/msedgedriver" in result.stdout
        acquire.assert_awaited_once_with("114.0.1823.43")
    
    def test_install_failure(self, runner, monkeypatch):
        """Test driver errors exit with status 1."""
        from edgedriver.main import app
        error = NotFoundError("1.2.3.4", ["114.0.1823.43"])
        patch_class(monkeypatch, "DriverInstaller", acquire=AsyncMock(side_effect=error))
        
        result = runner.invoke(app, ["install", "--driver-version", "1.2.3.4"])
        
        assert result.exit_code == 1
        assert 'No version "1.2.3.4" found' in result.stdout
    
    def test_install_filesystem_error(self, runner, monkeypatch):
        """Test filesystem errors exit with status 1 instead of a traceback."""
        from edgedriver.main import app
        error = PermissionError("Permission denied: '/opt/edgedriver/.bin'")
        patch_class(monkeypatch, "DriverInstaller", acquire=AsyncMock(side_effect=error))
        
        result = runner.invoke(app, ["install"])
        
        assert result.exit_code == 1
        assert "Permission denied" in result.stdout
        assert not isinstance(result.exception, PermissionError)


class TestCLIVersions:
    """Test the 'versions' CLI command."""
    
    def test_versions(self, runner, monkeypatch):
        from edgedriver.main import app
        available = AsyncMock(return_value=["114.0.1823.43", "113.0.1774.57"])
        patch_class(monkeypatch, "CatalogResolver", available_versions=available)
        
        result = runner.invoke(app, ["versions", "-n", "2"])
        
        assert result.exit_code == 0
        assert "114.0.1823.43" in result.stdout
        assert "113.0.1774.57" in result.stdout
        available.assert_awaited_once_with(2)
    
    def test_versions_catalog_unavailable(self, runner, monkeypatch):
        from edgedriver.main import app
        error = DownloadError("Failed to fetch release catalog (statusCode 503)", status_code=503)
        patch_class(monkeypatch, "CatalogResolver", available_versions=AsyncMock(side_effect=error))
        
        result = runner.invoke(app, ["versions"])
        
        assert result.exit_code == 1
        assert "statusCode 503" in result.stdout
    
    def test_versions_rejects_zero_limit(self, runner):
        from edgedriver.main import app
        result = runner.invoke(app, ["versions", "--limit", "0"])
        assert result.exit_code != 0


class TestCLILocate:
    """Test the 'locate' CLI command."""
    
    def test_locate(self, runner, monkeypatch):
        from edgedriver.main import app
        found = AsyncMock(return_value=["/usr/bin/microsoft-edge", "/usr/bin/microsoft-edge-beta"])
        patch_class(monkeypatch, "EdgeFinder", find_installations=found)
        
        result = runner.invoke(app, ["locate"])
        
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["/usr/bin/microsoft-edge", "/usr/bin/microsoft-edge-beta"]
    
    def test_locate_nothing_found(self, runner, monkeypatch):
        from edgedriver.main import app
        patch_class(monkeypatch, "EdgeFinder", find_installations=AsyncMock(return_value=[]))
        
        result = runner.invoke(app, ["locate"])
        
        assert result.exit_code == 1
        assert "No Microsoft Edge installation found" in result.stdout


class TestCLIPlatform:
    """Test the 'platform' CLI command."""
    
    def test_platform(self, runner):
        from edgedriver.driver.profiler import profile
        from edgedriver.main import app
        result = runner.invoke(app, ["platform"])
        assert result.exit_code == 0
        assert f"_{profile().identifier}" in result.stdout
