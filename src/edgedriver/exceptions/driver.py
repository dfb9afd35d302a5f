"""
Driver acquisition exceptions.
"""

from typing import List, Optional

from edgedriver.exceptions.base import EdgeDriverError


class DriverError(EdgeDriverError):
    """Base exception for driver acquisition errors."""
    pass


class NotFoundError(DriverError):
    """
    No catalog release matches the requested version and platform.
    
    The message lists the most recent versions the catalog offers so the
    caller can pick one of them instead.
    """
    
    def __init__(self, version: str, available_versions: List[str]):
        super().__init__(
            f'No version "{version}" found, latest versions available are '
            f"{', '.join(available_versions)}"
        )
        self.version = version
        self.available_versions = available_versions


class DownloadError(DriverError):
    """
    A remote resource could not be downloaded.
    
    Raised for non-success HTTP statuses and for responses that carry
    no body.
    """
    
    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message, {"url": url, "status_code": status_code})
        self.url = url
        self.status_code = status_code


class StreamError(DriverError):
    """
    Reading the archive or writing one of its entries failed.
    """
    
    def __init__(self, message: str, path: str | None = None):
        super().__init__(message, {"path": path} if path else None)
        self.path = path


class BrowserNotFoundError(DriverError):
    """No Microsoft Edge installation could be found on this host."""
    pass


class VersionProbeError(DriverError):
    """
    The browser's version output could not be parsed.
    """
    
    def __init__(self, message: str, path: str, output: Optional[str] = None):
        super().__init__(message, {"path": path, "output": output})
        self.path = path
        self.output = output
