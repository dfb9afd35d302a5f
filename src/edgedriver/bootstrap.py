"""
Auto-install entry point.

Downloading the driver is never a side effect of importing edgedriver.
Post-install hooks call ``auto_install`` (or the ``edgedriver-auto-install``
console script) and pass whether the download is enabled.

Usage:
    EDGEDRIVER__AUTO_INSTALL=true edgedriver-auto-install
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from edgedriver.config import get_settings
from edgedriver.driver.installer import DriverInstaller
from edgedriver.utils.logging import configure_from_settings

logger = logging.getLogger(__name__)


async def auto_install(
    enabled: bool,
    installer: Optional[DriverInstaller] = None,
) -> Optional[Path]:
    """
    Install the driver for the installed browser if enabled.
    
    Failures are logged, not raised, so a failed download never breaks
    the installation that triggered it.
    
    Args:
        enabled: Whether auto-install is switched on
        installer: Installer to use (default: one built from global settings)
        
    Returns:
        Path to the driver binary, or None if disabled or failed
    """
    if not enabled:
        logger.debug("Edgedriver auto-install is disabled")
        return None
    
    installer = installer or DriverInstaller(get_settings().driver)
    try:
        binary_path = await installer.acquire()
    except Exception as e:
        logger.error(f"Failed to install Edgedriver: {e}", exc_info=True)
        return None
    
    logger.info("Success!")
    return binary_path


def main() -> None:
    """Console script entry point."""
    settings = get_settings()
    configure_from_settings(settings.logging, verbose=settings.debug)
    asyncio.run(auto_install(settings.auto_install))


if __name__ == "__main__":
    main()
