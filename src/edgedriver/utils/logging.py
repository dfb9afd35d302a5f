"""
Logging utilities for edgedriver.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from edgedriver.config.settings import LoggingSettings


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    file_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
) -> None:
    """
    Configure logging for the application.
    
    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        json_format: Use JSON format for the log file
        file_format: Format of log file records when json_format is off
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    
    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)
    
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        
        if json_format:
            formatter = logging.Formatter(
                '{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'
            )
        else:
            formatter = logging.Formatter(file_format)
        
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def configure_from_settings(settings: LoggingSettings, verbose: bool = False) -> None:
    """Configure logging from LoggingSettings; ``verbose`` forces DEBUG."""
    setup_logging(
        level="DEBUG" if verbose else settings.level,
        log_file=settings.file,
        json_format=settings.json_format,
        file_format=settings.format,
    )
