"""
Subprocess Runner - Implementation of IProcessRunner using asyncio.
"""

import asyncio
import logging
import shutil
from typing import Optional, Sequence

from edgedriver.interfaces.process import IProcessRunner
from edgedriver.exceptions.process import (
    ExecutableLookupError,
    ProcessError,
    ProcessExecutionError,
)

logger = logging.getLogger(__name__)


class SubprocessRunner(IProcessRunner):
    """
    Runs executables with asyncio subprocesses and resolves them on PATH.
    
    Example:
        >>> runner = SubprocessRunner()
        >>> await runner.run_and_capture_output("/usr/bin/microsoft-edge", ["--version"])
        'Microsoft Edge 114.0.1823.43 \\n'
    """
    
    def __init__(self, search_path: Optional[str] = None):
        """
        Initialize the runner.
        
        Args:
            search_path: PATH-style string to search instead of the PATH variable
        """
        self._search_path = search_path
    
    async def run_and_capture_output(self, path: str, args: Sequence[str] = ()) -> str:
        """Run ``path`` with ``args`` and return its standard output."""
        command = [path, *args]
        logger.debug(f"Running {command}")
        
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProcessError(f"Failed to start {path}: {e}", {"path": path}) from e
        stdout, stderr = await process.communicate()
        
        if process.returncode != 0:
            raise ProcessExecutionError(
                command,
                process.returncode,
                stderr.decode(errors="replace"),
            )
        return stdout.decode(errors="replace")
    
    async def find_on_path(self, name: str) -> str:
        """Resolve ``name`` on PATH."""
        # shutil.which stats every PATH entry
        found = await asyncio.to_thread(shutil.which, name, path=self._search_path)
        if found is None:
            raise ExecutableLookupError(name)
        return found
