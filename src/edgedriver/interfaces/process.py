"""
Process Interface - External process invocation and PATH lookup.

The driver core never spawns processes or queries PATH directly; it goes
through this interface so the decision logic can be exercised with fakes.

Example:
    >>> from edgedriver.system import SubprocessRunner
    >>> runner = SubprocessRunner()
    >>> path = await runner.find_on_path("microsoft-edge")
    >>> output = await runner.run_and_capture_output(path, ["--version"])
"""

from abc import ABC, abstractmethod
from typing import Sequence


class IProcessRunner(ABC):
    """
    Abstract interface for running executables and resolving them on PATH.
    """

    @abstractmethod
    async def run_and_capture_output(self, path: str, args: Sequence[str] = ()) -> str:
        """
        Run an executable and wait for it to exit.
        
        Args:
            path: Executable to run
            args: Command line arguments
            
        Returns:
            Decoded standard output
            
        Raises:
            ProcessExecutionError: If the process exits with a non-zero status
        """
        ...

    @abstractmethod
    async def find_on_path(self, name: str) -> str:
        """
        Resolve an executable name the way a shell would.
        
        Args:
            name: Executable name (e.g. "microsoft-edge")
            
        Returns:
            Absolute path of the executable
            
        Raises:
            ExecutableLookupError: If no executable with that name is on PATH
        """
        ...
