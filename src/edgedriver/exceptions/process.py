"""
Process and PATH lookup exceptions.
"""

from typing import Sequence

from edgedriver.exceptions.base import EdgeDriverError


class ProcessError(EdgeDriverError):
    """Base exception for external process errors."""
    pass


class ProcessExecutionError(ProcessError):
    """
    An external command exited with a non-zero status.
    """
    
    def __init__(self, command: Sequence[str], returncode: int, stderr: str = ""):
        super().__init__(
            f"Command {' '.join(command)!r} exited with status {returncode}",
            {"returncode": returncode, "stderr": stderr.strip()},
        )
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr


class ExecutableLookupError(ProcessError, LookupError):
    """
    A named executable is not available on PATH.
    """
    
    def __init__(self, name: str):
        super().__init__(f"Executable {name!r} not found on PATH")
        self.name = name
