"""
Runner Exceptions
=================

Error taxonomy for the test runner. Only DirectoryAccessError and
ConfigurationError are fatal to a run; everything raised while processing a
single test is converted into a failed TestResult by the orchestrator.
"""

from pathlib import Path
from typing import Optional, Union


class E2ERunnerError(Exception):
    """Base class for all runner errors."""
    pass


class ConfigurationError(E2ERunnerError, ValueError):
    """Run configuration is missing or invalid."""
    pass


class DirectoryAccessError(E2ERunnerError):
    """The tests directory is missing or cannot be listed."""

    def __init__(self, directory: Union[str, Path], reason: str):
        self.directory = Path(directory)
        self.reason = reason
        super().__init__(f"Cannot access tests directory {self.directory}: {reason}")


class FileReadError(E2ERunnerError):
    """A listed test file could not be read."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read test file {self.path.name}: {reason}")


class GatewayExecutionError(E2ERunnerError):
    """The agent failed to execute a prompt (transport, model, tool or turn limit)."""

    def __init__(self, message: str, subtype: Optional[str] = None):
        self.subtype = subtype
        super().__init__(message)


class GatewayResponseError(GatewayExecutionError):
    """The agent answered, but not in the requested result shape."""
    pass
