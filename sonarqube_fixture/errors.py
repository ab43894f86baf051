"""
Exceptions raised by the SonarQube fixture.
"""

from collections.abc import Sequence
from pathlib import Path


class SonarQubeFixtureError(Exception):
    """Base exception for SonarQube fixture errors."""

    pass


class ConfigurationError(SonarQubeFixtureError):
    """The distribution cannot be driven as installed.

    Raised before any process is spawned, e.g. when the control script for the
    requested action is missing or not executable.
    """

    def __init__(self, message: str, path: Path | None = None, action: str | None = None):
        super().__init__(message)
        self.path = path
        self.action = action


class LaunchError(SonarQubeFixtureError):
    """A control script could not be run or exited with a nonzero status."""

    def __init__(
        self,
        message: str,
        action: str,
        command: Sequence[str],
        returncode: int | None = None,
    ):
        super().__init__(message)
        self.action = action
        self.command = list(command)
        self.returncode = returncode


class AlreadyStartedError(SonarQubeFixtureError):
    """start() was called on a controller whose server is still running."""

    pass


class ArtifactNotFoundError(SonarQubeFixtureError, FileNotFoundError):
    """The plugin artifact to install does not exist."""

    pass


class AdminClientError(SonarQubeFixtureError):
    """An administrative request could not reach the server."""

    pass
