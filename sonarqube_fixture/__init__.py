"""
SonarQube test fixture.

Drives an installed SonarQube distribution for integration tests: writes its
configuration, stages plugins, starts and stops it through the bundled control
scripts, and waits until it answers HTTP requests.
"""

from sonarqube_fixture.admin_client import AdminClient
from sonarqube_fixture.config import ServerConfig
from sonarqube_fixture.controller import SonarQube
from sonarqube_fixture.errors import (
    AdminClientError,
    AlreadyStartedError,
    ArtifactNotFoundError,
    ConfigurationError,
    LaunchError,
    SonarQubeFixtureError,
)

__version__ = "0.1.0"

__all__ = [
    "AdminClient",
    "AdminClientError",
    "AlreadyStartedError",
    "ArtifactNotFoundError",
    "ConfigurationError",
    "LaunchError",
    "ServerConfig",
    "SonarQube",
    "SonarQubeFixtureError",
]
