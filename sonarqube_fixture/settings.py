"""
Fixture settings loaded from the environment.
"""

from collections.abc import Mapping
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from sonarqube_fixture.config import DEFAULT_HOST, DEFAULT_PORT, TIMEOUT_CONSTANTS
from sonarqube_fixture.errors import ConfigurationError

# Environment variables read by FixtureSettings.from_env()
ENV_VARIABLES = {
    "install_dir": "SONARQUBE_HOME",
    "port": "SONARQUBE_PORT",
    "host": "SONARQUBE_HOST",
    "plugin": "SONARQUBE_PLUGIN",
    "poll_interval": "SONARQUBE_POLL_INTERVAL",
}


class FixtureSettings(BaseModel):
    """Settings for driving one SonarQube distribution."""

    install_dir: Path = Field(..., description="Root of the unpacked distribution")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Web port")
    host: str = Field(default=DEFAULT_HOST, min_length=1, description="Address to bind to")
    poll_interval: float = Field(
        default=TIMEOUT_CONSTANTS["readiness_poll_interval"],
        gt=0,
        description="Delay in seconds between two readiness probes",
    )
    request_timeout: float = Field(
        default=TIMEOUT_CONSTANTS["http_request"],
        gt=0,
        description="Timeout in seconds of a single HTTP request",
    )
    plugin: Path | None = Field(default=None, description="Plugin artifact to install")
    properties: dict[str, str] = Field(
        default_factory=dict, description="Additional server properties"
    )

    @classmethod
    def load(cls, **values) -> "FixtureSettings":
        """Build settings, reporting invalid values as a ConfigurationError.

        Values that are None are left out so that defaults apply.

        Raises:
            ConfigurationError: If a value is missing or invalid
        """
        values = {key: value for key, value in values.items() if value is not None}
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid fixture settings: {e}") from e

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "FixtureSettings":
        """Build settings from environment variables.

        Args:
            environ: Environment to read; defaults to ``os.environ``

        Raises:
            ConfigurationError: If SONARQUBE_HOME is unset or a value is invalid
        """
        environ = os.environ if environ is None else environ
        if not environ.get(ENV_VARIABLES["install_dir"]):
            raise ConfigurationError(f"{ENV_VARIABLES['install_dir']} is not set")

        values = {field: environ.get(variable) or None for field, variable in ENV_VARIABLES.items()}
        return cls.load(**values)
