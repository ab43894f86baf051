"""
Lifecycle controller for an installed SonarQube distribution.
"""

from collections.abc import Callable
import logging
from pathlib import Path
import subprocess
import time
from typing import Any

import httpx

from sonarqube_fixture.admin_client import AdminClient
from sonarqube_fixture.config import (
    DEFAULT_HOST,
    DISTRIBUTION_PATHS,
    TIMEOUT_CONSTANTS,
    ServerConfig,
)
from sonarqube_fixture.errors import AlreadyStartedError, ConfigurationError, LaunchError
from sonarqube_fixture.settings import FixtureSettings
from sonarqube_fixture.utils.artifact_installer import install_plugin
from sonarqube_fixture.utils.platform_resolver import (
    Action,
    host_platform,
    resolve_command,
    resolve_executable,
)
from sonarqube_fixture.utils.properties import write_properties
from sonarqube_fixture.utils.readiness import ReadinessPoller

logger = logging.getLogger(__name__)


class SonarQube:
    """Drives one SonarQube server installed in a directory.

    The bundled control scripts daemonize the server, so ``start()`` only
    waits for the launcher to hand over and ``stop()`` runs the stop script
    instead of signalling a process. Use ``wait_for_ready()`` after
    ``start()`` before talking to the server.
    """

    def __init__(
        self,
        install_dir: str | Path,
        port: int,
        host: str = DEFAULT_HOST,
        *,
        os_name: str | None = None,
        arch: str | None = None,
        http_client: httpx.Client | None = None,
        poll_interval: float = TIMEOUT_CONSTANTS["readiness_poll_interval"],
        request_timeout: float = TIMEOUT_CONSTANTS["http_request"],
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the controller.

        Args:
            install_dir: Root of the unpacked distribution
            port: Web port the server listens on
            host: Address the server binds to
            os_name: Operating system name; detected from the host if omitted
            arch: CPU architecture; detected from the host if omitted
            http_client: HTTP client for readiness probes and API calls; one
                is created (and closed by ``close()``) if omitted. A created
                client ignores proxy environment variables.
            poll_interval: Delay in seconds between two readiness probes
            request_timeout: Timeout in seconds of a created HTTP client
            sleep: Function used to wait between readiness probes
        """
        self.install_dir = Path(install_dir).resolve()
        self.config = ServerConfig(host=host, port=port)

        if os_name is None or arch is None:
            host_os, host_arch = host_platform()
            os_name = host_os if os_name is None else os_name
            arch = host_arch if arch is None else arch
        self.os_name = os_name
        self.arch = arch

        self._owns_client = http_client is None
        self.http_client = http_client or httpx.Client(
            timeout=request_timeout, trust_env=False
        )
        self.poll_interval = poll_interval
        self.sleep = sleep
        self.running = False

    @classmethod
    def from_settings(cls, settings: FixtureSettings, **kwargs: Any) -> "SonarQube":
        """Create a controller from fixture settings.

        Args:
            settings: Settings to apply, including additional properties
            **kwargs: Extra keyword arguments for the constructor
        """
        controller = cls(
            settings.install_dir,
            settings.port,
            settings.host,
            poll_interval=settings.poll_interval,
            request_timeout=settings.request_timeout,
            **kwargs,
        )
        controller.config.update(settings.properties)
        return controller

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def port(self) -> int:
        return self.config.port

    @property
    def url(self) -> str:
        """Root URL of the server, built from the current configuration."""
        return self.config.url("/")

    @property
    def config_path(self) -> Path:
        return self.install_dir / DISTRIBUTION_PATHS["config_file"]

    @property
    def plugins_dir(self) -> Path:
        return self.install_dir / DISTRIBUTION_PATHS["plugins"]

    def executable(self, action: str | Action) -> Path:
        """Get the control script for an action on this controller's platform.

        Raises:
            ConfigurationError: If the script is missing or not executable
        """
        return resolve_executable(self.install_dir, action, self.os_name, self.arch)

    def command(self, action: str | Action) -> list[str]:
        """Get the command line running an action on this controller's platform."""
        return resolve_command(self.install_dir, action, self.os_name, self.arch)

    def write_config(self) -> None:
        """Write the configuration to conf/sonar.properties.

        Raises:
            OSError: If the file cannot be written
        """
        write_properties(self.config_path, self.config.as_properties())

    def start(self) -> None:
        """Start the server and wait for its launcher to exit.

        Returning means the launcher reported success, not that the server
        answers requests yet.

        Raises:
            AlreadyStartedError: If the server was started and not stopped
            OSError: If the configuration cannot be written
            ConfigurationError: If the start script is missing or not executable
            LaunchError: If the start script cannot be run or exits nonzero
        """
        if self.running:
            raise AlreadyStartedError(f"SonarQube in {self.install_dir} is already running")

        self.write_config()
        cmd = self.command(Action.START)

        logger.info(f"Starting SonarQube on {self.url}: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, cwd=self.install_dir)
        except OSError as e:
            raise LaunchError(
                f"Could not run start script {cmd[0]}: {e}",
                action=Action.START.value,
                command=cmd,
            ) from e

        if result.returncode != 0:
            raise LaunchError(
                f"Start script {cmd[0]} exited with status {result.returncode}",
                action=Action.START.value,
                command=cmd,
                returncode=result.returncode,
            )

        self.running = True
        logger.info("SonarQube start script completed")

    def stop(self) -> None:
        """Stop the server, ignoring any failure.

        The server may already be down and stop scripts are not reliable on
        every platform, so neither a missing script nor its exit status is
        reported.
        """
        self.running = False
        try:
            cmd = self.command(Action.STOP)
            logger.info(f"Stopping SonarQube: {' '.join(cmd)}")
            result = subprocess.run(cmd, cwd=self.install_dir)
        except (ConfigurationError, OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Ignoring failure to stop SonarQube: {e}")
            return

        logger.debug(f"SonarQube stop script exited with status {result.returncode}")

    def install_plugin(self, artifact: str | Path) -> None:
        """Install a plugin artifact; see ``utils.artifact_installer``."""
        install_plugin(self.install_dir, artifact)

    def wait_for_ready(self) -> int:
        """Block until the server answers 200 on its root URL.

        Returns:
            Number of probes made
        """
        poller = ReadinessPoller(
            lambda: self.url, self.http_client, interval=self.poll_interval, sleep=self.sleep
        )
        return poller.wait()

    def create_project(self, key: str, name: str) -> bool:
        """Create a project on the running server.

        Returns:
            True if the server answered 200

        Raises:
            AdminClientError: If the request could not be completed
        """
        return AdminClient(lambda: self.url, self.http_client).create_project(key, name)

    def close(self) -> None:
        """Close the HTTP client if this controller created it."""
        if self._owns_client:
            self.http_client.close()

    def __enter__(self) -> "SonarQube":
        """Start the server and wait until it is ready."""
        try:
            self.start()
        except BaseException:
            self.close()
            raise

        try:
            self.wait_for_ready()
        except BaseException:
            self.stop()
            self.close()
            raise
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Stop the server and release the HTTP client."""
        self.stop()
        self.close()

    def __repr__(self) -> str:
        return f"SonarQube(install_dir={str(self.install_dir)!r}, url={self.url!r})"
