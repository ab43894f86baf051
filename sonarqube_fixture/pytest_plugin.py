"""
pytest fixtures for tests that need a running SonarQube server.

Enable them from a ``conftest.py``::

    pytest_plugins = ["sonarqube_fixture.pytest_plugin"]

The server is described by environment variables (see
``sonarqube_fixture.settings.ENV_VARIABLES``); tests using the fixtures are
skipped when SONARQUBE_HOME is not set.
"""

from collections.abc import Generator
import logging

import pytest

from sonarqube_fixture.controller import SonarQube
from sonarqube_fixture.errors import ConfigurationError
from sonarqube_fixture.settings import ENV_VARIABLES, FixtureSettings

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session")
def sonarqube_settings() -> FixtureSettings:
    """Fixture settings read from the environment."""
    try:
        return FixtureSettings.from_env()
    except ConfigurationError as e:
        pytest.skip(f"SonarQube not configured ({ENV_VARIABLES['install_dir']}): {e}")


@pytest.fixture(scope="session")
def sonarqube(sonarqube_settings: FixtureSettings) -> Generator[SonarQube, None, None]:
    """A started and ready SonarQube server, stopped after the session."""
    controller = SonarQube.from_settings(sonarqube_settings)
    if sonarqube_settings.plugin is not None:
        try:
            controller.install_plugin(sonarqube_settings.plugin)
        except BaseException:
            controller.close()
            raise

    logger.info(f"Starting SonarQube from {controller.install_dir} for the test session")
    with controller:
        yield controller
