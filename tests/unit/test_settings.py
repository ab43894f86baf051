"""
Tests for fixture settings.
"""

from pathlib import Path

import pytest

from sonarqube_fixture.errors import ConfigurationError
from sonarqube_fixture.settings import FixtureSettings


class TestFixtureSettings:
    """Test suite for FixtureSettings."""

    def test_from_env(self):
        settings = FixtureSettings.from_env(
            {
                "SONARQUBE_HOME": "/opt/sonarqube",
                "SONARQUBE_PORT": "9100",
                "SONARQUBE_HOST": "localhost",
                "SONARQUBE_PLUGIN": "/build/plugin.jar",
                "SONARQUBE_POLL_INTERVAL": "0.5",
            }
        )

        assert settings.install_dir == Path("/opt/sonarqube")
        assert settings.port == 9100
        assert settings.host == "localhost"
        assert settings.plugin == Path("/build/plugin.jar")
        assert settings.poll_interval == 0.5

    def test_from_env_defaults(self):
        settings = FixtureSettings.from_env({"SONARQUBE_HOME": "/opt/sonarqube"})

        assert settings.port == 9000
        assert settings.host == "127.0.0.1"
        assert settings.plugin is None
        assert settings.poll_interval == 5.0
        assert settings.request_timeout == 10.0
        assert settings.properties == {}

    def test_empty_values_use_defaults(self):
        settings = FixtureSettings.from_env(
            {"SONARQUBE_HOME": "/opt/sonarqube", "SONARQUBE_PORT": ""}
        )

        assert settings.port == 9000

    @pytest.mark.parametrize("environ", [{}, {"SONARQUBE_HOME": ""}])
    def test_missing_install_dir(self, environ):
        with pytest.raises(ConfigurationError, match="SONARQUBE_HOME is not set"):
            FixtureSettings.from_env(environ)

    @pytest.mark.parametrize("port", ["0", "65536", "not-a-port"])
    def test_invalid_port(self, port):
        with pytest.raises(ConfigurationError, match="Invalid fixture settings"):
            FixtureSettings.from_env({"SONARQUBE_HOME": "/opt/sonarqube", "SONARQUBE_PORT": port})

    def test_load_skips_none(self):
        settings = FixtureSettings.load(install_dir="/opt/sonarqube", port=None, host=None)

        assert settings.port == 9000
        assert settings.host == "127.0.0.1"
