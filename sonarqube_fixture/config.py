"""
Configuration settings for the SonarQube fixture.
"""

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Property keys read by the server from conf/sonar.properties
PORT_PROPERTY = "sonar.web.port"
HOST_PROPERTY = "sonar.web.host"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9000

# Layout of an unpacked distribution, relative to its root
DISTRIBUTION_PATHS = {
    "bin": "bin",
    "config_file": "conf/sonar.properties",
    "plugins": "extensions/plugins",
}

# Timeout constants (in seconds)
TIMEOUT_CONSTANTS = {
    "readiness_poll_interval": 5.0,  # Delay between two readiness probes
    "http_request": 10.0,  # Timeout for a single HTTP request to the server
}


class ServerConfig(BaseModel):
    """Properties written to conf/sonar.properties before the server starts.

    Behaves as a mapping from property key to string value. The web host and
    port are typed fields and are always present in the mapping; any other key
    is kept verbatim in ``extra``.
    """

    model_config = ConfigDict(validate_assignment=True)

    host: str = Field(default=DEFAULT_HOST, min_length=1, description="Address to bind to")
    port: int = Field(..., ge=1, le=65535, description="HTTP port of the web server")
    extra: dict[str, str] = Field(
        default_factory=dict, description="Additional properties persisted as-is"
    )

    def __getitem__(self, key: str) -> str:
        if key == PORT_PROPERTY:
            return str(self.port)
        if key == HOST_PROPERTY:
            return self.host
        return self.extra[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: object) -> bool:
        return key in (PORT_PROPERTY, HOST_PROPERTY) or key in self.extra

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.as_properties())

    def __len__(self) -> int:
        return len(self.as_properties())

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get a property value, or ``default`` when the key is not set."""
        try:
            return self[key]
        except KeyError:
            return default

    def set(self, key: str, value: Any) -> None:
        """Set a property.

        The web host and port keys update the typed fields (and are validated);
        every other key is stored as a string.

        Args:
            key: Property key
            value: Property value, converted with ``str()``
        """
        if key == PORT_PROPERTY:
            self.port = int(value)
        elif key == HOST_PROPERTY:
            self.host = str(value)
        else:
            self.extra[key] = str(value)

    def update(self, properties: dict[str, Any]) -> None:
        """Set several properties at once."""
        for key, value in properties.items():
            self.set(key, value)

    def as_properties(self) -> dict[str, str]:
        """Get all properties as a plain dictionary.

        Returns:
            Mapping of property key to value, including host and port
        """
        properties = dict(self.extra)
        properties[PORT_PROPERTY] = str(self.port)
        properties[HOST_PROPERTY] = self.host
        return properties

    def url(self, path: str = "/") -> str:
        """Build the server URL for ``path`` from the current host and port.

        An IPv6 literal host is enclosed in brackets.
        """
        if not path.startswith("/"):
            path = f"/{path}"
        host = self.host
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        return f"http://{host}:{self.port}{path}"
