"""
Administrative HTTP calls against a running SonarQube server.
"""

from collections.abc import Callable
import logging
from urllib.parse import quote_plus

import httpx

from sonarqube_fixture.errors import AdminClientError

logger = logging.getLogger(__name__)

CREATE_PROJECT_PATH = "/api/projects/create"


def form_encode(value: str) -> str:
    """Encode a query value the way Java's URLEncoder does.

    Differs from ``quote_plus`` only in keeping ``*`` and escaping ``~``.
    """
    return quote_plus(value, safe="*").replace("~", "%7E")


class AdminClient:
    """Client for the server's web API."""

    def __init__(self, base_url: str | Callable[[], str], client: httpx.Client):
        """Initialize admin client.

        Args:
            base_url: Root URL of the server, or a callable returning it
            client: HTTP client used for the requests
        """
        self._base_url = base_url
        self.client = client

    @property
    def base_url(self) -> str:
        """Root URL of the server, without trailing slash."""
        base_url = self._base_url() if callable(self._base_url) else self._base_url
        return base_url.rstrip("/")

    def project_url(self, key: str, name: str | None = None) -> str:
        """Build the project creation URL.

        Both query parameters carry the project key; ``name`` is accepted but
        not sent, which keeps the requests identical to the ones existing
        tests were written against.

        Args:
            key: Project key
            name: Project name (unused)

        Returns:
            Absolute URL with a form-encoded query string
        """
        query = f"key={form_encode(key)}&name={form_encode(key)}"
        return f"{self.base_url}{CREATE_PROJECT_PATH}?{query}"

    def create_project(self, key: str, name: str) -> bool:
        """Create a project.

        Args:
            key: Project key
            name: Project name

        Returns:
            True if the server answered 200, False for any other status

        Raises:
            AdminClientError: If the request could not be completed
        """
        url = self.project_url(key, name)
        try:
            response = self.client.post(url)
        except httpx.RequestError as e:
            raise AdminClientError(f"Request failed: POST {url}: {e}") from e

        if response.status_code != 200:
            logger.warning(f"Creating project {key!r} returned HTTP {response.status_code}")
            return False

        logger.info(f"Created project {key!r}")
        return True
