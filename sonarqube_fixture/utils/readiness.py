"""
Readiness polling for a starting SonarQube server.

A cold server can take minutes before it answers on its web port, so the
poller never gives up on its own: it keeps probing the root URL at a fixed
interval until it gets a 200 response. Bounding the total wait is left to the
test runner driving it.
"""

from collections.abc import Callable
import logging
import time

import httpx

from sonarqube_fixture.config import TIMEOUT_CONSTANTS

logger = logging.getLogger(__name__)


class ReadinessPoller:
    """Polls a server URL until it answers with HTTP 200."""

    def __init__(
        self,
        url: str | Callable[[], str],
        client: httpx.Client,
        interval: float = TIMEOUT_CONSTANTS["readiness_poll_interval"],
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize readiness poller.

        Args:
            url: URL to probe, or a callable returning it (evaluated per attempt)
            client: HTTP client used for the probes
            interval: Delay in seconds between two attempts
            sleep: Function used to wait between attempts
        """
        self._url = url
        self.client = client
        self.interval = interval
        self.sleep = sleep

    @property
    def url(self) -> str:
        """URL probed by the next attempt."""
        return self._url() if callable(self._url) else self._url

    def probe(self, url: str | None = None) -> bool:
        """Probe the server once.

        Args:
            url: URL to probe instead of the configured one

        Returns:
            True if the server answered 200, False on any other status or if
            the request could not be completed
        """
        url = self.url if url is None else url
        try:
            response = self.client.get(url)
        except httpx.RequestError as e:
            logger.debug(f"Readiness probe of {url} failed: {e}")
            return False

        if response.status_code != 200:
            logger.debug(f"Readiness probe of {url} returned HTTP {response.status_code}")
            return False
        return True

    def wait(self) -> int:
        """Block until the server is ready.

        This never raises for an unavailable server and has no deadline.

        Returns:
            Number of attempts made, including the successful one
        """
        attempts = 0
        while True:
            attempts += 1
            url = self.url
            logger.info(f"Waiting for SonarQube to be available at {url}")
            if self.probe(url):
                break
            self.sleep(self.interval)

        logger.info("SonarQube is ready")
        return attempts
