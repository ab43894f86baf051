"""
Pytest configuration and shared fixtures for SonarQube fixture tests.
"""

from collections.abc import Generator
from pathlib import Path
import stat
import tempfile
from unittest.mock import MagicMock, patch

import httpx
import pytest


def write_script(path: Path, content: str = "#!/bin/sh\nexit 0\n", executable: bool = True) -> Path:
    """Create a control script, optionally marked executable."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    mode = path.stat().st_mode
    if executable:
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    else:
        path.chmod(mode & ~(stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))
    return path


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def make_script():
    """Create control scripts in a test distribution."""
    return write_script


@pytest.fixture
def distribution(temp_dir: Path) -> Path:
    """Create an unpacked distribution layout with Linux and Windows scripts."""
    root = temp_dir / "sonarqube"
    (root / "conf").mkdir(parents=True)
    (root / "extensions" / "plugins").mkdir(parents=True)

    write_script(root / "bin" / "linux-x86-64" / "sonar.sh")
    write_script(root / "bin" / "windows-x86-64" / "StartSonar.bat", "@echo off\r\n")
    write_script(root / "bin" / "windows-x86-64" / "StopNTService.bat", "@echo off\r\n")
    return root


@pytest.fixture
def mock_subprocess_run():
    """Mock control script invocations."""

    def mock_run(*args, **kwargs):
        """Mock subprocess.run behavior."""
        result = MagicMock()
        result.returncode = 0
        return result

    with patch("subprocess.run", side_effect=mock_run) as mock:
        yield mock


@pytest.fixture
def recorded_sleeps() -> list[float]:
    """Delays passed to an injected sleep function."""
    return []


@pytest.fixture
def mock_http_client():
    """Create HTTP clients replaying canned responses in order.

    Each response is either a status code or an exception instance to raise.
    The requests a client received are available as ``client.requests``.
    """
    clients = []

    def factory(*responses) -> httpx.Client:
        queue = list(responses)
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            item = queue.pop(0)
            if isinstance(item, Exception):
                raise item
            return httpx.Response(item)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        client.requests = requests
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()
