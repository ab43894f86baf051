"""
Control script resolution for SonarQube distributions.

A distribution ships one directory of control scripts per platform under
``bin/<os>-<arch>/``. This module maps an operating system name, a CPU
architecture and a lifecycle action to the script to run. Host detection is
kept separate so that every resolution can be exercised for any platform.
"""

from enum import Enum
import logging
import os
from pathlib import Path
import platform
import re

from sonarqube_fixture.config import DISTRIBUTION_PATHS
from sonarqube_fixture.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """Lifecycle actions understood by the control scripts."""

    START = "start"
    STOP = "stop"


class OsFamily(Enum):
    """Families of operating systems with distinct control scripts."""

    WINDOWS = "windows"
    UNIX = "unix"


# Normalized OS names that use the shared shell script
UNIX_OS_NAMES = frozenset(
    {
        "linux",
        "mac os x",
        "darwin",
        "freebsd",
        "openbsd",
        "netbsd",
        "sunos",
        "solaris",
        "aix",
        "hp-ux",
    }
)

WINDOWS_SCRIPTS = {
    Action.START.value: "StartSonar.bat",
    # Provisional: stopping a Windows install may need another mechanism
    Action.STOP.value: "StopNTService.bat",
}

# Never shipped in a distribution, so resolution of an unsupported action fails
UNKNOWN_WINDOWS_SCRIPT = "unknown_action.cmd"

UNIX_SCRIPT = "sonar.sh"

# Python's platform names mapped to the ones the distribution directories use
HOST_OS_NAMES = {"Darwin": "Mac OS X"}
HOST_ARCH_NAMES = {
    "x86_64": "amd64",
    "AMD64": "amd64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "ARM64": "aarch64",
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
}


def normalize_os(os_name: str) -> str:
    """Normalize an operating system name.

    Windows reports more than its family (e.g. 'Windows 10'); anything
    starting with 'windows' becomes 'windows'. Other names are only lowercased.

    Args:
        os_name: Operating system name as reported by the host

    Returns:
        Normalized operating system name
    """
    lowered = os_name.lower()
    if re.match(r"windows.*", lowered):
        return "windows"
    return lowered


def normalize_arch(arch: str) -> str:
    """Normalize a CPU architecture name.

    Only the exact string 'amd64' is rewritten (to 'x86-64'); the comparison
    is case-sensitive and every other value passes through unchanged.
    """
    if arch == "amd64":
        return "x86-64"
    return arch


def os_family(normalized_os: str) -> OsFamily:
    """Classify a normalized operating system name.

    Raises:
        ConfigurationError: If the operating system is not supported
    """
    if normalized_os == "windows":
        return OsFamily.WINDOWS
    if normalized_os in UNIX_OS_NAMES:
        return OsFamily.UNIX
    raise ConfigurationError(f"Unsupported operating system: {normalized_os!r}")


def script_name(family: OsFamily, action: str) -> str:
    """Get the control script file name for an action on an OS family."""
    if family is OsFamily.WINDOWS:
        return WINDOWS_SCRIPTS.get(action, UNKNOWN_WINDOWS_SCRIPT)
    return UNIX_SCRIPT


def platform_directory(os_name: str, arch: str) -> str:
    """Get the name of the ``bin/`` sub-directory for a platform."""
    return f"{normalize_os(os_name)}-{normalize_arch(arch)}"


def resolve_executable(
    install_dir: str | Path, action: str | Action, os_name: str, arch: str
) -> Path:
    """Find the control script to run for an action.

    The script is validated eagerly so that a broken installation is reported
    before any process is spawned.

    Args:
        install_dir: Root of the unpacked distribution
        action: Lifecycle action, e.g. 'start' or 'stop'
        os_name: Operating system name as reported by the host
        arch: CPU architecture as reported by the host

    Returns:
        Path to the control script

    Raises:
        ConfigurationError: If the OS is unsupported, or the script is missing
            or not executable
    """
    action = action.value if isinstance(action, Action) else action
    family = os_family(normalize_os(os_name))
    executable = (
        Path(install_dir)
        / DISTRIBUTION_PATHS["bin"]
        / platform_directory(os_name, arch)
        / script_name(family, action)
    )

    if not executable.exists():
        raise ConfigurationError(
            f"Control script for '{action}' not found: {executable}",
            path=executable,
            action=action,
        )
    if not executable.is_file() or not os.access(executable, os.X_OK):
        raise ConfigurationError(
            f"Control script for '{action}' is not executable: {executable}",
            path=executable,
            action=action,
        )

    logger.debug(f"Resolved '{action}' control script: {executable}")
    return executable


def resolve_command(
    install_dir: str | Path, action: str | Action, os_name: str, arch: str
) -> list[str]:
    """Build the command line that runs an action.

    The shell script shared by unix-like platforms takes the action as its
    first argument; the Windows scripts are dedicated to a single action.

    Returns:
        Command line suitable for ``subprocess.run``

    Raises:
        ConfigurationError: See ``resolve_executable``
    """
    action = action.value if isinstance(action, Action) else action
    executable = resolve_executable(install_dir, action, os_name, arch)
    if os_family(normalize_os(os_name)) is OsFamily.UNIX:
        return [str(executable), action]
    return [str(executable)]


def host_platform() -> tuple[str, str]:
    """Get the running host's OS name and architecture.

    Names are reported the way distribution directories are named, so the
    result can be passed straight to ``resolve_command``.

    Returns:
        Tuple of (os_name, arch)
    """
    system = platform.system()
    machine = platform.machine()
    return HOST_OS_NAMES.get(system, system), HOST_ARCH_NAMES.get(machine, machine)
