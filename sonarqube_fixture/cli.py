#!/usr/bin/env python3
"""
Command line interface for the SonarQube fixture.

Lets a shell script or CI job drive the same lifecycle the test fixture uses,
e.g.::

    sonarqube-fixture --install-dir /opt/sonarqube --port 9000 start --wait
    sonarqube-fixture --install-dir /opt/sonarqube create-project my-project
    sonarqube-fixture --install-dir /opt/sonarqube stop
"""

import argparse
from collections.abc import Mapping, Sequence
import logging
import os
import sys

from sonarqube_fixture.controller import SonarQube
from sonarqube_fixture.errors import ConfigurationError, SonarQubeFixtureError
from sonarqube_fixture.settings import ENV_VARIABLES, FixtureSettings
from sonarqube_fixture.utils.properties import read_properties

logger = logging.getLogger(__name__)


def setup_logging(level: str = "info") -> None:
    """Set up logging configuration.

    Note:
        Uses basicConfig which only takes effect on first call.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def parse_property(text: str) -> tuple[str, str]:
    """Parse a KEY=VALUE command line argument."""
    key, separator, value = text.partition("=")
    if not separator or not key:
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got {text!r}")
    return key, value


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sonarqube-fixture",
        description="Drive an installed SonarQube distribution for integration tests",
    )
    parser.add_argument(
        "--install-dir",
        help=f"Root of the unpacked distribution (default: ${ENV_VARIABLES['install_dir']})",
    )
    parser.add_argument(
        "--port",
        type=int,
        help=f"Web port (default: ${ENV_VARIABLES['port']} or 9000)",
    )
    parser.add_argument(
        "--host",
        help=f"Address to bind to (default: ${ENV_VARIABLES['host']} or 127.0.0.1)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        help="Seconds between two readiness probes (default: 5)",
    )
    parser.add_argument(
        "--property",
        "-D",
        action="append",
        type=parse_property,
        default=[],
        metavar="KEY=VALUE",
        help="Additional server property (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        default="info",
        help="Log level (default: info)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    start = subparsers.add_parser("start", help="Write the configuration and start the server")
    start.add_argument("--wait", action="store_true", help="Wait until the server is ready")
    start.add_argument(
        "--plugin",
        help=f"Plugin artifact to install before starting (default: ${ENV_VARIABLES['plugin']})",
    )

    subparsers.add_parser("stop", help="Stop the server (never fails)")
    subparsers.add_parser("wait", help="Wait until the server answers on its root URL")

    install = subparsers.add_parser("install-plugin", help="Copy a plugin into the distribution")
    install.add_argument("artifact", help="Plugin file to install")

    create = subparsers.add_parser("create-project", help="Create a project on the server")
    create.add_argument("key", help="Project key")
    create.add_argument("name", nargs="?", help="Project name (default: the key)")

    subparsers.add_parser("show-config", help="Print the written conf/sonar.properties")

    return parser


def settings_from_args(
    args: argparse.Namespace, environ: Mapping[str, str] | None = None
) -> FixtureSettings:
    """Combine command line arguments with environment defaults.

    Raises:
        ConfigurationError: If the settings are incomplete or invalid
    """
    environ = os.environ if environ is None else environ
    values = {field: environ.get(variable) or None for field, variable in ENV_VARIABLES.items()}
    overrides = {
        "install_dir": args.install_dir,
        "port": args.port,
        "host": args.host,
        "poll_interval": args.poll_interval,
        "plugin": getattr(args, "plugin", None),
        "properties": dict(args.property) if args.property else None,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    if not values.get("install_dir"):
        raise ConfigurationError(f"--install-dir or ${ENV_VARIABLES['install_dir']} is required")
    return FixtureSettings.load(**values)


def run_command(controller: SonarQube, args: argparse.Namespace, settings: FixtureSettings) -> int:
    """Run the selected subcommand.

    Returns:
        Process exit status
    """
    if args.command == "start":
        if settings.plugin is not None:
            controller.install_plugin(settings.plugin)
        controller.start()
        if args.wait:
            controller.wait_for_ready()
    elif args.command == "stop":
        controller.stop()
    elif args.command == "wait":
        controller.wait_for_ready()
    elif args.command == "install-plugin":
        controller.install_plugin(args.artifact)
    elif args.command == "create-project":
        if not controller.create_project(args.key, args.name or args.key):
            print(f"Failed to create project {args.key!r}", file=sys.stderr)
            return 1
    elif args.command == "show-config":
        for key, value in sorted(read_properties(controller.config_path).items()):
            print(f"{key}={value}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the command line interface."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        settings = settings_from_args(args)
        controller = SonarQube.from_settings(settings)
        try:
            return run_command(controller, args, settings)
        finally:
            controller.close()
    except KeyboardInterrupt:
        print("\nInterrupted!", file=sys.stderr)
        return 1
    except (SonarQubeFixtureError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
