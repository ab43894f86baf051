#!/usr/bin/env python3
"""
Test runner script for the SonarQube fixture.

Runs the unit and integration suites with a consistent set of pytest options,
either together or one at a time.
"""

import sys
import subprocess
import argparse
from pathlib import Path

TEST_DIRECTORIES = ("unit", "unit/utils", "integration")


def run_command(cmd, description):
    """Run a command and return the result."""
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"Command: {' '.join(cmd)}")
    print(f"{'='*60}")

    result = subprocess.run(cmd, capture_output=True, text=True)

    if result.stdout:
        print("STDOUT:")
        print(result.stdout)

    if result.stderr:
        print("STDERR:")
        print(result.stderr)

    return result.returncode == 0


def find_module(tests_dir, module):
    """Locate a test module by name in the known test directories."""
    for directory in TEST_DIRECTORIES:
        module_path = tests_dir / directory / f'{module}.py'
        if module_path.exists():
            return module_path
    return None


def main():
    parser = argparse.ArgumentParser(description='Run SonarQube fixture tests')
    parser.add_argument('--unit', action='store_true',
                        help='Run unit tests only')
    parser.add_argument('--integration', action='store_true',
                        help='Run integration tests only')
    parser.add_argument('--coverage', action='store_true',
                        help='Run with coverage reporting')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')
    parser.add_argument('--module', '-m', type=str,
                        help='Run tests for specific module (e.g., test_readiness)')
    parser.add_argument('--no-capture', action='store_true',
                        help='Do not capture stdout/stderr (useful for debugging)')

    args = parser.parse_args()

    tests_dir = Path(__file__).parent / 'tests'

    cmd = [sys.executable, '-m', 'pytest']

    if args.verbose:
        cmd.append('-v')

    if args.no_capture:
        cmd.append('-s')

    if args.coverage:
        cmd.extend(['--cov=sonarqube_fixture', '--cov-report=html', '--cov-report=term'])

    if args.module:
        module_path = find_module(tests_dir, args.module)
        if module_path is None:
            searched = ', '.join(f'tests/{directory}/' for directory in TEST_DIRECTORIES)
            print(f"Error: Module {args.module} not found in {searched}")
            return False

        cmd.append(str(module_path))
    elif args.unit:
        cmd.append(str(tests_dir / 'unit'))
    elif args.integration:
        cmd.append(str(tests_dir / 'integration'))
    else:
        cmd.append(str(tests_dir))

    success = run_command(cmd, "SonarQube Fixture Tests")

    if success:
        print("\n✅ All tests passed!")
        return True
    else:
        print("\n❌ Some tests failed!")
        return False


if __name__ == '__main__':
    success = main()
    sys.exit(0 if success else 1)
