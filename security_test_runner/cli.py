"""CLI entry point for the security test runner."""

import argparse
import asyncio
import logging
import os
import shutil
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import NoReturn

from pydantic import ValidationError

from security_test_runner.discovery import get_package_manager
from security_test_runner.installer import install_security_tools
from security_test_runner.models.config import RunConfig, environment_settings
from security_test_runner.runner import SecurityTestRunner
from security_test_runner.tools.loading import load_tools

log = logging.getLogger("security_test_runner")

EPILOG = """\
examples:
  security-test-runner                           full security scan
  security-test-runner --quick --verbose         fast scan with details
  security-test-runner --install                 install all tools
  security-test-runner --fix --ci                auto-fix in CI mode
  security-test-runner --json --output-dir ./out JSON report to custom dir
  security-test-runner --fail-fast --no-parallel sequential with early exit

environment variables:
  SNYK_TOKEN             Snyk authentication token
  SECURITY_SCAN_CACHE    enable/disable caching (true/false)
"""


class UsageError(Exception):
    """Raised for unknown or invalid command-line arguments."""


class ArgumentParser(argparse.ArgumentParser):
    """Parser that raises instead of exiting with argparse's status 2."""

    def error(self, message: str) -> NoReturn:
        """Raise a UsageError for the caller to report."""
        raise UsageError(message)


def build_parser() -> ArgumentParser:
    """Build the command-line parser."""
    parser = ArgumentParser(
        prog="security-test-runner",
        description="Run available security scanners and report the results",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument(
        "--quick", action="store_true", help="Fast mode (core checks only)"
    )
    parser.add_argument(
        "--fix", action="store_true", help="Auto-fix issues when possible"
    )
    parser.add_argument(
        "--install", action="store_true", help="Install security tools"
    )
    parser.add_argument(
        "--ci",
        action="store_true",
        help="CI/CD mode (minimal output, strict exit codes)",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument("--skip-snyk", action="store_true", help="Skip Snyk testing")
    parser.add_argument(
        "--skip-cache", action="store_true", help="Skip cache, force fresh scans"
    )
    parser.add_argument(
        "--fail-fast", action="store_true", help="Exit on first test failure"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results in JSON format",
    )
    parser.add_argument(
        "--no-parallel",
        action="store_false",
        dest="parallel",
        help="Disable parallel test execution",
    )
    parser.add_argument(
        "--max-parallel",
        type=int,
        default=4,
        metavar="N",
        help="Max parallel tests (default: 4)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=300,
        metavar="N",
        help="Test timeout in seconds (default: 300)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("security-reports"),
        metavar="DIR",
        help="Report output directory (default: security-reports)",
    )
    return parser


def parse_config(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> RunConfig:
    """Parse arguments and environment into a RunConfig.

    Raises:
        UsageError: On unknown arguments or invalid values

    """
    args = build_parser().parse_args(argv)
    try:
        settings = environment_settings(os.environ if environ is None else environ)
        return RunConfig(**vars(args), **settings)
    except (ValidationError, ValueError) as exc:
        raise UsageError(str(exc)) from exc


async def run(config: RunConfig) -> int:
    """Run the security tests (or install tools) and return the exit code."""
    log.info("=" * 80)
    log.info("Security Testing")
    log.info("=" * 80)

    if config.install:
        package_manager = get_package_manager()
        if package_manager is None:
            log.error("No package manager found (npm/yarn/pnpm)")
            return 1
        await install_security_tools(package_manager)
        return 0

    runner = SecurityTestRunner(config=config, tools=load_tools(), which=shutil.which)
    return await runner.run()


def configure_logging(config: RunConfig) -> None:
    """Configure root logging for the run."""
    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main() -> None:
    """CLI entry point."""
    try:
        config = parse_config()
    except UsageError as exc:
        logging.basicConfig(stream=sys.stderr)
        log.error("%s", exc)
        print("Use --help for available options", file=sys.stderr)
        sys.exit(1)

    configure_logging(config)

    exit_code = asyncio.run(run(config))
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
