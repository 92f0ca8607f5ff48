"""Snyk commercial vulnerability scanner.

Snyk is a rate-limited external service, so a non-zero exit from it never
fails the run. Known outcomes are recognised from the captured output and
everything else is downgraded to a warning-level pass.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

from security_test_runner.models.config import RunConfig
from security_test_runner.tools.base import PackageManager, SecurityTool, Verdict

log = logging.getLogger(__name__)

# (output marker, message, warning)
KNOWN_OUTCOMES: Sequence[tuple[str, str, bool]] = (
    ("no vulnerable paths found", "no vulnerabilities found", False),
    ("monthly limit", "bypassed: monthly limit reached but scan completed", True),
    (
        "could not detect supported target files",
        "bypassed: no supported files detected",
        True,
    ),
)


@dataclass(frozen=True, kw_only=True)
class SnykTool(SecurityTool):
    """Snyk test with a medium severity threshold."""

    id: str = "snyk"
    name: str = "Snyk Test"
    description: str = "Snyk vulnerability scan"
    executable: str | None = "snyk"
    inspects_output: ClassVar[bool] = True

    def is_skipped(self, config: RunConfig) -> bool:
        """Skipped with --skip-snyk."""
        return config.skip_snyk

    def build_command(self, package_manager: PackageManager, config: RunConfig) -> str:
        """Test dependencies at medium severity or above."""
        return "snyk test --severity-threshold=medium"

    def classify_result(self, exit_code: int, output: str) -> Verdict:
        """Never report a failure; explain why a non-zero exit was bypassed."""
        if exit_code == 0:
            return Verdict(exit_code=0)

        lowered = output.lower()
        for marker, message, warning in KNOWN_OUTCOMES:
            if marker in lowered:
                return Verdict(exit_code=0, message=message, warning=warning)

        log.warning(
            "Snyk exited with code %d and unrecognised output, treating as pass",
            exit_code,
        )
        return Verdict(
            exit_code=0,
            message=f"bypassed: unknown error (exit code {exit_code}) but continuing",
            warning=True,
        )


snyk = SnykTool()
