"""Summaries and report files for a completed run."""

import logging
import platform
import socket
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from pydantic import Field

from security_test_runner.models.base import Model
from security_test_runner.models.result import TestResult

log = logging.getLogger(__name__)

REPORT_VERSION = "3.0.0"
REPORT_TITLE = "Security Test Report"
REPORT_WIDTH = 80
FILENAME_TIMESTAMP = "%Y%m%d_%H%M%S"

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
}

CI_STATUS_SYMBOLS = {
    "passed": "[PASS]",
    "failed": "[FAIL]",
}


@dataclass(frozen=True, kw_only=True)
class EnvironmentInfo:
    """Host the run executed on."""

    os: str
    arch: str
    hostname: str
    release: str = ""


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Aggregate counts for a run, derived from its results."""

    total: int
    passed: int
    failed: int
    duration: float
    timestamp: datetime
    environment: EnvironmentInfo

    @property
    def success_rate(self) -> float:
        """Percentage of passed tests, rounded to 2 decimals."""
        if self.total == 0:
            return 0.0
        return round(self.passed * 100 / self.total, 2)

    @property
    def succeeded(self) -> bool:
        """Whether every test passed."""
        return self.failed == 0


@dataclass(frozen=True, kw_only=True)
class ReportPaths:
    """Files written by write_reports; None when a file was not written."""

    text: Path | None
    json: Path | None = None


class JsonEnvironment(Model):
    """Environment block of the JSON report."""

    os: str
    arch: str
    hostname: str


class JsonSummary(Model):
    """Summary block of the JSON report."""

    total: int
    passed: int
    failed: int
    duration: float
    success_rate: float


class JsonTest(Model):
    """Per-test entry of the JSON report."""

    id: str
    name: str
    status: Literal["passed", "failed"]
    exit_code: int
    duration: float
    output_file: str


class JsonReport(Model):
    """Machine readable report written with --json."""

    version: str = Field(default=REPORT_VERSION)
    timestamp: str
    environment: JsonEnvironment
    summary: JsonSummary
    tests: Sequence[JsonTest]


def get_environment() -> EnvironmentInfo:
    """Describe the current host."""
    return EnvironmentInfo(
        os=platform.system(),
        arch=platform.machine(),
        hostname=socket.gethostname(),
        release=platform.release(),
    )


def summarize(
    results: Sequence[TestResult],
    duration: float,
    timestamp: datetime,
    environment: EnvironmentInfo,
) -> RunSummary:
    """Compute the run summary from the final results."""
    passed = sum(1 for result in results if result.passed)
    return RunSummary(
        total=len(results),
        passed=passed,
        failed=len(results) - passed,
        duration=duration,
        timestamp=timestamp,
        environment=environment,
    )


def _percentage(count: int, total: int) -> int:
    return count * 100 // total if total else 0


def render_text_report(
    summary: RunSummary,
    results: Sequence[TestResult],
    output_dir: Path,
) -> str:
    """Render the human readable report."""
    rule = "=" * REPORT_WIDTH
    thin_rule = "-" * REPORT_WIDTH
    env = summary.environment

    lines = [
        rule,
        REPORT_TITLE.center(REPORT_WIDTH).rstrip(),
        rule,
        "",
        f"Generated: {summary.timestamp.astimezone().strftime('%Y-%m-%d %H:%M:%S %Z')}",
        f"Script Version: {REPORT_VERSION}",
        f"Environment: {env.os} {env.release}".rstrip(),
        "",
        rule,
        "",
        "SUMMARY",
        thin_rule,
        f"Total Tests:     {summary.total}",
        f"Passed:          {summary.passed} "
        f"({_percentage(summary.passed, summary.total)}%)",
        f"Failed:          {summary.failed} "
        f"({_percentage(summary.failed, summary.total)}%)",
        f"Total Duration:  {summary.duration:.0f}s",
        "",
        rule,
        "",
        "TEST RESULTS",
        thin_rule,
    ]

    for result in results:
        status = "✅ PASS" if result.passed else "❌ FAIL"
        lines.append(f"{result.name:<40} {status} ({result.duration:.0f}s)")

    lines.extend(
        [
            "",
            rule,
            "",
            "For detailed output of each test, see:",
            f"{output_dir}/test-*.log",
            "",
        ]
    )
    return "\n".join(lines)


def build_json_report(
    summary: RunSummary, results: Sequence[TestResult]
) -> JsonReport:
    """Build the structured report."""
    timestamp = summary.timestamp.astimezone(timezone.utc)
    return JsonReport(
        timestamp=timestamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
        environment=JsonEnvironment(
            os=summary.environment.os,
            arch=summary.environment.arch,
            hostname=summary.environment.hostname,
        ),
        summary=JsonSummary(
            total=summary.total,
            passed=summary.passed,
            failed=summary.failed,
            duration=round(summary.duration, 2),
            success_rate=summary.success_rate,
        ),
        tests=[
            JsonTest(
                id=result.id,
                name=result.name,
                status=result.status,
                exit_code=result.exit_code,
                duration=round(result.duration, 2),
                output_file=str(result.output_file),
            )
            for result in results
        ],
    )


def write_reports(
    summary: RunSummary,
    results: Sequence[TestResult],
    output_dir: Path,
    *,
    json_output: bool = False,
) -> ReportPaths:
    """Write the text report, and the JSON report when requested.

    Write errors are logged rather than raised; the affected path is None.
    """
    stamp = summary.timestamp.astimezone().strftime(FILENAME_TIMESTAMP)
    text_path = output_dir / f"security-report-{stamp}.txt"
    json_path = output_dir / f"security-report-{stamp}.json"

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        log.error("Cannot create report directory %s: %s", output_dir, exc)
        return ReportPaths(text=None, json=None)

    written_text = _write(
        text_path, render_text_report(summary, results, output_dir)
    )
    written_json = None
    if json_output:
        report = build_json_report(summary, results)
        written_json = _write(json_path, report.model_dump_json(indent=2) + "\n")

    return ReportPaths(text=written_text, json=written_json)


def _write(path: Path, content: str) -> Path | None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        log.error("Failed to write report %s: %s", path, exc)
        return None
    log.info("Report written: %s", path)
    return path


def log_results_summary(
    log: logging.Logger,
    summary: RunSummary,
    results: Sequence[TestResult],
    *,
    ci: bool = False,
) -> None:
    """Log a formatted summary of test results."""
    symbols = CI_STATUS_SYMBOLS if ci else STATUS_SYMBOLS

    log.info("=" * REPORT_WIDTH)
    log.info("Test Results Summary:")
    log.info("=" * REPORT_WIDTH)

    for result in results:
        log.info(
            "%s %s: %s (%.2fs)",
            symbols[result.status],
            result.id,
            result.status,
            result.duration,
        )
        if result.message:
            log.info("  Message: %s", result.message)

    log.info("Total Tests:  %d", summary.total)
    log.info("Passed:       %d", summary.passed)
    log.info("Failed:       %d", summary.failed)
    log.info("Duration:     %.0fs", summary.duration)

    if summary.succeeded:
        log.info("All security tests passed!")
    else:
        log.error("Security tests failed. Please review the reports.")
