"""Tests for run summaries and report files."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from security_test_runner.models.result import TestResult
from security_test_runner.reporting import (
    EnvironmentInfo,
    RunSummary,
    build_json_report,
    get_environment,
    log_results_summary,
    render_text_report,
    summarize,
    write_reports,
)
from security_test_runner.testing.factories import TestResultFactory

TIMESTAMP = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)
ENVIRONMENT = EnvironmentInfo(
    os="Linux", arch="x86_64", hostname="ci-runner", release="6.8.0"
)


@pytest.fixture
def results(tmp_path: Path) -> list[TestResult]:
    """Two passing tests and one failure, in definition order."""
    return [
        TestResult(
            id="npm-audit",
            name="NPM Audit",
            exit_code=0,
            duration=3.2,
            output_file=tmp_path / "test-npm-audit.log",
        ),
        TestResult(
            id="osv",
            name="OSV Scanner",
            exit_code=1,
            raw_exit_code=1,
            duration=1.0,
            output_file=tmp_path / "test-osv.log",
        ),
        TestResult(
            id="snyk",
            name="Snyk Test",
            exit_code=0,
            raw_exit_code=2,
            duration=7.5,
            output_file=tmp_path / "test-snyk.log",
            message="bypassed: monthly limit reached but scan completed",
        ),
    ]


@pytest.fixture
def summary(results: list[TestResult]) -> RunSummary:
    """Summary for the standard results."""
    return summarize(results, 8.4, TIMESTAMP, ENVIRONMENT)


def test_summarize_counts(summary: RunSummary) -> None:
    """Counts come from effective exit codes."""
    assert summary.total == 3
    assert summary.passed == 2
    assert summary.failed == 1
    assert summary.total == summary.passed + summary.failed
    assert summary.success_rate == 66.67
    assert summary.succeeded is False


def test_summarize_empty() -> None:
    """No results gives a zero success rate instead of dividing by zero."""
    summary = summarize([], 0.0, TIMESTAMP, ENVIRONMENT)

    assert summary.total == 0
    assert summary.success_rate == 0.0
    assert summary.succeeded is True


def test_get_environment_describes_host() -> None:
    """Environment fields are populated."""
    environment = get_environment()

    assert environment.os
    assert environment.hostname


def test_text_report_lists_tests_in_order(
    summary: RunSummary, results: list[TestResult], tmp_path: Path
) -> None:
    """Text report has the summary block and one line per test."""
    text = render_text_report(summary, results, tmp_path)

    assert "Security Test Report" in text
    assert "Environment: Linux 6.8.0" in text
    assert "Total Tests:     3" in text
    assert "Passed:          2 (66%)" in text
    assert "Failed:          1 (33%)" in text
    assert "Total Duration:  8s" in text

    lines = text.splitlines()
    audit = next(i for i, line in enumerate(lines) if line.startswith("NPM Audit"))
    assert lines[audit] == f"{'NPM Audit':<40} ✅ PASS (3s)"
    assert lines[audit + 1] == f"{'OSV Scanner':<40} ❌ FAIL (1s)"
    assert lines[audit + 2] == f"{'Snyk Test':<40} ✅ PASS (8s)"
    assert f"{tmp_path}/test-*.log" in text


def test_json_report_structure(
    summary: RunSummary, results: list[TestResult]
) -> None:
    """JSON report has version, environment, summary and tests."""
    report = build_json_report(summary, results).model_dump(mode="json")

    assert report["version"] == "3.0.0"
    assert report["timestamp"] == "2026-03-14T09:26:53Z"
    assert report["environment"] == {
        "os": "Linux",
        "arch": "x86_64",
        "hostname": "ci-runner",
    }
    assert report["summary"] == {
        "total": 3,
        "passed": 2,
        "failed": 1,
        "duration": 8.4,
        "success_rate": 66.67,
    }
    assert [t["id"] for t in report["tests"]] == ["npm-audit", "osv", "snyk"]
    assert report["tests"][1] == {
        "id": "osv",
        "name": "OSV Scanner",
        "status": "failed",
        "exit_code": 1,
        "duration": 1.0,
        "output_file": str(results[1].output_file),
    }


def test_json_summary_invariants() -> None:
    """total equals passed + failed and success_rate is rounded."""
    results = [TestResultFactory.build(exit_code=code) for code in (0, 0, 1, 0, 0, 1)]
    summary = summarize(results, 1.0, TIMESTAMP, ENVIRONMENT)

    report = build_json_report(summary, results)

    assert report.summary.total == report.summary.passed + report.summary.failed
    assert report.summary.success_rate == round(4 * 100 / 6, 2)


def test_write_reports_creates_directory(
    summary: RunSummary, results: list[TestResult], tmp_path: Path
) -> None:
    """Output directory is created on demand; JSON only when asked."""
    output_dir = tmp_path / "nested" / "reports"

    paths = write_reports(summary, results, output_dir, json_output=False)

    assert paths.text is not None
    assert paths.text.parent == output_dir
    assert paths.text.name.startswith("security-report-")
    assert paths.text.suffix == ".txt"
    assert paths.json is None
    assert list(output_dir.glob("*.json")) == []


def test_write_reports_with_json(
    summary: RunSummary, results: list[TestResult], tmp_path: Path
) -> None:
    """Text and JSON reports share a timestamp."""
    paths = write_reports(summary, results, tmp_path, json_output=True)

    assert paths.text is not None
    assert paths.json is not None
    assert paths.text.stem == paths.json.stem
    data = json.loads(paths.json.read_text())
    assert data["summary"]["total"] == 3


def test_write_reports_does_not_raise_on_failure(
    summary: RunSummary,
    results: list[TestResult],
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """An unusable output directory is logged, not raised."""
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")

    with caplog.at_level(logging.ERROR):
        paths = write_reports(summary, results, blocker / "reports")

    assert paths.text is None
    assert paths.json is None
    assert "Cannot create report directory" in caplog.text


def test_log_results_summary(
    summary: RunSummary,
    results: list[TestResult],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Logs one status line per test plus messages."""
    with caplog.at_level(logging.INFO):
        log_results_summary(logging.getLogger(), summary, results)

    assert "Test Results Summary:" in caplog.text
    assert "✅ npm-audit: passed (3.20s)" in caplog.text
    assert "❌ osv: failed (1.00s)" in caplog.text
    assert "Message: bypassed: monthly limit reached" in caplog.text
    assert "Security tests failed" in caplog.text


def test_log_results_summary_ci_mode(
    summary: RunSummary,
    results: list[TestResult],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """CI mode uses plain status markers."""
    with caplog.at_level(logging.INFO):
        log_results_summary(logging.getLogger(), summary, results, ci=True)

    assert "[PASS] npm-audit: passed" in caplog.text
    assert "[FAIL] osv: failed" in caplog.text
