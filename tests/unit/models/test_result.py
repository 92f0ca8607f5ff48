"""Tests for TestResult."""

from security_test_runner.testing.factories import TestResultFactory


def test_zero_exit_code_is_passed() -> None:
    """Status derives from the effective exit code."""
    result = TestResultFactory.build(exit_code=0, raw_exit_code=1)

    assert result.passed is True
    assert result.status == "passed"


def test_non_zero_exit_code_is_failed() -> None:
    """Any non-zero effective exit code is a failure."""
    result = TestResultFactory.build(exit_code=2)

    assert result.passed is False
    assert result.status == "failed"
