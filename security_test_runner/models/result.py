"""Models for test execution results."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Result of a single test execution.

    ``exit_code`` is the effective code after the tool classified its output;
    ``raw_exit_code`` is what the subprocess actually returned.
    """

    __test__ = False

    id: str
    name: str
    exit_code: int
    duration: float
    output_file: Path
    raw_exit_code: int = 0
    message: str | None = None
    timed_out: bool = False

    @property
    def status(self) -> Literal["passed", "failed"]:
        """Status string used in reports."""
        return "passed" if self.exit_code == 0 else "failed"

    @property
    def passed(self) -> bool:
        """Whether the effective result is a pass."""
        return self.exit_code == 0
