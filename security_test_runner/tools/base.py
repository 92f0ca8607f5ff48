"""Abstract base class for security scanning tools."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import ClassVar, Literal, TypeAlias

from security_test_runner.models.config import RunConfig

PackageManager: TypeAlias = Literal["npm", "yarn", "pnpm"]
Which: TypeAlias = Callable[[str], str | None]


@dataclass(frozen=True, kw_only=True)
class Verdict:
    """Effective outcome of a test after the tool inspected its output."""

    exit_code: int
    message: str | None = None
    warning: bool = False


@dataclass(frozen=True, kw_only=True)
class SecurityTool(ABC):
    """A third-party scanner the runner knows how to invoke.

    Each tool is a small variant that knows how to build its shell command
    for a given configuration and how to interpret the subprocess outcome.
    Tools with ``executable=None`` run through the package manager and are
    available whenever one is resolvable. Only tools that set
    ``inspects_output`` receive the captured output in ``classify_result``.
    """

    inspects_output: ClassVar[bool] = False

    id: str
    name: str
    description: str
    executable: str | None
    secondary: bool = False

    def is_available(self, which: Which, config: RunConfig) -> bool:
        """Check whether the tool can run on this host."""
        return self.executable is None or which(self.executable) is not None

    def is_skipped(self, config: RunConfig) -> bool:
        """Check whether the configuration explicitly skips this tool."""
        return False

    @abstractmethod
    def build_command(self, package_manager: PackageManager, config: RunConfig) -> str:
        """Build the shell command to execute.

        Args:
            package_manager: Resolved package manager (npm, yarn or pnpm)
            config: Run configuration

        Returns:
            Shell command string, run from the project root

        """

    def classify_result(self, exit_code: int, output: str) -> Verdict:
        """Map a raw exit code and captured output to an effective verdict."""
        return Verdict(exit_code=exit_code)
