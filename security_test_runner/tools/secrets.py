"""Pattern based secret detection using grep."""

import shlex
from collections.abc import Sequence
from dataclasses import dataclass, field

from security_test_runner.models.config import RunConfig
from security_test_runner.tools.base import PackageManager, SecurityTool, Verdict

SECRET_PATTERN = "(password|secret|token|api_key|apikey).*="
GREP_ERROR_EXIT_CODE = 2


@dataclass(frozen=True, kw_only=True)
class SecretScanTool(SecurityTool):
    """Grep the project for credential-looking assignments.

    The exit code is reported as grep returns it.
    """

    id: str = "secrets"
    name: str = "Secret Scan"
    description: str = "Manual secret detection"
    executable: str | None = "grep"
    secondary: bool = True
    pattern: str = SECRET_PATTERN
    excluded_dirs: Sequence[str] = field(default=("node_modules", ".git"))

    def build_command(self, package_manager: PackageManager, config: RunConfig) -> str:
        """Search recursively, skipping vendored code and our own reports."""
        excluded = [*self.excluded_dirs, config.output_dir.name]
        parts = ["grep", "-rIE"]
        parts.extend(f"--exclude-dir={shlex.quote(d)}" for d in excluded if d)
        parts.extend([shlex.quote(self.pattern), "."])
        return " ".join(parts)

    def classify_result(self, exit_code: int, output: str) -> Verdict:
        """Keep grep's exit code, noting when grep itself failed."""
        if exit_code >= GREP_ERROR_EXIT_CODE:
            return Verdict(exit_code=exit_code, message="grep failed")
        return Verdict(exit_code=exit_code)


secret_scan = SecretScanTool()
