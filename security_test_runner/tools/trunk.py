"""Trunk lint and security aggregator."""

from dataclasses import dataclass

from security_test_runner.models.config import RunConfig
from security_test_runner.tools.base import PackageManager, SecurityTool


@dataclass(frozen=True, kw_only=True)
class TrunkTool(SecurityTool):
    """Trunk check across all files."""

    id: str = "trunk"
    name: str = "Trunk Security"
    description: str = "Comprehensive security checks"
    executable: str | None = "trunk"

    def build_command(self, package_manager: PackageManager, config: RunConfig) -> str:
        """Run every linter, applying fixes in fix mode."""
        command = "trunk check --all --no-progress"
        if config.fix:
            command += " --fix"
        return command


trunk = TrunkTool()
