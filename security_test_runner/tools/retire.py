"""Retire.js outdated library scanner."""

from dataclasses import dataclass

from security_test_runner.models.config import RunConfig
from security_test_runner.tools.base import PackageManager, SecurityTool


@dataclass(frozen=True, kw_only=True)
class RetireTool(SecurityTool):
    """Detect JavaScript libraries with known vulnerabilities."""

    id: str = "retire"
    name: str = "Retire.js"
    description: str = "Check for outdated libraries"
    executable: str | None = "retire"

    def build_command(self, package_manager: PackageManager, config: RunConfig) -> str:
        """Scan the project root and emit JSON."""
        return "retire --path . --outputformat json"


retire = RetireTool()
