"""OSV vulnerability database scanner."""

from dataclasses import dataclass

from security_test_runner.models.config import RunConfig
from security_test_runner.tools.base import PackageManager, SecurityTool


@dataclass(frozen=True, kw_only=True)
class OsvScannerTool(SecurityTool):
    """Scan the npm lockfile against the OSV database."""

    id: str = "osv"
    name: str = "OSV Scanner"
    description: str = "Scan for known vulnerabilities"
    executable: str | None = "osv-scanner"
    lockfile: str = "package-lock.json"

    def build_command(self, package_manager: PackageManager, config: RunConfig) -> str:
        """Scan the lockfile and emit JSON."""
        return f"osv-scanner --lockfile {self.lockfile} --format json"


osv_scanner = OsvScannerTool()
