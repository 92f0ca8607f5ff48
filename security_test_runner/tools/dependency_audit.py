"""Package manager based checks: dependency audit and license listing."""

from collections.abc import Mapping
from dataclasses import dataclass

from security_test_runner.models.config import RunConfig
from security_test_runner.tools.base import PackageManager, SecurityTool, Which

AUDIT_COMMANDS: Mapping[PackageManager, str] = {
    "npm": "npm audit --audit-level=moderate",
    "pnpm": "pnpm audit --audit-level moderate",
    "yarn": "yarn audit --level moderate",
}

FIX_COMMANDS: Mapping[PackageManager, str] = {
    "npm": "npm audit fix --audit-level=moderate",
    "pnpm": "pnpm audit --audit-level moderate --fix",
}


@dataclass(frozen=True, kw_only=True)
class DependencyAuditTool(SecurityTool):
    """Baseline dependency audit, always part of a run."""

    id: str = "npm-audit"
    name: str = "NPM Audit"
    description: str = "Check npm dependencies for vulnerabilities"
    executable: str | None = None

    def build_command(self, package_manager: PackageManager, config: RunConfig) -> str:
        """Build the audit command, with remediation when fix mode is on."""
        command = AUDIT_COMMANDS[package_manager]
        if config.fix:
            # yarn classic has no audit remediation flag
            command = FIX_COMMANDS.get(package_manager, command)
        if package_manager == "npm" and not config.use_cache:
            command += " --prefer-online"
        return command


@dataclass(frozen=True, kw_only=True)
class LicenseCheckTool(SecurityTool):
    """List top-level packages so their licenses can be reviewed."""

    id: str = "licenses"
    name: str = "License Check"
    description: str = "Check package licenses"
    executable: str | None = None
    secondary: bool = True

    def is_available(self, which: Which, config: RunConfig) -> bool:
        """Available only for projects with a package.json."""
        return (config.project_root / "package.json").is_file()

    def build_command(self, package_manager: PackageManager, config: RunConfig) -> str:
        """List direct dependencies as JSON."""
        return f"{package_manager} list --depth=0 --json"


dependency_audit = DependencyAuditTool()
license_check = LicenseCheckTool()
