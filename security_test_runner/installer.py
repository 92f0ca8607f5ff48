"""Install the security tools the runner knows about."""

import asyncio
import logging
import shutil
from collections.abc import Mapping, Sequence

from security_test_runner.tools.base import PackageManager, Which

log = logging.getLogger(__name__)

# executable -> package published to the npm registry
NPM_PACKAGES: Mapping[str, str] = {
    "snyk": "snyk",
    "retire": "retire",
    "audit-ci": "audit-ci",
}

# executable -> installation instructions for tools not on the npm registry
MANUAL_INSTALLS: Mapping[str, str] = {
    "trunk": "https://docs.trunk.io/cli/installation",
    "osv-scanner": "https://github.com/google/osv-scanner/releases",
}

VERIFIED_TOOLS: Sequence[str] = ("snyk", "trunk", "osv-scanner", "retire", "audit-ci")

GLOBAL_INSTALL_ARGS: Mapping[PackageManager, Sequence[str]] = {
    "npm": ("install", "-g"),
    "pnpm": ("add", "-g"),
    "yarn": ("global", "add"),
}


async def install_tool(package_manager: PackageManager, package: str) -> bool:
    """Install a package globally, returning whether it succeeded."""
    process = await asyncio.create_subprocess_exec(
        package_manager,
        *GLOBAL_INSTALL_ARGS[package_manager],
        package,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    stdout, _ = await process.communicate()

    if process.returncode != 0:
        log.warning(
            "Failed to install %s: %s", package, stdout.decode(errors="replace").strip()
        )
        return False
    return True


async def install_security_tools(
    package_manager: PackageManager, which: Which = shutil.which
) -> int:
    """Install missing tools and return the number available afterwards."""
    log.info("Using package manager: %s", package_manager)

    for executable, package in NPM_PACKAGES.items():
        if which(executable) is not None:
            log.info("%s already installed", executable)
            continue
        log.info("Installing %s...", executable)
        try:
            installed = await install_tool(package_manager, package)
        except OSError as exc:
            log.warning("Failed to install %s: %s", executable, exc)
            continue
        if installed:
            log.info("%s installed successfully", executable)

    for executable, url in MANUAL_INSTALLS.items():
        if which(executable) is None:
            log.warning("Please install %s manually: %s", executable, url)

    log.info("=" * 80)
    log.info("Verification:")
    log.info("=" * 80)

    available = 0
    for executable in VERIFIED_TOOLS:
        if which(executable) is not None:
            log.info("%s: installed", executable)
            available += 1
        else:
            log.warning("%s: not found", executable)

    log.info(
        "Installation complete: %d/%d tools available", available, len(VERIFIED_TOOLS)
    )
    return available
