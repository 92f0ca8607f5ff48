"""Detect the package manager and scanners available on this host."""

import logging
import shutil
from collections.abc import Sequence
from dataclasses import dataclass

from security_test_runner.errors import PackageManagerNotFoundError
from security_test_runner.models.config import RunConfig
from security_test_runner.tools.base import PackageManager, SecurityTool, Which

log = logging.getLogger(__name__)

PACKAGE_MANAGERS: Sequence[PackageManager] = ("npm", "yarn", "pnpm")


@dataclass(frozen=True, kw_only=True)
class ToolAvailability:
    """Tool ids split by whether they can run on this host."""

    available: Sequence[str]
    missing: Sequence[str]

    def is_available(self, tool_id: str) -> bool:
        """Check whether a tool id was found."""
        return tool_id in self.available


def get_package_manager(which: Which = shutil.which) -> PackageManager | None:
    """Return the first supported package manager on the search path."""
    for package_manager in PACKAGE_MANAGERS:
        if which(package_manager) is not None:
            return package_manager
    return None


def require_package_manager(which: Which = shutil.which) -> PackageManager:
    """Return the package manager or raise if none is installed.

    Raises:
        PackageManagerNotFoundError: If none of npm, yarn or pnpm is found

    """
    package_manager = get_package_manager(which)
    if package_manager is None:
        raise PackageManagerNotFoundError(
            "No package manager found. Please install npm, yarn, or pnpm."
        )
    return package_manager


def discover_tools(
    tools: Sequence[SecurityTool],
    config: RunConfig,
    which: Which = shutil.which,
) -> ToolAvailability:
    """Probe each tool without side effects."""
    available: list[str] = []
    missing: list[str] = []

    for tool in tools:
        if tool.is_available(which, config):
            available.append(tool.id)
        else:
            missing.append(tool.id)

    log.debug("Available tools: %s", ", ".join(available) or "none")
    if missing:
        log.info("Missing tools: %s", ", ".join(missing))

    return ToolAvailability(available=tuple(available), missing=tuple(missing))
