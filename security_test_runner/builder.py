"""Build the ordered list of tests for a run."""

import logging
from collections.abc import Sequence

from security_test_runner.discovery import ToolAvailability
from security_test_runner.errors import DuplicateTestError, NoTestsAvailableError
from security_test_runner.models.config import RunConfig
from security_test_runner.models.definition import TestDefinition
from security_test_runner.tools.base import PackageManager, SecurityTool

log = logging.getLogger(__name__)


def build_test_list(
    tools: Sequence[SecurityTool],
    availability: ToolAvailability,
    package_manager: PackageManager,
    config: RunConfig,
) -> Sequence[TestDefinition]:
    """Select and configure the tests to run, preserving tool order.

    Args:
        tools: Known tools in definition order
        availability: Result of tool discovery
        package_manager: Resolved package manager
        config: Run configuration

    Returns:
        Test definitions in the order they should be reported

    Raises:
        NoTestsAvailableError: If no tool qualifies
        DuplicateTestError: If two tools share an id

    """
    definitions: list[TestDefinition] = []
    seen: set[str] = set()

    for tool in tools:
        if not availability.is_available(tool.id):
            continue
        if tool.is_skipped(config):
            log.info("Skipping %s (disabled by configuration)", tool.name)
            continue
        if config.quick and tool.secondary:
            log.debug("Skipping %s in quick mode", tool.name)
            continue
        if tool.id in seen:
            raise DuplicateTestError(f"Duplicate test id: {tool.id}")
        seen.add(tool.id)

        definitions.append(
            TestDefinition(
                id=tool.id,
                name=tool.name,
                command=tool.build_command(package_manager, config),
                description=tool.description,
                tool=tool,
            )
        )

    if not definitions:
        raise NoTestsAvailableError(
            "No tests available. Please install security tools (run with --install)."
        )

    return definitions
