"""Loading of security tools from entry points."""

from collections.abc import Sequence
from importlib.metadata import entry_points

from security_test_runner.errors import ToolNotFoundError
from security_test_runner.tools.base import SecurityTool

ENTRY_POINT_GROUP = "security_test_runner.tools"

# Definition order of the built-in tools; plugins without a slot run last.
TOOL_ORDER = ("npm-audit", "trunk", "osv", "snyk", "retire", "secrets", "licenses")


def load_tool(key: str) -> SecurityTool:
    """Load a single tool by key.

    Args:
        key: The tool key as registered in pyproject.toml (e.g., "snyk")

    Returns:
        The tool instance

    Raises:
        ToolNotFoundError: If no tool with the given key is registered

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            tool: SecurityTool = entry.load()
            return tool

    available = [e.name for e in entries]
    raise ToolNotFoundError(f"Tool '{key}' not found. Available tools: {available}")


def load_tools() -> Sequence[SecurityTool]:
    """Load every registered tool in definition order."""
    tools: list[SecurityTool] = [
        entry.load() for entry in entry_points(group=ENTRY_POINT_GROUP)
    ]
    return sorted(tools, key=_order_key)


def _order_key(tool: SecurityTool) -> tuple[int, str]:
    if tool.id in TOOL_ORDER:
        return TOOL_ORDER.index(tool.id), tool.id
    return len(TOOL_ORDER), tool.id
