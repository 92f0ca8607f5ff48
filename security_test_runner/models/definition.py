"""Models for the tests a run will execute."""

from dataclasses import dataclass, field

from security_test_runner.tools.base import SecurityTool


@dataclass(frozen=True, kw_only=True)
class TestDefinition:
    """One scan to run: a shell command plus the tool that interprets it."""

    __test__ = False

    id: str
    name: str
    command: str
    description: str
    tool: SecurityTool = field(repr=False, compare=False)
