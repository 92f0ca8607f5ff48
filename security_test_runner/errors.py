"""Exceptions raised for fatal run preconditions."""


class SecurityTestRunnerError(Exception):
    """Base class for errors that abort a run before tests execute."""


class PackageManagerNotFoundError(SecurityTestRunnerError):
    """Raised when no supported package manager is on the search path."""


class NoTestsAvailableError(SecurityTestRunnerError):
    """Raised when the built test list is empty."""


class DuplicateTestError(SecurityTestRunnerError):
    """Raised when two test definitions share an id."""


class ToolNotFoundError(SecurityTestRunnerError):
    """Raised when a tool is not registered."""
