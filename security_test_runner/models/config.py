"""Run configuration built once from command-line arguments."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, model_validator

from security_test_runner.models.base import Model

SNYK_TOKEN_ENV = "SNYK_TOKEN"
CACHE_ENV = "SECURITY_SCAN_CACHE"

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class RunConfig(Model):
    """Immutable configuration for a single security test run."""

    quick: bool = Field(default=False, description="Core checks only")
    fix: bool = Field(default=False, description="Auto-fix issues when possible")
    install: bool = Field(default=False, description="Install security tools")
    ci: bool = Field(default=False, description="CI mode, plain output")
    verbose: bool = Field(default=False, description="Verbose logging")
    skip_snyk: bool = Field(default=False, description="Skip the Snyk scan")
    skip_cache: bool = Field(default=False, description="Force fresh scans")
    fail_fast: bool = Field(default=False, description="Stop on first failure")
    json_output: bool = Field(default=False, description="Also write a JSON report")
    parallel: bool = Field(default=True, description="Run tests concurrently")
    max_parallel: int = Field(default=4, ge=1, description="Concurrency cap")
    timeout: float = Field(default=300, gt=0, description="Per-test timeout (s)")
    output_dir: Path = Field(default=Path("security-reports"))
    project_root: Path = Field(default_factory=Path.cwd)
    snyk_token: SecretStr | None = Field(default=None)
    cache_enabled: bool = Field(default=True)

    @model_validator(mode="before")
    @classmethod
    def _ci_disables_verbose(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("ci"):
            return {**data, "verbose": False}
        return data

    @property
    def use_cache(self) -> bool:
        """Whether cached scanner data may be reused."""
        return self.cache_enabled and not self.skip_cache


def parse_bool(value: str) -> bool:
    """Parse a boolean environment value such as ``true`` or ``0``."""
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def environment_settings(environ: Mapping[str, str]) -> dict[str, object]:
    """Extract RunConfig fields from environment variables."""
    settings: dict[str, object] = {}
    if token := environ.get(SNYK_TOKEN_ENV):
        settings["snyk_token"] = SecretStr(token)
    if (cache := environ.get(CACHE_ENV)) is not None and cache.strip():
        settings["cache_enabled"] = parse_bool(cache)
    return settings
