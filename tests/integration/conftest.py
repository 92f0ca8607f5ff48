"""Fixtures for integration tests running real shell commands."""

from pathlib import Path

import pytest

from security_test_runner.models.config import RunConfig


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Empty project directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def config(project: Path) -> RunConfig:
    """Configuration writing reports inside the project."""
    return RunConfig(
        project_root=project,
        output_dir=project / "security-reports",
        timeout=30,
    )
