"""Fixtures for end-to-end runs over recorded machine output."""

from pathlib import Path

import pytest

from dart_test_junit.config import ReporterConfig


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a Flutter-like project layout."""
    (tmp_path / "test" / "widgets").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def config(project: Path) -> ReporterConfig:
    """Create a config rooted at the project."""
    return ReporterConfig(working_dir=project)
