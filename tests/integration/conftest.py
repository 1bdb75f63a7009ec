"""Fixtures for integration tests."""

from pathlib import Path

import pytest

from cucumber_batch.config import BatchSettings


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a project with two feature files."""
    features = tmp_path / "src" / "test" / "resources" / "features"
    features.mkdir(parents=True)
    (features / "login.feature").write_text("Feature: Login\n")
    (features / "checkout.feature").write_text("Feature: Checkout\n")
    return tmp_path


@pytest.fixture
def settings(project: Path) -> BatchSettings:
    """Create settings for the project."""
    return BatchSettings(project_root=project, timeout=10)
