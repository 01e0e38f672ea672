"""Shared fixtures for ralli tests."""

import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from ralli.config.schemas import GameVersionEntry, ProjectConfig
from ralli.core.matrix import GameVersion, GameVersionList
from ralli.core.project import Project
from ralli.utils.version import Version

# Newest first, as the metadata service lists them
GAME_VERSIONS = ["1.21.1", "1.21", "1.20.6", "1.20.5", "1.20.4", "1.19.4"]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory."""
    path = Path(tempfile.mkdtemp(prefix="ralli_test_"))
    yield path
    if path.exists():
        shutil.rmtree(path)


@pytest.fixture
def known_versions() -> GameVersionList:
    """Known stable game versions with mappings builds."""
    return GameVersionList(
        GameVersion(Version.parse(text), build) for build, text in enumerate(GAME_VERSIONS, 1)
    )


@pytest.fixture
def sample_project_config() -> ProjectConfig:
    """Sample project configuration for testing."""
    return ProjectConfig(
        project_name="test-mod",
        minecraft_version="1.20.6",
        compatible_ranges=[">=1.20.5 <1.21"],
        game_versions=[
            GameVersionEntry(version=text, build=build)
            for build, text in enumerate(GAME_VERSIONS, 1)
        ],
    )


@pytest.fixture
def initialized_project(temp_dir: Path, sample_project_config: ProjectConfig) -> Project:
    """Project with ralli.yaml written to disk."""
    project = Project(temp_dir, sample_project_config)
    project.save()
    return project
