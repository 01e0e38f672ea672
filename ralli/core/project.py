"""Project model representing a ralli-managed mod project."""

from pathlib import Path

from ralli.config.parser import (
    PROJECT_FILE,
    find_project_root,
    load_project_config,
    save_project_config,
)
from ralli.config.schemas import ProjectConfig
from ralli.core.matrix import GameVersionList, confirm_version, java_version_for
from ralli.core.rangeset import simplify_range_set
from ralli.utils.ranges import VersionRange
from ralli.utils.version import Version


class Project:
    """Represents a ralli-managed project.

    A project is defined by its ralli.yaml configuration file.
    """

    def __init__(self, root: Path, config: ProjectConfig):
        """Initialize a Project.

        Args:
            root: Path to the project root directory
            config: Parsed project configuration
        """
        self._root = root.resolve()
        self._config = config

    @classmethod
    def load(cls, path: Path | None = None) -> "Project":
        """Load a project from disk.

        Args:
            path: Path to the project root, or None to search from cwd

        Returns:
            Loaded Project instance

        Raises:
            FileNotFoundError: If no project is found
        """
        if path is None:
            path = find_project_root()
            if path is None:
                raise FileNotFoundError(
                    f"No {PROJECT_FILE} found in current directory or any parent directory"
                )
        else:
            path = path.resolve()
            if not (path / PROJECT_FILE).exists():
                raise FileNotFoundError(f"No {PROJECT_FILE} found in {path}")

        config = load_project_config(path)
        return cls(path, config)

    @classmethod
    def init(cls, path: Path, project_name: str | None = None) -> "Project":
        """Initialize a new project.

        Args:
            path: Path to the project root directory
            project_name: Optional project name (defaults to directory name)

        Returns:
            New Project instance

        Raises:
            FileExistsError: If ralli.yaml already exists
        """
        path = path.resolve()
        config_path = path / PROJECT_FILE

        if config_path.exists():
            raise FileExistsError(f"Project already initialized: {config_path}")

        config = ProjectConfig(project_name=project_name or path.name)
        project = cls(path, config)
        project.save()
        return project

    def save(self) -> None:
        """Save the project configuration to disk."""
        save_project_config(self._root, self._config)

    @property
    def root(self) -> Path:
        """Get the project root directory."""
        return self._root

    @property
    def project_name(self) -> str:
        """Get the project name."""
        return self._config.project_name or self._root.name

    @property
    def config(self) -> ProjectConfig:
        """Get the underlying configuration."""
        return self._config

    @property
    def minecraft_version(self) -> Version | None:
        """Get the game version the project currently builds against."""
        if self._config.minecraft_version is None:
            return None
        return Version.parse(self._config.minecraft_version)

    @property
    def known_versions(self) -> GameVersionList:
        return self._config.known_versions()

    def compatible_ranges(self) -> list[VersionRange]:
        """Get the simplified compatible range set."""
        return simplify_range_set(self._config.ranges())

    def set_compatible_ranges(self, ranges: list[VersionRange]) -> None:
        self._config.compatible_ranges = [str(range_) for range_ in simplify_range_set(ranges)]

    def confirm(self, version: Version) -> list[VersionRange]:
        """Add a version to the compatible ranges.

        Args:
            version: Version confirmed to work

        Returns:
            Updated range set

        Raises:
            MatrixError: If the version is not a known game version
        """
        ranges = confirm_version(self.compatible_ranges(), version, self.known_versions)
        self.set_compatible_ranges(ranges)
        return ranges

    def java_version(self, version: Version | None = None) -> int:
        """Get the Java release for a game version (defaults to the current one)."""
        if version is None:
            version = self.minecraft_version or Version(0)
        return java_version_for(version, self._config.java_table())

    def __repr__(self) -> str:
        return f"Project(root={self._root!r}, name={self.project_name!r})"
