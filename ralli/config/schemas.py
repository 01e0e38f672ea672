"""Pydantic schemas for the ralli project file (ralli.yaml)."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ralli.core.matrix import JAVA_VERSION_TABLE, GameVersion, GameVersionList
from ralli.utils.ranges import VersionRange
from ralli.utils.version import ParseError, Version


def _reject_number(value: Any) -> Any:
    """Refuse YAML numbers where a version string is expected.

    An unquoted 1.20 loads as the float 1.2, so the original text is gone.
    """
    if isinstance(value, int | float) and not isinstance(value, bool):
        raise ValueError(f"{value!r} is a number; quote version numbers in ralli.yaml")
    return value


class GameVersionEntry(BaseModel):
    """A game version as recorded from the metadata service."""

    version: str
    stable: bool = True
    build: int = Field(default=0, ge=0)  # Latest mappings build

    @field_validator("version", mode="before")
    @classmethod
    def reject_numeric_version(cls, v: Any) -> Any:
        return _reject_number(v)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate version format."""
        try:
            Version.parse(v)
        except ParseError as e:
            raise ValueError(str(e)) from e
        return v


class ProjectConfig(BaseModel):
    """Project configuration (ralli.yaml) schema."""

    project_name: str | None = None
    minecraft_version: str | None = None
    compatible_ranges: list[str] = Field(default_factory=list)
    game_versions: list[GameVersionEntry] = Field(default_factory=list)
    java_versions: dict[str, int] = Field(default_factory=dict)  # Overrides the built-in table

    @field_validator("minecraft_version", mode="before")
    @classmethod
    def reject_numeric_minecraft_version(cls, v: Any) -> Any:
        return _reject_number(v)

    @field_validator("compatible_ranges", mode="before")
    @classmethod
    def reject_numeric_ranges(cls, v: Any) -> Any:
        if isinstance(v, list):
            for spec in v:
                _reject_number(spec)
        return v

    @field_validator("java_versions", mode="before")
    @classmethod
    def reject_numeric_thresholds(cls, v: Any) -> Any:
        if isinstance(v, dict):
            for threshold in v:
                _reject_number(threshold)
        return v

    @field_validator("minecraft_version")
    @classmethod
    def validate_minecraft_version(cls, v: str | None) -> str | None:
        """Validate version format."""
        if v is not None:
            try:
                Version.parse(v)
            except ParseError as e:
                raise ValueError(str(e)) from e
        return v

    @field_validator("compatible_ranges")
    @classmethod
    def validate_compatible_ranges(cls, v: list[str]) -> list[str]:
        """Validate every range string."""
        for spec in v:
            try:
                VersionRange.parse(spec)
            except ParseError as e:
                raise ValueError(str(e)) from e
        return v

    @field_validator("java_versions")
    @classmethod
    def validate_java_versions(cls, v: dict[str, int]) -> dict[str, int]:
        """Validate that thresholds are versions."""
        for threshold in v:
            try:
                Version.parse(threshold)
            except ParseError as e:
                raise ValueError(str(e)) from e
        return v

    def ranges(self) -> list[VersionRange]:
        """Get the compatible ranges as parsed values."""
        return [VersionRange.parse(spec) for spec in self.compatible_ranges]

    def known_versions(self) -> GameVersionList:
        """Get the stable game versions."""
        return GameVersionList(
            GameVersion(Version.parse(entry.version), entry.build)
            for entry in self.game_versions
            if entry.stable
        )

    def java_table(self) -> tuple[tuple[Version, int], ...]:
        """Get the Java lookup table, preferring configured thresholds."""
        if not self.java_versions:
            return JAVA_VERSION_TABLE
        return tuple(
            sorted(
                ((Version.parse(threshold), java) for threshold, java in self.java_versions.items()),
                key=lambda entry: entry[0],
            )
        )
