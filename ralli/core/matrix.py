"""Compatibility matrix over known game versions.

This module holds the logic behind choosing which game version to build
against next and recording versions that were confirmed to work. It only
works on values handed to it: the list of known stable game versions
(newest first, as published by the metadata service) and the project's
current compatible range set.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ralli.core.rangeset import simplify_range_set
from ralli.utils.ranges import VersionRange
from ralli.utils.version import ParseError, Version

logger = logging.getLogger(__name__)

# First game version requiring each Java release, ascending
JAVA_VERSION_TABLE: tuple[tuple[Version, int], ...] = (
    (Version(0), 8),
    (Version(1, 17), 16),
    (Version(1, 18), 17),
    (Version(1, 20, 5), 21),
)

DEFAULT_JAVA_VERSION = 8


class MatrixError(Exception):
    """Error navigating the compatibility matrix."""

    def __init__(self, message: str, version: Version | None = None):
        self.version = version
        super().__init__(message)


def java_version_for(
    version: Version,
    table: Iterable[tuple[Version, int]] = JAVA_VERSION_TABLE,
) -> int:
    """Get the Java release needed to build against a game version.

    Args:
        version: Game version
        table: Thresholds as (first game version, Java release) pairs

    Returns:
        Java release of the highest threshold not above version
    """
    for threshold, java in sorted(table, key=lambda entry: entry[0], reverse=True):
        if version >= threshold:
            return java
    return DEFAULT_JAVA_VERSION


@dataclass(frozen=True)
class GameVersion:
    """A stable game version and its latest mappings build."""

    version: Version
    build: int = 0

    @property
    def mappings(self) -> str:
        """Mappings version string (e.g., "1.21+build.3")."""
        return f"{self.version}+build.{self.build}"

    def __str__(self) -> str:
        return str(self.version)


class GameVersionList:
    """Known stable game versions, newest first."""

    def __init__(self, versions: Iterable[GameVersion] = ()):
        self._versions = sorted(versions, key=lambda entry: entry.version, reverse=True)

    @classmethod
    def from_metadata(
        cls,
        versions: Iterable[tuple[str, bool]],
        mappings: Iterable[tuple[str, int]] = (),
    ) -> "GameVersionList":
        """Build the list from metadata entries.

        Args:
            versions: (version string, stable) pairs
            mappings: (game version string, mappings build) pairs

        Returns:
            GameVersionList with the highest build recorded per version
        """
        builds: dict[Version, int] = {}
        for text, stable in versions:
            if not stable:
                continue
            try:
                builds[Version.parse(text)] = 0
            except ParseError:
                logger.debug("Skipping unparseable game version %r", text)

        for text, build in mappings:
            try:
                version = Version.parse(text)
            except ParseError:
                logger.debug("Skipping mappings for unparseable game version %r", text)
                continue
            if version in builds:
                builds[version] = max(builds[version], build)

        logger.info("Found %d stable game versions", len(builds))
        return cls(GameVersion(version, build) for version, build in builds.items())

    def __len__(self) -> int:
        return len(self._versions)

    def __iter__(self) -> Iterator[GameVersion]:
        return iter(self._versions)

    def __getitem__(self, index: int) -> GameVersion:
        return self._versions[index]

    @property
    def newest(self) -> GameVersion | None:
        return self._versions[0] if self._versions else None

    @property
    def oldest(self) -> GameVersion | None:
        return self._versions[-1] if self._versions else None

    def index_of(self, version: Version) -> int:
        """Get the index of an exact version.

        Raises:
            MatrixError: If the version is not known
        """
        for index, entry in enumerate(self._versions):
            if entry.version == version:
                return index
        raise MatrixError(f"Game version {version} not found", version)

    def find_numbers(self, version: Version) -> int:
        """Get the index of the first version with the same major.minor.patch.

        Range bounds usually carry an empty release ("1.21-"), so they are
        looked up by their numbers only.

        Raises:
            MatrixError: If no known version has those numbers
        """
        for index, entry in enumerate(self._versions):
            if entry.version.matches_numbers(version):
                return index
        raise MatrixError(f"Game version {version} not found", version)


def confirm_version(
    ranges: Iterable[VersionRange],
    version: Version,
    known: GameVersionList,
) -> list[VersionRange]:
    """Record a version as compatible.

    The version is added as a range reaching up to the next newer known
    version. The newest known version reaches up to the next minor release.

    Args:
        ranges: Current compatible ranges
        version: Version confirmed to work
        known: Known game versions

    Returns:
        Simplified range set including the new version

    Raises:
        MatrixError: If the version is not a known game version
    """
    index = known.index_of(version)
    if index > 0:
        end = known[index - 1].version
    else:
        end = Version(version.major, version.minor + 1)

    logger.info("Adding %s to the compatible ranges", version)
    return simplify_range_set([*ranges, VersionRange(version, end)])


def next_version_up(ranges: list[VersionRange], known: GameVersionList) -> GameVersion:
    """Get the next game version to test above the compatible ranges.

    Raises:
        MatrixError: If there is nothing to test above the ranges
    """
    if not ranges:
        raise MatrixError("No known compatible versions yet")

    end = ranges[-1].end
    if end is None:
        newest = known.newest
        raise MatrixError(
            f"No available game versions later than {newest}",
            newest.version if newest else None,
        )
    return known[known.find_numbers(end)]


def next_version_down(ranges: list[VersionRange], known: GameVersionList) -> GameVersion:
    """Get the next game version to test below the compatible ranges.

    Raises:
        MatrixError: If there is nothing to test below the ranges
    """
    if not ranges:
        raise MatrixError("No known compatible versions yet")

    start = ranges[0].start
    oldest = known.oldest
    if start is None:
        raise MatrixError(
            f"No available game versions earlier than {oldest}",
            oldest.version if oldest else None,
        )

    index = known.find_numbers(start)
    if index + 1 >= len(known):
        raise MatrixError(
            f"No available game versions earlier than {oldest}",
            oldest.version if oldest else None,
        )
    return known[index + 1]
