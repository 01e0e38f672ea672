"""Semantic versioning utilities."""

import re
from dataclasses import dataclass
from functools import total_ordering

_NUMERIC = re.compile(r"[0-9]+")


class ParseError(ValueError):
    """Error parsing a version or range string."""

    def __init__(self, message: str, text: str | None = None):
        self.text = text
        super().__init__(message)


def _parse_number(field: str, text: str) -> int:
    """Parse a non-negative decimal field of a version core."""
    if not _NUMERIC.fullmatch(field):
        raise ParseError(f"Invalid version: {text!r} (bad numeric field {field!r})", text)
    return int(field)


def split_version(text: str) -> tuple[list[str], str | None, str | None]:
    """Split a version string into its numeric fields, release and build.

    The numeric fields are returned unparsed so that range expressions can
    recognize wildcards before conversion.

    Args:
        text: Version string (e.g., "1.2.3-rc.1+build.7")

    Returns:
        Tuple of (numeric fields, release, build)

    Raises:
        ParseError: If there is no major version component
    """
    core, plus, build = text.partition("+")
    core, minus, release = core.partition("-")

    if not core:
        raise ParseError(f"Invalid version: {text!r} (no major version)", text)

    return (
        core.split(".", 2),
        release if minus else None,
        build if plus else None,
    )


@total_ordering
@dataclass(frozen=True)
class Version:
    """Semantic version representation.

    Build metadata is carried along for display but never takes part in
    equality or ordering.
    """

    major: int
    minor: int = 0
    patch: int = 0
    release: str | None = None
    build: str | None = None

    def __post_init__(self) -> None:
        for name in ("major", "minor", "patch"):
            if getattr(self, name) < 0:
                raise ValueError(f"Version {name} cannot be negative")

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse a version string.

        Missing minor and patch fields default to 0, so "1.21" is 1.21.0.

        Args:
            text: Version string (e.g., "1.20.5", "1.21-rc.1+build.3")

        Returns:
            Version instance

        Raises:
            ParseError: If the major version is missing or a numeric field
                is not a non-negative integer
        """
        fields, release, build = split_version(text)
        numbers = [_parse_number(field, text) for field in fields]
        numbers += [0] * (3 - len(numbers))

        return cls(numbers[0], numbers[1], numbers[2], release, build)

    def bound_successor(self) -> "Version":
        """Get the value sorting immediately after this version.

        A pre-release gets an empty identifier appended ("rc" -> "rc."). A
        release has no room left inside its own numbers, since any release
        string would sort below it, so it moves to the lowest pre-release of
        the next patch (1.2.3 -> 1.2.4-). No version sorts strictly between
        this one and the result.

        This exists to turn inclusive comparators into exclusive range
        bounds. It is not a general successor function.
        """
        if self.release is None:
            return Version(self.major, self.minor, self.patch + 1, "")
        return Version(self.major, self.minor, self.patch, self.release + ".")

    def matches_numbers(self, other: "Version") -> bool:
        """Check whether major, minor and patch agree, ignoring the release."""
        return self._core == other._core

    @property
    def _core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        return format_version(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._core == other._core and _release_key(self.release) == _release_key(
            other.release
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented

        if self._core != other._core:
            return self._core < other._core

        # A release version is newer than any of its pre-releases
        if self.release is None:
            return False
        if other.release is None:
            return True
        return _release_key(self.release) < _release_key(other.release)

    def __hash__(self) -> int:
        return hash((self._core, _release_key(self.release)))


def _identifier_key(identifier: str) -> tuple[int, int, str]:
    """Sort key for one release identifier: numbers before words."""
    if identifier == "":
        return (0, 0, "")
    if _NUMERIC.fullmatch(identifier):
        return (0, int(identifier), "")
    return (1, 0, identifier)


def _release_key(release: str | None) -> tuple[tuple[int, int, str], ...] | None:
    """Comparison key for a release string.

    Tuples compare element-wise and a prefix sorts before any longer tuple,
    which is the identifier precedence rule for pre-releases.
    """
    if release is None:
        return None
    return tuple(_identifier_key(part) for part in release.split("."))


def parse_version(text: str) -> Version:
    """Parse a version string. See Version.parse()."""
    return Version.parse(text)


def format_version(version: Version) -> str:
    """Format a version, leaving out trailing zero fields.

    "1.0.0" formats as "1" and "1.20.0" as "1.20"; parsing the result gives
    back an equal version.
    """
    text = str(version.major)
    if version.minor > 0 or version.patch > 0:
        text += f".{version.minor}"
    if version.patch > 0:
        text += f".{version.patch}"
    if version.release is not None:
        text += f"-{version.release}"
    if version.build is not None:
        text += f"+{version.build}"
    return text
