"""Version ranges.

A range is a half-open interval ``[start, end)`` over Version. Range strings
are whitespace-separated comparator expressions combined by intersection:

    1.20.1          exactly 1.20.1
    >=1.20 <1.21    1.20 up to, but not including, 1.21
    ^1              any 1.x version (also written 1.x)
    ~1.20           any 1.20.x version (also written 1.20.x)
    *               every version
"""

import logging
from dataclasses import dataclass
from enum import Enum

from ralli.utils.version import ParseError, Version, split_version

logger = logging.getLogger(__name__)

WILDCARDS = frozenset({"X", "x", "*"})


class MatchKind(Enum):
    """Comparator operator of a single range expression."""

    EQUAL = "="
    GREATER_EQUAL = ">="
    LESS_EQUAL = "<="
    GREATER = ">"
    LESS = "<"
    MAJOR = "^"
    MINOR = "~"


# Longest prefixes first so ">=" is not read as ">"
_OPERATORS = sorted(MatchKind, key=lambda kind: len(kind.value), reverse=True)


@dataclass(frozen=True)
class VersionRange:
    """Half-open version interval.

    - start: inclusive lower bound, None when unbounded below
    - end: exclusive upper bound, None when unbounded above
    """

    start: Version | None = None
    end: Version | None = None

    @classmethod
    def parse(cls, text: str) -> "VersionRange":
        """Parse a range string.

        Each expression narrows the range: the highest lower bound and the
        lowest upper bound win.

        Args:
            text: Range string (e.g., ">=1.20 <1.21", "^1", "1.20.x")

        Returns:
            VersionRange instance

        Raises:
            ParseError: If the string is empty or an expression is malformed
        """
        expressions = text.split()
        if not expressions:
            raise ParseError(f"Invalid range: {text!r} (no expressions)", text)

        start: Version | None = None
        end: Version | None = None
        for expression in expressions:
            new_start, new_end = _parse_expression(expression)
            if new_start is not None and (start is None or new_start > start):
                start = new_start
            if new_end is not None and (end is None or new_end < end):
                end = new_end

        return cls(start, end)

    @property
    def is_empty(self) -> bool:
        """Whether no version can satisfy this range."""
        return self.start is not None and self.end is not None and self.start >= self.end

    def contains(self, version: Version) -> bool:
        """Check if a version lies within this range."""
        if self.start is not None and version < self.start:
            return False
        if self.end is not None and version >= self.end:
            return False
        return True

    def __contains__(self, version: object) -> bool:
        return isinstance(version, Version) and self.contains(version)

    def __str__(self) -> str:
        return format_range(self)


def _major_floor(major: int) -> Version:
    return Version(major, 0, 0, "")


def _minor_floor(major: int, minor: int) -> Version:
    return Version(major, minor, 0, "")


def _parse_expression(expression: str) -> tuple[Version | None, Version | None]:
    """Convert one comparator expression into (start, end) bounds."""
    kind = MatchKind.EQUAL
    body = expression
    for operator in _OPERATORS:
        if body.startswith(operator.value):
            kind = operator
            body = body[len(operator.value) :]
            break

    # A bare wildcard places no bound on either side; after an operator it has nothing to compare
    if body in WILDCARDS:
        if body == expression:
            return None, None
        raise ParseError(
            f"Invalid range: {expression!r} (wildcard cannot follow {kind.value!r})", expression
        )

    try:
        fields, release, build = split_version(body)
    except ParseError as e:
        raise ParseError(f"Invalid range: {expression!r} (no major version)", expression) from e

    numbers = []
    for position, field in enumerate(fields):
        if position == 1 and field in WILDCARDS:
            kind = MatchKind.MAJOR
            numbers.append(0)
        elif position == 2 and field in WILDCARDS:
            if kind is not MatchKind.MAJOR:
                kind = MatchKind.MINOR
            numbers.append(0)
        elif field.isascii() and field.isdigit():
            numbers.append(int(field))
        else:
            raise ParseError(
                f"Invalid range: {expression!r} (bad numeric field {field!r})", expression
            )
    numbers += [0] * (3 - len(numbers))

    version = Version(numbers[0], numbers[1], numbers[2], release, build)
    logger.debug("Range expression %r parsed as %s %s", expression, kind.name, version)

    if kind is MatchKind.EQUAL:
        return version, version.bound_successor()
    if kind is MatchKind.GREATER_EQUAL:
        return version, None
    if kind is MatchKind.LESS_EQUAL:
        return None, version.bound_successor()
    if kind is MatchKind.GREATER:
        return version.bound_successor(), None
    if kind is MatchKind.LESS:
        return None, version
    if kind is MatchKind.MAJOR:
        return _major_floor(version.major), _major_floor(version.major + 1)
    return (
        _minor_floor(version.major, version.minor),
        _minor_floor(version.major, version.minor + 1),
    )


def parse_range(text: str) -> VersionRange:
    """Parse a range string. See VersionRange.parse()."""
    return VersionRange.parse(text)


def format_range(range_: VersionRange) -> str:
    """Format a range as canonical comparators."""
    if range_.start is None and range_.end is None:
        return "*"
    if range_.end is None:
        return f">={range_.start}"
    if range_.start is None:
        return f"<{range_.end}"
    return f">={range_.start} <{range_.end}"


def is_compatible(spec: str, version: str) -> bool:
    """Check if a version is compatible with a range specifier.

    Args:
        spec: Range specifier (e.g., "^1", ">=1.20 <1.21")
        version: Version string to check

    Returns:
        True if compatible, False if not or if either string is invalid
    """
    try:
        return VersionRange.parse(spec).contains(Version.parse(version))
    except ParseError:
        return False


def find_best_version(spec: str, available: list[str]) -> str | None:
    """Find the best matching version from a list.

    Args:
        spec: Range specifier
        available: List of available versions

    Returns:
        Best matching version as given in the list, or None if no match

    Raises:
        ParseError: If the range specifier is invalid
    """
    range_ = VersionRange.parse(spec)
    best: tuple[Version, str] | None = None

    for text in available:
        try:
            version = Version.parse(text)
        except ParseError:
            logger.debug("Skipping invalid version %r", text)
            continue
        if range_.contains(version) and (best is None or version > best[0]):
            best = (version, text)

    return best[1] if best else None
