"""Range set simplification.

A range set is a sorted list of non-overlapping, non-touching version
ranges. The compatibility property of a project stores one as a list of
quoted range strings:

    minecraft_compatible_range=[">=1.20 <1.20.5", ">=1.21 <1.21.2"]
"""

import logging
from collections.abc import Iterable
from dataclasses import replace

from ralli.utils.ranges import VersionRange
from ralli.utils.version import Version

logger = logging.getLogger(__name__)


def _start_key(range_: VersionRange) -> tuple[bool, Version | None]:
    # Unbounded starts sort first
    return (range_.start is not None, range_.start)


def _starts_within(next_range: VersionRange, current: VersionRange) -> bool:
    """Check whether next_range begins at or before the end of current."""
    if current.end is None or next_range.start is None:
        return True
    return next_range.start <= current.end


def _later_end(a: Version | None, b: Version | None) -> Version | None:
    if a is None or b is None:
        return None
    return max(a, b)


def simplify_range_set(ranges: Iterable[VersionRange]) -> list[VersionRange]:
    """Sort and merge overlapping ranges.

    Empty ranges (start at or after end) are dropped first. Ranges that
    overlap or touch are merged, so the result covers exactly the same
    versions as the input with as few ranges as possible. Simplifying an
    already simplified list returns it unchanged.

    Args:
        ranges: Ranges in any order

    Returns:
        Sorted list of disjoint ranges
    """
    candidates = []
    for range_ in ranges:
        if range_.is_empty:
            logger.debug("Dropping empty range %s", range_)
            continue
        candidates.append(range_)

    candidates.sort(key=_start_key)

    merged: list[VersionRange] = []
    if not candidates:
        return merged

    current = candidates[0]
    for next_range in candidates[1:]:
        if _starts_within(next_range, current):
            current = replace(current, end=_later_end(current.end, next_range.end))
        else:
            merged.append(current)
            current = next_range

    merged.append(current)
    logger.debug("Simplified %d ranges to %d", len(candidates), len(merged))
    return merged


def parse_range_list(text: str) -> list[VersionRange]:
    """Parse a bracketed list of quoted range strings.

    Blank entries are skipped and the result is simplified.

    Args:
        text: List text (e.g., '[">=1.20 <1.21", "1.21.1"]')

    Returns:
        Simplified range set

    Raises:
        ParseError: If any entry is not a valid range
    """
    body = text.strip().removeprefix("[").removesuffix("]")

    ranges = []
    for item in body.split(","):
        item = item.strip().strip('"')
        if not item:
            continue
        ranges.append(VersionRange.parse(item))

    return simplify_range_set(ranges)


def format_range_list(ranges: Iterable[VersionRange]) -> str:
    """Format ranges as a bracketed list of quoted range strings."""
    return "[" + ", ".join(f'"{range_}"' for range_ in ranges) + "]"
