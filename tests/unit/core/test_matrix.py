"""Tests for ralli.core.matrix module."""

import pytest

from ralli.core.matrix import (
    JAVA_VERSION_TABLE,
    GameVersion,
    GameVersionList,
    MatrixError,
    confirm_version,
    java_version_for,
    next_version_down,
    next_version_up,
)
from ralli.core.rangeset import format_range_list
from ralli.utils.ranges import VersionRange
from ralli.utils.version import Version


def v(text: str) -> Version:
    return Version.parse(text)


class TestJavaVersionFor:
    """Tests for java_version_for()."""

    @pytest.mark.parametrize(
        ("game_version", "java"),
        [
            ("1.8.9", 8),
            ("1.16.5", 8),
            ("1.17", 16),
            ("1.17.1", 16),
            ("1.18", 17),
            ("1.20.4", 17),
            ("1.20.5-rc.1", 17),
            ("1.20.5", 21),
            ("1.21.1", 21),
        ],
    )
    def test_builtin_table(self, game_version: str, java: int):
        """Each game version maps to the Java release of its threshold."""
        assert java_version_for(v(game_version)) == java

    def test_custom_table_order_does_not_matter(self):
        """Thresholds are looked up by version, not position."""
        table = [(v("2"), 25), (v("1"), 11)]
        assert java_version_for(v("1.5"), table) == 11
        assert java_version_for(v("2.1"), table) == 25

    def test_below_every_threshold_uses_default(self):
        """Versions below the table fall back to Java 8."""
        assert java_version_for(v("0.5"), [(v("1"), 11)]) == 8

    def test_table_is_ascending(self):
        """The built-in table is sorted by threshold."""
        thresholds = [threshold for threshold, _ in JAVA_VERSION_TABLE]
        assert thresholds == sorted(thresholds)


class TestGameVersion:
    """Tests for GameVersion."""

    def test_mappings(self):
        """Mappings strings carry the build number."""
        assert GameVersion(v("1.21"), 3).mappings == "1.21+build.3"

    def test_str(self):
        """str() is the compact version."""
        assert str(GameVersion(v("1.20.0"))) == "1.20"


class TestGameVersionList:
    """Tests for GameVersionList."""

    def test_sorted_newest_first(self):
        """Entries are kept newest first."""
        known = GameVersionList([GameVersion(v("1.19")), GameVersion(v("1.21")), GameVersion(v("1.20"))])
        assert [str(entry) for entry in known] == ["1.21", "1.20", "1.19"]
        assert str(known.newest) == "1.21"
        assert str(known.oldest) == "1.19"

    def test_empty(self):
        """An empty list has no newest or oldest entry."""
        known = GameVersionList()
        assert len(known) == 0
        assert known.newest is None
        assert known.oldest is None

    def test_from_metadata_filters_and_pairs_builds(self):
        """Only stable parseable versions are kept, with their highest build."""
        known = GameVersionList.from_metadata(
            [
                ("1.21", True),
                ("24w14a", False),
                ("1.21-rc1", False),
                ("1.20.6", True),
                ("not a version", True),
            ],
            [("1.21", 1), ("1.21", 9), ("1.21", 4), ("1.20.6", 2), ("24w14a", 7), ("bad", 1)],
        )
        assert [(str(entry), entry.build) for entry in known] == [("1.21", 9), ("1.20.6", 2)]

    def test_from_metadata_without_mappings(self):
        """Versions without mappings get build 0."""
        known = GameVersionList.from_metadata([("1.20", True)])
        assert known[0].build == 0

    def test_index_of(self, known_versions: GameVersionList):
        """Exact versions are found by index."""
        assert known_versions.index_of(v("1.21")) == 1
        assert known_versions.index_of(v("1.21.0")) == 1

    def test_index_of_unknown_raises(self, known_versions: GameVersionList):
        """Unknown versions raise MatrixError."""
        with pytest.raises(MatrixError, match="not found") as exc_info:
            known_versions.index_of(v("1.18"))
        assert exc_info.value.version == v("1.18")

    def test_index_of_requires_exact_release(self, known_versions: GameVersionList):
        """A range bound with an empty release is not an exact match."""
        with pytest.raises(MatrixError):
            known_versions.index_of(v("1.21-"))

    def test_find_numbers(self, known_versions: GameVersionList):
        """Lookup by numbers ignores the release."""
        assert known_versions.find_numbers(v("1.21-")) == 1

    def test_find_numbers_unknown_raises(self, known_versions: GameVersionList):
        """Unknown numbers raise MatrixError."""
        with pytest.raises(MatrixError):
            known_versions.find_numbers(v("1.22-"))


class TestConfirmVersion:
    """Tests for confirm_version()."""

    def test_first_confirmation(self, known_versions: GameVersionList):
        """The version reaches up to the next newer known version."""
        result = confirm_version([], v("1.20.6"), known_versions)
        assert format_range_list(result) == '[">=1.20.6 <1.21"]'

    def test_newest_reaches_next_minor(self, known_versions: GameVersionList):
        """The newest known version reaches up to the next minor release."""
        result = confirm_version([], v("1.21.1"), known_versions)
        assert format_range_list(result) == '[">=1.21.1 <1.22"]'

    def test_extends_existing_range(self, known_versions: GameVersionList):
        """Confirming the version at a range's end extends the range."""
        existing = [VersionRange(v("1.20.5"), v("1.20.6"))]
        result = confirm_version(existing, v("1.20.6"), known_versions)
        assert format_range_list(result) == '[">=1.20.5 <1.21"]'

    def test_leaves_gap_between_ranges(self, known_versions: GameVersionList):
        """Non-adjacent versions stay in separate ranges."""
        existing = [VersionRange(v("1.20.4"), v("1.20.5"))]
        result = confirm_version(existing, v("1.21"), known_versions)
        assert format_range_list(result) == '[">=1.20.4 <1.20.5", ">=1.21 <1.21.1"]'

    def test_fills_gap(self, known_versions: GameVersionList):
        """Confirming the missing version joins both neighbors."""
        existing = [VersionRange(v("1.20.4"), v("1.20.5")), VersionRange(v("1.20.6"), v("1.21"))]
        result = confirm_version(existing, v("1.20.5"), known_versions)
        assert format_range_list(result) == '[">=1.20.4 <1.21"]'

    def test_unknown_version_raises(self, known_versions: GameVersionList):
        """Unknown versions cannot be confirmed."""
        with pytest.raises(MatrixError):
            confirm_version([], v("1.18.2"), known_versions)


class TestNextVersion:
    """Tests for next_version_up() and next_version_down()."""

    def test_up_returns_version_at_range_end(self, known_versions: GameVersionList):
        """Up picks the known version the last range stops before."""
        ranges = [VersionRange(v("1.20.5"), v("1.21"))]
        assert str(next_version_up(ranges, known_versions)) == "1.21"

    def test_up_uses_last_range(self, known_versions: GameVersionList):
        """Up looks past the newest range."""
        ranges = [VersionRange(v("1.19.4"), v("1.20.4")), VersionRange(v("1.20.5"), v("1.20.6"))]
        assert str(next_version_up(ranges, known_versions)) == "1.20.6"

    def test_up_matches_range_bound_numbers(self, known_versions: GameVersionList):
        """Bounds with an empty release still find their version."""
        ranges = [VersionRange.parse("~1.20")]
        assert str(next_version_up(ranges, known_versions)) == "1.21"

    def test_up_without_end_raises(self, known_versions: GameVersionList):
        """An open-ended range has nothing above it."""
        with pytest.raises(MatrixError, match="later than 1.21.1"):
            next_version_up([VersionRange(v("1.20"), None)], known_versions)

    def test_up_past_known_versions_raises(self, known_versions: GameVersionList):
        """A range ending past the newest version has nothing above it."""
        with pytest.raises(MatrixError, match="not found"):
            next_version_up([VersionRange(v("1.21.1"), v("1.22"))], known_versions)

    def test_down_returns_version_below_start(self, known_versions: GameVersionList):
        """Down picks the known version just older than the first range."""
        ranges = [VersionRange(v("1.20.5"), v("1.21"))]
        assert str(next_version_down(ranges, known_versions)) == "1.20.4"

    def test_down_at_oldest_raises(self, known_versions: GameVersionList):
        """Nothing lies below the oldest known version."""
        with pytest.raises(MatrixError, match="earlier than 1.19.4"):
            next_version_down([VersionRange(v("1.19.4"), v("1.20.4"))], known_versions)

    def test_down_without_start_raises(self, known_versions: GameVersionList):
        """A range without a start has nothing below it."""
        with pytest.raises(MatrixError, match="earlier than"):
            next_version_down([VersionRange(None, v("1.20"))], known_versions)

    @pytest.mark.parametrize("find_next", [next_version_up, next_version_down])
    def test_no_ranges_raises(self, known_versions: GameVersionList, find_next):
        """Nothing can be suggested before any version is confirmed."""
        with pytest.raises(MatrixError, match="No known compatible versions"):
            find_next([], known_versions)
