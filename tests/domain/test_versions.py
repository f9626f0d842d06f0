"""Tests for file format version comparison."""

import pytest

from chartfile.domain.versions import compare_versions, is_newer, is_older, parse_version


class TestParseVersion:
    @pytest.mark.parametrize(
        "version,expected",
        [
            ("1.0.0", (1, 0, 0)),
            ("1.2", (1, 2, 0)),
            ("", (0, 0, 0)),
            ("1.x.3", (1, 0, 3)),
            ("1.0.0.9", (1, 0, 0)),
        ],
    )
    def test_parse(self, version: str, expected: tuple[int, int, int]) -> None:
        assert parse_version(version) == expected


class TestCompareVersions:
    def test_numeric_not_lexical(self) -> None:
        assert compare_versions("1.10.0", "1.9.0") == 1

    def test_equal(self) -> None:
        assert compare_versions("1.0.0", "1.0") == 0

    def test_older(self) -> None:
        assert compare_versions("0.9.9", "1.0.0") == -1

    def test_prerelease_suffix_compares_equal(self) -> None:
        """Suffixes are not modeled; '1.0.0-beta' is the same as '1.0.0'."""
        assert compare_versions("1.0.0-beta", "1.0.0") == 0


class TestHelpers:
    def test_is_older(self) -> None:
        assert is_older("0.1.0", "1.0.0")
        assert not is_older("1.0.0", "1.0.0")

    def test_is_newer(self) -> None:
        assert is_newer("2.0.0", "1.0.0")
        assert not is_newer("1.0.0", "1.0.0")
