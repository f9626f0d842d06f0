"""Three-part file format version parsing and comparison.

Versions are compared numerically as ``major.minor.patch``. Missing or
non-numeric segments count as 0, so pre-release suffixes are not a
modeled concept: ``"1.0.0-beta"`` compares equal to ``"1.0.0"``.
"""

from __future__ import annotations

VersionTuple = tuple[int, int, int]


def _segment(parts: list[str], index: int) -> int:
    if index >= len(parts):
        return 0
    try:
        return int(parts[index])
    except ValueError:
        return 0


def parse_version(version: str) -> VersionTuple:
    """Parse *version* into ``(major, minor, patch)``.

    Examples:
        >>> parse_version("1.2.3")
        (1, 2, 3)
        >>> parse_version("2")
        (2, 0, 0)
        >>> parse_version("1.0.0-beta")
        (1, 0, 0)
    """
    parts = version.split(".")
    return (_segment(parts, 0), _segment(parts, 1), _segment(parts, 2))


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1 as *left* is older than, equal to, or newer than *right*."""
    a = parse_version(left)
    b = parse_version(right)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def is_older(version: str, than: str) -> bool:
    return compare_versions(version, than) < 0


def is_newer(version: str, than: str) -> bool:
    return compare_versions(version, than) > 0
