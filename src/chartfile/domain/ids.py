"""Identifier, color, date and number syntax checks.

Task and dependency IDs are random UUID v4 strings. Colors are CSS-style
hex literals (``#rgb`` or ``#rrggbb``). Dates are calendar dates written
as ``YYYY-MM-DD``.

INVARIANT: IDs are permanent. Once generated, an ID never changes.
"""

from __future__ import annotations

import math
import re
import uuid
from datetime import date
from typing import Any

UUID_V4_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)
HEX_COLOR_PATTERN = re.compile(r"#(?:[0-9a-f]{3}){1,2}", re.IGNORECASE)
ISO_DATE_PATTERN = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


def generate_id() -> str:
    """Generate a new random UUID v4 string."""
    return str(uuid.uuid4())


def is_uuid_v4(value: Any) -> bool:
    """Check whether *value* is a UUID v4 string (any letter case)."""
    return isinstance(value, str) and UUID_V4_PATTERN.fullmatch(value) is not None


def is_hex_color(value: Any) -> bool:
    """Check whether *value* is a 3- or 6-digit hex color such as ``#0af``."""
    return isinstance(value, str) and HEX_COLOR_PATTERN.fullmatch(value) is not None


def parse_iso_date(value: Any) -> date | None:
    """Parse a ``YYYY-MM-DD`` string into a real calendar date.

    The date is rebuilt from its components, so impossible dates such as
    ``2026-02-30`` are rejected instead of rolling over into March.

    Examples:
        >>> parse_iso_date("2026-02-28")
        datetime.date(2026, 2, 28)
        >>> parse_iso_date("2026-02-30") is None
        True
    """
    if not isinstance(value, str):
        return None
    match = ISO_DATE_PATTERN.fullmatch(value)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def is_finite_number(value: Any) -> bool:
    """True for real ints/floats that are not NaN or infinite (bools excluded).

    Integers are always finite, even when too large to convert to a float.

    Examples:
        >>> is_finite_number(10**400)
        True
        >>> is_finite_number(float("nan"))
        False
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, int):
        return True
    return math.isfinite(value)
