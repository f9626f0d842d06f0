"""Layer 5: strip injectable markup from human-authored text.

Every free-text string (chart name and description, task names and
unknown task fields, nested metadata, dependency extras, a few view
settings) is cleaned with ``nh3`` allowing no tags and no attributes.
Text content survives; ``<script>`` and ``<style>`` bodies do not.

Identifier-like fields are passed through untouched; their syntax is
enforced by Layer 4 and cleaning could corrupt a valid value.

Pollution key names are dropped at every level even though Layer 2
already removed them: this layer never assumes an upstream layer ran.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import nh3

from chartfile.fileformat.constants import (
    DANGEROUS_KEYS,
    DEPENDENCY_SKIP_SANITIZE_KEYS,
    MAX_SANITIZE_DEPTH,
    TASK_SKIP_SANITIZE_KEYS,
    VIEW_SETTINGS_TEXT_KEYS,
)

_DROPPED = object()


def sanitize_string(value: str) -> str:
    """Remove all HTML tags and attributes from *value*, keeping text content.

    Examples:
        >>> sanitize_string("<b>Plan</b> A")
        'Plan A'
        >>> sanitize_string("<script>alert(1)</script>Proj")
        'Proj'
    """
    return nh3.clean(value, tags=set(), attributes={})


def _sanitize_value(value: Any, depth: int) -> Any:
    """Clean *value* found at nesting *depth*.

    Containers deeper than ``MAX_SANITIZE_DEPTH`` come back as ``_DROPPED``
    so the caller can leave them out. Strings are cleaned at any depth.
    """
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, (dict, list)):
        if depth > MAX_SANITIZE_DEPTH:
            return _DROPPED
        if isinstance(value, dict):
            return sanitize_mapping(value, depth)
        return _sanitize_list(value, depth)
    return value


def sanitize_mapping(obj: Mapping[str, Any], depth: int = 1) -> dict[str, Any]:
    """Recursively clean every string in *obj*, preserving key order."""
    result: dict[str, Any] = {}
    for key, value in obj.items():
        if key in DANGEROUS_KEYS:
            continue
        cleaned = _sanitize_value(value, depth + 1)
        if cleaned is not _DROPPED:
            result[key] = cleaned
    return result


def _sanitize_list(items: list[Any], depth: int) -> list[Any]:
    result: list[Any] = []
    for item in items:
        cleaned = _sanitize_value(item, depth + 1)
        if cleaned is not _DROPPED:
            result.append(cleaned)
    return result


def _sanitize_record(record: Mapping[str, Any], skip: frozenset[str]) -> dict[str, Any]:
    """Clean a task or dependency, passing identifier fields through as-is."""
    result: dict[str, Any] = {}
    for key, value in record.items():
        if key in DANGEROUS_KEYS:
            continue
        if key in skip:
            result[key] = value
            continue
        cleaned = _sanitize_value(value, 1)
        if cleaned is not _DROPPED:
            result[key] = cleaned
    return result


def sanitize_task(task: Mapping[str, Any]) -> dict[str, Any]:
    return _sanitize_record(task, TASK_SKIP_SANITIZE_KEYS)


def sanitize_dependency(dep: Mapping[str, Any]) -> dict[str, Any]:
    return _sanitize_record(dep, DEPENDENCY_SKIP_SANITIZE_KEYS)


def strip_dangerous_keys(value: Any, depth: int = 1) -> Any:
    """Copy *value* without pollution keys, leaving strings untouched.

    Used for opaque data that must round-trip verbatim. Follows the same
    depth bound as sanitization.
    """
    if isinstance(value, dict):
        result: dict[str, Any] = {}
        for key, item in value.items():
            if key in DANGEROUS_KEYS:
                continue
            if isinstance(item, (dict, list)) and depth >= MAX_SANITIZE_DEPTH:
                continue
            result[key] = strip_dangerous_keys(item, depth + 1)
        return result
    if isinstance(value, list):
        return [
            strip_dangerous_keys(item, depth + 1)
            for item in value
            if not (isinstance(item, (dict, list)) and depth >= MAX_SANITIZE_DEPTH)
        ]
    return value


def _sanitize_view_settings(settings: Mapping[str, Any]) -> dict[str, Any]:
    result = strip_dangerous_keys(dict(settings))
    for key in VIEW_SETTINGS_TEXT_KEYS:
        if isinstance(result.get(key), str):
            result[key] = sanitize_string(result[key])
    return result


def sanitize_document(document: Mapping[str, Any]) -> dict[str, Any]:
    """Return a sanitized copy of a semantically valid document.

    The input is not modified. Keys outside the free-text set (versions,
    metadata timestamps, unknown top-level keys) are copied with pollution
    keys removed and strings left as they were.
    """
    result: dict[str, Any] = {}
    for key, value in document.items():
        if key in DANGEROUS_KEYS:
            continue
        if key == "chart":
            result[key] = _sanitize_chart(value)
        elif isinstance(value, (dict, list)):
            result[key] = strip_dangerous_keys(value)
        else:
            result[key] = value
    return result


def _sanitize_chart(source: Mapping[str, Any]) -> dict[str, Any]:
    chart: dict[str, Any] = {}
    for key, value in source.items():
        if key in DANGEROUS_KEYS:
            continue
        if key in ("name", "description"):
            chart[key] = sanitize_string(value) if isinstance(value, str) else value
        elif key == "tasks":
            chart[key] = [sanitize_task(task) for task in value]
        elif key == "dependencies" and isinstance(value, list):
            chart[key] = [sanitize_dependency(dep) for dep in value]
        elif key == "viewSettings":
            chart[key] = _sanitize_view_settings(value)
        else:
            chart[key] = strip_dangerous_keys(value)
    return chart
