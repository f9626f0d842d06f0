"""Write domain state out as an ``.ownchart`` document.

Known fields always come first and always win. Data this version does
not understand (task and dependency ``unknown_fields``, chart and document
extras) is appended afterwards, skipping known and dangerous key names.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import structlog

from chartfile import __version__
from chartfile.domain.models import ChartState, Dependency, Task
from chartfile.fileformat.constants import (
    DANGEROUS_KEYS,
    FILE_VERSION,
    KNOWN_CHART_KEYS,
    KNOWN_DEPENDENCY_KEYS,
    KNOWN_DOCUMENT_KEYS,
    KNOWN_TASK_KEYS,
    SCHEMA_VERSION,
)

logger = structlog.get_logger(__name__)


def timestamp() -> str:
    """Current UTC time as ISO 8601 with milliseconds and a ``Z`` suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def serialize(
    state: ChartState,
    *,
    pretty_print: bool = False,
    indent: int = 2,
    now: str | None = None,
) -> str:
    """Render *state* as document text.

    Args:
        state: Chart to write.
        pretty_print: Indent the output for humans.
        indent: Indent width when *pretty_print* is set.
        now: Timestamp for this save; defaults to the current time.
    """
    document = build_document(state, now=now)
    if pretty_print:
        return json.dumps(document, indent=indent, ensure_ascii=False)
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False)


def build_document(state: ChartState, now: str | None = None) -> dict[str, Any]:
    """Build the wire document for *state* as plain JSON-ready data."""
    now = now or timestamp()

    chart: dict[str, Any] = {"id": state.chart_id, "name": state.chart_name}
    if state.description is not None:
        chart["description"] = state.description
    chart["tasks"] = [serialize_task(task, now) for task in state.tasks]
    chart["dependencies"] = [serialize_dependency(dep, now) for dep in state.dependencies]
    chart["viewSettings"] = state.view_settings.to_wire()
    if state.export_settings is not None:
        chart["exportSettings"] = state.export_settings
    chart["metadata"] = {"createdAt": state.created_at or now, "updatedAt": now}
    _merge_extras(chart, state.chart_extras, KNOWN_CHART_KEYS)

    document: dict[str, Any] = {
        "fileVersion": FILE_VERSION,
        "appVersion": __version__,
        "schemaVersion": SCHEMA_VERSION,
        "chart": chart,
        "metadata": {"created": state.file_created_at or now, "modified": now},
        "features": {
            "hasHierarchy": any(task.parent for task in state.tasks),
            "hasHistory": False,
            "hasDependencies": bool(state.dependencies),
        },
    }
    if state.migrations is not None:
        document["migrations"] = {
            "appliedMigrations": list(state.migrations.applied_migrations),
            "originalVersion": state.migrations.original_version,
        }
    _merge_extras(document, state.document_extras, KNOWN_DOCUMENT_KEYS)

    logger.debug(
        "serialize.built",
        tasks=len(state.tasks),
        dependencies=len(state.dependencies),
    )
    return document


def serialize_task(task: Task, now: str) -> dict[str, Any]:
    """One task record; ``updatedAt`` is always *now*."""
    record: dict[str, Any] = {
        "id": task.id,
        "name": task.name,
        "startDate": task.start_date,
        "endDate": task.end_date,
        "duration": task.duration,
        "progress": task.progress,
        "color": task.color,
        "order": task.order,
        "type": str(task.type),
    }
    if task.parent:
        record["parent"] = task.parent
    record["open"] = task.open
    if task.color_override:
        record["colorOverride"] = task.color_override
    record["metadata"] = task.metadata
    record["createdAt"] = task.created_at or now
    record["updatedAt"] = now
    _merge_extras(record, task.unknown_fields, KNOWN_TASK_KEYS)
    return record


def serialize_dependency(dep: Dependency, now: str) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": dep.id,
        "from": dep.from_task_id,
        "to": dep.to_task_id,
        "type": str(dep.type),
    }
    if dep.lag is not None:
        record["lag"] = dep.lag
    record["createdAt"] = dep.created_at or now
    _merge_extras(record, dep.unknown_fields, KNOWN_DEPENDENCY_KEYS)
    return record


def _merge_extras(
    target: dict[str, Any], extras: Mapping[str, Any], known: frozenset[str]
) -> None:
    for key, value in extras.items():
        if key in known or key in DANGEROUS_KEYS or key in target:
            continue
        target[key] = value
