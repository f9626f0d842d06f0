"""Layer 4: semantic validation of a structurally valid document.

Checks meaning given valid shape: identifiers, calendar dates, numeric
ranges, colors, task kinds, the parent hierarchy, and the dependency
graph. Every failure is terminal: one :class:`FileValidationError` per
call, never a batch.

Input is the plain tree produced by Layers 2–3 (or by a migration).
Nothing here mutates it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from chartfile.domain.ids import is_finite_number, is_hex_color, is_uuid_v4, parse_iso_date
from chartfile.domain.types import DEPENDENCY_TYPES, TASK_TYPES, TaskType
from chartfile.fileformat.errors import ErrorCode, FileValidationError

logger = structlog.get_logger(__name__)


def validate_semantics(document: Mapping[str, Any]) -> None:
    """Validate tasks, hierarchy, then dependencies, stopping at the first error."""
    chart = document["chart"]
    tasks: list[dict[str, Any]] = chart["tasks"]

    task_ids = _validate_tasks(tasks)
    _validate_parents(tasks, task_ids)
    detect_circular_hierarchy(tasks)

    dependencies = chart.get("dependencies")
    if dependencies:
        _validate_dependencies(dependencies, task_ids)

    logger.debug("semantics.valid", tasks=len(tasks), dependencies=len(dependencies or []))


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


def _validate_tasks(tasks: list[dict[str, Any]]) -> set[str]:
    task_ids: set[str] = set()
    for index, task in enumerate(tasks):
        task_id = task["id"]
        if not is_uuid_v4(task_id):
            msg = f"Task {index} has invalid UUID: {task_id}"
            raise FileValidationError(ErrorCode.INVALID_ID, msg)
        if task_id in task_ids:
            raise FileValidationError(ErrorCode.DUPLICATE_ID, f"Duplicate task ID: {task_id}")
        task_ids.add(task_id)

        _validate_task_fields(task, index)
        _validate_task_dates(task, index)
        _validate_task_numbers(task, index)
        _validate_task_colors(task, index)

        task_type = task.get("type")
        known_type = isinstance(task_type, str) and task_type in TASK_TYPES
        if task_type is not None and not known_type:
            msg = f"Task {index} has invalid type: {task_type}"
            raise FileValidationError(ErrorCode.INVALID_TASK_TYPE, msg)
    return task_ids


def _validate_task_fields(task: dict[str, Any], index: int) -> None:
    """Type checks for the plain fields the domain model consumes."""
    problem: str | None = None
    if not isinstance(task["name"], str):
        problem = "name must be a string"
    elif not is_finite_number(task["order"]):
        problem = f"order must be a finite number, got {task['order']!r}"
    elif task.get("open") is not None and not isinstance(task["open"], bool):
        problem = "open must be a boolean"
    elif task.get("metadata") is not None and not isinstance(task["metadata"], dict):
        problem = "metadata must be an object"
    elif task.get("parent") is not None and not isinstance(task["parent"], str):
        problem = "parent must be a string"
    else:
        for key in ("createdAt", "updatedAt"):
            if task.get(key) is not None and not isinstance(task[key], str):
                problem = f"{key} must be a string"
                break
    if problem is not None:
        raise FileValidationError(ErrorCode.INVALID_TASK, f"Task {index}: {problem}")


def _validate_task_dates(task: dict[str, Any], index: int) -> None:
    start = parse_iso_date(task["startDate"])
    if start is None:
        msg = f"Task {index} has invalid startDate: {task['startDate']}"
        raise FileValidationError(ErrorCode.INVALID_DATE, msg)

    end_raw = task["endDate"]
    end = parse_iso_date(end_raw)
    if end is None:
        # A milestone may be saved without an end; the loader fills it in.
        if task.get("type") == TaskType.MILESTONE and end_raw == "":
            return
        msg = f"Task {index} has invalid endDate: {end_raw}"
        raise FileValidationError(ErrorCode.INVALID_DATE, msg)

    if end < start:
        msg = f"Task {index}: endDate {end_raw} is before startDate {task['startDate']}"
        raise FileValidationError(ErrorCode.INVALID_DATE_ORDER, msg)


def _validate_task_numbers(task: dict[str, Any], index: int) -> None:
    progress = task["progress"]
    if not is_finite_number(progress) or not 0 <= progress <= 100:
        msg = f"Task {index} has invalid progress: {progress!r}"
        raise FileValidationError(ErrorCode.INVALID_PROGRESS, msg)

    duration = task["duration"]
    if not is_finite_number(duration) or duration < 0:
        msg = f"Task {index} has invalid duration: {duration!r}"
        raise FileValidationError(ErrorCode.INVALID_DURATION, msg)


def _validate_task_colors(task: dict[str, Any], index: int) -> None:
    if not is_hex_color(task["color"]):
        msg = f"Task {index} has invalid color: {task['color']!r}"
        raise FileValidationError(ErrorCode.INVALID_COLOR, msg)

    override = task.get("colorOverride")
    if override is not None and not is_hex_color(override):
        msg = f"Task {index} has invalid colorOverride: {override!r}"
        raise FileValidationError(ErrorCode.INVALID_COLOR, msg)


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


def _validate_parents(tasks: list[dict[str, Any]], task_ids: set[str]) -> None:
    for index, task in enumerate(tasks):
        parent = task.get("parent")
        if parent and parent not in task_ids:
            msg = f"Task {index} references non-existent parent: {parent}"
            raise FileValidationError(ErrorCode.DANGLING_PARENT, msg)


def detect_circular_hierarchy(tasks: list[dict[str, Any]]) -> None:
    """Raise CIRCULAR_HIERARCHY if following ``parent`` links ever loops.

    Walks each task's parent chain with an on-stack set. A node seen again
    while still on the stack closes a cycle; a node finished by an earlier
    walk is skipped, so the whole check is O(n). The walk is iterative so
    deep chains never touch the interpreter's recursion limit.
    """
    parent_of: dict[str, str | None] = {t["id"]: t.get("parent") or None for t in tasks}
    visited: set[str] = set()

    for start in parent_of:
        if start in visited:
            continue
        path: list[str] = []
        on_stack: set[str] = set()
        current: str | None = start
        while current is not None:
            if current in on_stack:
                cycle = " -> ".join([*path, current])
                msg = f"Circular reference detected: {cycle}"
                raise FileValidationError(ErrorCode.CIRCULAR_HIERARCHY, msg)
            if current in visited:
                break
            on_stack.add(current)
            path.append(current)
            current = parent_of.get(current)
        visited.update(path)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _validate_dependencies(dependencies: list[dict[str, Any]], task_ids: set[str]) -> None:
    dep_ids: set[str] = set()
    for index, dep in enumerate(dependencies):
        dep_id = dep.get("id")
        if not is_uuid_v4(dep_id):
            msg = f"Dependency {index} has invalid UUID: {dep_id}"
            raise FileValidationError(ErrorCode.INVALID_ID, msg)
        if dep_id in dep_ids:
            msg = f"Duplicate dependency ID: {dep_id}"
            raise FileValidationError(ErrorCode.DUPLICATE_ID, msg)
        dep_ids.add(dep_id)

        dep_type = dep.get("type")
        if not isinstance(dep_type, str) or dep_type not in DEPENDENCY_TYPES:
            msg = f"Dependency {index} has invalid type: {dep_type!r}"
            raise FileValidationError(ErrorCode.INVALID_DEPENDENCY_TYPE, msg)

        lag = dep.get("lag")
        if lag is not None and not is_finite_number(lag):
            msg = f"Dependency {index} has invalid lag: {lag!r}"
            raise FileValidationError(ErrorCode.INVALID_LAG, msg)

        created = dep.get("createdAt")
        if created is not None and not isinstance(created, str):
            msg = f"Dependency {index}: createdAt must be a string"
            raise FileValidationError(ErrorCode.INVALID_STRUCTURE, msg)

        source = dep.get("from")
        target = dep.get("to")
        if isinstance(source, str) and source == target:
            msg = f"Dependency {index} links task {source} to itself"
            raise FileValidationError(ErrorCode.SELF_DEPENDENCY, msg)

        for endpoint in (source, target):
            if not isinstance(endpoint, str) or endpoint not in task_ids:
                msg = f"Dependency {index} references non-existent task: {endpoint}"
                raise FileValidationError(ErrorCode.DANGLING_DEPENDENCY, msg)
