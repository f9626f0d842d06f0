"""Layers 1–3: cheap checks that reject malformed input before real work.

- Layer 1 (pre-parse): file size and extension, from metadata alone.
- Layer 2 (safe parse): JSON text to a plain tree, dropping pollution keys
  at the moment they would be assigned.
- Layer 3 (structure): presence and type of the fields later layers rely on.

All three fail fast with a single :class:`FileValidationError`.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from chartfile.fileformat.constants import (
    DANGEROUS_KEYS,
    FILE_EXTENSION,
    MAX_FILE_SIZE,
    MAX_TASKS,
    REQUIRED_TASK_KEYS,
)
from chartfile.fileformat.errors import ErrorCode, FileValidationError

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Layer 1
# ---------------------------------------------------------------------------


def validate_pre_parse(name: str, size: int) -> None:
    """Reject empty, oversized, or wrongly named files without reading them."""
    if size == 0:
        raise FileValidationError(ErrorCode.FILE_EMPTY, "File is empty")
    if size > MAX_FILE_SIZE:
        msg = f"File size {size / 1024 / 1024:.1f}MB exceeds limit of 50MB"
        raise FileValidationError(ErrorCode.FILE_TOO_LARGE, msg)
    if not name.endswith(FILE_EXTENSION):
        msg = f"File must have {FILE_EXTENSION} extension"
        raise FileValidationError(ErrorCode.INVALID_EXTENSION, msg)


# ---------------------------------------------------------------------------
# Layer 2
# ---------------------------------------------------------------------------


def _safe_object(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    return {key: value for key, value in pairs if key not in DANGEROUS_KEYS}


def _reject_constant(name: str) -> Any:
    msg = f"Non-standard JSON constant: {name}"
    raise ValueError(msg)


def safe_json_parse(text: str) -> Any:
    """Parse *text* as strict JSON without ever building a pollution key.

    ``object_pairs_hook`` builds each object from its key/value pairs, so a
    dangerous key is dropped before the object exists. ``NaN`` and
    ``Infinity`` literals are rejected.
    """
    try:
        return json.loads(
            text,
            object_pairs_hook=_safe_object,
            parse_constant=_reject_constant,
        )
    except RecursionError as exc:
        msg = "Invalid JSON: nesting too deep"
        raise FileValidationError(ErrorCode.INVALID_JSON, msg) from exc
    except ValueError as exc:
        msg = f"Invalid JSON: {exc}"
        raise FileValidationError(ErrorCode.INVALID_JSON, msg) from exc


# ---------------------------------------------------------------------------
# Layer 3
# ---------------------------------------------------------------------------


def _missing(field: str) -> FileValidationError:
    return FileValidationError(ErrorCode.MISSING_FIELD, f"Missing required field: {field}")


def validate_structure(data: Any) -> None:
    """Check the document shape the semantic layer depends on.

    Only presence and container types are checked here; values are
    checked by :func:`chartfile.fileformat.semantics.validate_semantics`.
    """
    if not isinstance(data, dict):
        raise FileValidationError(ErrorCode.INVALID_STRUCTURE, "File must be a JSON object")

    if not isinstance(data.get("fileVersion"), str):
        raise _missing("fileVersion")

    chart = data.get("chart")
    if not isinstance(chart, dict):
        raise _missing("chart")

    if not isinstance(chart.get("id"), str):
        raise _missing("chart.id")
    if not isinstance(chart.get("name"), str):
        raise _missing("chart.name")

    tasks = chart.get("tasks")
    if not isinstance(tasks, list):
        raise FileValidationError(ErrorCode.INVALID_STRUCTURE, "chart.tasks must be an array")

    if len(tasks) > MAX_TASKS:
        msg = f"File contains {len(tasks)} tasks (max: {MAX_TASKS})"
        raise FileValidationError(ErrorCode.TOO_MANY_TASKS, msg)

    for index, task in enumerate(tasks):
        if not isinstance(task, dict):
            msg = f"Task at index {index} is not an object"
            raise FileValidationError(ErrorCode.INVALID_TASK, msg)
        for field in REQUIRED_TASK_KEYS:
            if field not in task:
                msg = f"Task {index} missing field: {field}"
                raise FileValidationError(ErrorCode.MISSING_FIELD, msg)

    dependencies = chart.get("dependencies")
    if dependencies is not None:
        if not isinstance(dependencies, list):
            msg = "chart.dependencies must be an array"
            raise FileValidationError(ErrorCode.INVALID_STRUCTURE, msg)
        for index, dep in enumerate(dependencies):
            if not isinstance(dep, dict):
                msg = f"Dependency at index {index} is not an object"
                raise FileValidationError(ErrorCode.INVALID_STRUCTURE, msg)

    if not isinstance(chart.get("viewSettings"), dict):
        raise _missing("chart.viewSettings")

    logger.debug("structure.valid", tasks=len(tasks), dependencies=len(dependencies or []))
