"""Load an ``.ownchart`` document into domain state.

Pipeline: PRE-PARSE → PARSE → STRUCTURE → MIGRATE → SEMANTICS → SANITIZE
→ CONVERT → ORDER

Every layer raises on its first violation. This module is the only place
where those exceptions become a :class:`ServiceResult`, so callers never
see a raised validation error from a load.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from chartfile.domain.hierarchy import normalize_task_order
from chartfile.domain.ids import is_finite_number
from chartfile.domain.models import (
    ChartState,
    Dependency,
    MigrationHistory,
    Task,
    ViewSettings,
)
from chartfile.domain.types import TaskType
from chartfile.fileformat.constants import (
    KNOWN_CHART_KEYS,
    KNOWN_DEPENDENCY_KEYS,
    KNOWN_DOCUMENT_KEYS,
    KNOWN_TASK_KEYS,
    MAX_ZOOM,
    MIN_ZOOM,
)
from chartfile.fileformat.errors import ErrorCode, FileValidationError
from chartfile.fileformat.migrate import Migrator, default_migrator
from chartfile.fileformat.sanitize import sanitize_document
from chartfile.fileformat.semantics import validate_semantics
from chartfile.fileformat.structure import (
    safe_json_parse,
    validate_pre_parse,
    validate_structure,
)
from chartfile.services.result import ServiceResult, error_result

logger = structlog.get_logger(__name__)

FUTURE_VERSION_WARNING = (
    "This file was created with a newer version. Some features may not work correctly."
)

# View settings fields repaired by type when a file carries a bad value.
_DEFAULT_TRUE_FLAGS = ("showWeekends", "showTodayMarker")
_OPTIONAL_FLAGS = (
    "showHolidays",
    "showDependencies",
    "showProgress",
    "workingDaysMode",
    "isTaskTableCollapsed",
)
_OPTIONAL_TEXT = ("taskLabelPosition", "holidayRegion", "projectTitle", "projectAuthor")
_OPTIONAL_MAPS = ("workingDaysConfig", "colorModeState")
_OPTIONAL_ID_LISTS = ("hiddenColumns", "hiddenTaskIds")


def deserialize(
    content: str,
    file_name: str,
    file_size: int | None = None,
    *,
    migrator: Migrator | None = None,
) -> ServiceResult:
    """Validate *content* and convert it to a :class:`ChartState`.

    Args:
        content: Raw document text.
        file_name: Name used for the extension check.
        file_size: Byte size for the pre-parse check; skipped when None.
        migrator: Registry to upgrade older documents with. Defaults to
            :func:`default_migrator`.

    Returns:
        ``ok=True`` with ``data`` holding ``chart``, ``migrated``,
        ``source_version`` and ``file_version`` plus any warnings, or
        ``ok=False`` with exactly one error.
    """
    op = "deserialize"
    warnings: list[str] = []
    try:
        if file_size is not None:
            validate_pre_parse(file_name, file_size)

        document = safe_json_parse(content)
        validate_structure(document)
        source_version = document["fileVersion"]

        document, migrated = _migrate(document, migrator or default_migrator(), warnings)

        validate_semantics(document)
        clean = sanitize_document(document)
        state = to_chart_state(clean)
    except FileValidationError as exc:
        logger.debug("deserialize.rejected", file=file_name, code=str(exc.code))
        return error_result(op, str(exc.code), exc.message)
    except Exception as exc:
        logger.error("deserialize.unexpected", file=file_name, exc_info=True)
        return error_result(op, str(ErrorCode.UNKNOWN_ERROR), f"Unexpected error: {exc}")

    logger.debug(
        "deserialize.complete",
        file=file_name,
        tasks=len(state.tasks),
        dependencies=len(state.dependencies),
        migrated=migrated,
    )
    return ServiceResult(
        ok=True,
        op=op,
        data={
            "chart": state,
            "migrated": migrated,
            "source_version": source_version,
            "file_version": clean["fileVersion"],
        },
        warnings=warnings,
    )


def _migrate(
    document: dict[str, Any], migrator: Migrator, warnings: list[str]
) -> tuple[dict[str, Any], bool]:
    version = document["fileVersion"]
    migrated = False

    if migrator.needs_migration(version):
        document = migrator.migrate(document)
        new_version = document["fileVersion"]
        if new_version != version:
            migrated = True
            warnings.append(f"File migrated from v{version} to v{new_version}")
            # A transform may reshape anything; its output is checked like input.
            validate_structure(document)
        else:
            warnings.append(f"No migration path from v{version}; loaded as-is")

    if migrator.is_from_future(document["fileVersion"]):
        logger.warning(
            "deserialize.future_version",
            file_version=document["fileVersion"],
            current=migrator.current_version,
        )
        warnings.append(FUTURE_VERSION_WARNING)

    return document, migrated


# ---------------------------------------------------------------------------
# Domain conversion
# ---------------------------------------------------------------------------


def to_chart_state(document: Mapping[str, Any]) -> ChartState:
    """Build domain state from a validated, sanitized document.

    Tasks come back with ``order`` rewritten to the depth-first index of
    the hierarchy; array positions are unchanged.
    """
    chart = document["chart"]
    tasks = normalize_task_order([to_task(raw) for raw in chart["tasks"]])
    dependencies = [to_dependency(raw) for raw in chart.get("dependencies") or []]

    chart_meta = chart.get("metadata")
    file_meta = document.get("metadata")
    export_settings = chart.get("exportSettings")
    description = chart.get("description")

    return ChartState(
        chart_id=chart["id"],
        chart_name=chart["name"],
        description=description if isinstance(description, str) else None,
        tasks=tasks,
        dependencies=dependencies,
        view_settings=repair_view_settings(chart["viewSettings"]),
        export_settings=export_settings if isinstance(export_settings, dict) else None,
        created_at=_str_field(chart_meta, "createdAt"),
        file_created_at=_str_field(file_meta, "created"),
        migrations=_migration_history(document.get("migrations")),
        chart_extras={k: v for k, v in chart.items() if k not in KNOWN_CHART_KEYS},
        document_extras={k: v for k, v in document.items() if k not in KNOWN_DOCUMENT_KEYS},
    )


def to_task(raw: Mapping[str, Any]) -> Task:
    task_type = raw.get("type") or TaskType.TASK
    end_date = raw["endDate"]
    if task_type == TaskType.MILESTONE and not end_date:
        end_date = raw["startDate"]

    is_open = raw.get("open")
    return Task(
        id=raw["id"],
        name=raw["name"],
        start_date=raw["startDate"],
        end_date=end_date,
        duration=raw["duration"],
        progress=raw["progress"],
        color=raw["color"],
        order=raw["order"],
        type=task_type,
        parent=raw.get("parent") or None,
        open=is_open if is_open is not None else True,
        color_override=raw.get("colorOverride") or None,
        metadata=raw.get("metadata") or {},
        created_at=raw.get("createdAt"),
        updated_at=raw.get("updatedAt"),
        unknown_fields={k: v for k, v in raw.items() if k not in KNOWN_TASK_KEYS},
    )


def to_dependency(raw: Mapping[str, Any]) -> Dependency:
    return Dependency(
        id=raw["id"],
        from_task_id=raw["from"],
        to_task_id=raw["to"],
        type=raw["type"],
        lag=raw.get("lag"),
        created_at=_str_field(raw, "createdAt"),
        unknown_fields={k: v for k, v in raw.items() if k not in KNOWN_DEPENDENCY_KEYS},
    )


def repair_view_settings(raw: Mapping[str, Any]) -> ViewSettings:
    """Coerce stored view settings into a usable :class:`ViewSettings`.

    Bad values never fail a load: numbers fall back to neutral values,
    flags to their defaults, and other mistyped optional settings are
    dropped. Keys outside the model are kept as extras.
    """
    settings = dict(raw)

    zoom = raw.get("zoom")
    zoom = zoom if is_finite_number(zoom) else 1
    settings["zoom"] = min(MAX_ZOOM, max(MIN_ZOOM, zoom))

    pan = raw.get("panOffset")
    pan = pan if isinstance(pan, dict) else {}
    settings["panOffset"] = {
        axis: pan.get(axis) if is_finite_number(pan.get(axis)) else 0 for axis in ("x", "y")
    }

    width = raw.get("taskTableWidth")
    settings["taskTableWidth"] = width if is_finite_number(width) and width > 0 else None

    for key in _DEFAULT_TRUE_FLAGS:
        if not isinstance(raw.get(key), bool):
            settings[key] = True
    for key in _OPTIONAL_FLAGS:
        if not isinstance(raw.get(key), bool):
            settings.pop(key, None)
    for key in _OPTIONAL_TEXT:
        if not isinstance(raw.get(key), str):
            settings.pop(key, None)
    for key in _OPTIONAL_MAPS:
        if not isinstance(raw.get(key), dict):
            settings.pop(key, None)
    for key in _OPTIONAL_ID_LISTS:
        value = raw.get(key)
        if isinstance(value, list):
            settings[key] = [item for item in value if isinstance(item, str)]
        else:
            settings.pop(key, None)

    widths = raw.get("columnWidths")
    if isinstance(widths, dict):
        settings["columnWidths"] = {k: v for k, v in widths.items() if is_finite_number(v)}
    else:
        settings.pop("columnWidths", None)

    return ViewSettings.model_validate(settings)


def _str_field(container: Any, key: str) -> str | None:
    if isinstance(container, dict) and isinstance(container.get(key), str):
        return container[key]
    return None


def _migration_history(raw: Any) -> MigrationHistory | None:
    if not isinstance(raw, dict) or not isinstance(raw.get("originalVersion"), str):
        return None
    applied = raw.get("appliedMigrations")
    labels = [s for s in applied if isinstance(s, str)] if isinstance(applied, list) else []
    return MigrationHistory(applied_migrations=labels, original_version=raw["originalVersion"])
