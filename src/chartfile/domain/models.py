"""Typed in-memory chart entities.

These are the only shapes that cross the read/write boundary. The
deserializer produces them from a validated document and the serializer
turns them back into a wire document.

Known fields are fixed attributes. Keys a task or dependency carried in
the file but this version does not understand live in ``unknown_fields``,
a separate side channel that is merged back only at save time and never
into the same namespace as known fields.

All models use Pydantic with frozen config for immutability.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chartfile.domain.types import DependencyType, TaskType

Number = int | float


class Task(BaseModel):
    """A unit of work, a summary row, or a milestone."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    start_date: str
    end_date: str
    duration: Number
    progress: Number = 0
    color: str
    order: Number
    type: TaskType = TaskType.TASK
    parent: str | None = None
    open: bool = True
    color_override: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: str | None = None
    updated_at: str | None = None
    unknown_fields: dict[str, Any] = Field(default_factory=dict)


class Dependency(BaseModel):
    """A directed scheduling constraint from one task to another."""

    model_config = ConfigDict(frozen=True)

    id: str
    from_task_id: str
    to_task_id: str
    type: DependencyType = DependencyType.FINISH_TO_START
    lag: Number | None = None
    created_at: str | None = None
    unknown_fields: dict[str, Any] = Field(default_factory=dict)


class PanOffset(BaseModel):
    """Timeline scroll position."""

    model_config = ConfigDict(frozen=True)

    x: Number = 0
    y: Number = 0


# Written even when None: a null width means "auto" to the table.
_ALWAYS_WRITTEN = frozenset({"task_table_width"})


class ViewSettings(BaseModel):
    """Chart view state persisted alongside the data.

    Wire keys are camelCase. Keys this version does not model are kept as
    pydantic extras and written back unchanged.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        alias_generator=to_camel,
    )

    zoom: Number = 1
    pan_offset: PanOffset = Field(default_factory=PanOffset)
    show_weekends: bool = True
    show_today_marker: bool = True
    task_table_width: Number | None = None
    column_widths: dict[str, Number] | None = None
    show_holidays: bool | None = None
    show_dependencies: bool | None = None
    show_progress: bool | None = None
    task_label_position: str | None = None
    working_days_mode: bool | None = None
    working_days_config: dict[str, Any] | None = None
    holiday_region: str | None = None
    project_title: str | None = None
    project_author: str | None = None
    color_mode_state: dict[str, Any] | None = None
    hidden_columns: list[str] | None = None
    is_task_table_collapsed: bool | None = None
    hidden_task_ids: list[str] | None = None

    def to_wire(self) -> dict[str, Any]:
        """Dump to a camelCase dict, omitting unset optional settings."""
        data = self.model_dump(mode="json", by_alias=True)
        for name, field in type(self).model_fields.items():
            if name in _ALWAYS_WRITTEN:
                continue
            alias = field.alias or name
            if data.get(alias) is None:
                data.pop(alias, None)
        return data


class MigrationHistory(BaseModel):
    """Record of the format upgrades a document went through."""

    model_config = ConfigDict(frozen=True)

    applied_migrations: list[str] = Field(default_factory=list)
    original_version: str


class ChartState(BaseModel):
    """Everything a loaded document contributes to the application.

    Attributes:
        chart_id: Stable chart identifier (``chart.id``).
        chart_name: Display name (``chart.name``), sanitized.
        created_at: ``chart.metadata.createdAt`` from the source document.
        file_created_at: ``metadata.created`` from the source document.
        chart_extras: ``chart`` keys this version does not model.
        document_extras: Top-level keys this version does not model.
    """

    model_config = ConfigDict(frozen=True)

    chart_id: str
    chart_name: str
    description: str | None = None
    tasks: list[Task] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(default_factory=list)
    view_settings: ViewSettings = Field(default_factory=ViewSettings)
    export_settings: dict[str, Any] | None = None
    created_at: str | None = None
    file_created_at: str | None = None
    migrations: MigrationHistory | None = None
    chart_extras: dict[str, Any] = Field(default_factory=dict)
    document_extras: dict[str, Any] = Field(default_factory=dict)
