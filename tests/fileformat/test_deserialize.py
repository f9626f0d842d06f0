"""Tests for the full load pipeline."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest

from chartfile.domain.ids import generate_id
from chartfile.domain.models import ChartState
from chartfile.domain.types import DependencyType, TaskType
from chartfile.fileformat.deserialize import FUTURE_VERSION_WARNING, deserialize
from chartfile.fileformat.errors import ErrorCode
from chartfile.fileformat.migrate import Migration, Migrator, default_migrator
from chartfile.services.result import ServiceResult

Factory = Callable[..., dict[str, Any]]


def _load(document: dict[str, Any] | str, **kwargs: Any) -> ServiceResult:
    text = document if isinstance(document, str) else json.dumps(document)
    return deserialize(text, "plan.ownchart", **kwargs)


def _chart(result: ServiceResult) -> ChartState:
    assert result.ok, result.error
    return result.data["chart"]


class TestScenarios:
    def test_script_in_chart_name_is_removed(self, make_document: Factory) -> None:
        doc = make_document()
        doc["chart"]["name"] = "<script>x</script>Proj"
        assert _chart(_load(doc)).chart_name == "Proj"

    def test_impossible_date_rejected(self, make_document: Factory, make_task: Factory) -> None:
        result = _load(make_document([make_task(startDate="2026-02-30")]))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.INVALID_DATE

    def test_mutual_parents_rejected(self, make_document: Factory, make_task: Factory) -> None:
        a, b = make_task(), make_task()
        a["parent"], b["parent"] = b["id"], a["id"]
        result = _load(make_document([a, b]))
        assert result.error is not None
        assert result.error.code == ErrorCode.CIRCULAR_HIERARCHY

    def test_too_many_tasks(self, make_document: Factory, make_task: Factory) -> None:
        task = make_task()
        result = _load(make_document([task] * 10_001))
        assert result.error is not None
        assert result.error.code == ErrorCode.TOO_MANY_TASKS

    def test_registered_migration_applied(self, make_document: Factory) -> None:
        migrator = default_migrator().with_migration(
            Migration("0.9.0", "1.0.0", "initial release", lambda doc: doc)
        )
        result = _load(make_document(fileVersion="0.9.0"), migrator=migrator)
        assert result.ok
        assert result.data["migrated"] is True
        assert any("migrated from v0.9.0 to v1.0.0" in w for w in result.warnings)
        state = _chart(result)
        assert state.migrations is not None
        assert state.migrations.applied_migrations == ["0.9.0->1.0.0"]
        assert state.migrations.original_version == "0.9.0"


class TestResultShape:
    def test_success(self, make_document: Factory, make_task: Factory) -> None:
        result = _load(make_document([make_task()]))
        assert result.ok
        assert result.op == "deserialize"
        assert result.error is None
        assert result.warnings == []
        assert result.data["migrated"] is False
        assert result.data["file_version"] == "1.0.0"

    def test_failure_is_not_recoverable(self) -> None:
        result = _load("{")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.INVALID_JSON
        assert result.error.recoverable is False
        assert result.data == {}

    def test_size_check_only_when_size_given(self, make_document: Factory) -> None:
        text = json.dumps(make_document())
        assert deserialize(text, "plan.json").ok
        result = deserialize(text, "plan.json", len(text))
        assert result.error is not None
        assert result.error.code == ErrorCode.INVALID_EXTENSION

    def test_empty_file(self) -> None:
        result = deserialize("", "plan.ownchart", 0)
        assert result.error is not None
        assert result.error.code == ErrorCode.FILE_EMPTY


class TestMigrationOutcomes:
    def test_no_path_warns_and_loads(self, make_document: Factory) -> None:
        result = _load(make_document(fileVersion="0.5.0"))
        assert result.ok
        assert result.data["migrated"] is False
        assert result.warnings == ["No migration path from v0.5.0; loaded as-is"]

    def test_future_version_warns(self, make_document: Factory) -> None:
        result = _load(make_document(fileVersion="2.0.0"))
        assert result.ok
        assert result.warnings == [FUTURE_VERSION_WARNING]

    def test_migrated_shape_is_validated(self, make_document: Factory) -> None:
        migrator = default_migrator().with_migration(
            Migration("0.9.0", "1.0.0", "breaks tasks", lambda doc: {**doc, "chart": []})
        )
        result = _load(make_document(fileVersion="0.9.0"), migrator=migrator)
        assert result.error is not None
        assert result.error.code == ErrorCode.MISSING_FIELD

    def test_migrated_values_are_validated(
        self, make_document: Factory, make_task: Factory
    ) -> None:
        def bad_progress(doc: dict[str, Any]) -> dict[str, Any]:
            for task in doc["chart"]["tasks"]:
                task["progress"] = 150
            return doc

        migrator = default_migrator().with_migration(
            Migration("0.9.0", "1.0.0", "scale progress", bad_progress)
        )
        result = _load(make_document([make_task()], fileVersion="0.9.0"), migrator=migrator)
        assert result.error is not None
        assert result.error.code == ErrorCode.INVALID_PROGRESS

    def test_cyclic_registry_is_unknown_error(self, make_document: Factory) -> None:
        migrator = (
            Migrator(current_version="1.0.0")
            .with_migration(Migration("0.1.0", "0.2.0", "a", lambda d: d))
            .with_migration(Migration("0.2.0", "0.1.0", "b", lambda d: d))
        )
        result = _load(make_document(fileVersion="0.1.0"), migrator=migrator)
        assert result.error is not None
        assert result.error.code == ErrorCode.UNKNOWN_ERROR
        assert result.error.message.startswith("Unexpected error:")


class TestPollution:
    def test_proto_keys_never_reach_state(
        self, make_document: Factory, make_task: Factory
    ) -> None:
        task = make_task()
        text = json.dumps(make_document([task]))
        text = text.replace('"name": "Design review"', '"name": "x", "__proto__": {"admin": true}')
        text = text.replace('"viewSettings": {', '"viewSettings": {"constructor": {"a": 1}, ')
        state = _chart(_load(text))
        assert state.tasks[0].unknown_fields == {}
        assert "constructor" not in state.view_settings.to_wire()

    def test_pollution_in_metadata_removed(
        self, make_document: Factory, make_task: Factory
    ) -> None:
        text = json.dumps(make_document([make_task(metadata={"prototype": {"x": 1}, "k": 1})]))
        assert _chart(_load(text)).tasks[0].metadata == {"k": 1}


class TestTaskConversion:
    def test_defaults(self, make_document: Factory, make_task: Factory) -> None:
        raw = make_task()
        for key in ("type", "open", "metadata"):
            del raw[key]
        task = _chart(_load(make_document([raw]))).tasks[0]
        assert task.type is TaskType.TASK
        assert task.open is True
        assert task.metadata == {}

    def test_milestone_end_date_filled(self, make_document: Factory, make_task: Factory) -> None:
        raw = make_task(type="milestone", startDate="2026-04-01", endDate="", duration=0)
        task = _chart(_load(make_document([raw]))).tasks[0]
        assert task.end_date == "2026-04-01"

    def test_unknown_fields_side_channel(
        self, make_document: Factory, make_task: Factory
    ) -> None:
        raw = make_task(customField="<b>kept</b>", estimate={"hours": 12})
        task = _chart(_load(make_document([raw]))).tasks[0]
        assert task.unknown_fields == {"customField": "kept", "estimate": {"hours": 12}}
        assert not hasattr(task, "customField")

    def test_order_normalized(self, make_document: Factory, make_task: Factory) -> None:
        parent = make_task(order=10)
        child = make_task(order=3, parent=parent["id"])
        other = make_task(order=20)
        tasks = _chart(_load(make_document([child, other, parent]))).tasks
        assert [t.id for t in tasks] == [child["id"], other["id"], parent["id"]]
        assert [t.order for t in tasks] == [1, 2, 0]

    def test_dependency_conversion(
        self, make_document: Factory, make_task: Factory, make_dependency: Factory
    ) -> None:
        a, b = make_task(), make_task()
        dep = make_dependency(a["id"], b["id"], type="SS", lag=2, risk="high")
        state = _chart(_load(make_document([a, b], [dep])))
        loaded = state.dependencies[0]
        assert loaded.from_task_id == a["id"]
        assert loaded.to_task_id == b["id"]
        assert loaded.type is DependencyType.START_TO_START
        assert loaded.lag == 2
        assert loaded.unknown_fields == {"risk": "high"}


class TestViewSettingsRepair:
    def _view(self, make_document: Factory, **settings: Any) -> Any:
        doc = make_document()
        doc["chart"]["viewSettings"] = settings
        return _chart(_load(doc)).view_settings

    @pytest.mark.parametrize(
        "zoom,expected",
        [
            (0.001, 0.05),
            (10, 3.0),
            (1.5, 1.5),
            ("2", 1),
            (None, 1),
            (10**400, 3.0),
            (-(10**400), 0.05),
        ],
    )
    def test_zoom(self, make_document: Factory, zoom: Any, expected: float) -> None:
        assert self._view(make_document, zoom=zoom).zoom == expected

    def test_pan_offset(self, make_document: Factory) -> None:
        view = self._view(make_document, panOffset={"x": "left", "y": -40})
        assert (view.pan_offset.x, view.pan_offset.y) == (0, -40)

    @pytest.mark.parametrize("width,expected", [(320, 320), (0, None), (-5, None), ("1", None)])
    def test_task_table_width(self, make_document: Factory, width: Any, expected: Any) -> None:
        assert self._view(make_document, taskTableWidth=width).task_table_width == expected

    def test_wrong_typed_flags(self, make_document: Factory) -> None:
        view = self._view(make_document, showWeekends="no", showHolidays=1)
        assert view.show_weekends is True
        assert view.show_holidays is None

    def test_wrong_typed_optionals_dropped(self, make_document: Factory) -> None:
        view = self._view(
            make_document,
            projectTitle=42,
            hiddenColumns="progress",
            workingDaysConfig=[],
            columnWidths={"name": 200, "bad": "wide"},
            hiddenTaskIds=["a", 3],
        )
        assert view.project_title is None
        assert view.hidden_columns is None
        assert view.working_days_config is None
        assert view.column_widths == {"name": 200}
        assert view.hidden_task_ids == ["a"]

    def test_unmodeled_settings_kept(self, make_document: Factory) -> None:
        view = self._view(make_document, timelineDensity="compact")
        assert view.to_wire()["timelineDensity"] == "compact"

    def test_huge_integers_never_fail(self, make_document: Factory) -> None:
        view = self._view(
            make_document,
            panOffset={"x": 10**400, "y": 0},
            taskTableWidth=10**400,
            columnWidths={"name": 10**400},
        )
        assert view.pan_offset.x == 10**400
        assert view.task_table_width == 10**400
        assert view.column_widths == {"name": 10**400}

    def test_snake_case_keys_stay_unmodeled(self, make_document: Factory) -> None:
        view = self._view(make_document, hidden_columns=5, column_widths={"name": 200})
        assert view.hidden_columns is None
        assert view.column_widths is None
        wire = view.to_wire()
        assert wire["hidden_columns"] == 5
        assert wire["column_widths"] == {"name": 200}


class TestSyntaxEdges:
    @pytest.mark.parametrize(
        "overrides,code",
        [
            ({"color": "#fff\n"}, ErrorCode.INVALID_COLOR),
            ({"startDate": "2026-03-02\n"}, ErrorCode.INVALID_DATE),
            ({"startDate": "２０２６-０３-０２"}, ErrorCode.INVALID_DATE),
            ({"progress": 10**400}, ErrorCode.INVALID_PROGRESS),
        ],
    )
    def test_rejected_values(
        self, make_document: Factory, make_task: Factory, overrides: dict[str, Any], code: str
    ) -> None:
        result = _load(make_document([make_task(**overrides)]))
        assert result.error is not None
        assert result.error.code == code

    def test_trailing_newline_id(self, make_document: Factory, make_task: Factory) -> None:
        task = make_task()
        task["id"] += "\n"
        result = _load(make_document([task]))
        assert result.error is not None
        assert result.error.code == ErrorCode.INVALID_ID

    def test_non_string_dependency_created_at(
        self, make_document: Factory, make_task: Factory, make_dependency: Factory
    ) -> None:
        a, b = make_task(), make_task()
        doc = make_document([a, b], [make_dependency(a["id"], b["id"], createdAt=1700000000)])
        result = _load(doc)
        assert result.error is not None
        assert result.error.code == ErrorCode.INVALID_STRUCTURE


class TestChartConversion:
    def test_metadata_and_extras(self, make_document: Factory) -> None:
        doc = make_document(
            metadata={"created": "2025-01-01T00:00:00.000Z", "modified": "x"},
            plugins={"kanban": True},
        )
        doc["chart"]["metadata"] = {"createdAt": "2025-02-01T00:00:00.000Z"}
        doc["chart"]["exportSettings"] = {"format": "png"}
        doc["chart"]["baseline"] = {"id": generate_id()}
        state = _chart(_load(doc))
        assert state.file_created_at == "2025-01-01T00:00:00.000Z"
        assert state.created_at == "2025-02-01T00:00:00.000Z"
        assert state.export_settings == {"format": "png"}
        assert state.document_extras == {"plugins": {"kanban": True}}
        assert list(state.chart_extras) == ["baseline"]

    def test_export_settings_must_be_object(self, make_document: Factory) -> None:
        doc = make_document()
        doc["chart"]["exportSettings"] = "png"
        assert _chart(_load(doc)).export_settings is None
