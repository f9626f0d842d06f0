"""Shared pytest fixtures for chartfile tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from chartfile.domain.ids import generate_id
from chartfile.fileformat.constants import FILE_VERSION

TaskFactory = Callable[..., dict[str, Any]]
DocumentFactory = Callable[..., dict[str, Any]]


def _task(**overrides: Any) -> dict[str, Any]:
    task: dict[str, Any] = {
        "id": generate_id(),
        "name": "Design review",
        "startDate": "2026-03-02",
        "endDate": "2026-03-06",
        "duration": 5,
        "progress": 0,
        "color": "#4a90d9",
        "order": 0,
        "type": "task",
        "open": True,
        "metadata": {},
    }
    task.update(overrides)
    return task


def _dependency(source: str, target: str, **overrides: Any) -> dict[str, Any]:
    dep: dict[str, Any] = {"id": generate_id(), "from": source, "to": target, "type": "FS"}
    dep.update(overrides)
    return dep


def _document(
    tasks: list[dict[str, Any]] | None = None,
    dependencies: list[dict[str, Any]] | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    document: dict[str, Any] = {
        "fileVersion": FILE_VERSION,
        "appVersion": "0.1.0",
        "schemaVersion": 1,
        "chart": {
            "id": generate_id(),
            "name": "Roadmap",
            "tasks": tasks if tasks is not None else [],
            "dependencies": dependencies if dependencies is not None else [],
            "viewSettings": {
                "zoom": 1,
                "panOffset": {"x": 0, "y": 0},
                "showWeekends": True,
                "showTodayMarker": True,
                "taskTableWidth": None,
            },
        },
    }
    document.update(overrides)
    return document


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_task() -> TaskFactory:
    """Factory for a valid persisted task record; keyword args override fields."""
    return _task


@pytest.fixture
def make_dependency() -> Callable[..., dict[str, Any]]:
    """Factory for a valid FS dependency between two task ids."""
    return _dependency


@pytest.fixture
def make_document() -> DocumentFactory:
    """Factory for a valid current-version document."""
    return _document


@pytest.fixture
def write_chart(tmp_path: Path) -> Callable[..., Path]:
    """Write a document (dict or raw text) under tmp_path and return its path."""

    def _write(document: dict[str, Any] | str, name: str = "plan.ownchart") -> Path:
        path = tmp_path / name
        text = document if isinstance(document, str) else json.dumps(document)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run with CWD in a temp directory and no config env overrides.

    Use via ``@pytest.mark.usefixtures("_isolated_cwd")`` on command test
    classes so config discovery never picks up a stray chartfile.toml.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CHARTFILE_CONFIG", raising=False)
