"""Task and dependency classification enums."""

from __future__ import annotations

from enum import StrEnum


class TaskType(StrEnum):
    """The three kinds of row a chart can hold."""

    TASK = "task"
    SUMMARY = "summary"
    MILESTONE = "milestone"


class DependencyType(StrEnum):
    """Temporal relation between the two endpoints of a dependency."""

    FINISH_TO_START = "FS"
    START_TO_START = "SS"
    FINISH_TO_FINISH = "FF"
    START_TO_FINISH = "SF"


TASK_TYPES: frozenset[str] = frozenset(t.value for t in TaskType)
DEPENDENCY_TYPES: frozenset[str] = frozenset(t.value for t in DependencyType)
