"""Typed errors raised by the load pipeline.

Every layer below ``deserialize`` raises one of these with a stable code.
Only ``deserialize`` turns them into a ``ServiceResult``.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error codes reported to callers."""

    # Layer 1
    FILE_EMPTY = "FILE_EMPTY"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_EXTENSION = "INVALID_EXTENSION"
    # Layer 2
    INVALID_JSON = "INVALID_JSON"
    # Layer 3
    INVALID_STRUCTURE = "INVALID_STRUCTURE"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_TASK = "INVALID_TASK"
    TOO_MANY_TASKS = "TOO_MANY_TASKS"
    # Layer 4
    INVALID_ID = "INVALID_ID"
    DUPLICATE_ID = "DUPLICATE_ID"
    INVALID_DATE = "INVALID_DATE"
    INVALID_DATE_ORDER = "INVALID_DATE_ORDER"
    INVALID_PROGRESS = "INVALID_PROGRESS"
    INVALID_DURATION = "INVALID_DURATION"
    INVALID_COLOR = "INVALID_COLOR"
    INVALID_TASK_TYPE = "INVALID_TASK_TYPE"
    DANGLING_PARENT = "DANGLING_PARENT"
    CIRCULAR_HIERARCHY = "CIRCULAR_HIERARCHY"
    INVALID_DEPENDENCY_TYPE = "INVALID_DEPENDENCY_TYPE"
    INVALID_LAG = "INVALID_LAG"
    SELF_DEPENDENCY = "SELF_DEPENDENCY"
    DANGLING_DEPENDENCY = "DANGLING_DEPENDENCY"
    # Anything else
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    # File access, reported by the document service
    READ_FAILED = "READ_FAILED"
    WRITE_FAILED = "WRITE_FAILED"
    SAVE_CANCELLED = "SAVE_CANCELLED"
    FILE_EXISTS = "FILE_EXISTS"


class ChartFileError(Exception):
    """Base class for pipeline errors carrying a stable code."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class FileValidationError(ChartFileError):
    """A document failed one of validation layers 1–4."""


class MigrationError(ChartFileError):
    """The migration registry is defective (cycle or runaway chain).

    Not a user-input problem, so it is never reported with a validation code.
    """

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.UNKNOWN_ERROR, message)
