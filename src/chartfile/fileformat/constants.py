"""Shared constants for the file format (limits, versions, key sets)."""

from __future__ import annotations

FILE_VERSION = "1.0.0"
SCHEMA_VERSION = 1
FILE_EXTENSION = ".ownchart"

MAX_FILE_SIZE = 50 * 1024 * 1024
MAX_TASKS = 10_000
MAX_SANITIZE_DEPTH = 50
MAX_MIGRATION_STEPS = 100

MIN_ZOOM = 0.05
MAX_ZOOM = 3.0

DEFAULT_CHART_NAME = "Untitled"

# Key names that would mutate an object prototype in a JavaScript reader.
# Stripped on parse, on sanitize and on serialize.
DANGEROUS_KEYS: frozenset[str] = frozenset({"__proto__", "constructor", "prototype"})

REQUIRED_TASK_KEYS: tuple[str, ...] = (
    "id",
    "name",
    "startDate",
    "endDate",
    "duration",
    "progress",
    "color",
    "order",
)

# Every task key the domain model owns. Anything else is an unknown field.
KNOWN_TASK_KEYS: frozenset[str] = frozenset(
    {
        *REQUIRED_TASK_KEYS,
        "type",
        "parent",
        "open",
        "colorOverride",
        "metadata",
        "createdAt",
        "updatedAt",
    }
)

KNOWN_DEPENDENCY_KEYS: frozenset[str] = frozenset(
    {"id", "from", "to", "type", "lag", "createdAt"}
)

KNOWN_CHART_KEYS: frozenset[str] = frozenset(
    {
        "id",
        "name",
        "description",
        "tasks",
        "dependencies",
        "viewSettings",
        "exportSettings",
        "metadata",
    }
)

KNOWN_DOCUMENT_KEYS: frozenset[str] = frozenset(
    {
        "fileVersion",
        "appVersion",
        "schemaVersion",
        "chart",
        "metadata",
        "features",
        "migrations",
    }
)

# Identifier-like task fields: validated by syntax, never sanitized.
TASK_SKIP_SANITIZE_KEYS: frozenset[str] = frozenset(
    {
        "id",
        "startDate",
        "endDate",
        "color",
        "colorOverride",
        "parent",
        "type",
        "createdAt",
        "updatedAt",
    }
)

DEPENDENCY_SKIP_SANITIZE_KEYS: frozenset[str] = frozenset(
    {"id", "from", "to", "type", "createdAt"}
)

VIEW_SETTINGS_TEXT_KEYS: tuple[str, ...] = ("projectTitle", "projectAuthor", "holidayRegion")
