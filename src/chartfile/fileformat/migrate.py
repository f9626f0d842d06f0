"""Layer 6: upgrade older documents to the current file format.

Pipeline per step: LOOK UP → TRANSFORM → RECORD → REPEAT

A :class:`Migrator` owns an explicit registry keyed by source version.
Registering or removing a migration returns a new migrator, so tests and
concurrent callers never share mutable registry state.

Example for a future 1.1.0 format::

    migrator = default_migrator().with_migration(
        Migration(
            from_version="1.0.0",
            to_version="1.1.0",
            description="Add customFields support",
            transform=lambda doc: {**doc, "customFields": []},
        )
    )
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import structlog

from chartfile.domain.versions import is_newer, is_older
from chartfile.fileformat.constants import FILE_VERSION, MAX_MIGRATION_STEPS
from chartfile.fileformat.errors import MigrationError

logger = structlog.get_logger(__name__)

Document = dict[str, Any]


@dataclass(frozen=True)
class Migration:
    """One registered format upgrade from ``from_version`` to ``to_version``."""

    from_version: str
    to_version: str
    description: str
    transform: Callable[[Document], Document]

    @property
    def label(self) -> str:
        return f"{self.from_version}->{self.to_version}"


@dataclass(frozen=True)
class Migrator:
    """Applies registered migrations until no further step is known.

    Attributes:
        current_version: The format version this build writes.
        migrations: Registry keyed by ``from_version`` (read-only view).
        max_steps: Hard cap on applied steps; exceeding it means the
            registry contains a cycle.
    """

    current_version: str = FILE_VERSION
    migrations: Mapping[str, Migration] = field(default_factory=lambda: MappingProxyType({}))
    max_steps: int = MAX_MIGRATION_STEPS

    def with_migration(self, migration: Migration) -> Migrator:
        """Return a migrator that also knows *migration* (replacing any same-source entry)."""
        registry = {**self.migrations, migration.from_version: migration}
        return Migrator(self.current_version, MappingProxyType(registry), self.max_steps)

    def without_migration(self, from_version: str) -> Migrator:
        """Return a migrator with the migration from *from_version* removed."""
        registry = {k: v for k, v in self.migrations.items() if k != from_version}
        return Migrator(self.current_version, MappingProxyType(registry), self.max_steps)

    def needs_migration(self, version: str) -> bool:
        """True when *version* is older than :attr:`current_version`."""
        return is_older(version, self.current_version)

    def is_from_future(self, version: str) -> bool:
        """True when *version* is newer than :attr:`current_version`."""
        return is_newer(version, self.current_version)

    def migrate(self, document: Mapping[str, Any]) -> Document:
        """Upgrade *document* step by step and return the result.

        The input is deep-copied before the first transform and never
        modified. Documents that are current or newer are returned as an
        unchanged copy. Each applied step is appended to
        ``migrations.appliedMigrations``.

        Raises:
            MigrationError: More than :attr:`max_steps` steps were applied.
        """
        current: Document = copy.deepcopy(dict(document))
        version = str(current["fileVersion"])
        if not self.needs_migration(version):
            return current

        original_version = version
        steps = 0
        while version != self.current_version:
            migration = self.migrations.get(version)
            if migration is None:
                break

            steps += 1
            if steps > self.max_steps:
                msg = (
                    f"Migration exceeded {self.max_steps} steps (at version {version}). "
                    "Possible cyclic migration chain."
                )
                raise MigrationError(msg)

            current = migration.transform(current)
            current["fileVersion"] = migration.to_version
            _record_step(current, migration.label, original_version)
            logger.info(
                "migration.applied",
                step=migration.label,
                description=migration.description,
            )
            version = migration.to_version

        return current


def _record_step(document: Document, label: str, original_version: str) -> None:
    history = document.get("migrations")
    if not isinstance(history, dict):
        history = {}
    applied = history.get("appliedMigrations")
    history["appliedMigrations"] = [*(applied if isinstance(applied, list) else []), label]
    history.setdefault("originalVersion", original_version)
    document["migrations"] = history


# Format 1.0.0 is the first released format; no upgrades are registered yet.
_DEFAULT_MIGRATOR = Migrator()


def default_migrator() -> Migrator:
    """The migrator the application ships with."""
    return _DEFAULT_MIGRATOR
