"""DocumentService: file-level operations on ``.ownchart`` documents.

Pipelines:
  check:     READ → DESERIALIZE → REPORT
  upgrade:   READ → DESERIALIZE → BACKUP → SERIALIZE → WRITE
  normalize: READ → DESERIALIZE → SERIALIZE → WRITE
  create:    CONFIRM → SERIALIZE → WRITE

Disk failures never raise out of this layer: a read error is
READ_FAILED, a write or backup error is WRITE_FAILED. A save the user
declines is SAVE_CANCELLED, which is not a failure of the system.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from chartfile.config.logging import document_context
from chartfile.config.models import SaveConfig, UpgradeConfig
from chartfile.domain.ids import generate_id
from chartfile.domain.models import ChartState
from chartfile.fileformat.constants import DEFAULT_CHART_NAME, FILE_EXTENSION, FILE_VERSION
from chartfile.fileformat.deserialize import deserialize
from chartfile.fileformat.errors import ErrorCode, FileValidationError
from chartfile.fileformat.migrate import Migrator, default_migrator
from chartfile.fileformat.sanitize import sanitize_string
from chartfile.fileformat.serialize import serialize
from chartfile.fileformat.structure import validate_pre_parse
from chartfile.infrastructure.filesystem import (
    backup_document,
    read_document,
    write_document,
)
from chartfile.services.result import ServiceResult, error_result

logger = logging.getLogger(__name__)

ConfirmOverwrite = Callable[[Path], bool]


class DocumentService:
    """Loads, checks, upgrades, normalizes and creates chart documents.

    Usage::

        svc = DocumentService(save=settings.save, upgrade=settings.upgrade)
        result = svc.check(Path("plan.ownchart"))
        if result.ok:
            print(result.data["tasks"])
    """

    def __init__(
        self,
        *,
        save: SaveConfig | None = None,
        upgrade: UpgradeConfig | None = None,
        migrator: Migrator | None = None,
    ) -> None:
        self._save = save or SaveConfig()
        self._upgrade = upgrade or UpgradeConfig()
        self._migrator = migrator or default_migrator()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def load(self, path: Path, *, op: str = "load") -> ServiceResult:
        """Read *path* and run it through the full load pipeline.

        Size and extension are checked from the file's metadata before
        any content is read. On success ``data["chart"]`` is the
        :class:`ChartState`.
        """
        with document_context(path):
            try:
                validate_pre_parse(path.name, path.stat().st_size)
                content, size = read_document(path)
            except FileValidationError as exc:
                logger.debug("Pre-parse rejected %s: %s", path, exc.code)
                return error_result(op, str(exc.code), exc.message).model_copy(
                    update={"meta": {"path": str(path)}}
                )
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Read failed for %s", path, exc_info=True)
                return error_result(
                    op, ErrorCode.READ_FAILED, f"Cannot read {path}: {exc}", path=str(path)
                )

            result = deserialize(content, path.name, size, migrator=self._migrator)
            return result.model_copy(update={"op": op, "meta": {"path": str(path)}})

    def check(self, path: Path) -> ServiceResult:
        """Validate *path* and summarize it."""
        op = "check"
        loaded = self.load(path, op=op)
        if not loaded.ok:
            return loaded

        state: ChartState = loaded.data["chart"]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": str(path),
                "chart_id": state.chart_id,
                "chart_name": state.chart_name,
                "file_version": loaded.data["source_version"],
                "current_version": FILE_VERSION,
                "needs_upgrade": self._migrator.needs_migration(loaded.data["source_version"]),
                "tasks": len(state.tasks),
                "dependencies": len(state.dependencies),
            },
            warnings=loaded.warnings,
        )

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def upgrade(self, path: Path, *, check_only: bool = False) -> ServiceResult:
        """Rewrite an older document at the current format version.

        With *check_only* nothing is written; the result reports whether
        an upgrade is pending. A backup is taken first when
        ``[upgrade] backup`` is enabled.
        """
        op = "upgrade"
        loaded = self.load(path, op=op)
        if not loaded.ok:
            return loaded

        source_version: str = loaded.data["source_version"]
        base: dict[str, Any] = {
            "path": str(path),
            "from_version": source_version,
            "to_version": FILE_VERSION,
        }
        if not self._migrator.needs_migration(source_version):
            return ServiceResult(
                ok=True,
                op=op,
                data={**base, "needs_upgrade": False, "upgraded": False},
                warnings=loaded.warnings,
            )
        if check_only:
            return ServiceResult(
                ok=True,
                op=op,
                data={**base, "needs_upgrade": True, "upgraded": False},
                warnings=loaded.warnings,
            )

        backup_path: Path | None = None
        if self._upgrade.backup:
            try:
                backup_path = backup_document(path, self._upgrade.backup_suffix)
            except OSError as exc:
                return error_result(op, ErrorCode.WRITE_FAILED, f"Backup failed: {exc}")

        written = self._write(op, path, loaded.data["chart"])
        if not written.ok:
            if backup_path is not None and written.error is not None:
                return error_result(
                    op,
                    ErrorCode.WRITE_FAILED,
                    f"{written.error.message}. Backup at: {backup_path}",
                    backup_path=str(backup_path),
                )
            return written

        logger.info("Upgraded %s from %s to %s", path, source_version, FILE_VERSION)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                **base,
                "needs_upgrade": True,
                "upgraded": True,
                "backup_path": str(backup_path) if backup_path else None,
            },
            warnings=loaded.warnings,
        )

    def normalize(
        self,
        path: Path,
        *,
        output: Path | None = None,
        pretty_print: bool | None = None,
    ) -> ServiceResult:
        """Load *path* and save it again, sanitized and in canonical order.

        Writes to *output* when given, otherwise in place.
        """
        op = "normalize"
        loaded = self.load(path, op=op)
        if not loaded.ok:
            return loaded

        target = output or path
        state: ChartState = loaded.data["chart"]
        written = self._write(op, target, state, pretty_print=pretty_print)
        if not written.ok:
            return written

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": str(path),
                "output": str(target),
                "tasks": len(state.tasks),
                "dependencies": len(state.dependencies),
                "bytes": written.data["bytes"],
            },
            warnings=loaded.warnings,
        )

    def create(
        self,
        path: Path,
        *,
        name: str | None = None,
        overwrite: bool = False,
        confirm: ConfirmOverwrite | None = None,
    ) -> ServiceResult:
        """Write a new, empty chart to *path*.

        The ``.ownchart`` extension is appended when missing. An existing
        file is replaced only with *overwrite* or when *confirm* approves;
        without either the result is FILE_EXISTS.
        """
        op = "create"
        if path.suffix != FILE_EXTENSION:
            path = path.with_name(f"{path.name}{FILE_EXTENSION}")

        if path.exists() and not overwrite:
            if confirm is None:
                return error_result(
                    op, ErrorCode.FILE_EXISTS, f"File already exists: {path}", path=str(path)
                )
            if not confirm(path):
                return error_result(
                    op, ErrorCode.SAVE_CANCELLED, "Save cancelled", path=str(path)
                )

        chart_name = sanitize_string(name) if name else self._save.default_chart_name
        state = ChartState(chart_id=generate_id(), chart_name=chart_name or DEFAULT_CHART_NAME)
        written = self._write(op, path, state)
        if not written.ok:
            return written

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": str(path),
                "chart_id": state.chart_id,
                "chart_name": state.chart_name,
                "file_version": FILE_VERSION,
            },
        )

    def _write(
        self,
        op: str,
        path: Path,
        state: ChartState,
        *,
        pretty_print: bool | None = None,
    ) -> ServiceResult:
        pretty = self._save.pretty_print if pretty_print is None else pretty_print
        text = serialize(state, pretty_print=pretty, indent=self._save.indent)
        try:
            write_document(path, text)
        except OSError as exc:
            logger.debug("Write failed for %s", path, exc_info=True)
            return error_result(
                op, ErrorCode.WRITE_FAILED, f"Cannot write {path}: {exc}", path=str(path)
            )
        size = len(text.encode("utf-8"))
        return ServiceResult(ok=True, op=op, data={"path": str(path), "bytes": size})
