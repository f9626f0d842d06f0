"""Filesystem operations for chart documents.

Documents are always UTF-8 text. Errors surface as :class:`OSError`;
the document service maps them to READ_FAILED / WRITE_FAILED.
"""

from __future__ import annotations

import shutil
from pathlib import Path

# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def read_document(path: Path) -> tuple[str, int]:
    """Read a document, returning ``(text, size_in_bytes)``.

    The size comes from the raw bytes, so it is what the pre-parse size
    check expects even for non-ASCII content.
    """
    raw = path.read_bytes()
    return raw.decode("utf-8"), len(raw)


def write_document(path: Path, text: str) -> None:
    """Write *text* to *path*.

    Creates parent directories if they don't exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def backup_document(path: Path, suffix: str) -> Path:
    """Copy *path* next to itself with *suffix* appended and return the copy."""
    backup_path = path.with_name(f"{path.name}{suffix}")
    shutil.copy2(str(path), str(backup_path))
    return backup_path
