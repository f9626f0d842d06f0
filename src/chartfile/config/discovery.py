"""Locating and reading ``chartfile.toml``.

The file is found the way git finds ``.git/``, by walking up from a start
directory. A chart document may be given as the start, in which case the
walk begins in the directory holding it. ``CHARTFILE_CONFIG`` names a
config file, or a directory containing one, and skips the walk.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from chartfile.config.models import ChartfileConfig
from chartfile.fileformat.constants import FILE_EXTENSION

CONFIG_FILENAME = "chartfile.toml"
CONFIG_ENV_VAR = "CHARTFILE_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file that applies to *start* (default: cwd), or None.

    A ``CHARTFILE_CONFIG`` that points nowhere yields None rather than
    falling back to the walk.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        target = Path(override)
        if target.is_dir():
            target = target / CONFIG_FILENAME
        return target if target.is_file() else None

    current = (start or Path.cwd()).resolve()
    if current.is_file() or current.suffix == FILE_EXTENSION:
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def read_config(path: Path) -> dict[str, Any]:
    """Parse *path* and check its ``[save]`` and ``[upgrade]`` sections.

    Returns the raw table so top-level flags such as ``quiet`` reach the
    settings layer too. Malformed TOML and out-of-range section values
    are reported as a :class:`click.ClickException` naming the file.
    """
    try:
        data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc

    sections = {name: data[name] for name in ChartfileConfig.model_fields if name in data}
    try:
        ChartfileConfig.model_validate(sections)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        msg = f"Invalid config in {path}: {errors}"
        raise click.ClickException(msg) from exc
    return data
