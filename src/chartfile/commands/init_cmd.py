"""Command: new empty chart (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from chartfile.commands._base import ChartCommand, document_argument

if TYPE_CHECKING:
    from chartfile.commands._context import AppContext

_INIT_EXAMPLES = """\
  chartfile init roadmap.ownchart
  chartfile init roadmap --name "Q3 Roadmap"
  chartfile init roadmap.ownchart --force
  chartfile --no-interact init roadmap.ownchart"""


@click.command("init", cls=ChartCommand, examples=_INIT_EXAMPLES)
@document_argument()
@click.option("--name", default=None, help="Chart name (default from [save]).")
@click.option("--force", is_flag=True, help="Overwrite an existing file without asking.")
@click.pass_obj
def init_cmd(app: AppContext, path: Path, name: str | None, force: bool) -> None:
    """Write a new, empty chart to PATH."""

    def confirm(target: Path) -> bool:
        return click.confirm(f"{target} exists. Overwrite?", default=False, err=True)

    interactive = not app.settings.no_interact
    app.emit(
        app.documents.create(
            path,
            name=name,
            overwrite=force,
            confirm=confirm if interactive else None,
        )
    )
