"""Command: file format migration."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from chartfile.commands._base import ChartCommand, document_argument

if TYPE_CHECKING:
    from chartfile.commands._context import AppContext


@click.command(
    cls=ChartCommand,
    examples="""\
  chartfile upgrade plan.ownchart
  chartfile upgrade --check plan.ownchart
  chartfile --json upgrade --check plan.ownchart""",
)
@document_argument()
@click.option(
    "--check", "check_only", is_flag=True, help="Report whether an upgrade is pending."
)
@click.pass_obj
def upgrade(app: AppContext, path: Path, check_only: bool) -> None:
    """Rewrite an older PATH at the current format version."""
    app.emit(app.documents.upgrade(path, check_only=check_only))
