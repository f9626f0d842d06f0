"""Command: validate a chart document."""

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
  chartfile check plan.ownchart
  chartfile --json check plan.ownchart
  chartfile -v check plan.ownchart""",
)
@document_argument()
@click.pass_obj
def check(app: AppContext, path: Path) -> None:
    """Run every load check on PATH and summarize the chart."""
    app.emit(app.documents.check(path))
