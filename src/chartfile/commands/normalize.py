"""Command: load and re-save a document in canonical form."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from chartfile.commands._base import DOCUMENT_PATH, ChartCommand, document_argument

if TYPE_CHECKING:
    from chartfile.commands._context import AppContext


@click.command(
    cls=ChartCommand,
    examples="""\
  chartfile normalize plan.ownchart
  chartfile normalize plan.ownchart --output clean.ownchart
  chartfile normalize plan.ownchart --compact""",
)
@document_argument()
@click.option(
    "-o",
    "--output",
    type=DOCUMENT_PATH,
    default=None,
    help="Write here instead of overwriting PATH.",
)
@click.option(
    "--pretty/--compact",
    "pretty_print",
    default=None,
    help="Override [save] pretty_print.",
)
@click.pass_obj
def normalize(
    app: AppContext, path: Path, output: Path | None, pretty_print: bool | None
) -> None:
    """Sanitize PATH, renumber task order and save at the current version."""
    app.emit(app.documents.normalize(path, output=output, pretty_print=pretty_print))
