"""Shared Click building blocks for chartfile commands.

``ChartCommand`` and ``ChartGroup`` take an ``examples`` block that is
printed by an eager ``--examples`` flag, so ``--help`` stays short.
``document_argument`` declares the ``PATH`` every document command takes.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

F = TypeVar("F", bound=Callable[..., Any])

DOCUMENT_PATH = click.Path(dir_okay=False, path_type=Path)


def document_argument(name: str = "path") -> Callable[[F], F]:
    """Positional chart document argument, passed to the command as a Path."""
    return click.argument(name, type=DOCUMENT_PATH)


class _ExamplesMixin:
    """Adds ``--examples`` to a command when it was given an examples block."""

    examples: str | None

    def _init_examples(self, examples: str | None) -> None:
        self.examples = textwrap.indent(textwrap.dedent(examples), "  ") if examples else None
        if self.examples:
            self.params.append(  # type: ignore[attr-defined]
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._show_examples,
                    help="Show usage examples.",
                )
            )

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(self.examples)
        ctx.exit(0)


class ChartCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class ChartGroup(_ExamplesMixin, click.Group):
    """Root group; subcommands default to :class:`ChartCommand`."""

    command_class = ChartCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)
