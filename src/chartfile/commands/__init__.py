"""Subcommand modules for chartfile.

Provides register_commands() which uses deferred imports to keep
``chartfile --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from chartfile.commands.check import check
    from chartfile.commands.init_cmd import init_cmd
    from chartfile.commands.normalize import normalize
    from chartfile.commands.upgrade import upgrade

    cli.add_command(check)
    cli.add_command(upgrade)
    cli.add_command(normalize)
    cli.add_command(init_cmd)
