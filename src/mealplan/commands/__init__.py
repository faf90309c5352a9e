"""Subcommand modules for mealplan.

Provides register_commands() which uses deferred imports to keep
``mealplan --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the admin group and the standalone commands on the root CLI group."""
    # --- Groups ---
    from mealplan.commands.admin import admin

    cli.add_command(admin)

    # --- Standalone commands ---
    from mealplan.commands.board import abandon, attend, claim, show
    from mealplan.commands.directory import authorize, members
    from mealplan.commands.remind import remind
    from mealplan.commands.serve import serve

    cli.add_command(show)
    cli.add_command(claim)
    cli.add_command(abandon)
    cli.add_command(attend)
    cli.add_command(members)
    cli.add_command(authorize)
    cli.add_command(remind)
    cli.add_command(serve)
