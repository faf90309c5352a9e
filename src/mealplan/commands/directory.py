"""Commands: directory lookups (members, authorize)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mealplan.commands._base import MealplanCommand

if TYPE_CHECKING:
    from mealplan.commands._context import AppContext


@click.command(
    cls=MealplanCommand,
    examples="""\
  mealplan members pika-food
  mealplan -q members yfnkm""",
)
@click.argument("group")
@click.pass_obj
def members(app: AppContext, group: str) -> None:
    """List the canonical identities on directory list GROUP."""
    app.emit(app.membership_service().members(group))


@click.command(
    cls=MealplanCommand,
    examples="""\
  mealplan authorize dmz@mit.edu
  mealplan authorize someone@example.org --group yfnkm --group yfncc""",
)
@click.argument("address")
@click.option(
    "--group",
    "groups",
    multiple=True,
    help="List to check (repeatable; default: [auth] member_group).",
)
@click.pass_obj
def authorize(app: AppContext, address: str, groups: tuple[str, ...]) -> None:
    """Check whether ADDRESS is on any of the given lists."""
    groups = groups or (app.settings.auth.member_group,)
    app.emit(app.membership_service().authorize(address, groups))
