"""Commands: board view and member actions (show, claim, abandon, attend)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mealplan.commands._base import MealplanCommand, check_option, identity_option

if TYPE_CHECKING:
    from mealplan.commands._context import AppContext


def _require_member(app: AppContext, address: str, op: str) -> None:
    """Emit an authorization failure and exit unless *address* is a member."""
    svc = app.membership_service()
    result = svc.authorize(address, [app.settings.auth.member_group])
    if not result.ok:
        app.emit(result.model_copy(update={"op": op}))


@click.command(
    cls=MealplanCommand,
    examples="""\
  mealplan show
  mealplan show --as dmz
  mealplan --json show""",
)
@click.option(
    "--as",
    "address",
    default=None,
    envvar="MEALPLAN_AS",
    metavar="ADDRESS",
    help="Highlight this person's slots and attendance.",
)
@click.pass_obj
def show(app: AppContext, address: str | None) -> None:
    """Show the board, one table per week still in view."""
    app.emit(app.signup_service().board(address))


@click.command(
    cls=MealplanCommand,
    examples="""\
  mealplan claim "Big cook" 2019-01-07 --as dmz
  mealplan claim "Cleaner 1" 3 --as someone@example.org
  mealplan claim "Tiny cook" 2019-01-08 --as dmz --check""",
)
@click.argument("duty")
@click.argument("day")
@identity_option
@check_option
@click.pass_obj
def claim(app: AppContext, duty: str, day: str, address: str, check: bool) -> None:
    """Claim DUTY on DAY (ISO date or day index)."""
    if check:
        _require_member(app, address, "claim")
    app.emit(app.signup_service().claim(duty, day, address))


@click.command(
    cls=MealplanCommand,
    examples="""\
  mealplan abandon "Big cook" 2019-01-07 --as dmz""",
)
@click.argument("duty")
@click.argument("day")
@identity_option
@check_option
@click.pass_obj
def abandon(app: AppContext, duty: str, day: str, address: str, check: bool) -> None:
    """Give up DUTY on DAY, which you must currently hold."""
    if check:
        _require_member(app, address, "abandon")
    app.emit(app.signup_service().abandon(duty, day, address))


@click.command(
    cls=MealplanCommand,
    examples="""\
  mealplan attend 2019-01-07 --as dmz
  mealplan attend 2019-01-07 --as dmz --no""",
)
@click.argument("day")
@identity_option
@click.option("--yes/--no", "attending", default=True, help="Planning to eat (default yes).")
@click.pass_obj
def attend(app: AppContext, day: str, address: str, attending: bool) -> None:
    """Record whether you plan to eat on DAY."""
    app.emit(app.signup_service().set_attendance(address, day, attending))
