"""Command: duty reminders, usually run from cron."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mealplan.commands._base import MealplanCommand

if TYPE_CHECKING:
    from mealplan.commands._context import AppContext


@click.command(
    cls=MealplanCommand,
    examples="""\
  # Preview who would be reminded about cooking today
  mealplan remind cook 0

  # Mail tonight's cleaners the day before
  mealplan remind clean 1 --send""",
)
@click.argument("group")
@click.argument("days", type=int)
@click.option("--send", is_flag=True, help="Mail the reminder (default: dry run).")
@click.pass_obj
def remind(app: AppContext, group: str, days: int, send: bool) -> None:
    """Remind whoever holds GROUP duties DAYS days from today."""
    svc = app.reminder_service()
    app.emit(svc.send(group, days) if send else svc.plan(group, days))
