"""Command group: kitchen-manager operations (export, save, stats, clear)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click
from pydantic import ValidationError

from mealplan.commands._base import MealplanGroup
from mealplan.domain.errors import DecodeError
from mealplan.services.contracts import BulkSaveRequest
from mealplan.services.result import ServiceResult

if TYPE_CHECKING:
    from mealplan.commands._context import AppContext

_ADMIN_EXAMPLES = """\
  mealplan --json admin export > board.json
  mealplan admin save board.json --as yfnkm
  mealplan admin stats
  mealplan admin stats --group yfnkm --no-members
  mealplan admin clear someone@example.org"""


@click.group(cls=MealplanGroup, examples=_ADMIN_EXAMPLES)
@click.pass_obj
def admin(app: AppContext) -> None:
    """Kitchen-manager operations on the whole board."""


@admin.command(
    examples="""\
  mealplan --json admin export > board.json
  mealplan admin export --output board.json""",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the export payload to this file instead of stdout.",
)
@click.pass_obj
def export(app: AppContext, output: Path | None) -> None:
    """Export the full board with its current version token."""
    result = app.admin_service().export()
    if output is not None and result.ok:
        output.write_text(
            BulkSaveRequest.model_validate(result.data).model_dump_json(indent=2) + "\n",
            encoding="utf-8",
        )
        result = result.model_copy(update={"data": {**result.data, "output_file": str(output)}})
    app.emit(result)


@admin.command(
    examples="""\
  mealplan admin save board.json
  mealplan admin save board.json --as yfnkm""",
)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--as",
    "address",
    default="",
    envvar="MEALPLAN_AS",
    metavar="ADDRESS",
    help="Record this person as the editor.",
)
@click.pass_obj
def save(app: AppContext, file: Path, address: str) -> None:
    """Overwrite the board from FILE, unless it changed since FILE was exported."""
    try:
        request = BulkSaveRequest.model_validate_json(file.read_text(encoding="utf-8"))
    except ValidationError as exc:
        err = DecodeError(f"Invalid board file {file}: {exc}", path=str(file))
        app.emit(ServiceResult.failure("bulk_save", err))
        return
    app.emit(
        app.admin_service().bulk_save(
            request.version,
            request.assignments,
            request.attendance,
            identity=address,
        )
    )


@admin.command(
    examples="""\
  mealplan admin stats
  mealplan admin stats --group yfnkm --no-members""",
)
@click.option(
    "--group",
    default=None,
    help="List whose members are included (default: [auth] member_group).",
)
@click.option(
    "--members/--no-members",
    default=True,
    help="Include members with no signups (queries the directory).",
)
@click.pass_obj
def stats(app: AppContext, group: str | None, members: bool) -> None:
    """Signups per person since [board] stats_since, fewest first."""
    group = group or app.settings.auth.member_group
    member_list: list[str] = []
    if members:
        result = app.membership_service().members(group)
        if not result.ok:
            app.emit(result.model_copy(update={"op": "stats"}))
            return
        member_list = result.data["members"]
    app.emit(app.admin_service().stats(group, member_list))


@admin.command(
    examples="""\
  mealplan admin clear dmz
  mealplan admin clear someone@example.org""",
)
@click.argument("identity")
@click.pass_obj
def clear(app: AppContext, identity: str) -> None:
    """Unclaim every slot held by IDENTITY."""
    app.emit(app.admin_service().clear_identity(identity))
