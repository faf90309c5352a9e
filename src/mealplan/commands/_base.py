"""Custom Click base classes with --examples support.

Provides MealplanCommand and MealplanGroup that accept an ``examples``
parameter.  When ``--examples`` is passed, the command prints usage
examples and exits.  This keeps ``--help`` concise while making examples
available on demand.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click

F = TypeVar("F", bound=Callable[..., Any])


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class MealplanCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class MealplanGroup(click.Group):
    """Click Group subclass that supports an ``--examples`` flag.

    Sets ``command_class = MealplanCommand`` so all subcommands
    automatically accept the ``examples`` parameter.
    """

    command_class = MealplanCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


def identity_option(func: F) -> F:
    """Attach the ``--as ADDRESS`` option naming the person a command acts for."""
    return click.option(
        "--as",
        "address",
        required=True,
        envvar="MEALPLAN_AS",
        metavar="ADDRESS",
        help="Act as this person (local name or address; env MEALPLAN_AS).",
    )(func)


def check_option(func: F) -> F:
    """Attach ``--check``, which verifies group membership before acting."""
    return click.option(
        "--check",
        is_flag=True,
        help="Verify membership of [auth] member_group first.",
    )(func)
