"""Rich Console factory and theme for mealplan output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

MEALPLAN_THEME = Theme(
    {
        "meal.ok": "bold green",
        "meal.error": "bold red",
        "meal.warning": "bold yellow",
        "meal.op": "bold cyan",
        "meal.key": "dim",
        "meal.identity": "bold blue",
        "meal.duty": "bold",
        "meal.open": "dim",
        "meal.placeholder": "magenta",
        "meal.mine": "bold green",
        "meal.version": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=MEALPLAN_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
