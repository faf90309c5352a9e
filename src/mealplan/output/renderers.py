"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from mealplan.domain.schedule import PLACEHOLDER, UNCLAIMED
from mealplan.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from mealplan.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    d = result.data
    if result.op == "members":
        return "\n".join(d.get("members", []))
    if result.op == "stats":
        return "\n".join(f"{row['identity']} {row['count']}" for row in d.get("items", []))
    if result.op == "export":
        return str(d.get("version", ""))
    if result.op == "remind":
        return "\n".join(d.get("recipients", []))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="meal.ok")
    op = Text(f"  {result.op}", style="meal.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="meal.key")
    if key == "identity":
        v = Text(str(value), style="meal.identity")
    elif key in ("version", "previous_version"):
        v = Text(str(value), style="meal.version")
    elif key == "duty":
        v = Text(str(value), style="meal.duty")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _holder_cell(holder: str, identity: str | None) -> Text:
    if holder == UNCLAIMED:
        return Text("-", style="meal.open")
    if holder == PLACEHOLDER:
        return Text(holder, style="meal.placeholder")
    if identity is not None and holder == identity:
        return Text(holder, style="meal.mine")
    return Text(holder)


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="meal.error")
    op = Text(f"  {result.op}", style="meal.op")
    sep = Text(": ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Board renderers ───────────────────────────────────────────────────


def _render_board(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the board as one table per visible week."""
    d = result.data
    days = d.get("days", [])
    identity = d.get("identity")
    assignments = d.get("assignments", {})
    mine = d.get("my_attendance", {})

    for week in d.get("weeks", []):
        week_days = [days[i] for i in week]
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Duty", style="meal.duty", no_wrap=True)
        for day in week_days:
            table.add_column(day["label"], no_wrap=True)
        for duty in d.get("duties", []):
            row = assignments.get(duty, {})
            cells = [_holder_cell(row.get(day["key"], UNCLAIMED), identity) for day in week_days]
            table.add_row(duty, *cells)
        table.add_row(
            Text("Attending", style="meal.key"),
            *[Text(str(day["attending"]), style="meal.key") for day in week_days],
        )
        if identity:
            table.add_row(
                Text("You", style="meal.key"),
                *[Text("yes" if mine.get(day["key"]) else "no") for day in week_days],
            )
        console.print(table)
        console.print()

    if identity:
        _field(console, "identity", identity)
    if verbose:
        _field(console, "version", d.get("version", ""))


def _render_slot(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render claim, abandon, and attendance results."""
    _status_line(console, result)
    for key in ("identity", "duty", "label", "day", "attending"):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_submit(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a form submission that carried no slot action."""
    _status_line(console, result)
    _field(console, "identity", result.data.get("identity", ""))
    console.print("  no slot action")


# ── Admin renderers ───────────────────────────────────────────────────


def _render_export(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render export as a summary; the full document is available with --json."""
    _status_line(console, result)
    d = result.data
    claimed = sum(
        1
        for row in d.get("assignments", {}).values()
        for holder in row.values()
        if holder not in (UNCLAIMED, PLACEHOLDER)
    )
    _field(console, "version", d.get("version", ""))
    _field(console, "duties", len(d.get("duties", [])))
    _field(console, "days", len(d.get("days", [])))
    _field(console, "claimed", claimed)
    _field(console, "attendance_rows", len(d.get("attendance", {})))


def _render_bulk_save(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "version", result.data.get("version", ""))
    if verbose:
        _field(console, "previous_version", result.data.get("previous_version", ""))


def _render_stats(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render per-person signup counts, fewest first."""
    d = result.data
    items = d.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Person", style="meal.identity", no_wrap=True)
    table.add_column("Signups", justify="right")
    if verbose:
        table.add_column("Slots")
    for item in items:
        row = [str(item.get("identity", "")), str(item.get("count", 0))]
        if verbose:
            row.append(", ".join(item.get("signups", [])))
        table.add_row(*row)
    console.print(table)

    since = d.get("since")
    suffix = f" since {since}" if since else ""
    console.print(f"\n{d.get('count', len(items))} people on {d.get('group', '?')}{suffix}")


def _render_clear(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "identity", result.data.get("identity", ""))
    _field(console, "count", result.data.get("count", 0))
    if verbose:
        for slot in result.data.get("cleared", []):
            console.print(f"    {slot}")


# ── Directory and reminder renderers ─────────────────────────────────


def _render_members(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    members = d.get("members", [])
    console.print(f"[bold]{d.get('group', '?')}[/bold] ({d.get('count', len(members))} members)")
    for member in members:
        console.print(f"  [meal.identity]{member}[/meal.identity]")


def _render_remind(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "subject", d.get("subject", ""))
    _field(console, "day", d.get("day", ""))
    _field(console, "recipients", ", ".join(d.get("recipients", [])) or "(nobody)")
    if d.get("might_be_canceled"):
        console.print("  [meal.warning]not all shifts are filled[/meal.warning]")
    _field(console, "sent", "yes" if d.get("sent") else "no (dry run)")
    if verbose:
        console.print()
        console.print(d.get("body", ""))


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Board
    "board": _render_board,
    "claim": _render_slot,
    "abandon": _render_slot,
    "attendance": _render_slot,
    "submit": _render_submit,
    # Admin
    "export": _render_export,
    "bulk_save": _render_bulk_save,
    "stats": _render_stats,
    "clear": _render_clear,
    # Directory
    "members": _render_members,
    "authorize": _render_generic,
    # Reminders
    "remind": _render_remind,
}
