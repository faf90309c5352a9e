"""Slot action keys submitted by the signup form.

Each button on the board posts a field named ``<action>/<duty>/<day-key>``,
e.g. ``claim/Big cook/2019-01-07``.  A submission carries at most one
intended action; the first recognized key wins and everything else is
ignored.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

SEPARATOR = "/"


class SlotActionKind(StrEnum):
    CLAIM = "claim"
    ABANDON = "abandon"


_KINDS = frozenset(kind.value for kind in SlotActionKind)


@dataclass(frozen=True)
class SlotAction:
    """One parsed slot action."""

    kind: SlotActionKind
    duty: str
    day: str

    @property
    def key(self) -> str:
        return format_action_key(self.kind, self.duty, self.day)


def format_action_key(kind: str, duty: str, day: str | int) -> str:
    return SEPARATOR.join((str(kind), duty, str(day)))


def parse_action_key(key: str) -> SlotAction | None:
    """Parse one field name, or return None if it is not a slot action."""
    parts = key.split(SEPARATOR)
    if len(parts) != 3:
        return None
    action, duty, day = parts
    if action not in _KINDS or not duty or not day:
        return None
    return SlotAction(kind=SlotActionKind(action), duty=duty, day=day)


def parse_action(fields: Iterable[str]) -> SlotAction | None:
    """Return the first slot action among *fields* (in submission order)."""
    for key in fields:
        action = parse_action_key(key)
        if action is not None:
            return action
    return None
