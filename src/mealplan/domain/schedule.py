"""Duty assignment model — the document and its slot transitions.

The whole board is one :class:`Document`: configured duties x configured
days, each slot holding an identity or ``""`` when unclaimed.  Everything
here is pure; the transaction coordinator owns loading and saving.

Slot transitions:

- ``claim``:   unclaimed -> identity   (first writer wins)
- ``abandon``: identity  -> unclaimed  (holder only)

INVARIANT: A slot never holds two identities.  Re-claiming a slot you
already hold is a conflict, not a no-op.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from mealplan.domain.days import day_key
from mealplan.domain.errors import ConflictError, NotFoundError

UNCLAIMED = ""

# Admins fill slots with this to mark them as intentionally unstaffed.
PLACEHOLDER = "_"

DayRef = str | int | date


@dataclass
class Document:
    """Whole-board state held in memory for one transaction.

    ``duties`` and ``days`` come from configuration and define the current
    dimensions.  ``assignments`` and ``attendance`` are persisted and may
    contain rows for duties or dates that have since left the
    configuration; those rows are kept but cannot be claimed.
    """

    duties: tuple[str, ...]
    days: tuple[date, ...]
    assignments: dict[str, dict[str, str]] = field(default_factory=dict)
    attendance: dict[str, dict[str, bool]] = field(default_factory=dict)
    version: str = ""

    @property
    def day_keys(self) -> list[str]:
        return [day_key(d) for d in self.days]

    def slot(self, duty: str, day: DayRef) -> str:
        """Current holder of a slot (``""`` when unclaimed)."""
        key = self.require_slot(duty, day)
        return self.assignments[duty][key]

    def resolve_day(self, day: DayRef) -> str:
        """Turn an ISO key, a date, or a day index into an in-range ISO key."""
        keys = self.day_keys
        if isinstance(day, bool):
            raise NotFoundError(f"No such day: {day!r}", day=str(day))
        if isinstance(day, int):
            if 0 <= day < len(keys):
                return keys[day]
            raise NotFoundError(f"No such day: {day}", day=str(day))
        key = day_key(day) if isinstance(day, date) else str(day)
        if key.isdigit():
            return self.resolve_day(int(key))
        if key not in keys:
            raise NotFoundError(f"No such day: {key}", day=key)
        return key

    def require_slot(self, duty: str, day: DayRef) -> str:
        if duty not in self.duties:
            raise NotFoundError(f"No such duty: {duty}", duty=duty)
        key = self.resolve_day(day)
        row = self.assignments.setdefault(duty, {})
        row.setdefault(key, UNCLAIMED)
        return key


def empty_document(duties: Iterable[str], days: Iterable[date], version: str = "") -> Document:
    """A document with every in-scope slot unclaimed."""
    doc = Document(duties=tuple(duties), days=tuple(days), version=version)
    return reconcile(doc)


def reconcile(doc: Document) -> Document:
    """Give every configured (duty, day) pair a slot; extend attendance rows.

    Idempotent.  Never removes existing rows, so claims on duties or days
    that left the configuration survive a later re-extension.
    """
    keys = doc.day_keys
    for duty in doc.duties:
        row = doc.assignments.setdefault(duty, {})
        for key in keys:
            row.setdefault(key, UNCLAIMED)
    for row in doc.attendance.values():
        for key in keys:
            row.setdefault(key, False)
    return doc


# ---------------------------------------------------------------------------
# Slot transitions
# ---------------------------------------------------------------------------


def claim(doc: Document, duty: str, day: DayRef, identity: str) -> str:
    """Give an unclaimed slot to *identity*. Returns the ISO day key."""
    key = doc.require_slot(duty, day)
    if doc.assignments[duty][key] != UNCLAIMED:
        raise ConflictError(
            "slot already held",
            duty=duty,
            day=key,
            holder=doc.assignments[duty][key],
        )
    doc.assignments[duty][key] = identity
    return key


def abandon(doc: Document, duty: str, day: DayRef, identity: str) -> str:
    """Release a slot held by *identity*. Returns the ISO day key."""
    key = doc.require_slot(duty, day)
    if doc.assignments[duty][key] != identity:
        raise ConflictError("not the holder", duty=duty, day=key)
    doc.assignments[duty][key] = UNCLAIMED
    return key


def set_attendance(doc: Document, identity: str, day: DayRef, attending: bool) -> str:
    """Record whether *identity* plans to attend on *day*. Returns the ISO key."""
    key = doc.resolve_day(day)
    row = doc.attendance.setdefault(identity, {})
    for k in doc.day_keys:
        row.setdefault(k, False)
    row[key] = attending
    return key


def clear_identity(doc: Document, identity: str) -> list[tuple[str, str]]:
    """Unclaim every slot held by *identity*, in any row. Returns cleared slots."""
    cleared: list[tuple[str, str]] = []
    for duty, row in doc.assignments.items():
        for key, holder in row.items():
            if holder == identity:
                row[key] = UNCLAIMED
                cleared.append((duty, key))
    return cleared


# ---------------------------------------------------------------------------
# Read-only summaries
# ---------------------------------------------------------------------------


def total_attendance(doc: Document) -> list[int]:
    """Per in-scope day, how many people plan to attend."""
    return [
        sum(1 for row in doc.attendance.values() if row.get(key, False)) for key in doc.day_keys
    ]


def signups_by_identity(
    doc: Document,
    *,
    since: date | None = None,
) -> dict[str, list[tuple[str, str]]]:
    """Map each holder to their ``(day_key, duty)`` signups on in-scope days.

    Unclaimed slots and the admin placeholder are ignored.
    """
    result: dict[str, list[tuple[str, str]]] = {}
    for day in doc.days:
        if since is not None and day < since:
            continue
        key = day_key(day)
        for duty in doc.duties:
            holder = doc.assignments.get(duty, {}).get(key, UNCLAIMED)
            if holder in (UNCLAIMED, PLACEHOLDER):
                continue
            result.setdefault(holder, []).append((key, duty))
    return result
