"""SignupService — the member-facing board operations.

Every mutation is one coordinator transaction.  Identities are
canonicalized before they touch the document, so ``dmz`` and
``dmz@mit.edu`` always address the same slots.  Plugin hooks fire only
after the transaction has committed.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import TYPE_CHECKING

import structlog

from mealplan.domain.actions import SlotActionKind, parse_action
from mealplan.domain.days import day_label, days_in, make_weeks
from mealplan.domain.errors import MealplanError
from mealplan.domain.identity import IdentityNormalizer
from mealplan.domain.schedule import (
    DayRef,
    Document,
    abandon,
    claim,
    set_attendance,
    total_attendance,
)
from mealplan.services._helpers import today_in
from mealplan.services.base import BaseService
from mealplan.services.contracts import (
    AttendanceResultData,
    BoardResultData,
    SlotResultData,
    dump_validated,
)
from mealplan.services.result import ServiceResult

if TYPE_CHECKING:
    from mealplan.config.settings import MealplanSettings
    from mealplan.infrastructure.coordinator import TransactionCoordinator
    from mealplan.plugins.manager import PluginManager

log = structlog.get_logger(__name__)


class SignupService(BaseService):
    """Claim, abandon, and attendance operations for authorized members."""

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        settings: MealplanSettings,
        *,
        plugins: PluginManager | None = None,
    ) -> None:
        super().__init__(coordinator, settings, plugins=plugins)
        self._normalizer = IdentityNormalizer(settings.identity.domain)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def board(self, identity: str | None = None, *, today: date | None = None) -> ServiceResult:
        """The whole board as seen by *identity*, or read-only when None.

        Weeks that are entirely in the past are hidden, except the last.
        """
        who = self._normalizer.to_local(identity) if identity else None
        try:
            today = today or today_in(self._settings.board.timezone)
            doc = self._coordinator.read(lambda d: d)
        except MealplanError as exc:
            return ServiceResult.failure("board", exc)

        totals = total_attendance(doc)
        label_format = self._settings.board.label_format
        days = [
            {"index": i, "key": key, "label": day_label(day, label_format), "attending": totals[i]}
            for i, (day, key) in enumerate(zip(doc.days, doc.day_keys, strict=True))
        ]
        elapsed = days_in(doc.days[0], today) if doc.days else 0
        mine = doc.attendance.get(who, {}) if who else {}
        data = {
            "version": doc.version,
            "identity": who,
            "duties": list(doc.duties),
            "days": days,
            "weeks": make_weeks(len(doc.days), elapsed),
            "assignments": {
                duty: {key: doc.assignments[duty][key] for key in doc.day_keys}
                for duty in doc.duties
            },
            "my_attendance": {key: mine.get(key, False) for key in doc.day_keys} if who else {},
            "authorized": who is not None,
        }
        return ServiceResult(ok=True, op="board", data=dump_validated(BoardResultData, data))

    # ------------------------------------------------------------------
    # Slot transitions
    # ------------------------------------------------------------------

    def claim(self, duty: str, day: DayRef, identity: str) -> ServiceResult:
        """Give an unclaimed slot to *identity* (first writer wins)."""
        return self._transition(SlotActionKind.CLAIM, duty, day, identity)

    def abandon(self, duty: str, day: DayRef, identity: str) -> ServiceResult:
        """Release a slot held by *identity*."""
        return self._transition(SlotActionKind.ABANDON, duty, day, identity)

    def submit(self, fields: Iterable[str], identity: str) -> ServiceResult:
        """Apply the first slot action found among form *fields*.

        A submission without a recognized action changes nothing and
        succeeds with ``action`` set to None.
        """
        action = parse_action(fields)
        if action is None:
            return ServiceResult(
                ok=True,
                op="submit",
                data={"identity": self._normalizer.to_local(identity), "action": None},
                warnings=["No slot action in submission"],
            )
        return self._transition(action.kind, action.duty, action.day, identity)

    def _transition(
        self,
        kind: SlotActionKind,
        duty: str,
        day: DayRef,
        identity: str,
    ) -> ServiceResult:
        op = str(kind)
        who = self._normalizer.to_local(identity)
        mutate = claim if kind is SlotActionKind.CLAIM else abandon

        def mutator(doc: Document) -> str:
            return mutate(doc, duty, day, who)

        try:
            key = self._coordinator.apply(mutator)
        except MealplanError as exc:
            log.info(f"{op}_rejected", identity=who, duty=duty, day=str(day), code=exc.code)
            return ServiceResult.failure(op, exc)

        label = day_label(date.fromisoformat(key), self._settings.board.label_format)
        event = "claimed" if kind is SlotActionKind.CLAIM else "abandoned"
        log.info(event, identity=who, duty=duty, day=key)

        warnings: list[str] = []
        self._dispatch_event(
            f"post_{op}",
            {"identity": who, "duty": duty, "day": key, "day_label": label},
            warnings,
        )
        data = {"identity": who, "action": op, "duty": duty, "day": key, "label": label}
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(SlotResultData, data),
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Attendance
    # ------------------------------------------------------------------

    def set_attendance(self, identity: str, day: DayRef, attending: bool) -> ServiceResult:
        """Record whether *identity* plans to eat on *day*."""
        who = self._normalizer.to_local(identity)
        try:
            key = self._coordinator.apply(lambda doc: set_attendance(doc, who, day, attending))
        except MealplanError as exc:
            return ServiceResult.failure("attendance", exc)
        log.info("attendance_set", identity=who, day=key, attending=attending)
        data = {"identity": who, "day": key, "attending": attending}
        return ServiceResult(
            ok=True,
            op="attendance",
            data=dump_validated(AttendanceResultData, data),
        )
