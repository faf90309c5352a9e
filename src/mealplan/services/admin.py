"""AdminService — whole-board export, guarded overwrite, stats, and cleanup.

The bulk editor shows the entire board at one version and later submits
the entire board back.  :meth:`AdminService.bulk_save` only succeeds if no
other transaction committed in between; it never merges.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from mealplan.domain.days import day_key
from mealplan.domain.errors import MealplanError
from mealplan.domain.identity import IdentityNormalizer
from mealplan.domain.schedule import (
    PLACEHOLDER,
    UNCLAIMED,
    Document,
    clear_identity,
    signups_by_identity,
)
from mealplan.services.base import BaseService
from mealplan.services.contracts import (
    BulkSaveResultData,
    ClearResultData,
    ExportResultData,
    StatsResultData,
    dump_validated,
)
from mealplan.services.result import ServiceResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mealplan.config.settings import MealplanSettings
    from mealplan.infrastructure.coordinator import TransactionCoordinator
    from mealplan.plugins.manager import PluginManager

log = structlog.get_logger(__name__)


class AdminService(BaseService):
    """Operations reserved for the kitchen managers."""

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        settings: MealplanSettings,
        *,
        plugins: PluginManager | None = None,
    ) -> None:
        super().__init__(coordinator, settings, plugins=plugins)
        self._normalizer = IdentityNormalizer(settings.identity.domain)

    def export(self) -> ServiceResult:
        """The full document and the version token it was read at."""
        try:
            doc = self._coordinator.read(lambda d: d)
        except MealplanError as exc:
            return ServiceResult.failure("export", exc)
        data = {
            "version": doc.version,
            "duties": list(doc.duties),
            "days": doc.day_keys,
            "assignments": doc.assignments,
            "attendance": doc.attendance,
        }
        return ServiceResult(ok=True, op="export", data=dump_validated(ExportResultData, data))

    def bulk_save(
        self,
        expected_version: str,
        assignments: dict[str, dict[str, str]],
        attendance: dict[str, dict[str, bool]],
        *,
        identity: str = "",
    ) -> ServiceResult:
        """Overwrite the board if it is still at *expected_version*.

        Holders are canonicalized; blank cells become unclaimed.  On a stale
        token the result is a ``CONFLICT`` error whose detail carries the
        ``expected`` and ``actual`` tokens, and nothing is written.
        """
        replacement = Document(
            duties=(),
            days=(),
            assignments={
                duty: {key: self._canonical_holder(holder) for key, holder in row.items()}
                for duty, row in assignments.items()
            },
            attendance={
                self._normalizer.to_local(person): dict(row)
                for person, row in attendance.items()
            },
        )
        try:
            version = self._coordinator.compare_and_swap(expected_version, replacement)
        except MealplanError as exc:
            log.info("bulk_save_rejected", identity=identity, code=exc.code)
            return ServiceResult.failure("bulk_save", exc)

        log.info("bulk_saved", identity=identity, version=version)
        warnings: list[str] = []
        self._dispatch_event("post_bulk_save", {"identity": identity, "version": version}, warnings)
        data = {"previous_version": expected_version, "version": version}
        return ServiceResult(
            ok=True,
            op="bulk_save",
            data=dump_validated(BulkSaveResultData, data),
            warnings=warnings,
        )

    def stats(self, group: str, members: Iterable[str] = ()) -> ServiceResult:
        """Signups per person since ``board.stats_since``, fewest first.

        Everyone in *members* appears even with no signups, so slackers are
        listed at the top.
        """
        since = self._settings.board.stats_since

        def collect(doc: Document) -> dict[str, list[tuple[str, str]]]:
            return signups_by_identity(doc, since=since)

        try:
            by_identity = self._coordinator.read(collect)
        except MealplanError as exc:
            return ServiceResult.failure("stats", exc)

        people: dict[str, list[tuple[str, str]]] = {
            self._normalizer.to_local(m): [] for m in members
        }
        for holder, signups in by_identity.items():
            people.setdefault(holder, []).extend(signups)
        rows = sorted(people.items(), key=lambda item: (len(item[1]), item[0]))
        data = {
            "group": group,
            "since": day_key(since) if since else None,
            "count": len(rows),
            "items": [
                {
                    "identity": person,
                    "count": len(signups),
                    "signups": [f"{key} {duty}" for key, duty in signups],
                }
                for person, signups in rows
            ],
        }
        return ServiceResult(ok=True, op="stats", data=dump_validated(StatsResultData, data))

    def clear_identity(self, identity: str, *, actor: str = "") -> ServiceResult:
        """Unclaim every slot held by *identity* in one transaction.

        Nothing is saved when *identity* holds no slots, so the version
        token (and any export taken from it) stays valid.
        """
        who = self._normalizer.to_local(identity)
        try:
            with self._coordinator.transaction(write=False) as doc:
                cleared = clear_identity(doc, who)
                if cleared:
                    self._coordinator.store.save(doc)
        except MealplanError as exc:
            return ServiceResult.failure("clear", exc)
        warnings = [] if cleared else [f"{who} holds no slots"]
        log.info("identity_cleared", identity=who, actor=actor, count=len(cleared))
        data = {
            "identity": who,
            "count": len(cleared),
            "cleared": [f"{duty}/{key}" for duty, key in cleared],
        }
        return ServiceResult(
            ok=True,
            op="clear",
            data=dump_validated(ClearResultData, data),
            warnings=warnings,
        )

    def _canonical_holder(self, holder: str) -> str:
        holder = holder.strip()
        if holder in (UNCLAIMED, PLACEHOLDER):
            return holder
        return self._normalizer.to_local(holder)
