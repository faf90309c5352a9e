"""ReminderService — mail the people signed up for a group of duties.

Typically run from cron, e.g. ``mealplan remind cook 0 --send`` every
afternoon and ``mealplan remind clean 1 --send`` the evening before.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

import structlog

from mealplan.domain.days import day_key, relative_day_text
from mealplan.domain.errors import ConfigError, MealplanError, NotFoundError
from mealplan.domain.identity import IdentityNormalizer
from mealplan.domain.schedule import PLACEHOLDER, UNCLAIMED
from mealplan.services._helpers import today_in
from mealplan.services.base import BaseService
from mealplan.services.contracts import ReminderResultData, dump_validated
from mealplan.services.result import ServiceResult

if TYPE_CHECKING:
    from mealplan.config.settings import MealplanSettings
    from mealplan.domain.schedule import Document
    from mealplan.infrastructure.coordinator import TransactionCoordinator
    from mealplan.infrastructure.mail import Mailer
    from mealplan.plugins.manager import PluginManager

log = structlog.get_logger(__name__)

CANCEL_NOTE = "NOTE: not all shifts are filled, so dinner may be canceled"
FROM_NAME = "pika kitchen manager"


class ReminderService(BaseService):
    """Builds and sends duty reminders for one configured reminder group."""

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        settings: MealplanSettings,
        *,
        mailer: Mailer | None = None,
        plugins: PluginManager | None = None,
    ) -> None:
        super().__init__(coordinator, settings, plugins=plugins)
        self._mailer = mailer
        self._normalizer = IdentityNormalizer(settings.identity.domain)

    def plan(self, group: str, day_delta: int, today: date | None = None) -> ServiceResult:
        """Work out who to remind about *group* duties ``day_delta`` days from today.

        A day outside the board, or any unfilled important duty, sets
        ``might_be_canceled``.
        """
        try:
            data = self._plan(group, day_delta, today)
        except MealplanError as exc:
            return ServiceResult.failure("remind", exc)
        return ServiceResult(ok=True, op="remind", data=dump_validated(ReminderResultData, data))

    def send(self, group: str, day_delta: int, today: date | None = None) -> ServiceResult:
        """Plan the reminder and mail it, blind-copying the sender."""
        if self._mailer is None or not self._settings.mail.enabled:
            exc = ConfigError("mail is disabled; set [mail] enabled = true")
            return ServiceResult.failure("remind", exc)
        try:
            data = self._plan(group, day_delta, today)
            message = self._mailer.compose(
                to=data["recipients"],
                subject=data["subject"],
                body=data["body"],
                from_name=FROM_NAME,
            )
            self._mailer.send(message)
        except MealplanError as exc:
            return ServiceResult.failure("remind", exc)
        log.info("reminder_sent", group=group, day=data["day"], recipients=len(data["recipients"]))
        data["sent"] = True
        return ServiceResult(ok=True, op="remind", data=dump_validated(ReminderResultData, data))

    def _plan(self, group: str, day_delta: int, today: date | None) -> dict[str, Any]:
        config = self._settings.reminders.get(group)
        if config is None:
            msg = f"No reminder group: {group}"
            raise NotFoundError(msg, group=group, known=sorted(self._settings.reminders))

        today = today or today_in(self._settings.board.timezone)
        key = day_key(today + timedelta(days=day_delta))
        wanted = dict.fromkeys((*config.duties, *config.important_duties))

        def holders(doc: Document) -> tuple[bool, dict[str, str]]:
            in_range = key in doc.day_keys
            return in_range, {
                duty: doc.assignments.get(duty, {}).get(key, UNCLAIMED) for duty in wanted
            }

        in_range, assigned = self._coordinator.read(holders)
        recipients = [
            self._normalizer.to_address(assigned[duty])
            for duty in config.duties
            if assigned[duty] not in (UNCLAIMED, PLACEHOLDER)
        ]
        might_be_canceled = not in_range or any(
            assigned[duty] == UNCLAIMED for duty in config.important_duties
        )
        body = f"{self._settings.mail.site_url}\n\n"
        if might_be_canceled:
            body += f"{CANCEL_NOTE}\n"
        when = relative_day_text(day_delta, config.today_text)
        return {
            "group": group,
            "day": key,
            "recipients": recipients,
            "subject": f"Reminder: you are signed up to {group} {when}",
            "body": body,
            "might_be_canceled": might_be_canceled,
        }
