"""Built-in plugin: mail the kitchen managers when someone abandons a slot.

Delivery failures propagate to the dispatcher, which reports them as
warnings on the abandon result.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mealplan.plugins.hookspecs import hookimpl

if TYPE_CHECKING:
    from mealplan.domain.identity import IdentityNormalizer
    from mealplan.infrastructure.mail import Mailer

logger = logging.getLogger(__name__)


class AbandonNotifier:
    """Sends ``<user> unclaimed <duty>/<day> -- eom`` to the managers and the user."""

    def __init__(self, mailer: Mailer, normalizer: IdentityNormalizer) -> None:
        self._mailer = mailer
        self._normalizer = normalizer

    @hookimpl
    def post_abandon(self, identity: str, duty: str, day: str, day_label: str) -> None:
        address = self._normalizer.to_address(identity)
        message = self._mailer.compose(
            to=[self._mailer.sender],
            cc=[address],
            subject=f"{identity} unclaimed {duty}/{day_label} -- eom",
            body="",
            from_name="kitchen website",
        )
        self._mailer.send(message, bcc_sender=False)
        logger.debug("Abandon notice sent for %s %s/%s", identity, duty, day)
