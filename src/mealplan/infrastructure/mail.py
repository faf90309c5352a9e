"""Mailer — plain-text notifications over SMTP."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING

from mealplan.domain.errors import MailError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mealplan.config.models import MailConfig

logger = logging.getLogger(__name__)


class Mailer:
    """Sends messages through the configured relay, one connection per message."""

    def __init__(self, config: MailConfig) -> None:
        self._config = config

    @property
    def sender(self) -> str:
        return self._config.sender

    def compose(
        self,
        *,
        to: Sequence[str],
        subject: str,
        body: str,
        cc: Sequence[str] = (),
        from_name: str = "kitchen manager",
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = f'"{from_name}" <{self._config.sender}>'
        msg["To"] = ", ".join(to) if to else self._config.sender
        if cc:
            msg["Cc"] = ", ".join(cc)
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def send(self, message: EmailMessage, *, bcc_sender: bool = True) -> None:
        """Deliver *message*; the sender is blind-copied unless told otherwise.

        Raises:
            MailError: the relay refused the message or was unreachable.
        """
        recipients = [
            addr.strip()
            for header in ("To", "Cc")
            for addr in (message.get(header) or "").split(",")
            if addr.strip()
        ]
        if bcc_sender and self._config.sender not in recipients:
            recipients.append(self._config.sender)
        try:
            with smtplib.SMTP(
                self._config.server,
                self._config.port,
                timeout=self._config.timeout,
            ) as smtp:
                smtp.send_message(message, from_addr=self._config.sender, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as exc:
            msg = f"Cannot send {message['Subject']!r} via {self._config.server}: {exc}"
            raise MailError(msg, server=self._config.server) from exc
        logger.info("Sent %r to %d recipient(s)", message["Subject"], len(recipients))
