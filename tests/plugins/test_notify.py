"""Tests for the built-in abandon notifier."""

from __future__ import annotations

import pytest
from conftest import RecordingMailer

from mealplan.config.settings import MealplanSettings
from mealplan.domain.errors import MailError
from mealplan.domain.identity import IdentityNormalizer
from mealplan.infrastructure.coordinator import TransactionCoordinator
from mealplan.plugins.builtins.notify import AbandonNotifier
from mealplan.plugins.manager import PluginManager
from mealplan.services.signup import SignupService


def _service(
    coordinator: TransactionCoordinator,
    settings: MealplanSettings,
    mailer: RecordingMailer,
) -> SignupService:
    pm = PluginManager()
    pm.register_plugin(AbandonNotifier(mailer, IdentityNormalizer()), name="notify-builtin")
    return SignupService(coordinator, settings, plugins=pm)


class TestAbandonNotifier:
    def test_message(self, mailer: RecordingMailer) -> None:
        AbandonNotifier(mailer, IdentityNormalizer()).post_abandon(
            identity="bob",
            duty="Cleaner 1",
            day="2019-01-09",
            day_label="Wednesday (1/9)",
        )
        (message, bcc_sender) = mailer.sent[0]
        assert bcc_sender is False
        assert message["To"] == "yfnkm@mit.edu"
        assert message["Cc"] == "bob@mit.edu"
        assert message["Subject"] == "bob unclaimed Cleaner 1/Wednesday (1/9) -- eom"
        assert "kitchen website" in message["From"]

    def test_outside_address_kept(self, mailer: RecordingMailer) -> None:
        AbandonNotifier(mailer, IdentityNormalizer()).post_abandon(
            identity="dave@example.org",
            duty="Big cook",
            day="2019-01-07",
            day_label="Monday (1/7)",
        )
        assert mailer.sent[0][0]["Cc"] == "dave@example.org"

    def test_fires_on_abandon_only(
        self,
        coordinator: TransactionCoordinator,
        settings: MealplanSettings,
        mailer: RecordingMailer,
    ) -> None:
        service = _service(coordinator, settings, mailer)
        service.claim("Big cook", 0, "alice")
        assert mailer.sent == []
        assert service.abandon("Big cook", 0, "alice").ok
        assert len(mailer.sent) == 1

    def test_mail_failure_is_warning(
        self,
        coordinator: TransactionCoordinator,
        settings: MealplanSettings,
        mailer: RecordingMailer,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def refuse(*args: object, **kwargs: object) -> None:
            raise MailError("relay down")

        monkeypatch.setattr(mailer, "send", refuse)
        service = _service(coordinator, settings, mailer)
        service.claim("Big cook", 0, "alice")
        result = service.abandon("Big cook", 0, "alice")
        assert result.ok
        assert result.warnings == ["Event dispatch failed for post_abandon"]
        assert coordinator.read(lambda doc: doc.slot("Big cook", 0)) == ""
