"""Tests for SignupService — board reads, slot transitions, attendance."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from mealplan.config.settings import MealplanSettings
from mealplan.infrastructure.coordinator import TransactionCoordinator
from mealplan.plugins.hookspecs import hookimpl
from mealplan.plugins.manager import PluginManager
from mealplan.services.signup import SignupService


class _Recorder:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    @hookimpl
    def post_claim(self, identity: str, duty: str, day: str, day_label: str) -> None:
        self.events.append(("claim", {"identity": identity, "duty": duty, "day": day}))

    @hookimpl
    def post_abandon(self, identity: str, duty: str, day: str, day_label: str) -> None:
        self.events.append(("abandon", {"identity": identity, "day_label": day_label}))


class _Broken:
    @hookimpl
    def post_claim(self, identity: str, duty: str, day: str, day_label: str) -> None:
        raise RuntimeError("boom")


@pytest.fixture
def signup(coordinator: TransactionCoordinator, settings: MealplanSettings) -> SignupService:
    return SignupService(coordinator, settings)


class TestClaim:
    def test_claim_unclaimed(self, signup: SignupService) -> None:
        result = signup.claim("Big cook", "2019-01-07", "alice")
        assert result.ok
        assert result.data == {
            "identity": "alice",
            "action": "claim",
            "duty": "Big cook",
            "day": "2019-01-07",
            "label": "Monday (1/7)",
        }

    def test_claim_by_index(self, signup: SignupService) -> None:
        result = signup.claim("Big cook", 1, "alice")
        assert result.data["day"] == "2019-01-08"

    def test_address_canonicalized(self, signup: SignupService) -> None:
        signup.claim("Big cook", 0, "Alice@MIT.EDU")
        board = signup.board("alice", today=date(2019, 1, 7))
        assert board.data["assignments"]["Big cook"]["2019-01-07"] == "alice"

    def test_first_writer_wins(self, signup: SignupService) -> None:
        assert signup.claim("Big cook", 0, "alice").ok
        result = signup.claim("Big cook", 0, "bob")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "CONFLICT"
        assert result.error.detail["holder"] == "alice"

    def test_reclaim_own_slot_is_conflict(self, signup: SignupService) -> None:
        signup.claim("Big cook", 0, "alice")
        result = signup.claim("Big cook", 0, "alice@mit.edu")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "CONFLICT"

    @pytest.mark.parametrize(
        ("duty", "day"),
        [("Dishwasher", 0), ("Big cook", 14), ("Big cook", "2019-02-01"), ("Big cook", -1)],
    )
    def test_out_of_range(self, signup: SignupService, duty: str, day: Any) -> None:
        result = signup.claim(duty, day, "alice")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"


class TestAbandon:
    def test_holder_abandons(self, signup: SignupService) -> None:
        signup.claim("Cleaner 1", 2, "bob")
        result = signup.abandon("Cleaner 1", 2, "bob@mit.edu")
        assert result.ok
        assert result.op == "abandon"
        board = signup.board(today=date(2019, 1, 7))
        assert board.data["assignments"]["Cleaner 1"]["2019-01-09"] == ""

    def test_non_holder_rejected(self, signup: SignupService) -> None:
        signup.claim("Cleaner 1", 2, "bob")
        result = signup.abandon("Cleaner 1", 2, "alice")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "CONFLICT"

    def test_unclaimed_rejected(self, signup: SignupService) -> None:
        result = signup.abandon("Cleaner 1", 2, "alice")
        assert not result.ok


class TestSubmit:
    def test_first_action_wins(self, signup: SignupService) -> None:
        result = signup.submit(
            ["submit", "claim/Little cook/2019-01-09", "abandon/Big cook/2019-01-07"],
            "carol",
        )
        assert result.ok
        assert result.data["duty"] == "Little cook"

    def test_no_action(self, signup: SignupService) -> None:
        result = signup.submit(["submit", "attending"], "carol")
        assert result.ok
        assert result.data["action"] is None
        assert result.warnings == ["No slot action in submission"]


class TestEvents:
    def test_hooks_fire_after_commit(
        self,
        coordinator: TransactionCoordinator,
        settings: MealplanSettings,
    ) -> None:
        pm = PluginManager()
        recorder = _Recorder()
        pm.register_plugin(recorder)
        service = SignupService(coordinator, settings, plugins=pm)
        service.claim("Big cook", 0, "alice@mit.edu")
        service.abandon("Big cook", 0, "alice")
        service.abandon("Big cook", 0, "alice")
        assert recorder.events == [
            ("claim", {"identity": "alice", "duty": "Big cook", "day": "2019-01-07"}),
            ("abandon", {"identity": "alice", "day_label": "Monday (1/7)"}),
        ]

    def test_plugin_failure_is_warning(
        self,
        coordinator: TransactionCoordinator,
        settings: MealplanSettings,
    ) -> None:
        pm = PluginManager()
        pm.register_plugin(_Broken())
        result = SignupService(coordinator, settings, plugins=pm).claim("Big cook", 0, "alice")
        assert result.ok
        assert result.warnings == ["Event dispatch failed for post_claim"]
        assert coordinator.read(lambda doc: doc.slot("Big cook", 0)) == "alice"


class TestBoard:
    def test_anonymous_board(self, signup: SignupService) -> None:
        result = signup.board(today=date(2019, 1, 7))
        assert result.ok
        data = result.data
        assert data["identity"] is None
        assert data["duties"] == ["Big cook", "Little cook", "Cleaner 1"]
        assert len(data["days"]) == 14
        assert data["days"][0]["label"] == "Monday (1/7)"
        assert data["weeks"] == [list(range(7)), list(range(7, 14))]
        assert data["my_attendance"] == {}
        assert data["version"] == ""
        assert data["authorized"] is False

    def test_past_weeks_hidden(self, signup: SignupService) -> None:
        result = signup.board(today=date(2019, 1, 15))
        assert result.data["weeks"] == [list(range(7, 14))]

    def test_last_week_kept_after_end(self, signup: SignupService) -> None:
        result = signup.board(today=date(2019, 3, 1))
        assert result.data["weeks"] == [list(range(7, 14))]

    def test_version_changes_on_write(self, signup: SignupService) -> None:
        before = signup.board(today=date(2019, 1, 7)).data["version"]
        signup.claim("Big cook", 0, "alice")
        after = signup.board(today=date(2019, 1, 7)).data["version"]
        assert after and after != before


class TestAttendance:
    def test_totals_and_mine(self, signup: SignupService) -> None:
        assert signup.set_attendance("alice", 0, True).ok
        signup.set_attendance("bob@mit.edu", "2019-01-07", True)
        signup.set_attendance("bob", 1, True)
        signup.set_attendance("bob", 1, False)
        board = signup.board("Bob@mit.edu", today=date(2019, 1, 7)).data
        assert [d["attending"] for d in board["days"][:3]] == [2, 0, 0]
        assert board["my_attendance"]["2019-01-07"] is True
        assert board["my_attendance"]["2019-01-08"] is False
        assert len(board["my_attendance"]) == 14
        assert board["authorized"] is True

    def test_bad_day(self, signup: SignupService) -> None:
        result = signup.set_attendance("alice", 99, True)
        assert not result.ok
        assert result.op == "attendance"
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
