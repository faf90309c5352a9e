"""Tests for the duty assignment model — claim, abandon, reconcile."""

from __future__ import annotations

from datetime import date

import pytest

from mealplan.domain.days import day_range
from mealplan.domain.errors import ConflictError, NotFoundError
from mealplan.domain.schedule import (
    PLACEHOLDER,
    UNCLAIMED,
    Document,
    abandon,
    claim,
    clear_identity,
    empty_document,
    reconcile,
    set_attendance,
    signups_by_identity,
    total_attendance,
)

DUTIES = ("Big cook", "Little cook", "Cleaner 1")
DAYS = day_range(date(2019, 1, 7), date(2019, 1, 13))


@pytest.fixture
def doc() -> Document:
    return empty_document(DUTIES, DAYS, version="v0")


class TestEmptyDocument:
    def test_every_slot_unclaimed(self, doc: Document) -> None:
        assert set(doc.assignments) == set(DUTIES)
        for row in doc.assignments.values():
            assert list(row) == doc.day_keys
            assert set(row.values()) == {UNCLAIMED}

    def test_version_kept(self, doc: Document) -> None:
        assert doc.version == "v0"


class TestClaim:
    def test_claim_sets_holder(self, doc: Document) -> None:
        key = claim(doc, "Big cook", "2019-01-07", "alice")
        assert key == "2019-01-07"
        assert doc.slot("Big cook", key) == "alice"

    def test_claim_by_index_and_date(self, doc: Document) -> None:
        assert claim(doc, "Big cook", 2, "alice") == "2019-01-09"
        assert claim(doc, "Little cook", date(2019, 1, 10), "bob") == "2019-01-10"
        assert claim(doc, "Cleaner 1", "4", "carol") == "2019-01-11"

    def test_exclusive(self, doc: Document) -> None:
        claim(doc, "Big cook", 0, "alice")
        with pytest.raises(ConflictError) as exc_info:
            claim(doc, "Big cook", 0, "bob")
        assert exc_info.value.detail["holder"] == "alice"
        assert doc.slot("Big cook", 0) == "alice"

    def test_reclaim_own_slot_conflicts(self, doc: Document) -> None:
        claim(doc, "Big cook", 0, "alice")
        with pytest.raises(ConflictError, match="slot already held"):
            claim(doc, "Big cook", 0, "alice")

    def test_unknown_duty(self, doc: Document) -> None:
        with pytest.raises(NotFoundError):
            claim(doc, "Dishwasher", 0, "alice")

    @pytest.mark.parametrize("day", ["2019-02-01", 7, -1, "nonsense", True])
    def test_unknown_day(self, doc: Document, day: object) -> None:
        with pytest.raises(NotFoundError):
            claim(doc, "Big cook", day, "alice")  # type: ignore[arg-type]


class TestAbandon:
    def test_round_trip(self, doc: Document) -> None:
        claim(doc, "Big cook", 1, "alice")
        abandon(doc, "Big cook", 1, "alice")
        assert doc.slot("Big cook", 1) == UNCLAIMED

    def test_not_holder(self, doc: Document) -> None:
        claim(doc, "Big cook", 1, "alice")
        with pytest.raises(ConflictError, match="not the holder"):
            abandon(doc, "Big cook", 1, "bob")
        assert doc.slot("Big cook", 1) == "alice"

    def test_unclaimed(self, doc: Document) -> None:
        with pytest.raises(ConflictError):
            abandon(doc, "Big cook", 1, "alice")


class TestReconcile:
    def test_idempotent(self, doc: Document) -> None:
        claim(doc, "Big cook", 0, "alice")
        before = {duty: dict(row) for duty, row in doc.assignments.items()}
        reconcile(doc)
        reconcile(doc)
        assert doc.assignments == before

    def test_grows_new_duties_and_days(self) -> None:
        doc = Document(
            duties=("Big cook", "Tiny cook"),
            days=DAYS,
            assignments={"Big cook": {"2019-01-07": "alice"}},
            attendance={"bob": {"2019-01-07": True}},
        )
        reconcile(doc)
        assert doc.assignments["Big cook"]["2019-01-07"] == "alice"
        assert doc.assignments["Big cook"]["2019-01-13"] == UNCLAIMED
        assert set(doc.assignments["Tiny cook"].values()) == {UNCLAIMED}
        assert len(doc.attendance["bob"]) == len(DAYS)
        assert doc.attendance["bob"]["2019-01-07"] is True

    def test_keeps_rows_outside_configuration(self) -> None:
        doc = Document(
            duties=("Big cook",),
            days=DAYS[:2],
            assignments={"Retired duty": {"2019-01-07": "alice"}},
        )
        reconcile(doc)
        assert doc.assignments["Retired duty"] == {"2019-01-07": "alice"}
        with pytest.raises(NotFoundError):
            claim(doc, "Retired duty", 0, "bob")


class TestAttendance:
    def test_set_and_total(self, doc: Document) -> None:
        set_attendance(doc, "alice", 0, True)
        set_attendance(doc, "bob", "2019-01-07", True)
        set_attendance(doc, "bob", 1, True)
        set_attendance(doc, "bob", 1, False)
        totals = total_attendance(doc)
        assert totals[0] == 2
        assert totals[1] == 0
        assert len(totals) == len(DAYS)

    def test_unknown_day(self, doc: Document) -> None:
        with pytest.raises(NotFoundError):
            set_attendance(doc, "alice", "2020-01-01", True)


class TestSummaries:
    def test_clear_identity(self, doc: Document) -> None:
        claim(doc, "Big cook", 0, "alice")
        claim(doc, "Cleaner 1", 3, "alice")
        claim(doc, "Little cook", 0, "bob")
        doc.assignments["Retired duty"] = {"2019-01-07": "alice"}
        cleared = clear_identity(doc, "alice")
        assert sorted(cleared) == [
            ("Big cook", "2019-01-07"),
            ("Cleaner 1", "2019-01-10"),
            ("Retired duty", "2019-01-07"),
        ]
        assert doc.slot("Little cook", 0) == "bob"

    def test_signups_by_identity(self, doc: Document) -> None:
        claim(doc, "Big cook", 0, "alice")
        claim(doc, "Big cook", 5, "alice")
        claim(doc, "Little cook", 5, PLACEHOLDER)
        result = signups_by_identity(doc, since=date(2019, 1, 9))
        assert result == {"alice": [("2019-01-12", "Big cook")]}
        assert PLACEHOLDER not in signups_by_identity(doc)
