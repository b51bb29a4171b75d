"""
==============================================================================
Claim Coordinator Tests
==============================================================================

Tests for pick/unpick transitions and failure classification.

==============================================================================
"""

from types import SimpleNamespace

import pytest
from sqlalchemy import Update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from picklist.core.exceptions import (
    InvalidRequest,
    InvalidTransition,
    ItemNotFound,
    StorageUnavailable,
    UpdateVerificationFailed,
)
from picklist.db.models import PickAction, WorkItem, WorkState
from picklist.schemas.pick import PickedItem
from picklist.services.claim_service import ClaimCoordinator


def _fake_rowcount(db: Session, monkeypatch, rowcount: int) -> None:
    """Make conditional updates report `rowcount` without touching rows."""
    real_execute = db.execute

    def execute(statement, *args, **kwargs):
        if isinstance(statement, Update):
            return SimpleNamespace(rowcount=rowcount)
        return real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db, "execute", execute)


def _stored_qty(db: Session, item_id: str) -> int:
    """Read qty straight from the table, bypassing the identity map."""
    db.expire_all()
    return db.get(WorkItem, item_id).qty


class TestPick:
    """Claiming open items."""

    def test_pick_open_item(self, db: Session, make_item):
        make_item("1")

        item = ClaimCoordinator(db).pick("1")

        assert item.qty == int(WorkState.CLAIMED)
        assert item.status == "picked"
        assert _stored_qty(db, "1") == 0

    def test_pick_stamps_updated(self, db: Session, make_item):
        make_item("1")

        item = ClaimCoordinator(db).pick("1")

        assert item.updated is not None

    def test_second_pick_rejected(self, db: Session, make_item):
        make_item("1")
        coordinator = ClaimCoordinator(db)

        coordinator.pick("1")
        with pytest.raises(InvalidTransition) as exc_info:
            coordinator.pick("1")

        assert exc_info.value.code == "ITEM_NOT_PICKABLE"
        assert exc_info.value.status_code == 409
        assert _stored_qty(db, "1") == 0

    def test_pick_missing_item(self, db: Session):
        with pytest.raises(ItemNotFound) as exc_info:
            ClaimCoordinator(db).pick("missing-id")

        assert exc_info.value.code == "ITEM_NOT_FOUND"
        assert exc_info.value.status_code == 404

    @pytest.mark.parametrize("qty", [0, 1])
    def test_free_order_not_found_in_any_state(self, db: Session, make_item, qty):
        make_item("free", ordernum="#FREE", qty=qty)
        coordinator = ClaimCoordinator(db)

        with pytest.raises(ItemNotFound):
            coordinator.pick("free")
        with pytest.raises(ItemNotFound):
            coordinator.unpick("free")

        assert _stored_qty(db, "free") == qty

    def test_soft_deleted_item_not_found(self, db: Session, make_item):
        make_item("1", deleted=1)

        with pytest.raises(ItemNotFound):
            ClaimCoordinator(db).pick("1")

        assert _stored_qty(db, "1") == 1

    def test_item_id_is_trimmed(self, db: Session, make_item):
        make_item("42")

        item = ClaimCoordinator(db).pick("  42 ")

        assert item.id == "42"


class TestUnpick:
    """Releasing claimed items."""

    def test_unpick_claimed_item(self, db: Session, make_item):
        make_item("1", qty=0)

        item = ClaimCoordinator(db).unpick("1")

        assert item.qty == int(WorkState.OPEN)
        assert item.status == "to be picked"
        assert _stored_qty(db, "1") == 1

    def test_unpick_open_item_rejected(self, db: Session, make_item):
        make_item("1", qty=1)

        with pytest.raises(InvalidTransition) as exc_info:
            ClaimCoordinator(db).unpick("1")

        assert exc_info.value.code == "ITEM_NOT_PICKABLE"
        assert "unpicking" in exc_info.value.message
        assert _stored_qty(db, "1") == 1

    def test_pick_then_unpick_restores_projection(self, db: Session, make_item):
        make_item("1", code="SHOE123", ordernum="BC001234", location="C3-Front", pickorder=2)
        coordinator = ClaimCoordinator(db)

        before = PickedItem.from_model(coordinator.get_item("1"))
        coordinator.pick("1")
        after = PickedItem.from_model(coordinator.unpick("1"))

        assert after == before
        assert db.get(WorkItem, "1").pickorder == 2


class TestTransitionInput:
    """Input is rejected before storage is touched."""

    @pytest.mark.parametrize("item_id", [None, "", "   "])
    def test_missing_id(self, db: Session, item_id):
        with pytest.raises(InvalidRequest) as exc_info:
            ClaimCoordinator(db).transition(item_id, PickAction.PICK)

        assert exc_info.value.code == "MISSING_FIELDS"

    def test_missing_action(self, db: Session, make_item):
        make_item("1")

        with pytest.raises(InvalidRequest) as exc_info:
            ClaimCoordinator(db).transition("1", None)

        assert exc_info.value.code == "MISSING_FIELDS"
        assert _stored_qty(db, "1") == 1

    def test_unknown_action(self, db: Session, make_item):
        make_item("1")

        with pytest.raises(InvalidRequest) as exc_info:
            ClaimCoordinator(db).transition("1", "take")

        assert exc_info.value.code == "INVALID_ACTION"
        assert _stored_qty(db, "1") == 1

    @pytest.mark.parametrize("action", ["pick", "PICK", " Pick "])
    def test_action_string_accepted(self, db: Session, make_item, action):
        make_item("1")

        item = ClaimCoordinator(db).transition("1", action)

        assert item.status == "picked"

    def test_oversized_id_rejected(self, db: Session):
        with pytest.raises(InvalidRequest) as exc_info:
            ClaimCoordinator(db).pick("x" * 65)

        assert exc_info.value.code == "INVALID_REQUEST"


class TestFailureClassification:
    """Zero-row outcomes are explained by a fresh read."""

    def test_lost_race_against_stale_listing(self, db_manager, make_item):
        make_item("1")
        first = db_manager.get_session()
        second = db_manager.get_session()
        try:
            ClaimCoordinator(first).pick("1")

            with pytest.raises(InvalidTransition) as exc_info:
                ClaimCoordinator(second).pick("1")

            assert exc_info.value.code == "ITEM_NOT_PICKABLE"
        finally:
            first.close()
            second.close()

    def test_unconfirmed_update_reports_verification_failure(
        self, db: Session, make_item, monkeypatch
    ):
        make_item("1")
        _fake_rowcount(db, monkeypatch, 0)

        with pytest.raises(UpdateVerificationFailed) as exc_info:
            ClaimCoordinator(db).pick("1")

        assert exc_info.value.code == "INVALID_TRANSITION"
        assert exc_info.value.status_code == 409
        assert isinstance(exc_info.value, InvalidTransition)

    def test_multi_row_update_rejected(self, db: Session, make_item, monkeypatch):
        make_item("1")
        _fake_rowcount(db, monkeypatch, 2)

        with pytest.raises(UpdateVerificationFailed):
            ClaimCoordinator(db).pick("1")

    def test_failed_transition_leaves_updated_untouched(self, db: Session, make_item):
        make_item("1", qty=0)

        with pytest.raises(InvalidTransition):
            ClaimCoordinator(db).pick("1")

        db.expire_all()
        assert db.get(WorkItem, "1").updated is None


class TestStorageFailure:
    """Storage errors surface as StorageUnavailable."""

    def test_update_error_becomes_storage_error(self, db: Session, make_item, monkeypatch):
        make_item("1")

        def broken(*args, **kwargs):
            raise OperationalError("UPDATE", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "execute", broken)

        with pytest.raises(StorageUnavailable) as exc_info:
            ClaimCoordinator(db).pick("1")

        assert exc_info.value.code == "STORAGE_ERROR"
        monkeypatch.undo()
        assert _stored_qty(db, "1") == 1


class TestGetItem:
    """Single-item lookup for re-checking state."""

    def test_get_open_item(self, db: Session, make_item):
        make_item("1")

        item = ClaimCoordinator(db).get_item("1")

        assert item.status == "to be picked"

    def test_get_reflects_claim(self, db: Session, make_item):
        make_item("1")
        coordinator = ClaimCoordinator(db)

        coordinator.pick("1")

        assert coordinator.get_item("1").status == "picked"

    def test_get_missing_item(self, db: Session):
        with pytest.raises(ItemNotFound):
            ClaimCoordinator(db).get_item("nope")

    def test_get_free_order_not_found(self, db: Session, make_item):
        make_item("free", ordernum="#FREE")

        with pytest.raises(ItemNotFound):
            ClaimCoordinator(db).get_item("free")
