"""
==============================================================================
Security and Deadline Tests
==============================================================================

Tests for token issuance/verification and the storage call deadline.

==============================================================================
"""

import asyncio
import threading
import time
from datetime import timedelta

import pytest
from jose import jwt
from sqlalchemy.orm import Session

from picklist.api.v1.picks import PickController
from picklist.config import Settings
from picklist.core.deadline import run_with_deadline
from picklist.core.exceptions import StorageUnavailable
from picklist.core.security import SecurityManager
from picklist.db.models import PickAction, WorkItem
from picklist.services.claim_service import ClaimCoordinator


@pytest.fixture
def security() -> SecurityManager:
    return SecurityManager(Settings(jwt_secret_key="test-secret-key-0123456789"))


class TestTokens:
    """Tests for SecurityManager."""

    def test_round_trip(self, security: SecurityManager):
        """A fresh token verifies to the same identity."""
        token = security.create_access_token("1234", "Test Picker")

        identity = security.verify_token(token)

        assert identity.subject_id == "1234"
        assert identity.display_name == "Test Picker"
        assert identity.issued_at is not None

    def test_claims(self, security: SecurityManager):
        """Tokens carry issuer, name and login time."""
        token = security.create_access_token("1234", "Test Picker")

        claims = security.decode_token(token)

        assert claims["sub"] == "1234"
        assert claims["name"] == "Test Picker"
        assert claims["iss"] == "picklist-app"
        assert "loginTime" in claims
        assert claims["exp"] - claims["iat"] == 90 * 24 * 60 * 60

    def test_expired_token(self, security: SecurityManager):
        """Expired tokens do not verify."""
        token = security.create_access_token(
            "1234", "Test Picker", expires_delta=timedelta(seconds=-5)
        )

        assert security.verify_token(token) is None

    def test_wrong_secret(self, security: SecurityManager):
        """Tokens signed elsewhere do not verify."""
        other = SecurityManager(Settings(jwt_secret_key="another-secret-key-9876543210"))
        token = other.create_access_token("1234", "Test Picker")

        assert security.verify_token(token) is None

    def test_wrong_issuer(self, security: SecurityManager):
        """Tokens from another issuer do not verify."""
        token = jwt.encode(
            {"sub": "1234", "name": "Test Picker", "iss": "someone-else"},
            "test-secret-key-0123456789",
            algorithm="HS256",
        )

        assert security.verify_token(token) is None

    def test_garbage_token(self, security: SecurityManager):
        """Malformed tokens do not verify."""
        assert security.verify_token("not.a.token") is None


class TestDeadline:
    """Tests for run_with_deadline."""

    def test_returns_result(self):
        """Fast calls pass their result through."""
        result = asyncio.run(run_with_deadline(lambda a, b: a + b, 2, 3, timeout=1.0))

        assert result == 5

    def test_expired_deadline_is_storage_error(self):
        """Slow calls are reported as storage unavailability."""
        with pytest.raises(StorageUnavailable) as exc_info:
            asyncio.run(run_with_deadline(time.sleep, 0.5, timeout=0.05))

        assert exc_info.value.code == "STORAGE_ERROR"

    def test_errors_propagate(self):
        """Service errors are not masked by the deadline."""
        def fail():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            asyncio.run(run_with_deadline(fail, timeout=1.0))

    def test_timed_out_transition_keeps_its_session(self, db, db_manager, make_item, monkeypatch):
        """A transition past its deadline finishes before its own session closes."""
        make_item("1")
        events = []
        closed = threading.Event()
        real_transition = ClaimCoordinator.transition
        real_close = Session.close

        def slow_transition(self, item_id, action):
            time.sleep(0.2)
            item = real_transition(self, item_id, action)
            events.append(("transition", threading.get_ident()))
            return item

        def tracked_close(self):
            events.append(("close", threading.get_ident()))
            real_close(self)
            closed.set()

        monkeypatch.setattr(ClaimCoordinator, "transition", slow_transition)
        monkeypatch.setattr(Session, "close", tracked_close)

        controller = PickController(db_manager)
        with pytest.raises(StorageUnavailable):
            asyncio.run(run_with_deadline(
                controller.set_picked, "1", PickAction.PICK, timeout=0.05
            ))

        assert closed.wait(5)
        assert [name for name, _ in events] == ["transition", "close"]
        assert events[0][1] == events[1][1]

        # The write may land after the deadline; callers re-read before retrying
        db.expire_all()
        assert db.get(WorkItem, "1").qty == 0
