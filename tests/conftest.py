"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides test database, client, seeded picks and authentication fixtures.

==============================================================================
"""

import os

# Keep the module-level application off the on-disk development database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from typing import Callable, Dict, Generator

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from picklist.core.security import get_security_manager
from picklist.db.database import DatabaseManager
from picklist.db.models import PickerPin, SkuSummary, WorkItem
from picklist.main import Application


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
def db_manager() -> Generator[DatabaseManager, None, None]:
    """Fresh in-memory database for each test."""
    manager = DatabaseManager("sqlite://")
    manager.create_tables()
    try:
        yield manager
    finally:
        manager.drop_tables()
        manager.dispose()


@pytest.fixture(scope="function")
def db(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    """Session on the test database."""
    session = db_manager.get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def file_db_manager(tmp_path) -> Generator[DatabaseManager, None, None]:
    """File-backed SQLite database, one connection per thread."""
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'picklist.db'}")
    manager.create_tables()
    try:
        yield manager
    finally:
        manager.dispose()


@pytest.fixture(scope="function")
def client(db_manager: DatabaseManager) -> Generator[TestClient, None, None]:
    """Test client bound to the test database."""
    application = Application(db_manager=db_manager)

    with TestClient(application.app) as test_client:
        yield test_client


# ============================================================================
# DATA FIXTURES
# ============================================================================

def add_item(session: Session, item_id: str, **overrides) -> WorkItem:
    """Insert and commit one work item with sensible defaults."""
    values = {
        "code": f"CODE-{item_id}",
        "ordernum": "BC000001",
        "location": "A1",
        "groupid": None,
        "qty": 1,
        "pickorder": None,
        "deleted": None,
    }
    values.update(overrides)
    item = WorkItem(id=item_id, **values)
    session.add(item)
    session.commit()
    return item


@pytest.fixture
def make_item(db: Session) -> Callable[..., WorkItem]:
    """Factory inserting work items into the test database."""
    def _make(item_id: str, **overrides) -> WorkItem:
        return add_item(db, item_id, **overrides)
    return _make


@pytest.fixture
def make_summary(db: Session) -> Callable[..., SkuSummary]:
    """Factory inserting brand/supplier rows."""
    def _make(groupid: str, brand=None, supplier=None) -> SkuSummary:
        summary = SkuSummary(groupid=groupid, brand=brand, supplier=supplier)
        db.add(summary)
        db.commit()
        return summary
    return _make


@pytest.fixture
def picker(db: Session) -> PickerPin:
    """A picker who can log in with PIN 1234."""
    pin = PickerPin(pin=1234, name="Test Picker")
    db.add(pin)
    db.commit()
    return pin


# ============================================================================
# TOKEN FIXTURES
# ============================================================================

@pytest.fixture
def picker_token() -> str:
    """Access token for the test picker."""
    return get_security_manager().create_access_token("1234", "Test Picker")


@pytest.fixture
def auth_headers(picker_token: str) -> Dict[str, str]:
    """Authorization headers for the test picker."""
    return {"Authorization": f"Bearer {picker_token}"}
