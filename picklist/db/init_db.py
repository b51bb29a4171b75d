"""
==============================================================================
Database Initialization Module
==============================================================================

Database initialization and setup utilities.

Initialization Flow:
-------------------
1. Create any missing tables from ORM models
2. Verify the connection
3. Seed sample picks (development only, when enabled)

The inventory system normally owns these tables, so step 1 only matters for
local development and tests.

Usage:
------
    from picklist.db import DatabaseManager, init_db

    db_manager = DatabaseManager()
    init_db(db_manager)

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from picklist.config import Settings, get_settings
from picklist.db.database import DatabaseManager
from picklist.db.models import PickerPin, SkuSummary, WorkItem, WorkState


# Module logger
logger = logging.getLogger(__name__)


# Sample rows for local development
SAMPLE_PINS = [
    (1234, "Demo Picker"),
    (5678, "Second Picker"),
]

SAMPLE_ATTRIBUTES = [
    ("GRP-NIKE", "Nike", "MainSupplier"),
    ("GRP-ADIDAS", "Adidas", None),
]

SAMPLE_ITEMS = [
    # id, code, ordernum, location, groupid, pickorder
    ("sample-1", "SHOE123", "BC001234", "C3-Front-Rack-01", "GRP-NIKE", 1),
    ("sample-2", "SHOE456", "BC001234", "C3-Front-Rack-01", "GRP-ADIDAS", None),
    ("sample-3", "SHOE789", "BC001240", "A1-Rear-02", "GRP-MISSING", 2),
    ("sample-4", "SHOE999", "#FREE", "A1-Rear-02", "GRP-NIKE", 0),
]


class DatabaseInitializer:
    """
    Database initialization manager.

    Attributes:
        _db_manager: DatabaseManager bound to the target database
        _settings: Application settings

    Example:
        >>> initializer = DatabaseInitializer(db_manager)
        >>> initializer.initialize()
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        settings: Optional[Settings] = None
    ) -> None:
        self._db_manager = db_manager
        self._settings = settings or get_settings()

    # =========================================================================
    # TABLE OPERATIONS
    # =========================================================================

    def create_tables(self) -> None:
        """Create any missing tables."""
        logger.info("Creating database tables...")
        self._db_manager.create_tables()
        logger.info("✅ Database tables created successfully")

    def verify_tables(self) -> bool:
        """
        Verify that the pick tables are queryable.

        Returns:
            True if all tables exist, False otherwise
        """
        session = self._db_manager.get_session()
        try:
            session.query(WorkItem).first()
            session.query(SkuSummary).first()
            session.query(PickerPin).first()
            logger.debug("Database tables verified successfully")
            return True
        except Exception as e:
            logger.error(f"Table verification failed: {e}")
            return False
        finally:
            session.close()

    # =========================================================================
    # SAMPLE DATA
    # =========================================================================

    def seed_sample_data(self) -> int:
        """
        Insert sample pins, attributes and picks that are not yet present.

        Refused in production.

        Returns:
            Number of rows inserted
        """
        if self._settings.is_production:
            logger.error("Cannot seed sample data in production!")
            raise RuntimeError("Sample data seeding not allowed in production")

        inserted = 0
        with self._db_manager.session_scope() as session:
            inserted += self._seed_pins(session)
            inserted += self._seed_attributes(session)
            inserted += self._seed_items(session)

        logger.info(f"✅ Seeded {inserted} sample rows")
        return inserted

    def _seed_pins(self, session: Session) -> int:
        count = 0
        for pin, name in SAMPLE_PINS:
            if session.get(PickerPin, pin) is None:
                session.add(PickerPin(pin=pin, name=name))
                count += 1
        return count

    def _seed_attributes(self, session: Session) -> int:
        count = 0
        for groupid, brand, supplier in SAMPLE_ATTRIBUTES:
            if session.get(SkuSummary, groupid) is None:
                session.add(SkuSummary(groupid=groupid, brand=brand, supplier=supplier))
                count += 1
        return count

    def _seed_items(self, session: Session) -> int:
        count = 0
        for item_id, code, ordernum, location, groupid, pickorder in SAMPLE_ITEMS:
            if session.get(WorkItem, item_id) is None:
                session.add(WorkItem(
                    id=item_id,
                    code=code,
                    ordernum=ordernum,
                    location=location,
                    groupid=groupid,
                    qty=int(WorkState.OPEN),
                    pickorder=pickorder,
                ))
                count += 1
        return count

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    def initialize(self) -> None:
        """
        Perform full database initialization.

        This is the recommended method for application startup.
        """
        logger.info("=" * 60)
        logger.info("Initializing database...")
        logger.info("=" * 60)

        self.create_tables()

        if self._db_manager.verify_connection():
            logger.info("✅ Database connection verified")
        else:
            logger.warning("⚠️ Database connection check failed")

        if self._settings.seed_sample_data and not self._settings.is_production:
            self.seed_sample_data()

        logger.info("Database initialization complete")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def init_db(db_manager: DatabaseManager, settings: Optional[Settings] = None) -> None:
    """
    Initialize the database behind ``db_manager``.

    Usage:
        from picklist.db import init_db
        init_db(db_manager)
    """
    DatabaseInitializer(db_manager, settings).initialize()
