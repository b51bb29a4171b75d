"""
==============================================================================
Database Initialization Tests
==============================================================================

Tests for table creation and development sample data.

==============================================================================
"""

import pytest

from picklist.config import Settings
from picklist.db.database import DatabaseManager
from picklist.db.init_db import (
    SAMPLE_ATTRIBUTES,
    SAMPLE_ITEMS,
    SAMPLE_PINS,
    DatabaseInitializer,
)
from picklist.db.models import PickerPin
from picklist.services.catalog_service import WorkCatalog


class TestDatabaseInitializer:
    """Tests for DatabaseInitializer."""

    def test_tables_verified(self, db_manager: DatabaseManager):
        """Created tables are queryable."""
        assert DatabaseInitializer(db_manager).verify_tables() is True

    def test_seed_inserts_sample_rows(self, db_manager: DatabaseManager):
        """Seeding inserts every sample row once."""
        inserted = DatabaseInitializer(db_manager).seed_sample_data()

        assert inserted == len(SAMPLE_PINS) + len(SAMPLE_ATTRIBUTES) + len(SAMPLE_ITEMS)

    def test_seed_is_idempotent(self, db_manager: DatabaseManager):
        """A second seed adds nothing."""
        initializer = DatabaseInitializer(db_manager)
        initializer.seed_sample_data()

        assert initializer.seed_sample_data() == 0

    def test_seeded_listing(self, db_manager: DatabaseManager):
        """Sample data exercises ordering, sentinel and unknown attributes."""
        DatabaseInitializer(db_manager).seed_sample_data()

        with db_manager.session_scope() as session:
            picks, total = WorkCatalog(session).list_open_work()
            assert session.get(PickerPin, 1234).name == "Demo Picker"

        assert total == 3
        assert [pick.id for pick in picks] == ["sample-3", "sample-2", "sample-1"]
        assert picks[0].brand == "Unknown"
        assert picks[1].supplier == "Unknown"
        assert picks[2].brand == "Nike"

    def test_seed_refused_in_production(self, db_manager: DatabaseManager):
        """Production never receives sample data."""
        settings = Settings(app_env="production")

        with pytest.raises(RuntimeError):
            DatabaseInitializer(db_manager, settings).seed_sample_data()

    def test_initialize_seeds_when_enabled(self, db_manager: DatabaseManager):
        """Startup seeding follows the setting."""
        settings = Settings(seed_sample_data=True)

        DatabaseInitializer(db_manager, settings).initialize()

        with db_manager.session_scope() as session:
            assert session.get(PickerPin, 5678) is not None
