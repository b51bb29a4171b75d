"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy database infrastructure and ORM models.

Architecture:
------------
├── database.py   - DatabaseManager class, session factory
├── models.py     - WorkItem, SkuSummary, PickerPin, WorkState, PickAction
└── init_db.py    - DatabaseInitializer for setup

Usage:
------
    from picklist.db import DatabaseManager, WorkItem, init_db

    db_manager = DatabaseManager()
    init_db(db_manager)
    with db_manager.session_scope() as session:
        open_count = session.query(WorkItem).filter(WorkItem.qty == 1).count()

==============================================================================
"""

from .database import DatabaseManager, Base
from .models import WorkItem, SkuSummary, PickerPin, WorkState, PickAction
from .init_db import DatabaseInitializer, init_db

__all__ = [
    # Database management
    "DatabaseManager",
    "Base",
    # Models
    "WorkItem",
    "SkuSummary",
    "PickerPin",
    # Enums
    "WorkState",
    "PickAction",
    # Initialization
    "DatabaseInitializer",
    "init_db",
]
