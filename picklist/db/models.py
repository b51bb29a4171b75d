"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

ORM models for the warehouse picklist.

The tables are owned and populated by the external inventory system; this
service only reads them and flips ``localstock.qty`` between 1 and 0. Table
and column names therefore follow the inventory schema.

This module defines:
- WorkState: Open/Claimed, stored as the integer ``qty``
- PickAction: pick/unpick intents and their state requirements
- WorkItem: one pickable unit (``localstock``)
- SkuSummary: brand/supplier attributes keyed by group (``skusummary``)
- PickerPin: picker PINs for login (``pickpin``)

Database Schema:
---------------

    ┌─────────────────────────────────────────────────────────────────┐
    │                          localstock                             │
    ├─────────────────────────────────────────────────────────────────┤
    │ id (VARCHAR, PK)                                                │
    │ code (VARCHAR)            SKU                                   │
    │ ordernum (VARCHAR)        '#FREE' = not a real order            │
    │ location (VARCHAR)                                              │
    │ groupid (VARCHAR) ─────────────────┐                            │
    │ qty (INTEGER)             1 = open, 0 = picked                  │
    │ pickorder (INTEGER, NULLABLE)      │                            │
    │ deleted (INTEGER, NULLABLE)        │                            │
    │ updated (DATETIME, NULLABLE)       │                            │
    └────────────────────────────────────┼────────────────────────────┘
                                         │ N:1 (no FK, outer join)
                                         ▼
    ┌─────────────────────────────────────────────────────────────────┐
    │                          skusummary                             │
    ├─────────────────────────────────────────────────────────────────┤
    │ groupid (VARCHAR, PK)                                           │
    │ brand (VARCHAR, NULLABLE)                                       │
    │ supplier (VARCHAR, NULLABLE)                                    │
    └─────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────┐
    │                           pickpin                               │
    ├─────────────────────────────────────────────────────────────────┤
    │ pin (INTEGER, PK)                                               │
    │ name (VARCHAR)                                                  │
    └─────────────────────────────────────────────────────────────────┘

State Machine:
-------------

            pick  (requires OPEN)
    ┌──────┐ ─────────────────────▶ ┌─────────┐
    │ OPEN │                        │ CLAIMED │
    └──────┘ ◀───────────────────── └─────────┘
            unpick (requires CLAIMED)

==============================================================================
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, Index, Integer, String

from picklist.db.database import Base


# =============================================================================
# ENUMS
# =============================================================================

class WorkState(enum.IntEnum):
    """
    Lifecycle state of a work item.

    Stored as ``localstock.qty``: 1 means still to be picked, 0 means picked.
    """

    CLAIMED = 0
    OPEN = 1

    @property
    def label(self) -> str:
        """Human-readable status shown to pickers."""
        return "picked" if self is WorkState.CLAIMED else "to be picked"


class PickAction(str, enum.Enum):
    """
    Transition intents.

    - PICK: claim an open item
    - UNPICK: release a claimed item
    """

    PICK = "pick"
    UNPICK = "unpick"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value

    @property
    def required_state(self) -> WorkState:
        """State the item must be in for this action."""
        return WorkState.OPEN if self is PickAction.PICK else WorkState.CLAIMED

    @property
    def target_state(self) -> WorkState:
        """State the item is left in after this action."""
        return WorkState.CLAIMED if self is PickAction.PICK else WorkState.OPEN

    @property
    def past_tense(self) -> str:
        """Verb used in confirmation messages."""
        return "picked" if self is PickAction.PICK else "unpicked"


# =============================================================================
# WORK ITEM MODEL
# =============================================================================

class WorkItem(Base):
    """
    One pickable unit tied to an order line and a physical location.

    Attributes:
        id: Opaque unique identifier
        code: SKU of the physical good
        ordernum: Order reference ('#FREE' marks stock that is not an order)
        location: Physical location string
        groupid: Key into SkuSummary
        qty: Integer state (1 = open, 0 = picked)
        pickorder: Traversal hint within a location (NULL sorts as 0)
        deleted: Soft delete flag (NULL/0 = live)
        updated: Last confirmed transition
    """

    __tablename__ = "localstock"
    __table_args__ = (
        Index("ix_localstock_open", "qty", "location"),
    )

    id: str = Column(String(64), primary_key=True, doc="Unique item identifier")

    code: str = Column(String(100), nullable=False, doc="SKU code")

    ordernum: str = Column(String(100), nullable=False, doc="Order reference")

    location: str = Column(String(255), nullable=False, doc="Physical location")

    groupid: Optional[str] = Column(String(100), nullable=True, doc="Attribute group key")

    qty: int = Column(Integer, nullable=False, default=1, doc="1 = open, 0 = picked")

    pickorder: Optional[int] = Column(Integer, nullable=True, doc="Traversal hint")

    deleted: Optional[int] = Column(Integer, nullable=True, doc="Soft delete flag")

    updated: Optional[datetime] = Column(
        DateTime(timezone=True),
        nullable=True,
        doc="Timestamp of the last confirmed transition"
    )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> Optional[WorkState]:
        """Logical state, or None when qty holds an unrecognised value."""
        try:
            return WorkState(self.qty)
        except ValueError:
            return None

    @property
    def status(self) -> str:
        """Human-readable status label."""
        state = self.state
        return state.label if state is not None else "unknown"

    @property
    def sort_hint(self) -> int:
        """Pick order with NULL treated as 0."""
        return self.pickorder or 0

    def __repr__(self) -> str:
        return (
            f"WorkItem(id={self.id!r}, code={self.code!r}, "
            f"location={self.location!r}, qty={self.qty})"
        )


# =============================================================================
# DESCRIPTIVE ATTRIBUTES MODEL
# =============================================================================

class SkuSummary(Base):
    """Brand and supplier for a group of SKUs."""

    __tablename__ = "skusummary"

    groupid: str = Column(String(100), primary_key=True)

    brand: Optional[str] = Column(String(255), nullable=True)

    supplier: Optional[str] = Column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"SkuSummary(groupid={self.groupid!r}, brand={self.brand!r})"


# =============================================================================
# PICKER PIN MODEL
# =============================================================================

class PickerPin(Base):
    """Picker login PIN."""

    __tablename__ = "pickpin"

    pin: int = Column(Integer, primary_key=True, autoincrement=False)

    name: str = Column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"PickerPin(pin=****, name={self.name!r})"
