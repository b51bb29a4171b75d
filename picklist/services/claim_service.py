"""
==============================================================================
Claim Coordinator Service Module
==============================================================================

Write path: pick and unpick a single item.

State Machine:
-------------
            pick  (requires qty = 1)
    ┌──────┐ ─────────────────────▶ ┌─────────┐
    │ OPEN │                        │ CLAIMED │
    └──────┘ ◀───────────────────── └─────────┘
            unpick (requires qty = 0)

Conditional Update:
------------------
The precondition lives in the WHERE clause of a single UPDATE:

    UPDATE localstock
       SET qty = :target, updated = :now
     WHERE id = :id
       AND qty = :required
       AND ordernum != :sentinel
       AND (deleted IS NULL OR deleted = 0)

The affected-row count decides the outcome. When two pickers race for the
same item the database serialises the two UPDATEs; the second one matches
no row and is reported as a failed transition. No process-local lock is
taken, and no read happens before the write.

Zero-row Classification:
-----------------------
    row missing / deleted / '#FREE'      → ITEM_NOT_FOUND
    row in the wrong state               → ITEM_NOT_PICKABLE
    row already back in required state   → INVALID_TRANSITION (lost race)

==============================================================================
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from picklist.config import Settings, get_settings
from picklist.core import exceptions
from picklist.db.models import PickAction, WorkItem
from picklist.services.catalog_service import eligible_item_filters
from picklist.utils.validators import PickInputValidator


# Module logger
logger = logging.getLogger(__name__)


class ClaimCoordinator:
    """
    Executes pick/unpick transitions with compare-and-swap semantics.

    A coordinator wraps one Session; use one per request or per thread.

    Attributes:
        _db: Database session
        _settings: Application settings

    Example:
        >>> coordinator = ClaimCoordinator(db_session)
        >>> item = coordinator.transition("42", PickAction.PICK)
        >>> item.status
        'picked'
    """

    def __init__(self, db: Session, settings: Optional[Settings] = None) -> None:
        self._db = db
        self._settings = settings or get_settings()
        self._validator = PickInputValidator()

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_item(self, item_id: Optional[str]) -> WorkItem:
        """
        Load one eligible item in its current state.

        Callers use this to re-check state before retrying a transition whose
        outcome was ambiguous.

        Raises:
            AppException: MISSING_FIELDS, ITEM_NOT_FOUND or STORAGE_ERROR
        """
        item_id = self._validator.normalize_item_id(item_id)

        try:
            item = self._find_eligible(item_id)
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(f"❌ Item lookup failed for {item_id}: {e}")
            raise exceptions.storage_unavailable("Failed to load item from database")

        if item is None:
            raise exceptions.item_not_found(item_id)
        return item

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def pick(self, item_id: Optional[str]) -> WorkItem:
        """Claim an open item."""
        return self.transition(item_id, PickAction.PICK)

    def unpick(self, item_id: Optional[str]) -> WorkItem:
        """Release a claimed item."""
        return self.transition(item_id, PickAction.UNPICK)

    def transition(
        self,
        item_id: Optional[str],
        action: Union[PickAction, str, None]
    ) -> WorkItem:
        """
        Move one item between OPEN and CLAIMED.

        Args:
            item_id: Item identifier
            action: PickAction or its string value

        Returns:
            The item as committed after the transition

        Raises:
            AppException: MISSING_FIELDS / INVALID_ACTION for bad input,
                ITEM_NOT_FOUND, ITEM_NOT_PICKABLE, INVALID_TRANSITION,
                STORAGE_ERROR
        """
        item_id = self._validator.normalize_item_id(item_id)
        action = self._validator.normalize_action(action)

        now = datetime.now(timezone.utc)
        stmt = (
            update(WorkItem)
            .where(
                WorkItem.id == item_id,
                WorkItem.qty == int(action.required_state),
                *eligible_item_filters(self._settings.free_order_sentinel),
            )
            .values(qty=int(action.target_state), updated=now)
            .execution_options(synchronize_session=False)
        )

        try:
            result = self._db.execute(stmt)
            affected = result.rowcount

            if affected == 1:
                item = self._find_eligible(item_id)
                if item is None:
                    self._db.rollback()
                    raise exceptions.update_verification_failed(item_id, action.value)
                self._db.commit()
                logger.info(f"✅ Item {item_id} {action.past_tense} ({item.code} @ {item.location})")
                return item

            self._db.rollback()
            if affected > 1:
                logger.error(f"❌ Conditional update on {item_id} touched {affected} rows")
                raise exceptions.update_verification_failed(item_id, action.value)

            raise self._classify_failure(item_id, action)

        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(f"❌ Transition {action.value} on {item_id} failed: {e}")
            raise exceptions.storage_unavailable("Failed to update item status")

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _find_eligible(self, item_id: str) -> Optional[WorkItem]:
        """Fresh read of an eligible row, bypassing the identity map."""
        return (
            self._db.query(WorkItem)
            .filter(
                WorkItem.id == item_id,
                *eligible_item_filters(self._settings.free_order_sentinel),
            )
            .populate_existing()
            .first()
        )

    def _classify_failure(
        self,
        item_id: str,
        action: PickAction
    ) -> exceptions.AppException:
        """Explain why the conditional update matched no row."""
        current = self._find_eligible(item_id)
        # Release the read transaction opened by the lookup
        self._db.rollback()

        if current is None:
            logger.info(f"Item {item_id} not found for {action.value}")
            return exceptions.item_not_found(item_id)

        if current.qty != int(action.required_state):
            logger.info(
                f"Item {item_id} not in state for {action.value} "
                f"(qty={current.qty})"
            )
            return exceptions.item_not_pickable(item_id, action.value)

        logger.warning(
            f"⚠️ Item {item_id} {action.value} lost a race: "
            "state matches again after a concurrent change"
        )
        return exceptions.update_verification_failed(item_id, action.value)
