"""
==============================================================================
Work Catalog Service Module
==============================================================================

Read path: the ordered, filtered list of open picks.

Selection:
---------
    qty = 1
    AND ordernum != '#FREE'
    AND (deleted IS NULL OR deleted = 0)
    [AND location ILIKE '%<filter>%']

Ordering:
--------
    location, COALESCE(pickorder, 0), code, id

Pickers walk the warehouse in this order, so it must be identical across
repeated calls on the same data. ``id`` is the last key only to make the
order total when two rows share location, pick order and code.

The query takes no locks. An item listed here may be picked by someone else
a moment later; ClaimCoordinator rejects the stale claim.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from picklist.config import Settings, get_settings
from picklist.core import exceptions
from picklist.db.models import SkuSummary, WorkItem, WorkState
from picklist.schemas.pick import OpenPick
from picklist.utils.validators import LocationFilterValidator


# Module logger
logger = logging.getLogger(__name__)


def eligible_item_filters(sentinel: str) -> tuple:
    """
    SQL predicates for items that take part in picking at all.

    Shared by the catalog and the claim coordinator so that listing and
    claiming agree on what exists.
    """
    return (
        WorkItem.ordernum != sentinel,
        or_(WorkItem.deleted.is_(None), WorkItem.deleted == 0),
    )


class WorkCatalog:
    """
    Produces the open-work listing.

    Attributes:
        _db: Database session
        _settings: Application settings

    Example:
        >>> catalog = WorkCatalog(db_session)
        >>> picks, total = catalog.list_open_work("C3-Front")
    """

    def __init__(self, db: Session, settings: Optional[Settings] = None) -> None:
        self._db = db
        self._settings = settings or get_settings()
        self._filter_validator = LocationFilterValidator()

    def list_open_work(
        self,
        location_filter: Optional[str] = None
    ) -> Tuple[List[OpenPick], int]:
        """
        List open picks in traversal order.

        Args:
            location_filter: Case-insensitive substring of the location

        Returns:
            Tuple of (picks, count)

        Raises:
            AppException: INVALID_REQUEST for an oversized filter,
                STORAGE_ERROR if the query fails
        """
        location_filter = self._filter_validator.normalize(location_filter)

        query = (
            self._db.query(WorkItem, SkuSummary)
            .outerjoin(SkuSummary, SkuSummary.groupid == WorkItem.groupid)
            .filter(
                WorkItem.qty == int(WorkState.OPEN),
                *eligible_item_filters(self._settings.free_order_sentinel),
            )
        )

        if location_filter:
            query = query.filter(
                WorkItem.location.icontains(location_filter, autoescape=True)
            )

        query = query.order_by(
            WorkItem.location,
            func.coalesce(WorkItem.pickorder, 0),
            WorkItem.code,
            WorkItem.id,
        )

        try:
            rows = query.all()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(f"❌ Open work query failed: {e}")
            raise exceptions.storage_unavailable("Failed to retrieve picks from database")

        label = self._settings.unknown_label
        picks = [OpenPick.from_row(item, summary, label) for item, summary in rows]

        logger.debug(
            f"Listed {len(picks)} open picks"
            + (f" matching '{location_filter}'" if location_filter else "")
        )
        return picks, len(picks)
