"""
==============================================================================
Pick Endpoints
==============================================================================

Open-work listing and pick/unpick transitions.

Every endpoint requires a bearer token. Service calls are blocking, so they
run in the threadpool under the request deadline. Each call opens and closes
its own session on the worker thread; request teardown never touches it.

==============================================================================
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from picklist.core.deadline import run_with_deadline
from picklist.core.dependencies import get_current_identity, get_db_manager
from picklist.core.security import Identity
from picklist.db.database import DatabaseManager
from picklist.db.models import PickAction
from picklist.schemas.pick import (
    PickFilterRequest,
    PickItemResponse,
    PickListResponse,
    PickedItem,
    SetPickedRequest,
    SetPickedResponse,
)
from picklist.services.catalog_service import WorkCatalog
from picklist.services.claim_service import ClaimCoordinator


router = APIRouter(prefix="/picks", tags=["Picks"])


class PickController:
    """
    Controller for pick operations.

    Methods run on a threadpool worker and own their session from open to
    close, so a call that outlives its deadline keeps its session to itself.
    """

    def __init__(self, db_manager: DatabaseManager):
        self._db_manager = db_manager

    def list_open(self, location_filter: Optional[str]) -> PickListResponse:
        """List open picks in traversal order."""
        with self._db_manager.session_scope() as db:
            picks, total = WorkCatalog(db).list_open_work(location_filter)

        return PickListResponse(
            message=f"{total} picks available",
            picks=picks,
            total_picks=total,
        )

    def get_item(self, item_id: str) -> PickItemResponse:
        """Current state of one item."""
        with self._db_manager.session_scope() as db:
            item = PickedItem.from_model(ClaimCoordinator(db).get_item(item_id))

        return PickItemResponse(message=f"Item is {item.status}", item=item)

    def set_picked(self, item_id: str, action: PickAction) -> SetPickedResponse:
        """Pick or unpick one item."""
        with self._db_manager.session_scope() as db:
            item = PickedItem.from_model(ClaimCoordinator(db).transition(item_id, action))

        return SetPickedResponse(
            message=f"Item successfully {action.past_tense}",
            item=item,
        )


@router.get("", response_model=PickListResponse)
async def list_picks(
    location_filter: Optional[str] = Query(None, max_length=100),
    identity: Identity = Depends(get_current_identity),
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """List open picks, optionally filtered by location substring."""
    controller = PickController(db_manager)
    return await run_with_deadline(controller.list_open, location_filter)


@router.post("/get_picks", response_model=PickListResponse)
async def get_picks(
    request: Optional[PickFilterRequest] = Body(None),
    identity: Identity = Depends(get_current_identity),
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """List open picks; the filter arrives in the JSON body."""
    controller = PickController(db_manager)
    location_filter = request.location_filter if request else None
    return await run_with_deadline(controller.list_open, location_filter)


@router.post("/set_picked", response_model=SetPickedResponse)
async def set_picked(
    request: SetPickedRequest,
    identity: Identity = Depends(get_current_identity),
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """Pick or unpick an item by id."""
    controller = PickController(db_manager)
    return await run_with_deadline(controller.set_picked, request.id, request.action)


@router.get("/{item_id}", response_model=PickItemResponse)
async def get_pick(
    item_id: str,
    identity: Identity = Depends(get_current_identity),
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """Current state of one item, for re-checking before a retry."""
    controller = PickController(db_manager)
    return await run_with_deadline(controller.get_item, item_id)


@router.post("/{item_id}/pick", response_model=SetPickedResponse)
async def pick_item(
    item_id: str,
    identity: Identity = Depends(get_current_identity),
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """Claim an open item."""
    controller = PickController(db_manager)
    return await run_with_deadline(controller.set_picked, item_id, PickAction.PICK)


@router.post("/{item_id}/unpick", response_model=SetPickedResponse)
async def unpick_item(
    item_id: str,
    identity: Identity = Depends(get_current_identity),
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """Release a claimed item."""
    controller = PickController(db_manager)
    return await run_with_deadline(controller.set_picked, item_id, PickAction.UNPICK)
