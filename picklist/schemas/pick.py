"""
==============================================================================
Pick Schemas Module
==============================================================================

Request and response schemas for listing and transitioning picks.

JSON field names follow the handheld client contract (``ordernum``,
``groupid``, ``pickorder``, ``qty``) rather than Python naming.

==============================================================================
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from picklist.db.models import PickAction, SkuSummary, WorkItem
from picklist.schemas.common import EnvelopeResponse


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class PickFilterRequest(BaseModel):
    """Optional location filter for the open-work listing."""
    location_filter: Optional[str] = Field(default=None, max_length=100)


class SetPickedRequest(BaseModel):
    """Pick or unpick one item."""
    id: str = Field(..., min_length=1, max_length=64)
    action: PickAction

    @field_validator("id", mode="before")
    @classmethod
    def strip_id(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
        if v is None or v == "":
            raise PydanticCustomError("missing", "Field required")
        return v


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OpenPick(BaseModel):
    """One open work item joined with its brand/supplier."""
    id: str
    code: str
    ordernum: str
    location: str
    groupid: Optional[str] = None
    brand: str
    supplier: str
    qty: int
    pickorder: int

    @classmethod
    def from_row(
        cls,
        item: WorkItem,
        summary: Optional[SkuSummary],
        unknown_label: str = "Unknown"
    ) -> "OpenPick":
        brand = summary.brand if summary is not None else None
        supplier = summary.supplier if summary is not None else None
        return cls(
            id=item.id,
            code=item.code,
            ordernum=item.ordernum,
            location=item.location,
            groupid=item.groupid,
            brand=brand or unknown_label,
            supplier=supplier or unknown_label,
            qty=item.qty,
            pickorder=item.sort_hint,
        )


class PickedItem(BaseModel):
    """Projection of an item after (or instead of) a transition."""
    id: str
    code: str
    ordernum: str
    location: str
    qty: int
    status: str

    @classmethod
    def from_model(cls, item: WorkItem) -> "PickedItem":
        return cls(
            id=item.id,
            code=item.code,
            ordernum=item.ordernum,
            location=item.location,
            qty=item.qty,
            status=item.status,
        )


class PickListResponse(EnvelopeResponse):
    """Open-work listing."""
    picks: List[OpenPick]
    total_picks: int = Field(ge=0)


class SetPickedResponse(EnvelopeResponse):
    """Result of a pick/unpick transition."""
    item: PickedItem


class PickItemResponse(EnvelopeResponse):
    """Current state of a single item."""
    item: PickedItem
