"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: response envelope
- Auth: PIN login schemas
- Pick: listing and transition schemas

==============================================================================
"""

from .common import SUCCESS, EnvelopeResponse
from .auth import (
    LoginPinRequest,
    LoginPinResponse,
    PickerInfo,
    IdentityInfo,
    CurrentIdentityResponse,
)
from .pick import (
    PickFilterRequest,
    SetPickedRequest,
    OpenPick,
    PickedItem,
    PickListResponse,
    SetPickedResponse,
    PickItemResponse,
)

__all__ = [
    # Common
    "SUCCESS",
    "EnvelopeResponse",
    # Auth
    "LoginPinRequest",
    "LoginPinResponse",
    "PickerInfo",
    "IdentityInfo",
    "CurrentIdentityResponse",
    # Pick
    "PickFilterRequest",
    "SetPickedRequest",
    "OpenPick",
    "PickedItem",
    "PickListResponse",
    "SetPickedResponse",
    "PickItemResponse",
]
