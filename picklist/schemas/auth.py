"""
==============================================================================
Authentication Schemas Module
==============================================================================

Request and response schemas for PIN login.

==============================================================================
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

from picklist.schemas.common import EnvelopeResponse


class LoginPinRequest(BaseModel):
    """PIN login. The PIN may arrive as a number or a numeric string."""
    pin: Optional[Union[int, str]] = None


class PickerInfo(BaseModel):
    """Basic picker info returned after login."""
    pin: int
    name: str


class LoginPinResponse(EnvelopeResponse):
    """Token response after authentication."""
    token: str
    token_type: str = Field(default="bearer")
    expires_in: int
    user: PickerInfo


class IdentityInfo(BaseModel):
    """Identity claim carried by the bearer token."""
    subject_id: str
    display_name: str
    issued_at: Optional[datetime] = None


class CurrentIdentityResponse(EnvelopeResponse):
    """Current picker details."""
    identity: IdentityInfo
