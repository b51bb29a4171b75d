"""
==============================================================================
Common Schemas Module
==============================================================================

Shared response envelope used across all API endpoints.

Every response, success or failure, carries ``return_code`` and ``message``.

==============================================================================
"""

from pydantic import BaseModel, Field


SUCCESS = "SUCCESS"


class EnvelopeResponse(BaseModel):
    """Base envelope for every successful response."""
    return_code: str = Field(default=SUCCESS)
    message: str = Field(default="OK")
