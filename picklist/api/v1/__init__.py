"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- auth: PIN login
- picks: Open-work listing and pick/unpick

==============================================================================
"""

from . import health, auth, picks

__all__ = ["health", "auth", "picks"]
