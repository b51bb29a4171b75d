"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

This package provides:
- WorkCatalog: ordered, filtered listing of open picks (read path)
- ClaimCoordinator: pick/unpick via conditional update (write path)
- AuthService: PIN login and token issuance

Architecture Pattern: Service Layer
----------------------------------

    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │    Service      │  ← Business Logic
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │   SQLAlchemy    │  ← Data Access
    └─────────────────┘

Services receive their Session through the constructor and translate
storage failures into StorageUnavailable.

==============================================================================
"""

from .auth_service import AuthService
from .catalog_service import WorkCatalog
from .claim_service import ClaimCoordinator

__all__ = [
    "AuthService",
    "WorkCatalog",
    "ClaimCoordinator",
]
