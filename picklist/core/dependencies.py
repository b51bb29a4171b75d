"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for storage sessions and bearer authentication.

Dependency Hierarchy:
--------------------
    ┌──────────────────┐        ┌────────────────────────┐
    │ get_db_manager() │        │ get_current_identity() │
    └────────┬─────────┘        └────────────────────────┘
             │
    ┌────────▼────────┐
    │    get_db()     │
    └─────────────────┘

The DatabaseManager lives on ``app.state`` and is created by the
application at startup, so every request session comes from the same
injected pool rather than a module-level singleton.

Usage Examples:
--------------
    @router.get("/picks")
    async def list_picks(
        identity: Identity = Depends(get_current_identity),
        db: Session = Depends(get_db),
    ):
        ...

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from picklist.core import exceptions
from picklist.core.security import Identity, SecurityManager, get_security_manager
from picklist.db.database import DatabaseManager


# Module logger
logger = logging.getLogger(__name__)

# HTTP Bearer security scheme for Swagger UI
security_scheme = HTTPBearer(auto_error=False)


class AuthenticationManager:
    """
    Resolves the caller's identity from HTTP bearer credentials.

    Example:
        >>> auth = AuthenticationManager(get_security_manager())
        >>> identity = auth.get_current_identity(credentials)
    """

    def __init__(self, security: SecurityManager) -> None:
        self._security = security

    def extract_token_from_header(
        self,
        credentials: Optional[HTTPAuthorizationCredentials]
    ) -> str:
        """
        Extract JWT token from the Authorization header.

        Raises:
            AppException: UNAUTHORIZED if no token was sent
        """
        if not credentials or not credentials.credentials:
            logger.debug("No authorization credentials provided")
            raise exceptions.unauthorized()

        return credentials.credentials

    def get_current_identity(
        self,
        credentials: Optional[HTTPAuthorizationCredentials]
    ) -> Identity:
        """
        Verify the bearer token and return the identity claim.

        Raises:
            AppException: UNAUTHORIZED if missing, FORBIDDEN if invalid/expired
        """
        token = self.extract_token_from_header(credentials)
        identity = self._security.verify_token(token)

        if identity is None:
            raise exceptions.forbidden()

        logger.debug(f"Picker authenticated: {identity.subject_id}")
        return identity


# =============================================================================
# FASTAPI DEPENDENCY FUNCTIONS
# =============================================================================

def get_db_manager(request: Request) -> DatabaseManager:
    """Return the DatabaseManager the application opened at startup."""
    return request.app.state.db_manager


def get_db(
    db_manager: DatabaseManager = Depends(get_db_manager)
) -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a request-scoped database session.

    Yields:
        SQLAlchemy Session object, closed after the request
    """
    db = db_manager.get_session()
    try:
        yield db
    finally:
        db.close()


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme)
) -> Identity:
    """
    FastAPI dependency to get the authenticated picker.

    Usage:
        @router.get("/auth/me")
        async def me(identity: Identity = Depends(get_current_identity)):
            return {"name": identity.display_name}
    """
    auth_manager = AuthenticationManager(get_security_manager())
    return auth_manager.get_current_identity(credentials)
