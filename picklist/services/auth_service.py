"""
==============================================================================
Authentication Service Module
==============================================================================

PIN login for pickers.

Authentication Flow:
-------------------
    ┌─────────────┐
    │  PIN Login  │
    └──────┬──────┘
           │
    ┌──────▼──────┐     ┌─────────────┐
    │  PIN Given? │────▶│     No      │ → MISSING_FIELDS
    └──────┬──────┘     └─────────────┘
           │
    ┌──────▼──────┐     ┌─────────────┐
    │  Numeric?   │────▶│     No      │ → INVALID_PIN
    └──────┬──────┘     └─────────────┘
           │
    ┌──────▼──────┐     ┌─────────────┐
    │ Find Picker │────▶│  Not Found  │ → INVALID_PIN
    └──────┬──────┘     └─────────────┘
           │
    ┌──────▼──────┐
    │ Issue Token │
    └─────────────┘

PINs live in the inventory system's ``pickpin`` table and are matched by
value; this service never writes them.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from picklist.core import exceptions
from picklist.core.security import SecurityManager, get_security_manager
from picklist.db.models import PickerPin


# Module logger
logger = logging.getLogger(__name__)


class AuthService:
    """
    Exchanges a picker PIN for a bearer token.

    Attributes:
        _db: Database session for PIN lookups
        _security: SecurityManager for token issuance

    Example:
        >>> auth_service = AuthService(db_session)
        >>> picker, token = auth_service.login_pin("1234")
    """

    def __init__(
        self,
        db: Session,
        security: Optional[SecurityManager] = None
    ) -> None:
        self._db = db
        self._security = security or get_security_manager()

    def parse_pin(self, pin: Union[int, str, None]) -> int:
        """
        Normalise a raw PIN.

        Raises:
            AppException: MISSING_FIELDS if absent, INVALID_PIN if not a number
        """
        if pin is None or (isinstance(pin, str) and not pin.strip()):
            raise exceptions.missing_fields(["pin"])

        if isinstance(pin, bool):
            raise exceptions.invalid_pin("PIN must be a valid number")

        if isinstance(pin, int):
            return pin

        raw = pin.strip()
        if not raw.isdigit():
            raise exceptions.invalid_pin("PIN must be a valid number")
        return int(raw)

    def login_pin(self, pin: Union[int, str, None]) -> Tuple[PickerPin, str]:
        """
        Authenticate a picker by PIN.

        Returns:
            Tuple of (PickerPin, access_token)

        Raises:
            AppException: MISSING_FIELDS, INVALID_PIN or STORAGE_ERROR
        """
        pin_number = self.parse_pin(pin)

        try:
            picker = self._db.get(PickerPin, pin_number)
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(f"❌ PIN lookup failed: {e}")
            raise exceptions.storage_unavailable()

        if picker is None:
            logger.warning("Login failed: unknown PIN")
            raise exceptions.invalid_pin()

        token = self._security.create_access_token(str(picker.pin), picker.name)

        logger.info(f"✅ Picker authenticated: {picker.name}")
        return picker, token

    def get_token_expiry_seconds(self) -> int:
        """Get access token lifetime in seconds."""
        return self._security.get_access_token_expire_seconds()
