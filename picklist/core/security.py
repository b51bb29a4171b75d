"""
==============================================================================
Security Module
==============================================================================

JWT issuance and verification for PIN-authenticated pickers.

Tokens are long-lived (90 days by default) because handheld scanners stay
logged in for a whole season. The core pick logic never reads the token; it
only gates access at the HTTP layer.

Token Claims:
------------
    sub        picker PIN as string
    name       picker display name
    loginTime  ISO-8601 login timestamp
    iss        configured issuer
    iat / exp  standard timestamps

==============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from picklist.config import Settings, get_settings


# Module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Verified identity claim extracted from a bearer token."""

    subject_id: str
    display_name: str
    issued_at: Optional[datetime] = None


class SecurityManager:
    """
    Issues and verifies JWT access tokens.

    Example:
        >>> security = SecurityManager()
        >>> token = security.create_access_token("1234", "John Doe")
        >>> identity = security.verify_token(token)
        >>> identity.display_name
        'John Doe'
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        logger.debug("SecurityManager initialized")

    # =========================================================================
    # TOKEN CREATION
    # =========================================================================

    def create_access_token(
        self,
        subject_id: str,
        display_name: str,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create a signed access token for a picker.

        Args:
            subject_id: Picker identifier (the PIN)
            display_name: Picker name shown in clients
            expires_delta: Custom lifetime (defaults to settings)

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        expire = now + (
            expires_delta or timedelta(days=self._settings.access_token_expire_days)
        )

        payload = {
            "sub": str(subject_id),
            "name": display_name,
            "loginTime": now.isoformat(),
            "iss": self._settings.jwt_issuer,
            "iat": now,
            "exp": expire,
        }

        token = jwt.encode(
            payload,
            self._settings.jwt_secret_key,
            algorithm=self._settings.jwt_algorithm
        )

        logger.debug(f"Created access token for {subject_id}, expires: {expire.isoformat()}")
        return token

    # =========================================================================
    # TOKEN VERIFICATION
    # =========================================================================

    def decode_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Verify signature, expiry and issuer, returning the raw claims.

        Returns:
            Claims dictionary if valid, None otherwise
        """
        try:
            return jwt.decode(
                token,
                self._settings.jwt_secret_key,
                algorithms=[self._settings.jwt_algorithm],
                issuer=self._settings.jwt_issuer,
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Token verification failed: token expired")
            return None
        except JWTError as e:
            logger.warning(f"Token verification failed: {e}")
            return None

    def verify_token(self, token: str) -> Optional[Identity]:
        """
        Verify a token and build the identity claim.

        Returns:
            Identity if the token is valid and carries a subject, None otherwise
        """
        payload = self.decode_token(token)
        if not payload:
            return None

        subject_id = payload.get("sub")
        if not subject_id:
            logger.warning("Token payload missing 'sub' claim")
            return None

        issued_at = None
        if payload.get("iat") is not None:
            issued_at = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)

        return Identity(
            subject_id=str(subject_id),
            display_name=payload.get("name") or "",
            issued_at=issued_at,
        )

    def get_access_token_expire_seconds(self) -> int:
        """Get access token lifetime in seconds."""
        return self._settings.access_token_expire_seconds


# =============================================================================
# CACHED INSTANCE
# =============================================================================

@lru_cache(maxsize=1)
def get_security_manager() -> SecurityManager:
    """
    Get the process-wide SecurityManager.

    Returns:
        Cached SecurityManager instance
    """
    return SecurityManager()
