"""
==============================================================================
Authentication Endpoints
==============================================================================

PIN login and identity echo.

==============================================================================
"""

from fastapi import APIRouter, Depends

from picklist.core.deadline import run_with_deadline
from picklist.core.dependencies import get_current_identity, get_db_manager
from picklist.core.security import Identity
from picklist.db.database import DatabaseManager
from picklist.services.auth_service import AuthService
from picklist.schemas.auth import (
    CurrentIdentityResponse,
    IdentityInfo,
    LoginPinRequest,
    LoginPinResponse,
    PickerInfo,
)


router = APIRouter(prefix="/auth", tags=["Authentication"])


class AuthController:
    """Controller for authentication operations. Each login owns its session."""

    def __init__(self, db_manager: DatabaseManager):
        self._db_manager = db_manager

    def login_pin(self, request: LoginPinRequest) -> LoginPinResponse:
        """Authenticate picker and issue a token."""
        with self._db_manager.session_scope() as db:
            service = AuthService(db)
            picker, token = service.login_pin(request.pin)
            user = PickerInfo(pin=picker.pin, name=picker.name)

        return LoginPinResponse(
            message="Login successful",
            token=token,
            expires_in=service.get_token_expiry_seconds(),
            user=user,
        )


@router.post("/login_pin", response_model=LoginPinResponse)
async def login_pin(
    request: LoginPinRequest,
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """Exchange a picker PIN for a bearer token."""
    controller = AuthController(db_manager)
    return await run_with_deadline(controller.login_pin, request)


@router.get("/me", response_model=CurrentIdentityResponse)
async def get_current_identity_info(identity: Identity = Depends(get_current_identity)):
    """Get the identity carried by the bearer token."""
    return CurrentIdentityResponse(
        message="Authenticated",
        identity=IdentityInfo(
            subject_id=identity.subject_id,
            display_name=identity.display_name,
            issued_at=identity.issued_at,
        ),
    )
