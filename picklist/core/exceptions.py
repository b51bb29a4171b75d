"""
Application Exception Handling

AppException hierarchy for all application errors with FastAPI integration.
Every error is rendered in the same envelope as successful responses:

    {"return_code": "ITEM_NOT_FOUND", "message": "...", "timestamp": "..."}
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class AppException(Exception):
    """
    Root application exception.

    Subclasses fix the failure kind; ``code`` is the ``return_code`` sent to
    clients and may vary within a kind (e.g. MISSING_FIELDS vs INVALID_ACTION
    are both input errors).

    Error Codes:
        Authentication:
            - UNAUTHORIZED (401)
            - FORBIDDEN (403)
            - INVALID_PIN (401)

        Input:
            - MISSING_FIELDS (400)
            - INVALID_ACTION (400)
            - INVALID_REQUEST (400)

        Picks:
            - ITEM_NOT_FOUND (404)
            - ITEM_NOT_PICKABLE (409)
            - INVALID_TRANSITION (409)

        Infrastructure:
            - STORAGE_ERROR (503)
            - SERVER_ERROR (500)
    """

    default_code = "SERVER_ERROR"
    default_status = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable return code (defaults per subclass)
            status_code: HTTP status code (defaults per subclass)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the response envelope."""
        error_dict = {
            "return_code": self.code,
            "message": self.message,
            "timestamp": self.timestamp,
        }

        if self.details:
            error_dict["details"] = self.details

        return error_dict


class InvalidRequest(AppException):
    """Malformed or missing input. Rejected before storage is touched."""
    default_code = "INVALID_REQUEST"
    default_status = 400


class ItemNotFound(AppException):
    """No eligible row: missing, soft-deleted, or a sentinel order."""
    default_code = "ITEM_NOT_FOUND"
    default_status = 404


class InvalidTransition(AppException):
    """Item state does not satisfy the action's precondition."""
    default_code = "ITEM_NOT_PICKABLE"
    default_status = 409


class UpdateVerificationFailed(InvalidTransition):
    """Conditional update matched no row although the precondition now holds."""
    default_code = "INVALID_TRANSITION"
    default_status = 409


class StorageUnavailable(AppException):
    """Store unreachable, query failed, or deadline expired. Safe to retry reads."""
    default_code = "STORAGE_ERROR"
    default_status = 503


class AuthenticationError(AppException):
    """Missing, invalid or expired credential."""
    default_code = "UNAUTHORIZED"
    default_status = 401


# ============================================
# FASTAPI HANDLERS
# ============================================

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert AppException to the JSON envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Render pydantic validation failures in the same envelope.

    Absent or blank required fields map to MISSING_FIELDS; a bad ``action``
    alone maps to INVALID_ACTION; anything else is INVALID_REQUEST.
    """
    errors = exc.errors()
    missing_types = {"missing", "string_too_short"}

    fields = [
        ".".join(str(part) for part in error.get("loc", ())[1:])
        for error in errors
    ]

    if any(error.get("type") in missing_types for error in errors):
        exc_out = missing_fields(fields)
    elif fields and all(field == "action" for field in fields):
        exc_out = invalid_action()
    else:
        exc_out = InvalidRequest(
            "Request body is invalid",
            details={"fields": fields}
        )

    logger.debug(f"Request validation failed on {request.url.path}: {fields}")
    return JSONResponse(status_code=exc_out.status_code, content=exc_out.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log with traceback, return a generic envelope."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    error = AppException("Internal server error occurred")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def unauthorized() -> AppException:
    """Create missing token exception."""
    return AuthenticationError("Access token required", "UNAUTHORIZED", 401)


def forbidden(message: str = "Invalid or expired token") -> AppException:
    """Create invalid token exception."""
    return AuthenticationError(message, "FORBIDDEN", 403)


def invalid_pin(message: str = "Invalid PIN") -> AppException:
    """Create invalid PIN exception."""
    return AuthenticationError(message, "INVALID_PIN", 401)


def missing_fields(fields: Optional[list] = None) -> AppException:
    """Create missing required fields exception."""
    details = {"fields": fields} if fields else {}
    return InvalidRequest(
        "Required fields are missing",
        "MISSING_FIELDS",
        details=details
    )


def invalid_action(action: Optional[str] = None) -> AppException:
    """Create unknown action exception."""
    details = {"action": action} if action else {}
    return InvalidRequest(
        'Action must be either "pick" or "unpick"',
        "INVALID_ACTION",
        details=details
    )


def item_not_found(item_id: Optional[str] = None) -> AppException:
    """Create item not found exception."""
    details = {"id": item_id} if item_id else {}
    return ItemNotFound(
        "Item not found or not available for picking",
        details=details
    )


def item_not_pickable(item_id: str, action: str) -> AppException:
    """Create precondition mismatch exception."""
    if action == "pick":
        message = "Item is not available for picking (already picked or invalid state)"
    else:
        message = "Item is not available for unpicking (not yet picked or invalid state)"
    return InvalidTransition(message, details={"id": item_id, "action": action})


def update_verification_failed(item_id: str, action: str) -> AppException:
    """Create lost-race exception for an unconfirmed conditional update."""
    return UpdateVerificationFailed(
        "Item was changed by another picker, refresh and try again",
        details={"id": item_id, "action": action}
    )


def storage_unavailable(message: str = "Storage is unavailable") -> AppException:
    """Create storage failure exception."""
    return StorageUnavailable(message)
