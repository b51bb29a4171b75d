"""
==============================================================================
Core Package
==============================================================================

Core utilities and infrastructure for the application.

Modules:
--------
- exceptions: AppException hierarchy, envelope handlers, factory functions
- security: SecurityManager for JWT issuance/verification, Identity claim
- dependencies: FastAPI dependency injection functions
- deadline: bounded deadline around blocking storage calls

Usage:
------
    from picklist.core import exceptions
    raise exceptions.item_not_found("42")

==============================================================================
"""

from .exceptions import (
    AppException,
    InvalidRequest,
    ItemNotFound,
    InvalidTransition,
    UpdateVerificationFailed,
    StorageUnavailable,
    AuthenticationError,
    register_exception_handlers,
)
from .security import Identity, SecurityManager, get_security_manager
from .dependencies import (
    AuthenticationManager,
    get_current_identity,
    get_db,
    get_db_manager,
)
from .deadline import run_with_deadline

__all__ = [
    # Exceptions
    "AppException",
    "InvalidRequest",
    "ItemNotFound",
    "InvalidTransition",
    "UpdateVerificationFailed",
    "StorageUnavailable",
    "AuthenticationError",
    "register_exception_handlers",
    # Security
    "Identity",
    "SecurityManager",
    "get_security_manager",
    # Dependencies
    "AuthenticationManager",
    "get_current_identity",
    "get_db",
    "get_db_manager",
    # Concurrency
    "run_with_deadline",
]
