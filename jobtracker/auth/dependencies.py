"""
JobTracker - Authentication Dependencies

FastAPI dependencies for route protection and user injection.

Usage in routers:
    from ..auth.dependencies import get_current_active_user

    @router.get("/protected")
    def protected_route(current_user: User = Depends(get_current_active_user)):
        return {"user_id": current_user.id}

Dependency hierarchy:
    get_current_user_optional - Returns None instead of raising 401
    get_current_user          - Base: resolves the user through the configured verifier
    get_current_active_user   - Adds: user must be active
"""
from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session
import logging

from ..config import Settings
from ..database import get_db
from ..errors import AuthenticationError, PermissionDeniedError
from .models import User
from .service import AuthService
from .verifiers import CredentialVerifier

logger = logging.getLogger("jobtracker.auth")


# -----------------------------------------------------------------------------
# App State Accessors
# -----------------------------------------------------------------------------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_verifier(request: Request) -> CredentialVerifier:
    return request.app.state.verifier


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


# -----------------------------------------------------------------------------
# Core Authentication Dependencies
# -----------------------------------------------------------------------------

def get_current_user_optional(
    request: Request,
    db: Session = Depends(get_db),
    verifier: CredentialVerifier = Depends(get_verifier)
) -> Optional[User]:
    """
    Optionally get the current user, returning None if not authenticated.

    Used by routes that answer both signed-in and anonymous callers,
    such as the auth status check.
    """
    return verifier.resolve(request, db)


async def get_current_user(
    current_user: Optional[User] = Depends(get_current_user_optional),
    verifier: CredentialVerifier = Depends(get_verifier)
) -> User:
    """
    Get the current authenticated user.

    Raises:
        AuthenticationError: 401 if no valid credential was presented
    """
    if current_user is None:
        logger.debug("Request without a valid credential")
        raise AuthenticationError("Not authenticated", headers=verifier.challenge_headers)
    return current_user


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get the current user and verify they are active.

    Use this dependency for most protected routes.

    Raises:
        PermissionDeniedError: 403 if user account is deactivated
    """
    if not current_user.is_active:
        logger.warning(f"Inactive user {current_user.id} attempted access")
        raise PermissionDeniedError("Account is deactivated")
    return current_user
