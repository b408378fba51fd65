"""
JobTracker - Authentication Module

Email/password accounts, LinkedIn sign-in, and a single credential verifier
(bearer token or server-side session) chosen per deployment.

Usage:
    from jobtracker.auth import get_current_active_user, User

    @router.get("/protected")
    def protected_route(current_user: User = Depends(get_current_active_user)):
        return {"user_id": current_user.id}

Configuration (environment variables):
    JOBTRACKER_AUTH_STRATEGY=bearer|session
    JOBTRACKER_SECRET_KEY=<key>              - Signing key (required in production)
    JOBTRACKER_ACCESS_TOKEN_EXPIRE_MINUTES=1440
    JOBTRACKER_SESSION_EXPIRE_DAYS=7
"""

# Models
from .models import User, UserSession, OAuthAccount

# Service
from .service import AuthService

# Verifiers
from .verifiers import CredentialVerifier, BearerTokenVerifier, SessionVerifier, build_verifier

# Dependencies (for use in routers)
from .dependencies import (
    get_current_user,
    get_current_active_user,
    get_current_user_optional,
)

# Router (for mounting in main.py)
from .router import router

__all__ = [
    # Models
    "User",
    "UserSession",
    "OAuthAccount",
    # Service
    "AuthService",
    # Verifiers
    "CredentialVerifier",
    "BearerTokenVerifier",
    "SessionVerifier",
    "build_verifier",
    # Dependencies
    "get_current_user",
    "get_current_active_user",
    "get_current_user_optional",
    # Router
    "router",
]
