"""
JobTracker - Authentication Router

API endpoints for user authentication. Credentials are issued through the
deployment's verifier: a bearer token in the response body, or a session
cookie.

Endpoints:
    POST /api/auth/register                  - Email/password registration
    POST /api/auth/login                     - Email/password login
    POST /api/auth/logout                    - Revoke the current credential
    GET  /api/auth/status                    - {authenticated, user} check
    GET  /api/auth/me                        - Get current user
    GET  /api/auth/oauth/linkedin            - Redirect to LinkedIn
    GET  /api/auth/oauth/linkedin/callback   - Finish LinkedIn sign-in
"""
import json
import logging

from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import AuthenticationError, NotFoundError
from ..rate_limit import limiter, rate_limits_disabled, RATE_LIMIT_AUTH
from .dependencies import (
    get_auth_service,
    get_current_active_user,
    get_current_user_optional,
    get_verifier,
)
from .models import User
from .oauth import LINKEDIN, extract_linkedin_user_info, list_configured_providers, token_expiry
from .schemas import AuthResponse, AuthStatus, UserCreate, UserLogin, UserResponse
from .service import AuthService
from .verifiers import CredentialVerifier

logger = logging.getLogger("jobtracker.auth")
router = APIRouter()


# -----------------------------------------------------------------------------
# Auth Status & Info
# -----------------------------------------------------------------------------

@router.get("/status", response_model=AuthStatus)
def get_auth_status(
    request: Request,
    current_user: User = Depends(get_current_user_optional),
    verifier: CredentialVerifier = Depends(get_verifier)
):
    """
    Report whether the caller is signed in.

    Never fails with 401: anonymous callers get authenticated=false so the
    client can decide whether to show the login view.
    """
    return AuthStatus(
        authenticated=current_user is not None,
        user=_user_to_response(current_user) if current_user else None,
        strategy=verifier.name,
        oauth_providers=list_configured_providers(request.app.state.oauth),
    )


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_active_user)):
    """Get the current authenticated user's profile."""
    return _user_to_response(current_user)


# -----------------------------------------------------------------------------
# Registration & Login
# -----------------------------------------------------------------------------

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMIT_AUTH, exempt_when=rate_limits_disabled)
def register(
    request: Request,
    response: Response,
    user_data: UserCreate,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
    verifier: CredentialVerifier = Depends(get_verifier)
):
    """
    Register a new user with email and password, and sign them in.

    Returns the created user plus a token (bearer strategy) or a session
    cookie (session strategy).
    """
    user = auth_service.create_user(
        email=user_data.email,
        password=user_data.password,
        name=user_data.name,
        db=db
    )
    token = verifier.issue(user, db, response)

    return AuthResponse(
        user=_user_to_response(user),
        token=token,
        message="Registration successful"
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit(RATE_LIMIT_AUTH, exempt_when=rate_limits_disabled)
def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
    verifier: CredentialVerifier = Depends(get_verifier)
):
    """Login with email and password."""
    user = auth_service.authenticate_user(
        email=credentials.email,
        password=credentials.password,
        db=db
    )

    if not user:
        raise AuthenticationError(
            "Incorrect email or password",
            headers=verifier.challenge_headers
        )

    token = verifier.issue(user, db, response)

    return AuthResponse(
        user=_user_to_response(user),
        token=token,
        message="Login successful"
    )


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
    verifier: CredentialVerifier = Depends(get_verifier)
):
    """
    Logout by revoking the current credential.

    Session strategy: the session row is deleted and the cookie cleared.
    Bearer strategy: tokens are stateless, so the client drops its copy.
    """
    verifier.revoke(request, db, response)
    logger.info(f"User {current_user.id} logged out")
    return {"message": "Successfully logged out"}


# -----------------------------------------------------------------------------
# OAuth2 (LinkedIn)
# -----------------------------------------------------------------------------

def _get_linkedin_client(request: Request):
    oauth = request.app.state.oauth
    if oauth is None:
        raise NotFoundError(
            "OAuth provider 'linkedin' is not configured. Set JOBTRACKER_LINKEDIN_CLIENT_ID "
            "and JOBTRACKER_LINKEDIN_CLIENT_SECRET environment variables."
        )
    return oauth.create_client(LINKEDIN)


@router.get("/oauth/linkedin")
async def oauth_login(request: Request):
    """Redirect to LinkedIn for authentication."""
    client = _get_linkedin_client(request)
    redirect_uri = request.url_for("oauth_callback")
    return await client.authorize_redirect(request, str(redirect_uri))


@router.get("/oauth/linkedin/callback")
async def oauth_callback(
    request: Request,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
    verifier: CredentialVerifier = Depends(get_verifier)
):
    """
    Handle the OAuth callback from LinkedIn.

    Exchanges the authorization code for tokens, links or creates the local
    user and signs them in with the configured verifier.
    """
    client = _get_linkedin_client(request)

    try:
        token = await client.authorize_access_token(request)
    except OAuthError as e:
        logger.warning(f"LinkedIn sign-in failed: {e.error}")
        raise AuthenticationError(f"LinkedIn authentication failed: {e.error}")

    userinfo = token.get("userinfo")
    if not userinfo:
        userinfo = await client.userinfo(token=token)
    info = extract_linkedin_user_info(dict(userinfo))

    if not info.get("email") or not info.get("provider_user_id"):
        raise AuthenticationError("Could not retrieve email from LinkedIn")

    user = await run_in_threadpool(
        auth_service.get_or_create_oauth_user,
        email=info["email"],
        name=info.get("name"),
        provider=LINKEDIN,
        provider_user_id=info["provider_user_id"],
        access_token=token.get("access_token"),
        expires_at=token_expiry(token),
        db=db,
        email_verified=info["email_verified"]
    )

    if verifier.name == "session":
        response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
        await run_in_threadpool(verifier.issue, user, db, response)
        return response

    # OAuth callbacks arrive via browser redirect, so the bearer token is
    # handed to the client through localStorage before going home.
    issued = verifier.issue(user, db, Response())
    html_content = f"""<!DOCTYPE html>
<html><head><title>Signing in...</title></head>
<body>
<p>Signing in, please wait...</p>
<script>
localStorage.setItem('jobtracker_access_token', {json.dumps(issued.access_token)});
localStorage.setItem('jobtracker_token_expires', String(Date.now() + {issued.expires_in} * 1000));
window.location.href = '/';
</script>
</body></html>"""
    return HTMLResponse(content=html_content)


# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------

def _user_to_response(user: User) -> UserResponse:
    """Convert User model to UserResponse schema."""
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        created_at=user.created_at,
        has_password=user.hashed_password is not None
    )
