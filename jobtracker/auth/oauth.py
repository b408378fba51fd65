"""
JobTracker - OAuth2 Provider Configuration

"Sign in with LinkedIn" through LinkedIn's OpenID Connect endpoints.

Setup:
    - Go to https://www.linkedin.com/developers/apps and create an app
    - Add the "Sign In with LinkedIn using OpenID Connect" product
    - Set authorized redirect URL: {YOUR_URL}/api/auth/oauth/linkedin/callback
    - Set JOBTRACKER_LINKEDIN_CLIENT_ID and JOBTRACKER_LINKEDIN_CLIENT_SECRET in .env

The provider access token is stored on the user's OAuthAccount so the job
import endpoint can call the LinkedIn API on the user's behalf.
"""
from datetime import datetime
from typing import Optional

from authlib.integrations.starlette_client import OAuth

from ..config import Settings

LINKEDIN = "linkedin"


def build_oauth(settings: Settings) -> Optional[OAuth]:
    """
    Build the OAuth registry for this deployment.

    Returns:
        OAuth registry with the linkedin client, or None if not configured
    """
    if not settings.linkedin.oauth_configured:
        return None

    oauth = OAuth()
    oauth.register(
        name=LINKEDIN,
        client_id=settings.linkedin.linkedin_client_id,
        client_secret=settings.linkedin.linkedin_client_secret,
        server_metadata_url=settings.linkedin.linkedin_metadata_url,
        client_kwargs={
            "scope": "openid profile email",
            "token_endpoint_auth_method": "client_secret_post",
        },
    )
    return oauth


def list_configured_providers(oauth: Optional[OAuth]) -> list:
    """List configured OAuth providers."""
    if oauth is None:
        return []
    return [LINKEDIN]


def extract_linkedin_user_info(userinfo: dict) -> dict:
    """Extract user info from a LinkedIn OpenID Connect userinfo response."""
    name = userinfo.get("name")
    if not name:
        name = " ".join(
            part for part in (userinfo.get("given_name"), userinfo.get("family_name")) if part
        ) or None

    return {
        "email": userinfo.get("email"),
        "name": name,
        "provider_user_id": str(userinfo["sub"]) if userinfo.get("sub") else None,
        "email_verified": userinfo.get("email_verified") in (True, "true"),
    }


def token_expiry(token: dict) -> Optional[datetime]:
    """Convert the provider's expires_at (epoch seconds) to a naive UTC datetime."""
    expires_at = token.get("expires_at")
    if not expires_at:
        return None
    return datetime.utcfromtimestamp(int(expires_at))
