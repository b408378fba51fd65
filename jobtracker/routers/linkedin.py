"""
JobTracker - LinkedIn job import endpoint.

Turns a LinkedIn job posting URL into prefilled job fields. Nothing is
stored; the client shows the draft in the create form.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from ..auth.dependencies import get_auth_service, get_current_active_user
from ..auth.models import User
from ..auth.oauth import LINKEDIN
from ..auth.service import AuthService
from ..database import get_db
from ..errors import AuthenticationError
from ..rate_limit import limiter, rate_limits_disabled, RATE_LIMIT_LINKEDIN
from ..schemas import JobDraft, LinkedInImportRequest
from ..services.linkedin import LinkedInClient

router = APIRouter()


def get_linkedin_client(request: Request) -> LinkedInClient:
    return request.app.state.linkedin_client


@router.post("/scrape-linkedin", response_model=JobDraft)
@limiter.limit(RATE_LIMIT_LINKEDIN, exempt_when=rate_limits_disabled)
async def scrape_linkedin(
    request: Request,
    payload: LinkedInImportRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    auth_service: AuthService = Depends(get_auth_service),
    client: LinkedInClient = Depends(get_linkedin_client)
):
    """Fetch a LinkedIn job posting with the user's LinkedIn token."""
    access_token = await run_in_threadpool(auth_service.get_provider_token, current_user, LINKEDIN, db)
    if not access_token:
        raise AuthenticationError("LinkedIn account not linked. Sign in with LinkedIn first.")

    return await client.import_job(payload.url, access_token)
