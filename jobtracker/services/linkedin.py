"""
JobTracker - LinkedIn Job Import

Fetches a job posting from the LinkedIn API with the user's stored OAuth
access token and turns it into a draft job record for the create form.

Provider failures are mapped onto the app's error taxonomy:
    401 from LinkedIn -> 401 (the user must sign in with LinkedIn again)
    429 from LinkedIn -> 429 (quota exhausted)
    anything else     -> 502
"""
import logging
from typing import Optional

import httpx

from ..config import LinkedInSettings
from ..errors import UpstreamError
from ..schemas import LINKEDIN_JOB_PATTERN, JobDraft

logger = logging.getLogger("jobtracker.linkedin")

NOTES_PREVIEW_LENGTH = 200


def extract_job_id(url: str) -> str:
    """Pull the numeric job id out of a LinkedIn job posting URL."""
    match = LINKEDIN_JOB_PATTERN.match(url.strip())
    if not match:
        raise ValueError(f"Not a LinkedIn job URL: {url}")
    return match.group("job_id")


class LinkedInClient:
    """Thin async client for the LinkedIn jobs API."""

    def __init__(self, settings: LinkedInSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.linkedin_api_base_url
        self.timeout = settings.linkedin_timeout
        self._transport = transport

    async def fetch_job(self, job_id: str, access_token: str) -> dict:
        """
        Fetch raw job posting data.

        Raises:
            UpstreamError: LinkedIn rejected the call or could not be reached
        """
        headers = {
            "Authorization": f"Bearer {access_token}",
            "X-Restli-Protocol-Version": "2.0.0",
            "Accept": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport
            ) as client:
                response = await client.get(f"/jobs/{job_id}", headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"LinkedIn request for job {job_id} failed: {e}")
            raise UpstreamError(502, "LinkedIn unavailable", "Could not reach the LinkedIn API")

        if response.status_code == 401:
            raise UpstreamError(401, "LinkedIn authentication failed", "Please re-authenticate with LinkedIn")
        if response.status_code == 429:
            raise UpstreamError(429, "Rate limit exceeded", "Too many requests to LinkedIn API")
        if response.status_code != 200:
            logger.warning(f"LinkedIn returned status {response.status_code} for job {job_id}")
            raise UpstreamError(502, "LinkedIn request failed", f"LinkedIn returned status {response.status_code}")

        return response.json()

    async def import_job(self, url: str, access_token: str) -> JobDraft:
        """Fetch a posting by URL and map it onto job record fields."""
        job_id = extract_job_id(url)
        data = await self.fetch_job(job_id, access_token)
        logger.info(f"Imported LinkedIn job {job_id}")
        return to_job_draft(data, url)


def to_job_draft(data: dict, url: str) -> JobDraft:
    """Map a LinkedIn job payload onto the job record fields."""
    company = data.get("company")
    if isinstance(company, dict):
        company = company.get("name")

    location = data.get("location")
    if isinstance(location, dict):
        location = location.get("name") or location.get("city")

    notes = None
    description = data.get("description")
    if isinstance(description, dict):
        description = description.get("text")
    if description:
        notes = f"Scraped from LinkedIn - {description[:NOTES_PREVIEW_LENGTH]}..."

    return JobDraft(
        company=company,
        position=data.get("title"),
        location=location,
        url=url,
        notes=notes,
    )
