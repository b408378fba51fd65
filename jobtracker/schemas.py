"""
JobTracker - Pydantic schemas for request/response validation.

Defines data models for API request bodies and responses,
including validation rules and serialization configuration.
"""
from pydantic import AliasChoices, BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Dict, Optional
import re

from .models import JobStatus


# --- Helper validators ---

URL_PATTERN = re.compile(
    r'^https?://'  # http:// or https://
    r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,63}\.?|'  # domain
    r'localhost|'  # localhost
    r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # or IP
    r'(?::\d+)?'  # optional port
    r'(?:/?|[/?]\S+)$', re.IGNORECASE)

LINKEDIN_JOB_PATTERN = re.compile(
    r'^https?://(?:[a-z]{2,3}\.|www\.)?linkedin\.com/jobs/view/'
    r'(?:[^/?#]*?-)?(?P<job_id>\d+)/?(?:[?#].*)?$', re.IGNORECASE)


def validate_url(url: Optional[str]) -> Optional[str]:
    """Validate URL format if provided."""
    if url is None or url == "":
        return None
    if not URL_PATTERN.match(url):
        raise ValueError('Invalid URL format')
    return url


def validate_linkedin_job_url(url: str) -> str:
    """Validate that a URL points at a LinkedIn job posting."""
    if not LINKEDIN_JOB_PATTERN.match(url.strip()):
        raise ValueError('Must be a LinkedIn job URL, e.g. https://www.linkedin.com/jobs/view/1234567890')
    return url.strip()


def require_text(value: Optional[str], field_name: str) -> Optional[str]:
    """Reject values that are empty once surrounding whitespace is ignored."""
    if value is None or not value.strip():
        raise ValueError(f'{field_name} is required')
    return value


# --- Job Application Schemas ---

class JobApplicationBase(BaseModel):
    company: str = Field(..., max_length=200)
    position: str = Field(..., max_length=200)
    location: Optional[str] = Field(None, max_length=200)
    status: Optional[JobStatus] = None
    applied_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("applied_date", "appliedDate")
    )
    notes: Optional[str] = Field(None, max_length=5000)
    url: Optional[str] = Field(None, max_length=1000)

    @field_validator('company', 'position')
    @classmethod
    def validate_required_text(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator('url')
    @classmethod
    def validate_job_url(cls, v):
        return validate_url(v)


class JobApplicationCreate(JobApplicationBase):
    pass


class JobApplicationUpdate(BaseModel):
    """Partial update: only the fields present in the body are changed."""
    company: Optional[str] = Field(None, max_length=200)
    position: Optional[str] = Field(None, max_length=200)
    location: Optional[str] = Field(None, max_length=200)
    status: Optional[JobStatus] = None
    applied_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("applied_date", "appliedDate")
    )
    notes: Optional[str] = Field(None, max_length=5000)
    url: Optional[str] = Field(None, max_length=1000)

    # Validators only run on fields present in the body, so None below
    # means an explicit null for a column that cannot be empty.
    @field_validator('company', 'position')
    @classmethod
    def validate_required_text(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator('status', 'applied_date')
    @classmethod
    def validate_not_null(cls, v, info):
        if v is None:
            raise ValueError(f'{info.field_name} cannot be empty')
        return v

    @field_validator('url')
    @classmethod
    def validate_job_url(cls, v):
        return validate_url(v)


class JobApplicationResponse(BaseModel):
    id: int
    user_id: int
    company: str
    position: str
    location: Optional[str]
    status: JobStatus
    applied_date: date
    notes: Optional[str]
    url: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JobStats(BaseModel):
    total: int
    by_status: Dict[str, int]


# --- LinkedIn Import Schemas ---

class LinkedInImportRequest(BaseModel):
    url: str = Field(..., max_length=1000)

    @field_validator('url')
    @classmethod
    def validate_linkedin(cls, v):
        return validate_linkedin_job_url(v)


class JobDraft(BaseModel):
    """Prefilled job fields for the create form; not persisted."""
    company: Optional[str] = None
    position: Optional[str] = None
    location: Optional[str] = None
    url: str
    notes: Optional[str] = None
