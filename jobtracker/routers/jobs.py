"""
JobTracker - CRUD API for job applications.

Every endpoint requires a signed-in user and only ever touches that user's
records. Modifying someone else's record is a 403; reading it is a 404.
"""
from fastapi import APIRouter, Depends, Query, Request, status as http_status
from sqlalchemy.orm import Session
from typing import List, Optional

from .. import crud
from ..auth.dependencies import get_current_active_user
from ..auth.models import User
from ..database import get_db
from ..models import JobStatus
from ..rate_limit import limiter, rate_limits_disabled, RATE_LIMIT_GENERAL
from ..schemas import (
    JobApplicationCreate, JobApplicationUpdate, JobApplicationResponse, JobStats
)

router = APIRouter()


@router.get("", response_model=List[JobApplicationResponse])
def list_jobs(
    status: Optional[JobStatus] = None,
    search: Optional[str] = Query(None, max_length=200),
    sort_by: Optional[str] = Query(None, pattern="^(date|applied_date|company|position|created_at)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """List the current user's job applications with optional filter, search and sorting."""
    return crud.list_jobs(
        db, current_user,
        status=status,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order
    )


@router.get("/stats", response_model=JobStats)
def get_job_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Count the current user's job applications per status."""
    return crud.job_stats(db, current_user)


@router.get("/{job_id}", response_model=JobApplicationResponse)
def get_job(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Get a specific job application."""
    return crud.get_job(db, job_id, current_user)


@router.post("", response_model=JobApplicationResponse, status_code=http_status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMIT_GENERAL, exempt_when=rate_limits_disabled)
def create_job(
    request: Request,
    job: JobApplicationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Create a new job application owned by the current user."""
    return crud.create_job(db, job, owner=current_user)


@router.put("/{job_id}", response_model=JobApplicationResponse)
@limiter.limit(RATE_LIMIT_GENERAL, exempt_when=rate_limits_disabled)
def replace_job(
    request: Request,
    job_id: int,
    job: JobApplicationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Replace a job application."""
    return crud.replace_job(db, job_id, job, current_user)


@router.patch("/{job_id}", response_model=JobApplicationResponse)
@limiter.limit(RATE_LIMIT_GENERAL, exempt_when=rate_limits_disabled)
def update_job(
    request: Request,
    job_id: int,
    job: JobApplicationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Update some fields of a job application."""
    return crud.update_job(db, job_id, job, current_user)


@router.delete("/{job_id}")
@limiter.limit(RATE_LIMIT_GENERAL, exempt_when=rate_limits_disabled)
def delete_job(
    request: Request,
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Delete a job application."""
    crud.delete_job(db, job_id, current_user)
    return {"message": "Job application deleted successfully", "id": job_id}
