"""
Job record persistence with per-user ownership.

Every read is scoped to the owning user; every write takes the acting user
explicitly. Routers stay thin and delegate here.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from .auth.models import User
from .errors import NotFoundError, PermissionDeniedError
from .models import JobApplication, JobStatus
from .schemas import JobApplicationCreate, JobApplicationUpdate

logger = logging.getLogger("jobtracker.jobs")

# Largest value an INTEGER primary key can hold
MAX_JOB_ID = 2**63 - 1

SORT_COLUMNS = {
    "date": JobApplication.applied_date,
    "applied_date": JobApplication.applied_date,
    "company": JobApplication.company,
    "position": JobApplication.position,
    "created_at": JobApplication.created_at,
}


def user_query(db: Session, user: User):
    """Return a query filtered to the given user's job records."""
    return db.query(JobApplication).filter(JobApplication.user_id == user.id)


def list_jobs(
    db: Session,
    user: User,
    status: Optional[JobStatus] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: str = "desc",
) -> List[JobApplication]:
    """List a user's job records with optional status filter, search and sorting."""
    query = user_query(db, user)

    if status:
        query = query.filter(JobApplication.status == JobStatus(status).value)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                JobApplication.company.ilike(search_term),
                JobApplication.position.ilike(search_term),
                JobApplication.notes.ilike(search_term)
            )
        )

    if sort_by:
        sort_column = SORT_COLUMNS[sort_by]
        if sort_order == "asc":
            query = query.order_by(sort_column.asc(), JobApplication.id.asc())
        else:
            query = query.order_by(sort_column.desc(), JobApplication.id.desc())
    else:
        query = query.order_by(JobApplication.created_at.desc(), JobApplication.id.desc())

    return query.all()


def get_job(db: Session, job_id: int, user: User) -> JobApplication:
    """
    Fetch one of the user's job records, or raise 404.

    Records owned by someone else are reported as missing.
    """
    if not 0 < job_id <= MAX_JOB_ID:
        raise NotFoundError("Job application not found")
    job = user_query(db, user).filter(JobApplication.id == job_id).first()
    if not job:
        raise NotFoundError("Job application not found")
    return job


def get_owned_job(db: Session, job_id: int, user: User) -> JobApplication:
    """
    Fetch a job record the user is about to modify.

    Raises:
        NotFoundError: no record with this id exists
        PermissionDeniedError: the record belongs to another user
    """
    if not 0 < job_id <= MAX_JOB_ID:
        raise NotFoundError("Job application not found")
    job = db.query(JobApplication).filter(JobApplication.id == job_id).first()
    if not job:
        raise NotFoundError("Job application not found")
    if job.user_id != user.id:
        logger.warning(f"User {user.id} attempted to modify job {job_id} owned by user {job.user_id}")
        raise PermissionDeniedError("You do not have permission to modify this job application")
    return job


def create_job(db: Session, job: JobApplicationCreate, *, owner: User) -> JobApplication:
    """Persist a new job record owned by `owner`."""
    data = job.model_dump()
    data["status"] = (data["status"] or JobStatus.APPLIED).value
    if data["applied_date"] is None:
        del data["applied_date"]

    db_job = JobApplication(**data, user_id=owner.id)
    db.add(db_job)
    db.commit()
    db.refresh(db_job)
    logger.info(f"User {owner.id} created job application {db_job.id}")
    return db_job


def replace_job(db: Session, job_id: int, job: JobApplicationCreate, user: User) -> JobApplication:
    """Replace every editable field of an owned job record (PUT semantics)."""
    db_job = get_owned_job(db, job_id, user)

    data = job.model_dump()
    data["status"] = (data["status"] or JobStatus.APPLIED).value
    if data["applied_date"] is None:
        # Keep the original application date rather than resetting it
        del data["applied_date"]

    for key, value in data.items():
        setattr(db_job, key, value)

    db.commit()
    db.refresh(db_job)
    return db_job


def update_job(db: Session, job_id: int, job: JobApplicationUpdate, user: User) -> JobApplication:
    """Change only the fields present in the request (PATCH semantics)."""
    db_job = get_owned_job(db, job_id, user)

    update_data = job.model_dump(exclude_unset=True)
    if "status" in update_data:
        update_data["status"] = JobStatus(update_data["status"]).value

    for key, value in update_data.items():
        setattr(db_job, key, value)

    db.commit()
    db.refresh(db_job)
    return db_job


def delete_job(db: Session, job_id: int, user: User) -> None:
    db_job = get_owned_job(db, job_id, user)
    db.delete(db_job)
    db.commit()
    logger.info(f"User {user.id} deleted job application {job_id}")


def job_stats(db: Session, user: User) -> Dict[str, object]:
    """Count a user's job records, in total and per status."""
    by_status = {s.value: 0 for s in JobStatus}
    counts = user_query(db, user).with_entities(
        JobApplication.status, func.count(JobApplication.id)
    ).group_by(JobApplication.status).all()
    for status, count in counts:
        by_status[status] = count

    return {"total": sum(by_status.values()), "by_status": by_status}
