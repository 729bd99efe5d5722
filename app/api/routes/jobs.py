"""
Job application endpoints.

Every endpoint is scoped to the authenticated user.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user
from app.core.exceptions import PrepWiseError
from app.db.models.user import User
from app.db.session import get_db
from app.schemas.common import Envelope, MessageResponse
from app.schemas.job import (
    JobApplicationCreate,
    JobApplicationList,
    JobApplicationResponse,
    JobApplicationUpdate,
    JobStatistics,
)
from app.services import job_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=Envelope[JobApplicationResponse])
def create_job(
    payload: JobApplicationCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    job = job_service.create_job(db, user.id, payload)
    return Envelope(message="Job application created successfully", data=JobApplicationResponse.model_validate(job))


@router.get("", response_model=Envelope[JobApplicationList])
def list_jobs(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the user's job applications, newest first."""
    try:
        jobs, total = job_service.list_jobs(db, user.id, page, limit)
        return Envelope(data=JobApplicationList(
            job_applications=[JobApplicationResponse.model_validate(job) for job in jobs],
            total=total,
            page=page,
            limit=limit,
        ))
    except Exception as e:
        logger.error(f"Failed to list jobs: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch job applications"
        )


@router.get("/search", response_model=Envelope[list[JobApplicationResponse]])
def search_jobs(
    q: Optional[str] = Query(None, description="Text to match in title, company, description, location or skills"),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    jobs = job_service.search_jobs(db, user.id, q, limit)
    return Envelope(data=[JobApplicationResponse.model_validate(job) for job in jobs])


@router.get("/by-company", response_model=Envelope[list[JobApplicationResponse]])
def jobs_by_company(
    company: Optional[str] = Query(None, description="Company name (partial match)"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    jobs = job_service.jobs_by_company(db, user.id, company)
    return Envelope(data=[JobApplicationResponse.model_validate(job) for job in jobs])


@router.get("/statistics", response_model=Envelope[JobStatistics])
def job_statistics(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return Envelope(data=JobStatistics.model_validate(job_service.get_statistics(db, user.id)))


@router.get("/{job_id}", response_model=Envelope[JobApplicationResponse])
def get_job(
    job_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    job = job_service.get_job(db, job_id, user.id)
    return Envelope(data=JobApplicationResponse.model_validate(job))


@router.put("/{job_id}", response_model=Envelope[JobApplicationResponse])
def update_job(
    job_id: int,
    payload: JobApplicationUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Partial update: only fields present in the body change."""
    try:
        job = job_service.update_job(db, job_id, user.id, payload)
        return Envelope(message="Job application updated successfully", data=JobApplicationResponse.model_validate(job))
    except (HTTPException, PrepWiseError):
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to update job {job_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update job application"
        )


@router.delete("/{job_id}", response_model=MessageResponse)
def delete_job(
    job_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    job_service.delete_job(db, job_id, user.id)
    return MessageResponse(message="Job application deleted successfully")
