"""
Job application service: CRUD, search and statistics, scoped to one user.
"""
import logging
from typing import Optional

from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, PersistenceError, ValidationError
from app.db.models.interview_session import InterviewSession
from app.db.models.job_application import JobApplication
from app.db.session import commit_or_raise
from app.schemas.job import JobApplicationCreate, JobApplicationUpdate
from app.services import question_store

logger = logging.getLogger(__name__)

TOP_COMPANIES_LIMIT = 5

# Columns that may be changed but never cleared
NON_NULLABLE_FIELDS = {"title", "company", "description", "requirements", "skills", "application_status"}


def get_job(db: Session, job_id: int, user_id: int) -> JobApplication:
    job = (
        db.query(JobApplication)
        .filter(JobApplication.id == job_id, JobApplication.user_id == user_id)
        .first()
    )
    if job is None:
        raise NotFoundError("Job application not found")
    return job


def create_job(db: Session, user_id: int, data: JobApplicationCreate) -> JobApplication:
    job = JobApplication(user_id=user_id, **data.model_dump())
    db.add(job)
    commit_or_raise(db, "create job application")
    db.refresh(job)
    logger.info(f"Job application created: job_id={job.id}, user_id={user_id}, company={job.company}")
    return job


def list_jobs(db: Session, user_id: int, page: int = 1, limit: int = 20) -> tuple[list[JobApplication], int]:
    query = db.query(JobApplication).filter(JobApplication.user_id == user_id)
    total = query.count()
    jobs = (
        query.order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jobs, total


def search_jobs(db: Session, user_id: int, term: Optional[str], limit: int = 20) -> list[JobApplication]:
    """Case-insensitive match on title, company, description, location and skills."""
    if not term or not term.strip():
        raise ValidationError("Search term is required")

    pattern = f"%{term.strip()}%"
    return (
        db.query(JobApplication)
        .filter(
            JobApplication.user_id == user_id,
            or_(
                JobApplication.title.ilike(pattern),
                JobApplication.company.ilike(pattern),
                JobApplication.description.ilike(pattern),
                JobApplication.location.ilike(pattern),
                cast(JobApplication.skills, String).ilike(pattern),
            ),
        )
        .order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
        .limit(limit)
        .all()
    )


def jobs_by_company(db: Session, user_id: int, company: Optional[str]) -> list[JobApplication]:
    if not company or not company.strip():
        raise ValidationError("Company name is required")

    return (
        db.query(JobApplication)
        .filter(JobApplication.user_id == user_id, JobApplication.company.ilike(f"%{company.strip()}%"))
        .order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
        .all()
    )


def get_statistics(db: Session, user_id: int) -> dict:
    base = db.query(JobApplication).filter(JobApplication.user_id == user_id)
    total = base.count()

    company_count = func.count(JobApplication.id).label("count")
    companies = (
        db.query(JobApplication.company, company_count)
        .filter(JobApplication.user_id == user_id)
        .group_by(JobApplication.company)
        .order_by(company_count.desc(), JobApplication.company)
        .all()
    )

    by_status = dict(
        db.query(JobApplication.application_status, func.count(JobApplication.id))
        .filter(JobApplication.user_id == user_id)
        .group_by(JobApplication.application_status)
        .all()
    )

    return {
        "total_applications": total,
        "total_companies": len(companies),
        "top_companies": [
            {"company": company, "count": count} for company, count in companies[:TOP_COMPANIES_LIMIT]
        ],
        "by_status": by_status,
    }


def update_job(db: Session, job_id: int, user_id: int, data: JobApplicationUpdate) -> JobApplication:
    job = get_job(db, job_id, user_id)
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field in NON_NULLABLE_FIELDS:
            raise ValidationError(f"{field} cannot be empty")
    for field, value in changes.items():
        setattr(job, field, value)
    commit_or_raise(db, "update job application")
    db.refresh(job)
    logger.info(f"Job application updated: job_id={job.id}, user_id={user_id}")
    return job


def delete_job(db: Session, job_id: int, user_id: int) -> None:
    """Delete a job together with its sessions and questions."""
    job = get_job(db, job_id, user_id)
    try:
        sessions_deleted = (
            db.query(InterviewSession)
            .filter(InterviewSession.job_id == job_id, InterviewSession.user_id == user_id)
            .delete(synchronize_session=False)
        )
        questions_deleted = question_store.delete_by_job_id(db, job_id, user_id, commit=False)
        db.delete(job)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete job application: {e}", exc_info=True)
        raise PersistenceError("Failed to delete job application") from e

    logger.info(
        f"Job application deleted: job_id={job_id}, sessions={sessions_deleted}, questions={questions_deleted}"
    )
