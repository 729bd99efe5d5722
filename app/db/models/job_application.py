"""
JobApplication model for jobs a user is tracking.
"""
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, JSON
from sqlalchemy.sql import func
from app.db.base import Base


class JobType(str, enum.Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    REMOTE = "remote"


class ExperienceLevel(str, enum.Enum):
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    EXECUTIVE = "executive"


class ApplicationStatus(str, enum.Enum):
    SAVED = "saved"
    APPLIED = "applied"
    INTERVIEWING = "interviewing"
    OFFER = "offer"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


DEFAULT_JOB_DESCRIPTION = "Job description not available"


class JobApplication(Base):
    """
    A job posting the user saved or applied to.

    Questions and sessions reference it by id; deleting it does not cascade at
    the database level, the jobs route removes dependents explicitly.
    """
    __tablename__ = "job_applications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    company = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False, default=DEFAULT_JOB_DESCRIPTION)
    location = Column(String(200), nullable=True)
    url = Column(String, nullable=True)
    requirements = Column(JSON, nullable=False, default=list)
    skills = Column(JSON, nullable=False, default=list)
    salary = Column(String(100), nullable=True)
    job_type = Column(String(20), nullable=True)  # JobType value
    experience_level = Column(String(20), nullable=True)  # ExperienceLevel value
    application_status = Column(String(20), nullable=False, default=ApplicationStatus.SAVED.value)
    date_applied = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_job_applications_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<JobApplication(id={self.id}, company='{self.company}', title='{self.title}')>"
