"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.

All models must be imported here to be included in database migrations and table creation.
"""
from app.db.models.user import User
from app.db.models.job_application import (
    JobApplication,
    JobType,
    ExperienceLevel,
    ApplicationStatus,
    DEFAULT_JOB_DESCRIPTION,
)
from app.db.models.question import Question, QuestionType, QuestionStatus, QuestionDifficulty
from app.db.models.interview_session import InterviewSession, SessionStatus
from app.db.models.discussion import Discussion, DiscussionMessage

__all__ = [
    "User",
    "JobApplication",
    "JobType",
    "ExperienceLevel",
    "ApplicationStatus",
    "DEFAULT_JOB_DESCRIPTION",
    "Question",
    "QuestionType",
    "QuestionStatus",
    "QuestionDifficulty",
    "InterviewSession",
    "SessionStatus",
    "Discussion",
    "DiscussionMessage",
]
