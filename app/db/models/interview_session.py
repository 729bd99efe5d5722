"""
InterviewSession model for mock-interview runs.
"""
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, JSON, CheckConstraint, text
from sqlalchemy.sql import func
from app.db.base import Base


class SessionStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class InterviewSession(Base):
    """
    One mock-interview run through an ordered list of questions.

    question_ids keeps the order the questions are asked in. The session
    references the questions but does not own them.
    """
    __tablename__ = "interview_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("job_applications.id"), nullable=False, index=True)

    question_ids = Column(JSON, nullable=False, default=list)
    current_question_index = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=SessionStatus.ACTIVE.value, index=True)
    total_questions = Column(Integer, nullable=False)
    answered_questions = Column(Integer, nullable=False, default=0)

    started_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("total_questions >= 1", name="ck_interview_sessions_total_questions"),
        CheckConstraint("current_question_index >= 0", name="ck_interview_sessions_current_index"),
        # At most one active session per (user, job)
        Index(
            "uq_sessions_one_active_per_job",
            "user_id",
            "job_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    @property
    def progress_percentage(self) -> int:
        if not self.total_questions:
            return 0
        return round(self.answered_questions / self.total_questions * 100)

    @property
    def remaining_questions(self) -> int:
        return self.total_questions - self.answered_questions

    def __repr__(self):
        return f"<InterviewSession(id={self.id}, job_id={self.job_id}, status='{self.status}')>"
