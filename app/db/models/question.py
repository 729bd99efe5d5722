"""
Question model for interview practice prompts attached to a job.
"""
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, JSON
from sqlalchemy.sql import func
from app.db.base import Base


class QuestionType(str, enum.Enum):
    BEHAVIORAL = "behavioral"
    TECHNICAL = "technical"


class QuestionStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class QuestionDifficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Question(Base):
    """
    One interview prompt.

    Behavioral questions always carry a description. Technical questions point
    at an external problem through external_url and carry a difficulty.
    """
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("job_applications.id"), nullable=False, index=True)

    type = Column(String(20), nullable=False)  # QuestionType value
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    difficulty = Column(String(10), nullable=True)  # QuestionDifficulty value
    tags = Column(JSON, nullable=False, default=list)
    external_url = Column(String, nullable=True)
    status = Column(String(20), nullable=False, default=QuestionStatus.PENDING.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_questions_user_job_type", "user_id", "job_id", "type"),
    )

    def __repr__(self):
        return f"<Question(id={self.id}, job_id={self.job_id}, type='{self.type}', status='{self.status}')>"
