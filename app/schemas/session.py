"""
Pydantic schemas for mock-interview session endpoints.
"""
from typing import Any, Optional
from datetime import datetime

from app.schemas.common import APIModel
from app.schemas.question import AnswerFeedback, QuestionResponse


class SessionCreateRequest(APIModel):
    job_id: Any = None
    specific_question_id: Optional[int] = None

    class Config:
        json_schema_extra = {
            "example": {
                "jobId": 12,
                "specificQuestionId": 40
            }
        }


class SessionResponse(APIModel):
    id: int
    user_id: int
    job_id: int
    question_ids: list[int]
    current_question_index: int
    status: str
    total_questions: int
    answered_questions: int
    progress_percentage: int
    started_at: datetime
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class SessionWithQuestion(APIModel):
    session: SessionResponse
    current_question: Optional[QuestionResponse] = None


class SessionStats(APIModel):
    total: int
    completed: int
    active: int
    average_progress: int


class SessionList(APIModel):
    sessions: list[SessionResponse]
    stats: SessionStats


class SubmitAnswerRequest(APIModel):
    session_id: Any = None
    question_id: Any = None
    answer: Any = None


class SessionAnswerFeedback(AnswerFeedback):
    is_last_question: bool = False
    session_completed: bool = False


class SubmitAnswerResult(APIModel):
    session: SessionResponse
    feedback: SessionAnswerFeedback


class StatusUpdateRequest(APIModel):
    status: Any = None


class NavigateRequest(APIModel):
    question_index: Any = None


class SessionProgress(APIModel):
    session_id: int
    current_question_index: int
    total_questions: int
    answered_questions: int
    progress_percentage: int
    status: str
    remaining_questions: int
    estimated_time_remaining: int
