"""
Pydantic schemas for question endpoints and the answer feedback payload.
"""
from typing import Any, Optional
from datetime import datetime
from pydantic import Field

from app.db.models.question import QuestionType
from app.schemas.common import APIModel


class QuestionCreate(APIModel):
    """
    Input for the question store.

    Types are deliberately loose: the store performs the domain checks so API
    callers and the generation flows get the same error messages.
    """
    job_id: Any = None
    type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    difficulty: Optional[str] = None
    tags: Optional[list[str]] = None
    external_url: Optional[str] = None


class QuestionResponse(APIModel):
    id: int
    user_id: int
    job_id: int
    type: str
    title: str
    description: Optional[str] = None
    difficulty: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    external_url: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime


class ProgressCount(APIModel):
    total: int = 0
    completed: int = 0


class QuestionProgress(APIModel):
    technical: ProgressCount
    behavioral: ProgressCount
    overall: ProgressCount


class GenerateQuestionsRequest(APIModel):
    job_id: int = Field(..., description="Job application to generate questions for")
    types: list[QuestionType] = Field(
        default_factory=lambda: [QuestionType.BEHAVIORAL, QuestionType.TECHNICAL],
        min_length=1,
    )
    count: int = Field(10, ge=1, le=25, description="Total questions across all types")


class GeneratedQuestions(APIModel):
    questions: list[QuestionResponse]
    total: int


class BehavioralAnswerRequest(APIModel):
    question_id: int
    answer: Any = None


class AnswerFeedback(APIModel):
    feedback: str
    score: int = Field(..., ge=0, le=10)
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)


class BehavioralAnswerResult(APIModel):
    question: QuestionResponse
    feedback: AnswerFeedback


class LeetCodeProblem(APIModel):
    id: str
    title: str
    url: str
    difficulty: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
