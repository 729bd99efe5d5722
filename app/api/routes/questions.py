"""
Interview question endpoints: generation, listing, progress and practice answers.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user
from app.core.exceptions import NotFoundError, PrepWiseError, ValidationError
from app.core.rate_limit import llm_rate_limit
from app.db.models.question import QuestionStatus, QuestionType
from app.db.models.user import User
from app.db.session import get_db
from app.llm.provider import LLMProvider
from app.llm.router import get_llm_provider
from app.schemas.common import Envelope
from app.schemas.question import (
    BehavioralAnswerRequest,
    BehavioralAnswerResult,
    GenerateQuestionsRequest,
    GeneratedQuestions,
    LeetCodeProblem,
    QuestionCreate,
    QuestionProgress,
    QuestionResponse,
)
from app.services import feedback_service, job_service, question_generation, question_store
from app.services.leetcode_client import LeetCodeClient, get_leetcode_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/questions", tags=["Questions"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=Envelope[QuestionResponse])
def create_question(
    payload: QuestionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if isinstance(payload.job_id, int) and not isinstance(payload.job_id, bool):
        job_service.get_job(db, payload.job_id, user.id)
    question = question_store.create_question(db, user.id, payload)
    return Envelope(message="Question created successfully", data=QuestionResponse.model_validate(question))


@router.post(
    "/generate",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[GeneratedQuestions],
    dependencies=[Depends(llm_rate_limit)],
)
def generate_questions(
    payload: GenerateQuestionsRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: Optional[LLMProvider] = Depends(get_llm_provider),
    leetcode: LeetCodeClient = Depends(get_leetcode_client)
):
    """
    Replace the job's questions with a newly generated set.

    Behavioral questions come from the LLM; technical questions from LeetCode
    search, or a built-in list of classics when search is unavailable.
    """
    job = job_service.get_job(db, payload.job_id, user.id)
    try:
        questions = question_generation.generate_for_job(
            db, user.id, job, payload.types, payload.count, llm, leetcode
        )
    except (HTTPException, PrepWiseError):
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to generate questions for job {job.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate questions"
        )

    return Envelope(
        message="Questions generated successfully",
        data=GeneratedQuestions(
            questions=[QuestionResponse.model_validate(q) for q in questions],
            total=len(questions),
        ),
    )


@router.get("/leetcode-search", response_model=Envelope[list[LeetCodeProblem]])
def leetcode_search(
    query: Optional[str] = Query(None, description="Free-text problem search"),
    limit: Optional[int] = Query(None, ge=1, le=50),
    user: User = Depends(get_current_user),
    leetcode: LeetCodeClient = Depends(get_leetcode_client)
):
    if not query or not query.strip():
        raise ValidationError("query is required")
    return Envelope(data=leetcode.search(query, limit=limit))


@router.get("/job/{job_id}", response_model=Envelope[list[QuestionResponse]])
def questions_for_job(
    job_id: int,
    type: Optional[QuestionType] = Query(None, description="Only questions of this type"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    questions = question_store.find_by_job_and_type(db, job_id, user.id, type.value if type else None)
    return Envelope(data=[QuestionResponse.model_validate(q) for q in questions])


@router.get("/job/{job_id}/progress", response_model=Envelope[QuestionProgress])
def question_progress(
    job_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return Envelope(data=QuestionProgress.model_validate(question_store.get_progress_by_job(db, job_id, user.id)))


@router.post(
    "/behavioral/submit",
    response_model=Envelope[BehavioralAnswerResult],
    dependencies=[Depends(llm_rate_limit)],
)
def submit_behavioral_answer(
    payload: BehavioralAnswerRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: Optional[LLMProvider] = Depends(get_llm_provider)
):
    """Grade a practice answer outside a session and mark the question completed."""
    if not isinstance(payload.answer, str) or not payload.answer.strip():
        raise ValidationError("Answer is required and must be a non-empty string")

    question = question_store.find_by_id(db, payload.question_id, user.id)
    if question is None:
        raise NotFoundError("Question not found")
    if question.type != QuestionType.BEHAVIORAL.value:
        raise ValidationError("This endpoint is only for behavioral questions")

    feedback = feedback_service.generate_answer_feedback(llm, question.title, payload.answer)
    question = question_store.update_status(db, question.id, user.id, QuestionStatus.COMPLETED.value)

    return Envelope(
        message="Answer submitted successfully",
        data=BehavioralAnswerResult(question=QuestionResponse.model_validate(question), feedback=feedback),
    )


@router.get("/{question_id}", response_model=Envelope[QuestionResponse])
def get_question(
    question_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    question = question_store.find_by_id(db, question_id, user.id)
    if question is None:
        raise NotFoundError("Question not found")
    return Envelope(data=QuestionResponse.model_validate(question))


@router.put("/{question_id}/toggle", response_model=Envelope[QuestionResponse])
def toggle_question(
    question_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Flip a question between completed and pending."""
    question = question_store.toggle_status(db, question_id, user.id)
    return Envelope(message=f"Question marked as {question.status}", data=QuestionResponse.model_validate(question))
