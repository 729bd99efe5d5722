"""
Mock-interview session endpoints.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user
from app.core.exceptions import PrepWiseError
from app.core.rate_limit import llm_rate_limit
from app.db.models.interview_session import InterviewSession
from app.db.models.question import Question
from app.db.models.user import User
from app.db.session import get_db
from app.llm.provider import LLMProvider
from app.llm.router import get_llm_provider
from app.schemas.common import Envelope, MessageResponse
from app.schemas.question import QuestionResponse
from app.schemas.session import (
    NavigateRequest,
    SessionCreateRequest,
    SessionList,
    SessionProgress,
    SessionResponse,
    SessionStats,
    SessionWithQuestion,
    StatusUpdateRequest,
    SubmitAnswerRequest,
    SubmitAnswerResult,
)
from app.services import session_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["Sessions"])


def _with_question(session: InterviewSession, question: Optional[Question]) -> SessionWithQuestion:
    return SessionWithQuestion(
        session=SessionResponse.model_validate(session),
        current_question=QuestionResponse.model_validate(question) if question else None,
    )


@router.post("/create", status_code=status.HTTP_201_CREATED, response_model=Envelope[SessionWithQuestion])
def create_session(
    payload: SessionCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Start a mock interview for a job.

    Without specificQuestionId the session gets five default behavioral
    questions. 409 with the existing session when one is already active.
    """
    try:
        session, question = session_manager.create_session(db, user.id, payload.job_id, payload.specific_question_id)
        return Envelope(message="Mock interview session created successfully", data=_with_question(session, question))
    except (HTTPException, PrepWiseError):
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create session: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create session"
        )


@router.get("", response_model=Envelope[SessionList])
def list_sessions(
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    sessions, stats = session_manager.list_sessions(db, user.id, limit)
    return Envelope(data=SessionList(
        sessions=[SessionResponse.model_validate(s) for s in sessions],
        stats=SessionStats.model_validate(stats),
    ))


@router.post("/submit-answer", response_model=Envelope[SubmitAnswerResult], dependencies=[Depends(llm_rate_limit)])
def submit_answer(
    payload: SubmitAnswerRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: Optional[LLMProvider] = Depends(get_llm_provider)
):
    """
    Answer one of the session's questions.

    Behavioral answers come back with AI feedback (or default feedback if the
    AI service is unavailable). Answering the last question completes the session.
    """
    try:
        session, feedback = session_manager.submit_answer(
            db, user.id, payload.session_id, payload.question_id, payload.answer, llm
        )
    except (HTTPException, PrepWiseError):
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to submit answer: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit answer"
        )

    message = "Session completed successfully" if feedback.session_completed else "Answer submitted successfully"
    return Envelope(message=message, data=SubmitAnswerResult(
        session=SessionResponse.model_validate(session),
        feedback=feedback,
    ))


@router.get("/{session_id}", response_model=Envelope[SessionWithQuestion])
def get_session(
    session_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    session, question = session_manager.get_session(db, user.id, session_id)
    return Envelope(data=_with_question(session, question))


@router.put("/{session_id}/status", response_model=Envelope[SessionResponse])
def update_session_status(
    session_id: int,
    payload: StatusUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    session = session_manager.update_status(db, user.id, session_id, payload.status)
    return Envelope(message=f"Session {session.status} successfully", data=SessionResponse.model_validate(session))


@router.put("/{session_id}/navigate", response_model=Envelope[SessionWithQuestion])
def navigate_session(
    session_id: int,
    payload: NavigateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    session, question = session_manager.navigate_to_question(db, user.id, session_id, payload.question_index)
    return Envelope(message="Navigation successful", data=_with_question(session, question))


@router.get("/{session_id}/progress", response_model=Envelope[SessionProgress])
def session_progress(
    session_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    session = session_manager.get_owned_session(db, session_id, user.id)
    return Envelope(data=SessionProgress.model_validate(session_manager.get_progress(session)))


@router.delete("/{session_id}", response_model=MessageResponse)
def delete_session(
    session_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    session_manager.delete_session(db, user.id, session_id)
    return MessageResponse(message="Session deleted successfully")
