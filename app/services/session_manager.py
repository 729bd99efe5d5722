"""
Mock-interview session manager.

A session walks an ordered list of questions. Status moves along
SESSION_TRANSITIONS; cancelled and completed are terminal. At most one active
session may exist per (user, job): creation checks first, and the partial
unique index on interview_sessions catches the race the check cannot.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    ConflictError,
    InvalidStateError,
    MismatchError,
    NotFoundError,
    PersistenceError,
    QuestionIndexError,
    ValidationError,
)
from app.db.models.interview_session import InterviewSession, SessionStatus
from app.db.models.question import Question, QuestionStatus, QuestionType
from app.llm.provider import LLMProvider
from app.schemas.question import QuestionCreate
from app.schemas.session import SessionAnswerFeedback, SessionResponse
from app.services import feedback_service, job_service, question_store

logger = logging.getLogger(__name__)

DEFAULT_BEHAVIORAL_QUESTIONS = [
    "Tell me about a time when you had to resolve a conflict with a team member. "
    "How did you approach the situation, and what was the outcome?",
    "Describe a situation where you had to work under pressure to meet a tight deadline. "
    "How did you manage your time and prioritize tasks?",
    "Give me an example of a time when you had to learn a new skill or technology quickly. "
    "What was your approach?",
    "Tell me about a project where you took initiative and went above and beyond what was expected. "
    "What motivated you?",
    "Describe a situation where you received critical feedback. "
    "How did you respond and what did you learn from it?",
]
DEFAULT_QUESTION_DESCRIPTION = "Behavioral interview question for mock interview session"

TECHNICAL_PLACEHOLDER_FEEDBACK = (
    "Technical question noted. Please solve this problem on the external platform "
    "and mark it as complete when done."
)

SESSION_TRANSITIONS = {
    SessionStatus.ACTIVE.value: {SessionStatus.PAUSED.value, SessionStatus.CANCELLED.value, SessionStatus.COMPLETED.value},
    SessionStatus.PAUSED.value: {SessionStatus.ACTIVE.value, SessionStatus.CANCELLED.value, SessionStatus.COMPLETED.value},
    SessionStatus.CANCELLED.value: set(),
    SessionStatus.COMPLETED.value: set(),
}
SESSION_STATUSES = [s.value for s in SessionStatus]

ACTIVE_SESSION_EXISTS = "An active session already exists for this job. Please complete or cancel it first."
MAX_ANSWER_LENGTH = 5000
MINUTES_PER_QUESTION = 3


def _is_identifier(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _now() -> datetime:
    return datetime.now(timezone.utc)


def find_active_session(db: Session, user_id: int, job_id: int) -> Optional[InterviewSession]:
    return (
        db.query(InterviewSession)
        .filter(
            InterviewSession.user_id == user_id,
            InterviewSession.job_id == job_id,
            InterviewSession.status == SessionStatus.ACTIVE.value,
        )
        .first()
    )


def get_owned_session(db: Session, session_id: int, user_id: int) -> InterviewSession:
    session = (
        db.query(InterviewSession)
        .filter(InterviewSession.id == session_id, InterviewSession.user_id == user_id)
        .first()
    )
    if session is None:
        raise NotFoundError("Session not found")
    return session


def get_current_question(db: Session, session: InterviewSession) -> Optional[Question]:
    """The question at current_question_index, or None if it has since been deleted."""
    if not 0 <= session.current_question_index < len(session.question_ids):
        return None
    return question_store.find_by_id(db, session.question_ids[session.current_question_index], session.user_id)


def _raise_active_conflict(db: Session, user_id: int, job_id: int) -> None:
    existing = find_active_session(db, user_id, job_id)
    raise ConflictError(
        ACTIVE_SESSION_EXISTS,
        data={"session": SessionResponse.model_validate(existing)} if existing else None,
    )


def _create_default_questions(db: Session, user_id: int, job_id: int) -> list[Question]:
    drafts = [
        QuestionCreate(
            job_id=job_id,
            type=QuestionType.BEHAVIORAL.value,
            title=text[:question_store.MAX_TITLE_LENGTH],
            description=DEFAULT_QUESTION_DESCRIPTION,
            difficulty="medium",
        )
        for text in DEFAULT_BEHAVIORAL_QUESTIONS
    ]
    return question_store.create_questions(db, user_id, job_id, drafts, commit=False)


def _select_questions(
    db: Session,
    user_id: int,
    job_id: int,
    specific_question_id: Optional[int],
) -> list[Question]:
    if specific_question_id is None:
        return _create_default_questions(db, user_id, job_id)

    behavioral = question_store.find_by_job_and_type(db, job_id, user_id, QuestionType.BEHAVIORAL.value)
    if not behavioral:
        behavioral = _create_default_questions(db, user_id, job_id)

    specific = next((q for q in behavioral if q.id == specific_question_id), None)
    if specific is None:
        logger.info(f"Question {specific_question_id} not among job {job_id} behavioral questions, using all")
        return behavioral

    return [specific] + [q for q in behavioral if q.id != specific_question_id]


def create_session(
    db: Session,
    user_id: int,
    job_id: Any,
    specific_question_id: Optional[int] = None,
) -> tuple[InterviewSession, Optional[Question]]:
    """
    Start a mock interview for a job.

    Raises:
        ValidationError: job_id missing or malformed
        NotFoundError: Job does not exist for this user
        ConflictError: An active session already exists; data carries it
    """
    if not _is_identifier(job_id):
        raise ValidationError("Job ID is required")

    job_service.get_job(db, job_id, user_id)

    if find_active_session(db, user_id, job_id):
        _raise_active_conflict(db, user_id, job_id)

    try:
        questions = _select_questions(db, user_id, job_id, specific_question_id)
        session = InterviewSession(
            user_id=user_id,
            job_id=job_id,
            question_ids=[q.id for q in questions],
            current_question_index=0,
            status=SessionStatus.ACTIVE.value,
            total_questions=len(questions),
            answered_questions=0,
            started_at=_now(),
        )
        db.add(session)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Concurrent session creation for user_id={user_id}, job_id={job_id}")
        _raise_active_conflict(db, user_id, job_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create session: {e}", exc_info=True)
        raise PersistenceError("Failed to create session") from e

    db.refresh(session)
    logger.info(f"Session created: session_id={session.id}, job_id={job_id}, questions={session.total_questions}")
    return session, questions[0]


def session_stats(db: Session, user_id: int) -> dict:
    sessions = db.query(InterviewSession).filter(InterviewSession.user_id == user_id).all()
    total = len(sessions)
    completed = sum(1 for s in sessions if s.status == SessionStatus.COMPLETED.value)
    active = sum(1 for s in sessions if s.status == SessionStatus.ACTIVE.value)
    average = round(sum(s.progress_percentage for s in sessions) / total) if total else 0
    return {"total": total, "completed": completed, "active": active, "average_progress": average}


def list_sessions(db: Session, user_id: int, limit: int = 20) -> tuple[list[InterviewSession], dict]:
    """Most recent sessions first, plus stats over all of the user's sessions."""
    sessions = (
        db.query(InterviewSession)
        .filter(InterviewSession.user_id == user_id)
        .order_by(InterviewSession.created_at.desc(), InterviewSession.id.desc())
        .limit(limit)
        .all()
    )
    return sessions, session_stats(db, user_id)


def get_session(db: Session, user_id: int, session_id: int) -> tuple[InterviewSession, Optional[Question]]:
    session = get_owned_session(db, session_id, user_id)
    return session, get_current_question(db, session)


def _validate_answer(answer: Any) -> str:
    if not isinstance(answer, str) or not answer.strip():
        raise ValidationError("Answer is required and must be a non-empty string")
    if len(answer) > MAX_ANSWER_LENGTH:
        raise ValidationError(f"Answer too long (max {MAX_ANSWER_LENGTH} characters)")
    return answer


def submit_answer(
    db: Session,
    user_id: int,
    session_id: Any,
    question_id: Any,
    answer: Any,
    llm: Optional[LLMProvider],
) -> tuple[InterviewSession, SessionAnswerFeedback]:
    """
    Record an answer for one of the session's questions.

    Behavioral answers are graded by the feedback service (which degrades to
    default feedback rather than failing) and mark the question completed.
    Technical answers get placeholder feedback. Answering the question at the
    last index completes the session.
    """
    if not _is_identifier(session_id):
        raise ValidationError("Session ID is required and must be a number")
    if not _is_identifier(question_id):
        raise ValidationError("Question ID is required and must be a number")
    answer = _validate_answer(answer)

    session = get_owned_session(db, session_id, user_id)
    if session.status != SessionStatus.ACTIVE.value:
        raise InvalidStateError("Session is not active")

    question = question_store.find_by_id(db, question_id, user_id)
    if question is None:
        raise NotFoundError("Question not found")
    if question_id not in session.question_ids:
        raise MismatchError("Question does not belong to this session")

    if question.type == QuestionType.BEHAVIORAL.value:
        graded = feedback_service.generate_answer_feedback(llm, question.title, answer)
        feedback = SessionAnswerFeedback(**graded.model_dump())
        question.status = QuestionStatus.COMPLETED.value
    else:
        feedback = SessionAnswerFeedback(feedback=TECHNICAL_PLACEHOLDER_FEEDBACK, score=0)

    # Position decides completion, not how many distinct questions were answered
    is_last_question = session.current_question_index >= session.total_questions - 1
    reaches_total = session.answered_questions + 1 >= session.total_questions

    values = {
        InterviewSession.answered_questions: case(
            (InterviewSession.answered_questions < InterviewSession.total_questions,
             InterviewSession.answered_questions + 1),
            else_=InterviewSession.answered_questions,
        ),
        InterviewSession.updated_at: func.now(),
    }
    if is_last_question or reaches_total:
        values[InterviewSession.status] = SessionStatus.COMPLETED.value
        values[InterviewSession.completed_at] = _now()

    try:
        updated = (
            db.query(InterviewSession)
            .filter(
                InterviewSession.id == session.id,
                InterviewSession.user_id == user_id,
                InterviewSession.status == SessionStatus.ACTIVE.value,
            )
            .update(values, synchronize_session=False)
        )
        if not updated:
            db.rollback()
            raise PersistenceError("Failed to update session progress")
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update session progress: {e}", exc_info=True)
        raise PersistenceError("Failed to update session progress") from e

    db.refresh(session)
    feedback.is_last_question = is_last_question
    feedback.session_completed = session.status == SessionStatus.COMPLETED.value or is_last_question

    logger.info(
        f"Answer submitted: session_id={session.id}, question_id={question_id}, "
        f"answered={session.answered_questions}/{session.total_questions}, status={session.status}"
    )
    return session, feedback


def update_status(db: Session, user_id: int, session_id: int, status: Any) -> InterviewSession:
    """
    Move a session to a new status.

    Setting the current status again is a no-op, including for terminal
    statuses. Any other move out of cancelled or completed is rejected.
    """
    new_status = status.strip().lower() if isinstance(status, str) else None
    if new_status not in SESSION_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(SESSION_STATUSES)}")

    session = get_owned_session(db, session_id, user_id)
    if new_status == session.status:
        return session

    if new_status not in SESSION_TRANSITIONS[session.status]:
        raise InvalidStateError(f"Cannot change session status from {session.status} to {new_status}")

    session.status = new_status
    if new_status == SessionStatus.COMPLETED.value:
        session.completed_at = _now()

    try:
        db.commit()
    except IntegrityError:
        # Resuming a paused session while another one is active for the job
        db.rollback()
        _raise_active_conflict(db, user_id, session.job_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update session status: {e}", exc_info=True)
        raise PersistenceError("Failed to update session status") from e

    db.refresh(session)
    logger.info(f"Session status updated: session_id={session.id}, status={session.status}")
    return session


def navigate_to_question(
    db: Session,
    user_id: int,
    session_id: int,
    question_index: Any,
) -> tuple[InterviewSession, Optional[Question]]:
    if not isinstance(question_index, int) or isinstance(question_index, bool):
        raise ValidationError("Question index must be a number")

    session = get_owned_session(db, session_id, user_id)
    if not 0 <= question_index < session.total_questions:
        raise QuestionIndexError("Invalid question index")

    session.current_question_index = question_index
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to navigate session: {e}", exc_info=True)
        raise PersistenceError("Failed to navigate to question") from e

    db.refresh(session)
    return session, get_current_question(db, session)


def get_progress(session: InterviewSession) -> dict:
    """Derived progress view; reads stored fields only."""
    remaining = session.remaining_questions
    return {
        "session_id": session.id,
        "current_question_index": session.current_question_index,
        "total_questions": session.total_questions,
        "answered_questions": session.answered_questions,
        "progress_percentage": session.progress_percentage,
        "status": session.status,
        "remaining_questions": remaining,
        "estimated_time_remaining": max(0, remaining * MINUTES_PER_QUESTION),
    }


def delete_session(db: Session, user_id: int, session_id: int) -> None:
    session = get_owned_session(db, session_id, user_id)
    db.delete(session)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete session: {e}", exc_info=True)
        raise PersistenceError("Failed to delete session") from e
    logger.info(f"Session deleted: session_id={session_id}, user_id={user_id}")
