"""
Question store: persistence and validation for interview questions.

Every query filters on the owning user, so another user's question looks the
same as a missing one.
"""
import logging
from typing import Any, Iterable, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, PersistenceError, ValidationError
from app.db.session import commit_or_raise
from app.db.models.question import Question, QuestionDifficulty, QuestionStatus, QuestionType
from app.schemas.common import is_absolute_url
from app.schemas.question import QuestionCreate

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200

QUESTION_TYPES = {t.value for t in QuestionType}
QUESTION_STATUSES = {s.value for s in QuestionStatus}
DIFFICULTIES = {d.value for d in QuestionDifficulty}


def _is_identifier(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_question(data: QuestionCreate) -> dict:
    """
    Check a question payload and return normalized column values.

    Raises:
        ValidationError: With a message naming the first problem found
    """
    if not _is_identifier(data.job_id):
        raise ValidationError("Job ID is required")

    question_type = (data.type or "").strip().lower()
    if question_type not in QUESTION_TYPES:
        raise ValidationError("Invalid question type")

    title = (data.title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title too long (max {MAX_TITLE_LENGTH} characters)")

    description = (data.description or "").strip() or None
    if question_type == QuestionType.BEHAVIORAL.value and not description:
        raise ValidationError("Description is required for behavioral questions")

    difficulty = (data.difficulty or "").strip().lower() or None
    if difficulty is not None and difficulty not in DIFFICULTIES:
        raise ValidationError("Invalid difficulty. Must be one of: easy, medium, hard")

    external_url = (data.external_url or "").strip() or None
    if external_url is not None and not is_absolute_url(external_url):
        raise ValidationError("Invalid URL format")

    tags = [tag.strip() for tag in (data.tags or []) if tag and tag.strip()]

    return {
        "job_id": data.job_id,
        "type": question_type,
        "title": title,
        "description": description,
        "difficulty": difficulty,
        "tags": tags,
        "external_url": external_url,
    }


def create_question(db: Session, user_id: int, data: QuestionCreate) -> Question:
    values = validate_question(data)
    question = Question(user_id=user_id, status=QuestionStatus.PENDING.value, **values)
    db.add(question)
    commit_or_raise(db, "create question")
    db.refresh(question)
    logger.info(f"Question created: question_id={question.id}, job_id={question.job_id}, type={question.type}")
    return question


def create_questions(
    db: Session,
    user_id: int,
    job_id: int,
    items: Iterable[QuestionCreate],
    commit: bool = True,
) -> list[Question]:
    """
    Bulk create questions for one job.

    All items are validated before anything is written; one bad item rejects
    the whole batch. With commit=False the rows are flushed so they get ids,
    and the caller owns the transaction.
    """
    payloads = [item.model_copy(update={"job_id": job_id}) for item in items]
    if not payloads:
        return []

    values = [validate_question(payload) for payload in payloads]
    questions = [Question(user_id=user_id, status=QuestionStatus.PENDING.value, **v) for v in values]
    db.add_all(questions)

    if commit:
        commit_or_raise(db, "create questions")
        for question in questions:
            db.refresh(question)
    else:
        try:
            db.flush()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create questions: {e}", exc_info=True)
            raise PersistenceError("Failed to create questions") from e

    logger.info(f"Questions created: count={len(questions)}, job_id={job_id}, user_id={user_id}")
    return questions


def find_by_job_and_type(
    db: Session,
    job_id: int,
    user_id: int,
    question_type: Optional[str] = None,
) -> list[Question]:
    """Questions for a job, optionally of one type, newest first."""
    query = db.query(Question).filter(Question.job_id == job_id, Question.user_id == user_id)
    if question_type:
        query = query.filter(Question.type == question_type.lower())
    return query.order_by(Question.created_at.desc(), Question.id.desc()).all()


def find_by_job_id(db: Session, job_id: int, user_id: int) -> list[Question]:
    return find_by_job_and_type(db, job_id, user_id)


def find_by_id(db: Session, question_id: int, user_id: int) -> Optional[Question]:
    return db.query(Question).filter(Question.id == question_id, Question.user_id == user_id).first()


def find_by_ids(db: Session, question_ids: list[int], user_id: int) -> dict[int, Question]:
    if not question_ids:
        return {}
    rows = db.query(Question).filter(Question.id.in_(question_ids), Question.user_id == user_id).all()
    return {question.id: question for question in rows}


def update_status(db: Session, question_id: int, user_id: int, status: str) -> Optional[Question]:
    """Set a question's status. Returns None when the question is not found."""
    if status not in QUESTION_STATUSES:
        raise ValidationError(f"Invalid question status. Must be one of: {', '.join(s.value for s in QuestionStatus)}")

    question = find_by_id(db, question_id, user_id)
    if question is None:
        return None

    question.status = status
    commit_or_raise(db, "update question status")
    db.refresh(question)
    return question


def toggle_status(db: Session, question_id: int, user_id: int) -> Question:
    """Flip a question between completed and pending."""
    question = find_by_id(db, question_id, user_id)
    if question is None:
        raise NotFoundError("Question not found")

    new_status = (
        QuestionStatus.PENDING.value
        if question.status == QuestionStatus.COMPLETED.value
        else QuestionStatus.COMPLETED.value
    )
    return update_status(db, question_id, user_id, new_status)


def delete_by_job_id(db: Session, job_id: int, user_id: int, commit: bool = True) -> int:
    """Delete every question of a job. Returns how many were removed."""
    deleted = (
        db.query(Question)
        .filter(Question.job_id == job_id, Question.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if commit:
        commit_or_raise(db, "delete questions")
    logger.info(f"Questions deleted: count={deleted}, job_id={job_id}, user_id={user_id}")
    return deleted


def get_progress_by_job(db: Session, job_id: int, user_id: int) -> dict:
    """
    Totals per question type. Only COMPLETED counts as completed;
    IN_PROGRESS and SKIPPED do not.
    """
    rows = (
        db.query(Question.type, Question.status, func.count(Question.id))
        .filter(Question.job_id == job_id, Question.user_id == user_id)
        .group_by(Question.type, Question.status)
        .all()
    )

    progress = {
        "technical": {"total": 0, "completed": 0},
        "behavioral": {"total": 0, "completed": 0},
        "overall": {"total": 0, "completed": 0},
    }
    for question_type, status, count in rows:
        bucket = progress.get(question_type)
        if bucket is None:
            continue
        bucket["total"] += count
        progress["overall"]["total"] += count
        if status == QuestionStatus.COMPLETED.value:
            bucket["completed"] += count
            progress["overall"]["completed"] += count

    return progress
