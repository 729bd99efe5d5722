"""
Discussion threads shared by all users: browsing, creating threads and posting messages.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import NotFoundError, ValidationError
from app.db.models.discussion import Discussion, DiscussionMessage
from app.db.models.user import User
from app.db.session import commit_or_raise

logger = logging.getLogger(__name__)

MAX_TOPIC_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_MESSAGE_LENGTH = 2000
SORT_OPTIONS = ("recent", "popular")


def summarize(discussion: Discussion) -> dict:
    return {
        "id": discussion.id,
        "topic": discussion.topic,
        "description": discussion.description,
        "creator_id": discussion.creator_id,
        "creator_name": discussion.creator.name if discussion.creator else "Unknown",
        "message_count": discussion.message_count,
        "participant_count": discussion.participant_count,
        "last_activity_at": discussion.last_activity_at,
        "created_at": discussion.created_at,
    }


def message_view(message: DiscussionMessage) -> dict:
    return {
        "id": message.id,
        "user_id": message.user_id,
        "user_name": message.author.name if message.author else "Unknown",
        "content": message.content,
        "created_at": message.created_at,
        "updated_at": message.updated_at,
    }


def list_discussions(
    db: Session,
    search: Optional[str] = None,
    sort_by: str = "recent",
    page: int = 1,
    limit: int = 20,
) -> dict:
    """
    Page through discussions.

    recent orders by last activity; popular by message count, then participants.
    """
    if sort_by not in SORT_OPTIONS:
        raise ValidationError(f"Invalid sortBy. Must be one of: {', '.join(SORT_OPTIONS)}")

    query = db.query(Discussion).options(joinedload(Discussion.creator))
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Discussion.topic.ilike(pattern), Discussion.description.ilike(pattern)))

    total = query.count()

    if sort_by == "popular":
        query = query.order_by(
            Discussion.message_count.desc(),
            Discussion.participant_count.desc(),
            Discussion.last_activity_at.desc(),
        )
    else:
        query = query.order_by(Discussion.last_activity_at.desc(), Discussion.id.desc())

    discussions = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "discussions": [summarize(d) for d in discussions],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if total else 0,
        },
    }


def get_discussion(db: Session, discussion_id: int) -> Discussion:
    discussion = db.query(Discussion).filter(Discussion.id == discussion_id).first()
    if discussion is None:
        raise NotFoundError("Discussion not found")
    return discussion


def discussion_detail(db: Session, discussion_id: int) -> dict:
    discussion = get_discussion(db, discussion_id)
    detail = summarize(discussion)
    detail["messages"] = [message_view(m) for m in discussion.messages]
    return detail


def list_user_discussions(db: Session, user_id: int) -> list[dict]:
    discussions = (
        db.query(Discussion)
        .filter(Discussion.creator_id == user_id)
        .order_by(Discussion.last_activity_at.desc(), Discussion.id.desc())
        .all()
    )
    return [summarize(d) for d in discussions]


def refresh_counters(db: Session, discussion: Discussion) -> None:
    """Recount messages and distinct authors from the stored messages."""
    discussion.message_count = (
        db.query(func.count(DiscussionMessage.id))
        .filter(DiscussionMessage.discussion_id == discussion.id)
        .scalar()
    )
    discussion.participant_count = (
        db.query(func.count(func.distinct(DiscussionMessage.user_id)))
        .filter(DiscussionMessage.discussion_id == discussion.id)
        .scalar()
    )


def create_discussion(db: Session, user: User, topic: Any, description: Any = None) -> Discussion:
    topic = topic.strip() if isinstance(topic, str) else ""
    if not topic:
        raise ValidationError("Topic cannot be empty.")
    if len(topic) > MAX_TOPIC_LENGTH:
        raise ValidationError(f"Topic cannot exceed {MAX_TOPIC_LENGTH} characters.")

    description = description.strip() if isinstance(description, str) else ""
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters.")

    discussion = Discussion(
        creator_id=user.id,
        topic=topic,
        description=description,
        message_count=0,
        participant_count=0,
        last_activity_at=datetime.now(timezone.utc),
    )
    db.add(discussion)
    commit_or_raise(db, "create discussion")
    db.refresh(discussion)
    logger.info(f"Discussion created: discussion_id={discussion.id}, creator_id={user.id}")
    return discussion


def post_message(db: Session, user: User, discussion_id: int, content: Any) -> DiscussionMessage:
    """Add a message and refresh the thread's counters."""
    content = content.strip() if isinstance(content, str) else ""
    if not content:
        raise ValidationError("Message content cannot be empty.")
    if len(content) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters.")

    discussion = get_discussion(db, discussion_id)

    message = DiscussionMessage(discussion_id=discussion.id, user_id=user.id, content=content)
    db.add(message)
    db.flush()

    refresh_counters(db, discussion)
    discussion.last_activity_at = datetime.now(timezone.utc)

    commit_or_raise(db, "post message")
    db.refresh(message)
    logger.info(f"Message posted: discussion_id={discussion.id}, user_id={user.id}")
    return message
