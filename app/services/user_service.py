"""
User accounts: Google sign-up/sign-in and profile management.
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from app.core.google_auth import GoogleIdentity
from app.db.models.discussion import Discussion, DiscussionMessage
from app.db.models.interview_session import InterviewSession
from app.db.models.job_application import JobApplication
from app.db.models.question import Question
from app.db.models.user import User
from app.db.session import commit_or_raise
from app.services.discussion_service import refresh_counters

logger = logging.getLogger(__name__)


def find_by_google_id(db: Session, google_id: str) -> Optional[User]:
    return db.query(User).filter(User.google_id == google_id).first()


def sign_up(db: Session, identity: GoogleIdentity) -> User:
    """Create an account for a verified Google identity."""
    if find_by_google_id(db, identity.google_id) or db.query(User).filter(User.email == identity.email).first():
        raise ConflictError("User already exists")

    user = User(google_id=identity.google_id, email=identity.email, name=identity.name[:100])
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already exists")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create user: {e}", exc_info=True)
        raise PersistenceError("Failed to create user") from e

    db.refresh(user)
    logger.info(f"User signed up: user_id={user.id}")
    return user


def sign_in(db: Session, identity: GoogleIdentity) -> User:
    user = find_by_google_id(db, identity.google_id)
    if user is None:
        raise NotFoundError("User not found")
    logger.info(f"User signed in: user_id={user.id}")
    return user


def update_profile(db: Session, user: User, name: str) -> User:
    user.name = name
    commit_or_raise(db, "update profile")
    db.refresh(user)
    return user


def delete_account(db: Session, user: User, confirm_delete: bool) -> None:
    """
    Remove a user and everything they own.

    Messages other users posted in this user's discussions go with those
    discussions.
    """
    if not confirm_delete:
        raise ValidationError("Account deletion must be confirmed")

    user_id = user.id
    try:
        own_discussion_ids = [
            row.id for row in db.query(Discussion.id).filter(Discussion.creator_id == user_id).all()
        ]
        if own_discussion_ids:
            db.query(DiscussionMessage).filter(
                DiscussionMessage.discussion_id.in_(own_discussion_ids)
            ).delete(synchronize_session=False)
        touched_ids = {
            row.discussion_id
            for row in db.query(DiscussionMessage.discussion_id).filter(DiscussionMessage.user_id == user_id).all()
        } - set(own_discussion_ids)
        db.query(DiscussionMessage).filter(DiscussionMessage.user_id == user_id).delete(synchronize_session=False)
        db.query(Discussion).filter(Discussion.creator_id == user_id).delete(synchronize_session=False)
        for discussion in db.query(Discussion).filter(Discussion.id.in_(touched_ids)).all():
            refresh_counters(db, discussion)
        db.query(InterviewSession).filter(InterviewSession.user_id == user_id).delete(synchronize_session=False)
        db.query(Question).filter(Question.user_id == user_id).delete(synchronize_session=False)
        db.query(JobApplication).filter(JobApplication.user_id == user_id).delete(synchronize_session=False)
        db.delete(user)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete account: {e}", exc_info=True)
        raise PersistenceError("Failed to delete account") from e

    logger.info(f"User account deleted: user_id={user_id}")
