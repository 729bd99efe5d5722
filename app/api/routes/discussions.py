"""
Community discussion endpoints.

Every endpoint needs a signed-in user; threads are visible to all users.
Successful writes are pushed to socket clients after the response is
sent, so a socket problem never turns a saved write into an error.
"""
import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user
from app.db.models.user import User
from app.db.session import get_db
from app.schemas.common import Envelope
from app.schemas.discussion import (
    DiscussionCreate,
    DiscussionCreated,
    DiscussionDetail,
    DiscussionList,
    DiscussionMessageResponse,
    DiscussionSummary,
    MessageCreate,
)
from app.services import discussion_service
from app.services.socket_manager import ConnectionManager, manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/discussions", tags=["Discussions"])

NEW_DISCUSSION_EVENT = "newDiscussion"
MESSAGE_RECEIVED_EVENT = "messageReceived"


def get_connection_manager() -> ConnectionManager:
    return manager


@router.get("", response_model=Envelope[DiscussionList])
def list_discussions(
    search: Optional[str] = Query(None, description="Match in topic or description"),
    sort_by: str = Query("recent", alias="sortBy", pattern="^(recent|popular)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return Envelope(data=DiscussionList.model_validate(
        discussion_service.list_discussions(db, search, sort_by, page, limit)
    ))


@router.get("/my/discussions", response_model=Envelope[list[DiscussionSummary]])
def my_discussions(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    discussions = discussion_service.list_user_discussions(db, user.id)
    return Envelope(data=[DiscussionSummary.model_validate(d) for d in discussions])


@router.get("/{discussion_id}", response_model=Envelope[DiscussionDetail])
def get_discussion(
    discussion_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return Envelope(data=DiscussionDetail.model_validate(discussion_service.discussion_detail(db, discussion_id)))


@router.post("", status_code=status.HTTP_201_CREATED, response_model=Envelope[DiscussionCreated])
def create_discussion(
    payload: DiscussionCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    sockets: ConnectionManager = Depends(get_connection_manager)
):
    discussion = discussion_service.create_discussion(db, user, payload.topic, payload.description)

    summary = DiscussionSummary.model_validate(discussion_service.summarize(discussion))
    background_tasks.add_task(sockets.broadcast, NEW_DISCUSSION_EVENT, summary)

    return Envelope(
        message="Discussion created successfully",
        data=DiscussionCreated(success=True, discussion_id=discussion.id),
    )


@router.post(
    "/{discussion_id}/messages",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[DiscussionMessageResponse],
)
def post_message(
    discussion_id: int,
    payload: MessageCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    sockets: ConnectionManager = Depends(get_connection_manager)
):
    message = discussion_service.post_message(db, user, discussion_id, payload.content)

    view = DiscussionMessageResponse.model_validate(discussion_service.message_view(message))
    background_tasks.add_task(
        sockets.broadcast_to_room,
        discussion_id,
        MESSAGE_RECEIVED_EVENT,
        {"discussionId": discussion_id, "message": view},
    )

    return Envelope(message="Message posted successfully", data=view)
