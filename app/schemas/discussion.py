"""
Pydantic schemas for discussion endpoints.
"""
from typing import Optional
from datetime import datetime

from app.schemas.common import APIModel


class DiscussionCreate(APIModel):
    topic: Optional[str] = None
    description: Optional[str] = None


class MessageCreate(APIModel):
    content: Optional[str] = None


class DiscussionMessageResponse(APIModel):
    id: int
    user_id: int
    user_name: str
    content: str
    created_at: datetime
    updated_at: datetime


class DiscussionSummary(APIModel):
    id: int
    topic: str
    description: str
    creator_id: int
    creator_name: str
    message_count: int
    participant_count: int
    last_activity_at: datetime
    created_at: datetime


class DiscussionDetail(DiscussionSummary):
    messages: list[DiscussionMessageResponse]


class Pagination(APIModel):
    page: int
    limit: int
    total: int
    total_pages: int


class DiscussionList(APIModel):
    discussions: list[DiscussionSummary]
    pagination: Pagination


class DiscussionCreated(APIModel):
    success: bool = True
    discussion_id: int
