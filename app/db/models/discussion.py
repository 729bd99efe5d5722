"""
Discussion threads and their messages.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.base import Base


class Discussion(Base):
    """
    A community discussion thread.

    message_count and participant_count are denormalized counters refreshed
    whenever a message is posted.
    """
    __tablename__ = "discussions"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    topic = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False, default="")
    message_count = Column(Integer, nullable=False, default=0)
    participant_count = Column(Integer, nullable=False, default=0)
    last_activity_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    creator = relationship("User")
    messages = relationship(
        "DiscussionMessage",
        back_populates="discussion",
        cascade="all, delete-orphan",
        order_by="DiscussionMessage.id",
    )

    def __repr__(self):
        return f"<Discussion(id={self.id}, topic='{self.topic}')>"


class DiscussionMessage(Base):
    __tablename__ = "discussion_messages"

    id = Column(Integer, primary_key=True, index=True)
    discussion_id = Column(Integer, ForeignKey("discussions.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    discussion = relationship("Discussion", back_populates="messages")
    author = relationship("User")

    __table_args__ = (
        Index("idx_discussion_messages_discussion_created", "discussion_id", "created_at"),
    )

    def __repr__(self):
        return f"<DiscussionMessage(id={self.id}, discussion_id={self.discussion_id})>"
