"""
Test doubles and helpers shared across test modules.
"""
from app.core.security import create_access_token
from app.db.models.user import User
from app.llm.provider import LLMProvider, LLMResponse


class FakeLLM(LLMProvider):
    """Returns canned replies in order; an Exception instance is raised instead."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def chat(self, messages, model, temperature=0.7, max_tokens=None, **kwargs):
        self.calls.append({"messages": messages, "model": model, "max_tokens": max_tokens})
        reply = self.replies.pop(0) if self.replies else "{}"
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model=model)


class FakeLeetCode:
    def __init__(self, problems=None, error=None):
        self.problems = problems or []
        self.error = error
        self.queries = []

    def search(self, query, limit=None):
        self.queries.append(query)
        if self.error:
            raise self.error
        return self.problems[:limit] if limit is not None else list(self.problems)


class RecordingSockets:
    """Stands in for the connection manager and records every event."""

    def __init__(self):
        self.events = []

    async def broadcast(self, event, payload):
        self.events.append(("all", event, payload))

    async def broadcast_to_room(self, discussion_id, event, payload):
        self.events.append((discussion_id, event, payload))


def make_user(db, google_id="google-1", email="test@example.com", name="Test User") -> User:
    user = User(google_id=google_id, email=email, name=name)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
