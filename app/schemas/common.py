"""
Shared pydantic building blocks: camelCase wire format, the response envelope
and URL checking.
"""
from typing import Generic, Optional, TypeVar
from pydantic import AnyUrl, BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

T = TypeVar("T")

_url_adapter = TypeAdapter(AnyUrl)


def is_absolute_url(value: str) -> bool:
    """True when value parses as an absolute URL (scheme and host)."""
    try:
        parsed = _url_adapter.validate_python(value)
    except PydanticValidationError:
        return False
    return bool(parsed.scheme and parsed.host)


class APIModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Envelope(APIModel, Generic[T]):
    """Standard success body: an optional human message plus the payload."""
    message: Optional[str] = Field(None, description="Human-readable outcome")
    data: T


class MessageResponse(APIModel):
    message: str
