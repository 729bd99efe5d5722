"""
Pydantic schemas for the user profile endpoints.
"""
from datetime import datetime
from pydantic import Field

from app.schemas.common import APIModel


class UserResponse(APIModel):
    id: int
    email: str
    name: str
    created_at: datetime
    updated_at: datetime


class UpdateProfileRequest(APIModel):
    name: str = Field(..., min_length=1, max_length=100, description="Display name")

    class Config:
        str_strip_whitespace = True


class DeleteProfileRequest(APIModel):
    confirm_delete: bool = Field(False, description="Must be true to delete the account")
