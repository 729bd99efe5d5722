"""
Pydantic schemas for authentication endpoints.
"""
from pydantic import Field

from app.schemas.common import APIModel
from app.schemas.user import UserResponse


class GoogleTokenRequest(APIModel):
    """Request schema for Google sign-up and sign-in."""
    id_token: str = Field(..., min_length=1, description="Google ID token from the client sign-in flow")

    class Config:
        json_schema_extra = {
            "example": {
                "idToken": "eyJhbGciOiJSUzI1NiIsImtpZCI6Ij..."
            }
        }


class AuthResult(APIModel):
    """Service bearer token plus the signed-in user."""
    token: str = Field(..., description="Bearer token, valid for 19 hours")
    user: UserResponse
