"""
Profile endpoints for the signed-in user.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user
from app.db.models.user import User
from app.db.session import get_db
from app.schemas.common import Envelope, MessageResponse
from app.schemas.user import DeleteProfileRequest, UpdateProfileRequest, UserResponse
from app.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["User"])


@router.get("/profile", response_model=Envelope[UserResponse])
def get_profile(user: User = Depends(get_current_user)):
    return Envelope(message="Profile fetched successfully", data=UserResponse.model_validate(user))


@router.api_route("/profile", methods=["PUT", "POST"], response_model=Envelope[UserResponse])
def update_profile(
    payload: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user = user_service.update_profile(db, user, payload.name)
    return Envelope(message="Profile updated successfully", data=UserResponse.model_validate(user))


@router.delete("/profile", response_model=MessageResponse)
def delete_profile(
    payload: DeleteProfileRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete the account and all of its data. Requires {"confirmDelete": true}."""
    user_service.delete_account(db, user, payload.confirm_delete)
    return MessageResponse(message="Account deleted successfully")
