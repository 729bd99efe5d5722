"""
Google sign-up and sign-in.

Clients exchange a Google ID token for a PrepWise bearer token.
"""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.google_auth import GoogleTokenVerifier, get_google_verifier
from app.core.rate_limit import auth_rate_limit
from app.core.security import create_access_token
from app.db.session import get_db
from app.schemas.auth import AuthResult, GoogleTokenRequest
from app.schemas.common import Envelope
from app.schemas.user import UserResponse
from app.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"], dependencies=[Depends(auth_rate_limit)])


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=Envelope[AuthResult])
def signup(
    payload: GoogleTokenRequest,
    verifier: GoogleTokenVerifier = Depends(get_google_verifier),
    db: Session = Depends(get_db)
):
    """Create an account from a Google ID token. 409 if the account already exists."""
    identity = verifier.verify(payload.id_token)
    user = user_service.sign_up(db, identity)
    return Envelope(
        message="User signed up successfully",
        data=AuthResult(token=create_access_token(user.id), user=UserResponse.model_validate(user)),
    )


@router.post("/signin", response_model=Envelope[AuthResult])
def signin(
    payload: GoogleTokenRequest,
    verifier: GoogleTokenVerifier = Depends(get_google_verifier),
    db: Session = Depends(get_db)
):
    """Sign in with a Google ID token. 404 if no account exists yet."""
    identity = verifier.verify(payload.id_token)
    user = user_service.sign_in(db, identity)
    return Envelope(
        message="User signed in successfully",
        data=AuthResult(token=create_access_token(user.id), user=UserResponse.model_validate(user)),
    )
