import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core import config
from app.core.security import decode_access_token
from app.db.session import get_db
from app.db.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_mock_user(db: Session) -> User:
    """Return the development user, creating it on first use."""
    user = db.query(User).filter(User.google_id == config.MOCK_USER_GOOGLE_ID).first()
    if user:
        return user

    user = User(
        google_id=config.MOCK_USER_GOOGLE_ID,
        email=config.MOCK_USER_EMAIL,
        name=config.MOCK_USER_NAME,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.warning(f"BYPASS_AUTH enabled, created mock user id={user.id}")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the bearer token to a User, or the mock user when BYPASS_AUTH is on."""
    if config.BYPASS_AUTH:
        return get_mock_user(db)

    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")

    try:
        user_id = decode_access_token(credentials.credentials)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user
