"""
Authentication endpoints.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.models import get_db, User
from app.schemas.auth import TokenResponse, UserLogin, UserResponse
from app.core.auth import get_current_user
from app.core.error_responses import ErrorMessages, raise_unauthorized
from app.core.security import create_access_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login_user(credentials: UserLogin, db: Session = Depends(get_db)):
    """
    Exchange email and password for a bearer access token.

    Raises:
        UnauthorizedError: 401 if the credentials don't match a user
    """
    user = db.query(User).filter(User.email == credentials.email).first()
    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.info("Failed login attempt for %s", credentials.email)
        raise_unauthorized(ErrorMessages.INVALID_CREDENTIALS)

    access_token = create_access_token({"user_id": user.id})
    return TokenResponse(
        access_token=access_token,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user."""
    return current_user
