"""
FastAPI authentication dependencies.
"""
from typing import Callable

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.models import get_db, User, UserRole
from .security import decode_token
from .error_responses import ErrorMessages, raise_forbidden, raise_unauthorized

# HTTP Bearer token scheme
security = HTTPBearer()


def _decode_and_validate_token(token: str) -> int:
    """
    Decode an access token and return its user_id.

    Raises:
        UnauthorizedError: if the token is invalid, expired, of the wrong type,
            or carries no user_id
    """
    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        raise_unauthorized(ErrorMessages.INVALID_TOKEN)

    user_id = payload.get("user_id")
    if user_id is None:
        raise_unauthorized(ErrorMessages.INVALID_TOKEN)

    return user_id


def _get_user_or_401(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise_unauthorized(ErrorMessages.USER_NOT_FOUND_AUTH)
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Get the current authenticated user from the bearer token.

    Raises:
        UnauthorizedError: 401 if the token is invalid or the user is gone
    """
    user_id = _decode_and_validate_token(credentials.credentials)
    return _get_user_or_401(db, user_id)


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """
    Dependency factory that admits only users holding one of ``roles``.

    Usage:
        @router.post("", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """
    allowed = {role.value for role in roles}

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            if allowed == {UserRole.ADMIN.value}:
                raise_forbidden(ErrorMessages.ADMIN_REQUIRED)
            raise_forbidden(ErrorMessages.UNAUTHORIZED)
        return current_user

    return dependency
