"""
FastAPI dependencies for authentication and authorization.

The token is read from the `jwt` cookie set by the auth service, or from an
`Authorization: Bearer` header for API clients.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session
from typing import Optional

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import ForbiddenError, UnauthenticatedError
from app.core.security import decode_token
from app.models.user import User, UserRole

# Bearer is optional: the cookie is the primary transport
security = HTTPBearer(auto_error=False)


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME)


def _load_user(db: Session, token: str) -> Optional[User]:
    try:
        payload = decode_token(token)
    except JWTError:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        return None

    return db.query(User).filter(User.id == user_id).first()


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the acting user from the request token.

    Raises:
        UnauthenticatedError: token missing, invalid, or user not found
        ForbiddenError: user account is inactive
    """
    token = _extract_token(request, credentials)
    if not token:
        raise UnauthenticatedError("Unauthorized: User not authenticated")

    user = _load_user(db, token)
    if user is None:
        raise UnauthenticatedError("Unauthorized: Invalid or expired token")

    if not user.is_active:
        raise ForbiddenError("User account is inactive")

    return user


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Resolve the acting user if a valid token is present, otherwise None.

    Used by public endpoints whose behaviour depends on who is looking.
    """
    token = _extract_token(request, credentials)
    if not token:
        return None

    user = _load_user(db, token)
    return user if user and user.is_active else None


async def get_current_freelancer(user: User = Depends(get_current_user)) -> User:
    """
    Require the acting user to have the FREELANCER role.

    Raises:
        ForbiddenError: any other role
    """
    if user.role != UserRole.FREELANCER:
        raise ForbiddenError("Only freelancers can perform this action")
    return user
