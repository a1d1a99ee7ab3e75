"""
Authentication helpers for verifying EleWand access tokens and resolving the current User.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.core.security import decode_access_token
from app.database import get_db
from app.models import User

logger = logging.getLogger(__name__)


def _unauthorized(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_bearer_token(request: Request) -> str:
    """
    Extract 'Bearer <token>' from Authorization header.
    """
    auth = request.headers.get("Authorization")
    if not auth:
        raise _unauthorized("Missing Authorization header")

    parts = auth.split()
    if len(parts) != 2:
        raise _unauthorized("Invalid Authorization header format. Expected 'Bearer <token>'")

    scheme, token = parts
    if scheme.lower() != "bearer":
        raise _unauthorized("Invalid auth scheme. Expected 'Bearer'")

    return token


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """
    FastAPI dependency: returns the authenticated User (SQLAlchemy object).

    The token is one we signed at register/login time; its `sub` is the user id.
    """
    token = _extract_bearer_token(request)
    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Token missing subject (sub)")

    try:
        user_uuid = uuid.UUID(str(user_id))
    except (ValueError, TypeError):
        raise _unauthorized("Invalid user ID in token")

    user = db.query(User).filter(User.id == user_uuid).first()
    if user is None:
        raise _unauthorized("User not found")

    return user


def get_path_user(
    user_id: uuid.UUID,
    user: User = Depends(get_current_user),
) -> User:
    """
    Dependency for routes scoped by /{user_id}: the path must name the caller.
    """
    if user.id != user_id:
        logger.warning("User %s tried to access data of user %s", user.id, user_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only access your own data",
        )
    return user


def get_admin_user(user: User = Depends(get_current_user)) -> User:
    """
    Admin gate. Reads the server-side role flag, never anything the client sends.
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
