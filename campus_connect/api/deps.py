"""
API dependency helpers.

Resolves the calling user from a Bearer access token and gates routes by role.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from campus_connect.db import models
from campus_connect.db.database import get_db
from campus_connect.db.repositories import users as user_repo
from campus_connect.utils.credentials import TokenError, decode_access_token

logger = logging.getLogger(__name__)

# Contract:
# Returns the sqlalchemy User model for the token's userId.
# Raises 401 if no token is given, it does not verify, or the user is gone.


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def get_current_user(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None),
) -> models.User:
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")
    try:
        user_id = decode_access_token(token)
    except TokenError as exc:
        logger.debug("token_rejected code=%s", exc.code)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    user = user_repo.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def require_roles(*roles: str):
    """Dependency factory: the current user must hold one of ``roles``."""
    allowed = frozenset(roles)

    def _checker(user: models.User = Depends(get_current_user)) -> models.User:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return _checker


def get_optional_user(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None),
) -> Optional[models.User]:
    """Like get_current_user for public routes: any unusable token means anonymous."""
    token = _bearer_token(authorization)
    if not token:
        return None
    try:
        user_id = decode_access_token(token)
    except TokenError:
        return None
    return user_repo.get_user(db, user_id)
