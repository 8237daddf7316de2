"""
User repository functions.

Account CRUD plus the failed-login counters used by account lockout.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from campus_connect.db import models, schemas
from campus_connect.utils.credentials import hash_password


def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email.strip().lower()).first()


def create_user(
    db: Session,
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: str,
) -> models.User:
    user = models.User(
        email=email.strip().lower(),
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_profile(db: Session, user: models.User, payload: schemas.UserProfileUpdate) -> models.User:
    for key, value in payload.model_dump(exclude_unset=True).items():
        # Names are required columns; ignore explicit nulls for them
        if value is None and key in ("first_name", "last_name"):
            continue
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user


def record_failed_login(db: Session, user: models.User, *, locked_until: Optional[datetime], attempts: int) -> models.User:
    user.failed_login_attempts = attempts
    user.account_locked_until = locked_until
    db.commit()
    db.refresh(user)
    return user


def reset_failed_logins(db: Session, user: models.User) -> models.User:
    if user.failed_login_attempts or user.account_locked_until is not None:
        user.failed_login_attempts = 0
        user.account_locked_until = None
        db.commit()
        db.refresh(user)
    return user
