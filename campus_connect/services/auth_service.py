"""
Authentication service: registration, login and account lockout.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_connect.db import models, schemas
from campus_connect.db.models.base import as_utc, now_utc
from campus_connect.db.repositories import users as user_repo
from campus_connect.utils.credentials import create_access_token, verify_password
from campus_connect.utils.roles import ROLE_ADMIN
from campus_connect.utils.settings import get_auth_settings

logger = logging.getLogger(__name__)

LOGIN_OK = "ok"
LOGIN_INVALID = "invalid"
LOGIN_LOCKED = "locked"


@dataclass
class RegistrationResult:
    success: bool
    status_code: int = 201
    message: str = "User registered successfully"
    user: Optional[models.User] = None
    token: Optional[str] = None


@dataclass
class LoginResult:
    outcome: str
    message: str
    user: Optional[models.User] = None
    token: Optional[str] = None
    locked_until: Optional[datetime] = None
    attempts_remaining: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.outcome == LOGIN_OK


class AuthService:
    """Service class for account registration and credential checks."""

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_auth_settings()

    def register(self, payload: schemas.UserRegister) -> RegistrationResult:
        """Create a user account and issue its first access token."""
        role = payload.role
        if role == ROLE_ADMIN and payload.email not in self.settings.admin_emails:
            logger.warning("register_admin_denied email=%s", payload.email)
            return RegistrationResult(False, 403, "Admin registration is not allowed for this email")

        if user_repo.get_user_by_email(self.db, payload.email):
            return RegistrationResult(False, 400, "User with this email already exists")

        try:
            user = user_repo.create_user(
                self.db,
                email=payload.email,
                password=payload.password,
                first_name=payload.first_name,
                last_name=payload.last_name,
                role=role,
            )
        except IntegrityError:
            # Concurrent registration with the same address
            self.db.rollback()
            return RegistrationResult(False, 400, "User with this email already exists")

        logger.info("user_registered user_id=%s role=%s", user.id, user.role)
        return RegistrationResult(True, user=user, token=create_access_token(user.id))

    def login(self, email: str, password: str, *, now: Optional[datetime] = None) -> LoginResult:
        """Check credentials, applying the failed-attempt counter and lockout."""
        now = now or now_utc()
        user = user_repo.get_user_by_email(self.db, email)

        if user is not None and user.account_locked_until is not None:
            locked_until = as_utc(user.account_locked_until)
            if locked_until > now:
                logger.info("login_rejected_locked user_id=%s", user.id)
                return LoginResult(
                    LOGIN_LOCKED,
                    "Account is locked due to multiple failed login attempts",
                    locked_until=locked_until,
                )
            # The previous lock expired; start counting afresh
            user_repo.reset_failed_logins(self.db, user)

        if user is None:
            logger.info("login_failed reason=unknown_email")
            return LoginResult(LOGIN_INVALID, "Invalid email or password")

        if not verify_password(password, user.password_hash):
            return self._register_failure(user, now)

        user_repo.reset_failed_logins(self.db, user)
        logger.info("login_succeeded user_id=%s", user.id)
        return LoginResult(
            LOGIN_OK,
            "Login successful",
            user=user,
            token=create_access_token(user.id),
        )

    def _register_failure(self, user: models.User, now: datetime) -> LoginResult:
        max_attempts = self.settings.max_login_attempts
        attempts = (user.failed_login_attempts or 0) + 1
        if attempts >= max_attempts:
            locked_until = now + self.settings.lockout_duration
            user_repo.record_failed_login(self.db, user, attempts=attempts, locked_until=locked_until)
            logger.warning("account_locked user_id=%s attempts=%s until=%s", user.id, attempts, locked_until.isoformat())
            return LoginResult(
                LOGIN_LOCKED,
                "Account locked due to multiple failed login attempts",
                locked_until=locked_until,
            )
        user_repo.record_failed_login(self.db, user, attempts=attempts, locked_until=None)
        logger.info("login_failed user_id=%s attempts=%s", user.id, attempts)
        return LoginResult(
            LOGIN_INVALID,
            "Invalid email or password",
            attempts_remaining=max_attempts - attempts,
        )
