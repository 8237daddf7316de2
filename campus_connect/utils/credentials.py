"""
Password hashing and access-token utilities.

Responsibilities:
- Hash passwords with Argon2id and verify them in constant time
- Enforce the password strength policy used at registration
- Issue and decode signed JWT access tokens carrying the user id
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from campus_connect.utils.settings import get_auth_settings

_hasher = PasswordHasher(time_cost=2, memory_cost=19456, parallelism=1, hash_len=32)

MIN_PASSWORD_LENGTH = 8
_PASSWORD_CLASSES = (re.compile(r"[a-z]"), re.compile(r"[A-Z]"), re.compile(r"\d"))

TOKEN_CLAIM_USER_ID = "userId"


class TokenError(Exception):
    """Raised when an access token is malformed, tampered with or expired."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, encoded_hash: str) -> bool:
    if not password or not encoded_hash:
        return False
    try:
        return _hasher.verify(encoded_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def password_meets_policy(password: str) -> bool:
    """At least 8 characters with a lower-case letter, an upper-case letter and a digit."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return False
    return all(p.search(password) for p in _PASSWORD_CLASSES)


def create_access_token(user_id: int, *, now: Optional[datetime] = None) -> str:
    settings = get_auth_settings()
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        TOKEN_CLAIM_USER_ID: user_id,
        "iat": issued_at,
        "exp": issued_at + settings.jwt_expires_in,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int:
    """Return the user id carried by ``token`` or raise TokenError."""
    settings = get_auth_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("token_expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError("token_invalid") from exc
    user_id = payload.get(TOKEN_CLAIM_USER_ID)
    # bool is an int subclass; reject it explicitly
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise TokenError("token_invalid")
    return user_id
