"""Business logic services package."""

from .auth_service import AuthService, LoginResult, RegistrationResult

__all__ = [
    "AuthService",
    "LoginResult",
    "RegistrationResult",
]
