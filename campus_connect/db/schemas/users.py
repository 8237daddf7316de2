from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import ConfigDict, field_validator

from campus_connect.utils.credentials import password_meets_policy
from campus_connect.utils.roles import ALL_ROLES, ROLE_STUDENT
from .common import CamelModel, clean_optional_text

NAME_MAX_LENGTH = 100
BIO_MAX_LENGTH = 2000
URL_MAX_LENGTH = 500


def _normalize_email(value: str) -> str:
    try:
        result = validate_email(str(value or "").strip(), check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError("Valid email is required") from exc
    return result.normalized.lower()


def _clean_name(value: str, label: str) -> str:
    cleaned = str(value or "").strip()
    if not cleaned or len(cleaned) > NAME_MAX_LENGTH:
        raise ValueError(f"{label} is required")
    return cleaned


class UserRegister(CamelModel):
    email: str
    password: str
    first_name: str
    last_name: str
    role: str = ROLE_STUDENT

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        if not password_meets_policy(v):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return v

    @field_validator("first_name")
    @classmethod
    def _first_name(cls, v: str) -> str:
        return _clean_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def _last_name(cls, v: str) -> str:
        return _clean_name(v, "Last name")

    @field_validator("role")
    @classmethod
    def _role(cls, v: str) -> str:
        if v not in ALL_ROLES:
            raise ValueError("Invalid role")
        return v


class UserLogin(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class UserProfileUpdate(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None
    profile_image_url: str | None = None

    @field_validator("first_name")
    @classmethod
    def _first_name(cls, v):
        return None if v is None else _clean_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def _last_name(cls, v):
        return None if v is None else _clean_name(v, "Last name")

    @field_validator("bio")
    @classmethod
    def _bio(cls, v):
        v = clean_optional_text(v)
        if v is not None and len(v) > BIO_MAX_LENGTH:
            raise ValueError(f"Bio must be at most {BIO_MAX_LENGTH} characters")
        return v

    @field_validator("profile_image_url")
    @classmethod
    def _profile_image_url(cls, v):
        v = clean_optional_text(v)
        if v is not None and (len(v) > URL_MAX_LENGTH or not v.startswith(("http://", "https://"))):
            raise ValueError("Profile image URL must be an http(s) URL")
        return v


class UserSummary(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    model_config = ConfigDict(from_attributes=True)


class UserProfile(UserSummary):
    bio: str | None = None
    profile_image_url: str | None = None
    created_at: datetime | None = None
