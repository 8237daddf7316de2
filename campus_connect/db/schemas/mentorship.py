from typing import List

from pydantic import field_validator

from .common import CamelModel, clean_optional_text

AVAILABILITY_STATUSES = ("available", "busy", "unavailable")
REQUEST_DECISIONS = ("accepted", "rejected")
SKILL_MAX_LENGTH = 50
MESSAGE_MAX_LENGTH = 1000


class MentorProfileUpsert(CamelModel):
    skills: List[str]
    experience_years: int | None = None
    max_mentees: int = 5
    bio: str | None = None
    availability_status: str = "available"

    @field_validator("skills")
    @classmethod
    def _skills(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("At least one skill is required")
        cleaned = []
        for raw in v:
            skill = str(raw or "").strip()
            if not 1 <= len(skill) <= SKILL_MAX_LENGTH:
                raise ValueError("Each skill must be between 1 and 50 characters")
            cleaned.append(skill)
        return cleaned

    @field_validator("experience_years")
    @classmethod
    def _experience_years(cls, v):
        if v is not None and v < 0:
            raise ValueError("Experience years must be a non-negative integer")
        return v

    @field_validator("max_mentees")
    @classmethod
    def _max_mentees(cls, v: int) -> int:
        if not 1 <= v <= 20:
            raise ValueError("Max mentees must be between 1 and 20")
        return v

    @field_validator("bio", mode="before")
    @classmethod
    def _bio(cls, v):
        return clean_optional_text(v)

    @field_validator("availability_status")
    @classmethod
    def _availability(cls, v: str) -> str:
        if v not in AVAILABILITY_STATUSES:
            raise ValueError("Invalid availability status")
        return v


class MentorshipRequestCreate(CamelModel):
    mentor_id: int
    message: str | None = None

    @field_validator("message", mode="before")
    @classmethod
    def _message(cls, v):
        v = clean_optional_text(v)
        if v is not None and len(v) > MESSAGE_MAX_LENGTH:
            raise ValueError("Message too long")
        return v


class MentorshipRequestDecision(CamelModel):
    status: str

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        if v not in REQUEST_DECISIONS:
            raise ValueError('Invalid status. Must be "accepted" or "rejected"')
        return v
