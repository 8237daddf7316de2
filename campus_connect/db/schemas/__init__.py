"""
Domain-split Pydantic schemas.

Request bodies use camelCase keys on the wire; response payloads built from
joined rows keep the snake_case column names the frontend consumes.
"""

from .common import CamelModel, build_pagination, clamp_pagination, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .users import UserRegister, UserLogin, UserProfileUpdate, UserSummary, UserProfile
from .forum import (
    QuestionCreate,
    QuestionUpdate,
    AnswerCreate,
    VoteRequest,
    VOTABLE_TYPES,
    VOTE_TYPES,
)
from .mentorship import (
    MentorProfileUpsert,
    MentorshipRequestCreate,
    MentorshipRequestDecision,
    AVAILABILITY_STATUSES,
)
from .events import EventPayload, EventCategory, parse_iso_datetime

__all__ = [
    # common
    "CamelModel",
    "build_pagination",
    "clamp_pagination",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # users
    "UserRegister",
    "UserLogin",
    "UserProfileUpdate",
    "UserSummary",
    "UserProfile",
    # forum
    "QuestionCreate",
    "QuestionUpdate",
    "AnswerCreate",
    "VoteRequest",
    "VOTABLE_TYPES",
    "VOTE_TYPES",
    # mentorship
    "MentorProfileUpsert",
    "MentorshipRequestCreate",
    "MentorshipRequestDecision",
    "AVAILABILITY_STATUSES",
    # events
    "EventPayload",
    "EventCategory",
    "parse_iso_datetime",
]
