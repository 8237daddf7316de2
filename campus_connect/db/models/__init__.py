"""
Domain-split SQLAlchemy models.

Exposes `Base`, `now_utc`, `as_utc` and all ORM classes from one place.
"""

from .base import Base, now_utc, as_utc  # re-export

# Domain models
from .users import User
from .forum import Question, Answer, Vote, Tag, QuestionTag
from .mentorship import MentorProfile, MentorshipRequest, Mentorship
from .events import EventCategory, Event, EventRegistration

__all__ = [
    # base
    "Base",
    "now_utc",
    "as_utc",
    # users
    "User",
    # forum
    "Question",
    "Answer",
    "Vote",
    "Tag",
    "QuestionTag",
    # mentorship
    "MentorProfile",
    "MentorshipRequest",
    "Mentorship",
    # events
    "EventCategory",
    "Event",
    "EventRegistration",
]
