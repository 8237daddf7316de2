from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from campus_connect.db.models.base import as_utc
from .common import CamelModel, clean_optional_text


def parse_iso_datetime(value: Any, message: str) -> datetime | None:
    """Parse an ISO-8601 date or datetime into aware UTC (naive means UTC)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(message) from exc
    return as_utc(parsed)


def _zero_to_none(value: Any) -> Any:
    # Clients send 0 or "" for "no limit" / "no category"
    if value in (0, "0", "", None):
        return None
    return value


class EventPayload(CamelModel):
    title: str
    description: str
    # Defaulted so a missing value reaches the validator below
    event_date: datetime = Field(default=None, validate_default=True)
    location: str | None = None
    registration_deadline: datetime | None = None
    max_participants: int | None = None
    category_id: int | None = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        v = str(v or "").strip()
        if not 5 <= len(v) <= 255:
            raise ValueError("Title must be between 5 and 255 characters")
        return v

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        v = str(v or "").strip()
        if len(v) < 20:
            raise ValueError("Description must be at least 20 characters")
        return v

    @field_validator("event_date", mode="before")
    @classmethod
    def _event_date(cls, v):
        parsed = parse_iso_datetime(v, "Valid event date is required")
        if parsed is None:
            raise ValueError("Valid event date is required")
        return parsed

    @field_validator("registration_deadline", mode="before")
    @classmethod
    def _deadline(cls, v):
        return parse_iso_datetime(v, "Valid registration deadline is required")

    @field_validator("location", mode="before")
    @classmethod
    def _location(cls, v):
        v = clean_optional_text(v)
        if v is not None and len(v) > 255:
            raise ValueError("Location too long")
        return v

    @field_validator("max_participants", mode="before")
    @classmethod
    def _max_participants_blank(cls, v):
        return _zero_to_none(v)

    @field_validator("max_participants")
    @classmethod
    def _max_participants(cls, v):
        if v is not None and v < 1:
            raise ValueError("Max participants must be a positive integer")
        return v

    @field_validator("category_id", mode="before")
    @classmethod
    def _category_id(cls, v):
        return _zero_to_none(v)

    @model_validator(mode="after")
    def _deadline_before_event(self):
        if self.registration_deadline and self.registration_deadline > self.event_date:
            raise ValueError("Registration deadline must not be after the event date")
        return self


class EventCategory(BaseModel):
    id: int
    name: str
    description: str | None = None
    model_config = ConfigDict(from_attributes=True)
