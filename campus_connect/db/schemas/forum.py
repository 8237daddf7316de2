from typing import List

from pydantic import field_validator

from .common import CamelModel

VOTABLE_TYPES = ("question", "answer")
VOTE_TYPES = ("upvote", "downvote")
TAG_MAX_LENGTH = 50


def _clean_title(v: str) -> str:
    v = str(v or "").strip()
    if not 10 <= len(v) <= 255:
        raise ValueError("Title must be between 10 and 255 characters")
    return v


def _clean_content(v: str) -> str:
    v = str(v or "").strip()
    if len(v) < 20:
        raise ValueError("Content must be at least 20 characters")
    return v


def _clean_tags(values: List[str]) -> List[str]:
    """Trim names, drop blanks and duplicates while keeping first-seen order."""
    cleaned: List[str] = []
    for raw in values:
        name = str(raw or "").strip()
        if not name:
            continue
        if len(name) > TAG_MAX_LENGTH:
            raise ValueError(f"Each tag must be at most {TAG_MAX_LENGTH} characters")
        if name not in cleaned:
            cleaned.append(name)
    return cleaned


class QuestionCreate(CamelModel):
    title: str
    content: str
    tags: List[str] = []

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("content")
    @classmethod
    def _content(cls, v: str) -> str:
        return _clean_content(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_list(cls, v):
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("Tags must be an array")
        return v

    @field_validator("tags")
    @classmethod
    def _tags(cls, v: List[str]) -> List[str]:
        return _clean_tags(v)


class QuestionUpdate(CamelModel):
    title: str | None = None
    content: str | None = None
    tags: List[str] | None = None

    @field_validator("title")
    @classmethod
    def _title(cls, v):
        return None if v is None else _clean_title(v)

    @field_validator("content")
    @classmethod
    def _content(cls, v):
        return None if v is None else _clean_content(v)

    @field_validator("tags")
    @classmethod
    def _tags(cls, v):
        return None if v is None else _clean_tags(v)


class AnswerCreate(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def _content(cls, v: str) -> str:
        v = str(v or "").strip()
        if len(v) < 10:
            raise ValueError("Answer must be at least 10 characters")
        return v


class VoteRequest(CamelModel):
    votable_type: str
    vote_type: str

    @field_validator("votable_type")
    @classmethod
    def _votable_type(cls, v: str) -> str:
        if v not in VOTABLE_TYPES:
            raise ValueError("Invalid votable type")
        return v

    @field_validator("vote_type")
    @classmethod
    def _vote_type(cls, v: str) -> str:
        if v not in VOTE_TYPES:
            raise ValueError("Invalid vote type")
        return v
