"""
Mentorship repository functions.

Mentor profiles, mentorship requests and active mentorships. Mentee capacity
is the count of active mentorships compared against ``max_mentees``.
"""
from __future__ import annotations

import json
from typing import List, Optional, Tuple

from sqlalchemy import String, and_, cast, distinct, func, or_
from sqlalchemy.orm import Session

from campus_connect.db import models, schemas
from campus_connect.db.models.base import now_utc
from campus_connect.db.repositories.questions import like_pattern

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"
MENTORSHIP_ACTIVE = "active"
MENTORSHIP_COMPLETED = "completed"


def _mentor_query(db: Session):
    current_mentees = func.count(distinct(models.Mentorship.id)).label("current_mentees")
    q = (
        db.query(models.MentorProfile, models.User, current_mentees)
        .join(models.User, models.User.id == models.MentorProfile.user_id)
        .outerjoin(
            models.Mentorship,
            and_(
                models.Mentorship.mentor_id == models.MentorProfile.user_id,
                models.Mentorship.status == MENTORSHIP_ACTIVE,
            ),
        )
    )
    return q, current_mentees


def _serialize_mentor(profile: models.MentorProfile, user: models.User, current_mentees) -> dict:
    return {
        "id": profile.id,
        "skills": list(profile.skills or []),
        "experience_years": profile.experience_years,
        "availability_status": profile.availability_status,
        "max_mentees": profile.max_mentees,
        "bio": profile.bio,
        "user_id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "profile_image_url": user.profile_image_url,
        "current_mentees": int(current_mentees or 0),
    }


def list_mentors(db: Session, *, search: Optional[str] = None, skill: Optional[str] = None) -> List[dict]:
    """Mentors that are not unavailable and still below their mentee capacity."""
    q, current_mentees = _mentor_query(db)
    q = q.filter(models.MentorProfile.availability_status != "unavailable")
    if search:
        pattern = like_pattern(search)
        q = q.filter(
            or_(
                func.lower(models.User.first_name).like(pattern, escape="\\"),
                func.lower(models.User.last_name).like(pattern, escape="\\"),
                func.lower(func.coalesce(models.MentorProfile.bio, "")).like(pattern, escape="\\"),
            )
        )
    if skill:
        # Skills are a JSON list; match the quoted element within its text form
        needle = like_pattern(json.dumps(skill.strip(), ensure_ascii=False))
        q = q.filter(func.lower(cast(models.MentorProfile.skills, String)).like(needle, escape="\\"))
    rows = (
        q.group_by(models.MentorProfile.id, models.User.id)
        .having(current_mentees < models.MentorProfile.max_mentees)
        .order_by(models.User.first_name.asc(), models.User.last_name.asc(), models.MentorProfile.id.asc())
        .all()
    )
    return [_serialize_mentor(profile, user, count) for profile, user, count in rows]


def get_mentor(db: Session, user_id: int) -> Optional[dict]:
    q, _current = _mentor_query(db)
    row = (
        q.filter(models.MentorProfile.user_id == user_id)
        .group_by(models.MentorProfile.id, models.User.id)
        .first()
    )
    if row is None:
        return None
    profile, user, count = row
    return _serialize_mentor(profile, user, count)


def get_profile_by_user(db: Session, user_id: int) -> Optional[models.MentorProfile]:
    return db.query(models.MentorProfile).filter(models.MentorProfile.user_id == user_id).first()


def serialize_profile(profile: models.MentorProfile) -> dict:
    return {
        "id": profile.id,
        "user_id": profile.user_id,
        "skills": list(profile.skills or []),
        "experience_years": profile.experience_years,
        "availability_status": profile.availability_status,
        "max_mentees": profile.max_mentees,
        "bio": profile.bio,
        "created_at": profile.created_at,
        "updated_at": profile.updated_at,
    }


def upsert_profile(db: Session, *, user_id: int, payload: schemas.MentorProfileUpsert) -> Tuple[models.MentorProfile, bool]:
    """Create or update the mentor profile for ``user_id``; returns (profile, created)."""
    profile = get_profile_by_user(db, user_id)
    created = profile is None
    if created:
        profile = models.MentorProfile(user_id=user_id)
        db.add(profile)
    profile.skills = list(payload.skills)
    profile.experience_years = payload.experience_years
    profile.max_mentees = payload.max_mentees
    profile.bio = payload.bio
    profile.availability_status = payload.availability_status
    db.commit()
    db.refresh(profile)
    return profile, created


def count_active_mentees(db: Session, mentor_id: int) -> int:
    return (
        db.query(func.count(models.Mentorship.id))
        .filter(models.Mentorship.mentor_id == mentor_id, models.Mentorship.status == MENTORSHIP_ACTIVE)
        .scalar()
        or 0
    )


def list_requests(db: Session, *, user_id: int, as_mentor: bool, status: Optional[str] = None) -> List[dict]:
    """Requests addressed to a mentor, or sent by anyone else, with the counterpart's fields."""
    if as_mentor:
        own_column = models.MentorshipRequest.mentor_id
        other_column = models.MentorshipRequest.student_id
        other_key = "student_id"
    else:
        own_column = models.MentorshipRequest.student_id
        other_column = models.MentorshipRequest.mentor_id
        other_key = "mentor_id"
    q = (
        db.query(models.MentorshipRequest, models.User)
        .join(models.User, models.User.id == other_column)
        .filter(own_column == user_id)
    )
    if status:
        q = q.filter(models.MentorshipRequest.status == status)
    rows = q.order_by(models.MentorshipRequest.created_at.desc(), models.MentorshipRequest.id.desc()).all()
    return [
        {
            "id": req.id,
            "message": req.message,
            "status": req.status,
            "created_at": req.created_at,
            "updated_at": req.updated_at,
            other_key: other.id,
            "first_name": other.first_name,
            "last_name": other.last_name,
            "email": other.email,
        }
        for req, other in rows
    ]


def get_pending_request(db: Session, *, student_id: int, mentor_id: int) -> Optional[models.MentorshipRequest]:
    return (
        db.query(models.MentorshipRequest)
        .filter(
            models.MentorshipRequest.student_id == student_id,
            models.MentorshipRequest.mentor_id == mentor_id,
            models.MentorshipRequest.status == STATUS_PENDING,
        )
        .first()
    )


def get_active_mentorship_between(db: Session, *, student_id: int, mentor_id: int) -> Optional[models.Mentorship]:
    return (
        db.query(models.Mentorship)
        .filter(
            models.Mentorship.student_id == student_id,
            models.Mentorship.mentor_id == mentor_id,
            models.Mentorship.status == MENTORSHIP_ACTIVE,
        )
        .first()
    )


def create_request(db: Session, *, student_id: int, mentor_id: int, message: Optional[str]) -> models.MentorshipRequest:
    req = models.MentorshipRequest(student_id=student_id, mentor_id=mentor_id, message=message, status=STATUS_PENDING)
    db.add(req)
    db.commit()
    db.refresh(req)
    return req


def serialize_request(req: models.MentorshipRequest) -> dict:
    return {
        "id": req.id,
        "student_id": req.student_id,
        "mentor_id": req.mentor_id,
        "message": req.message,
        "status": req.status,
        "created_at": req.created_at,
        "updated_at": req.updated_at,
    }


def get_request_for_mentor(db: Session, *, request_id: int, mentor_id: int) -> Optional[models.MentorshipRequest]:
    return (
        db.query(models.MentorshipRequest)
        .filter(models.MentorshipRequest.id == request_id, models.MentorshipRequest.mentor_id == mentor_id)
        .first()
    )


def accept_request(db: Session, req: models.MentorshipRequest) -> models.Mentorship:
    """Create the active mentorship and mark the request accepted in one commit."""
    mentorship = models.Mentorship(
        student_id=req.student_id,
        mentor_id=req.mentor_id,
        request_id=req.id,
        status=MENTORSHIP_ACTIVE,
    )
    db.add(mentorship)
    req.status = STATUS_ACCEPTED
    req.updated_at = now_utc()
    db.commit()
    db.refresh(mentorship)
    return mentorship


def reject_request(db: Session, req: models.MentorshipRequest) -> models.MentorshipRequest:
    req.status = STATUS_REJECTED
    req.updated_at = now_utc()
    db.commit()
    db.refresh(req)
    return req


def list_active_mentorships(db: Session, *, user_id: int, as_mentor: bool) -> List[dict]:
    if as_mentor:
        own_column, other_column, other_key = models.Mentorship.mentor_id, models.Mentorship.student_id, "student_id"
    else:
        own_column, other_column, other_key = models.Mentorship.student_id, models.Mentorship.mentor_id, "mentor_id"
    rows = (
        db.query(models.Mentorship, models.User)
        .join(models.User, models.User.id == other_column)
        .filter(own_column == user_id, models.Mentorship.status == MENTORSHIP_ACTIVE)
        .order_by(models.Mentorship.started_at.desc(), models.Mentorship.id.desc())
        .all()
    )
    return [
        {
            "id": m.id,
            "started_at": m.started_at,
            "status": m.status,
            other_key: other.id,
            "first_name": other.first_name,
            "last_name": other.last_name,
            "email": other.email,
        }
        for m, other in rows
    ]


def get_mentorship(db: Session, mentorship_id: int) -> Optional[models.Mentorship]:
    return db.query(models.Mentorship).filter(models.Mentorship.id == mentorship_id).first()


def complete_mentorship(db: Session, mentorship: models.Mentorship) -> models.Mentorship:
    mentorship.status = MENTORSHIP_COMPLETED
    mentorship.ended_at = now_utc()
    db.commit()
    db.refresh(mentorship)
    return mentorship
