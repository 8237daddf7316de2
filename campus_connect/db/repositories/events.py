"""
Event repository functions.

Listing with filters and registration counts, CRUD, approval, and
registrations.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from campus_connect.db import models, schemas
from campus_connect.db.models.base import now_utc
from campus_connect.db.repositories.questions import like_pattern


def _registered_count_subquery():
    return (
        select(func.count(models.EventRegistration.id))
        .where(models.EventRegistration.event_id == models.Event.id)
        .scalar_subquery()
    )


def serialize_event(event: models.Event) -> dict:
    return {
        "id": event.id,
        "created_by": event.created_by,
        "category_id": event.category_id,
        "title": event.title,
        "description": event.description,
        "location": event.location,
        "event_date": event.event_date,
        "registration_deadline": event.registration_deadline,
        "max_participants": event.max_participants,
        "is_approved": bool(event.is_approved),
        "created_at": event.created_at,
        "updated_at": event.updated_at,
    }


def _event_row(event: models.Event, creator: Optional[models.User], category: Optional[models.EventCategory], count) -> dict:
    item = serialize_event(event)
    item.pop("created_by")
    item["created_by_id"] = creator.id if creator else None
    item["first_name"] = creator.first_name if creator else None
    item["last_name"] = creator.last_name if creator else None
    item["category_id"] = category.id if category else None
    item["category_name"] = category.name if category else None
    item["registered_count"] = int(count or 0)
    return item


def _event_query(db: Session):
    registered_count = _registered_count_subquery().label("registered_count")
    return (
        db.query(models.Event, models.User, models.EventCategory, registered_count)
        .outerjoin(models.User, models.User.id == models.Event.created_by)
        .outerjoin(models.EventCategory, models.EventCategory.id == models.Event.category_id)
    )


def list_events(
    db: Session,
    *,
    page: int = 1,
    limit: int = schemas.DEFAULT_PAGE_SIZE,
    category_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
    approved_only: bool = True,
) -> Tuple[List[dict], int]:
    """Return (rows, total) for one page of events ordered by event date."""
    filters = []
    if approved_only:
        filters.append(models.Event.is_approved.is_(True))
    if search:
        pattern = like_pattern(search)
        filters.append(
            or_(
                func.lower(models.Event.title).like(pattern, escape="\\"),
                func.lower(models.Event.description).like(pattern, escape="\\"),
            )
        )
    if category_id is not None:
        filters.append(models.Event.category_id == category_id)
    if start_date is not None:
        filters.append(models.Event.event_date >= start_date)
    if end_date is not None:
        filters.append(models.Event.event_date <= end_date)

    total = db.query(func.count(models.Event.id)).filter(*filters).scalar() or 0
    rows = (
        _event_query(db)
        .filter(*filters)
        .order_by(models.Event.event_date.asc(), models.Event.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return [_event_row(*row) for row in rows], int(total)


def list_categories(db: Session) -> List[models.EventCategory]:
    return db.query(models.EventCategory).order_by(models.EventCategory.name.asc()).all()


def get_category(db: Session, category_id: int) -> Optional[models.EventCategory]:
    return db.query(models.EventCategory).filter(models.EventCategory.id == category_id).first()


def get_event(db: Session, event_id: int) -> Optional[models.Event]:
    return db.query(models.Event).filter(models.Event.id == event_id).first()


def get_event_detail(db: Session, event_id: int) -> Optional[dict]:
    row = _event_query(db).filter(models.Event.id == event_id).first()
    if row is None:
        return None
    item = _event_row(*row)
    creator = row[1]
    item["email"] = creator.email if creator else None
    registrations = (
        db.query(models.EventRegistration, models.User)
        .join(models.User, models.User.id == models.EventRegistration.user_id)
        .filter(models.EventRegistration.event_id == event_id)
        .order_by(models.EventRegistration.registered_at.desc(), models.EventRegistration.id.desc())
        .all()
    )
    item["registrations"] = [
        {
            "id": reg.id,
            "registered_at": reg.registered_at,
            "user_id": user.id,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
        }
        for reg, user in registrations
    ]
    return item


def _apply_payload(event: models.Event, payload: schemas.EventPayload) -> None:
    event.title = payload.title
    event.description = payload.description
    event.location = payload.location
    event.event_date = payload.event_date
    event.registration_deadline = payload.registration_deadline
    event.max_participants = payload.max_participants
    event.category_id = payload.category_id


def create_event(db: Session, *, created_by: int, payload: schemas.EventPayload, approved: bool) -> models.Event:
    event = models.Event(created_by=created_by, is_approved=approved)
    _apply_payload(event, payload)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def update_event(db: Session, event: models.Event, payload: schemas.EventPayload, *, keep_approval: bool) -> models.Event:
    """Overwrite every editable field; approval is cleared unless ``keep_approval``."""
    _apply_payload(event, payload)
    if not keep_approval:
        event.is_approved = False
    event.updated_at = now_utc()
    db.commit()
    db.refresh(event)
    return event


def delete_event(db: Session, event: models.Event) -> None:
    db.delete(event)
    db.commit()


def approve_event(db: Session, event: models.Event) -> models.Event:
    event.is_approved = True
    event.updated_at = now_utc()
    db.commit()
    db.refresh(event)
    return event


def get_registration(db: Session, *, event_id: int, user_id: int) -> Optional[models.EventRegistration]:
    return (
        db.query(models.EventRegistration)
        .filter(models.EventRegistration.event_id == event_id, models.EventRegistration.user_id == user_id)
        .first()
    )


def count_registrations(db: Session, event_id: int) -> int:
    return (
        db.query(func.count(models.EventRegistration.id))
        .filter(models.EventRegistration.event_id == event_id)
        .scalar()
        or 0
    )


def create_registration(db: Session, *, event_id: int, user_id: int) -> models.EventRegistration:
    registration = models.EventRegistration(event_id=event_id, user_id=user_id)
    db.add(registration)
    db.commit()
    db.refresh(registration)
    return registration


def serialize_registration(registration: models.EventRegistration) -> dict:
    return {
        "id": registration.id,
        "event_id": registration.event_id,
        "user_id": registration.user_id,
        "registered_at": registration.registered_at,
    }


def delete_registration(db: Session, *, event_id: int, user_id: int) -> int:
    removed = (
        db.query(models.EventRegistration)
        .filter(models.EventRegistration.event_id == event_id, models.EventRegistration.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return removed
