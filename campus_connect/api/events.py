"""
Events API endpoints.

Event listing and detail, creation with admin approval, and registrations.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_connect.api.deps import get_current_user, get_optional_user, require_roles
from campus_connect.api.permissions import can_modify, is_admin
from campus_connect.db import models, schemas
from campus_connect.db.database import get_db
from campus_connect.db.models.base import as_utc, now_utc
from campus_connect.db.repositories import events as event_repo
from campus_connect.utils.roles import ROLE_ADMIN

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


def _query_datetime(value: Optional[str], name: str):
    try:
        return schemas.parse_iso_datetime(value, f"Invalid {name}")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _load_event(db: Session, event_id: int) -> models.Event:
    event = event_repo.get_event(db, event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _ensure_category(db: Session, payload: schemas.EventPayload) -> None:
    if payload.category_id is not None and event_repo.get_category(db, payload.category_id) is None:
        raise HTTPException(status_code=400, detail="Invalid category")


@router.get("")
@router.get("/", include_in_schema=False)
def list_events(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None),
    approved_only: Optional[str] = Query(None, alias="approvedOnly"),
    db: Session = Depends(get_db),
    user: Optional[models.User] = Depends(get_optional_user),
):
    page, limit = schemas.clamp_pagination(page, limit)
    # Only admins may see events still awaiting approval
    include_pending = (approved_only or "").strip().lower() == "false" and is_admin(user)
    items, total = event_repo.list_events(
        db,
        page=page,
        limit=limit,
        category_id=category_id,
        start_date=_query_datetime(start_date, "startDate"),
        end_date=_query_datetime(end_date, "endDate"),
        search=(search or "").strip() or None,
        approved_only=not include_pending,
    )
    return {"events": items, "pagination": schemas.build_pagination(page, limit, total)}


@router.get("/categories/all")
def list_categories(db: Session = Depends(get_db)):
    categories = event_repo.list_categories(db)
    return {"categories": [schemas.EventCategory.model_validate(c).model_dump() for c in categories]}


@router.get("/{event_id}")
def get_event(event_id: int, db: Session = Depends(get_db)):
    detail = event_repo.get_event_detail(db, event_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return detail


@router.post("", status_code=status.HTTP_201_CREATED)
@router.post("/", status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_event(
    payload: schemas.EventPayload,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    _ensure_category(db, payload)
    approved = is_admin(user)
    event = event_repo.create_event(db, created_by=user.id, payload=payload, approved=approved)
    logger.info("event_created event_id=%s user_id=%s approved=%s", event.id, user.id, approved)
    return {
        "message": "Event created and approved" if approved else "Event created, pending approval",
        "event": event_repo.serialize_event(event),
    }


@router.put("/{event_id}")
def update_event(
    event_id: int,
    payload: schemas.EventPayload,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    event = _load_event(db, event_id)
    if not can_modify(event.created_by, user):
        raise HTTPException(status_code=403, detail="Permission denied")
    _ensure_category(db, payload)
    admin = is_admin(user)
    event = event_repo.update_event(db, event, payload, keep_approval=admin)
    return {
        "message": "Event updated" if admin else "Event updated, pending approval",
        "event": event_repo.serialize_event(event),
    }


@router.delete("/{event_id}")
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    event = _load_event(db, event_id)
    if not can_modify(event.created_by, user):
        raise HTTPException(status_code=403, detail="Permission denied")
    event_repo.delete_event(db, event)
    logger.info("event_deleted event_id=%s by_user_id=%s", event_id, user.id)
    return {"message": "Event deleted successfully"}


@router.patch("/{event_id}/approve")
def approve_event(
    event_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(require_roles(ROLE_ADMIN)),
):
    event = event_repo.approve_event(db, _load_event(db, event_id))
    logger.info("event_approved event_id=%s by_user_id=%s", event.id, user.id)
    return {"message": "Event approved", "event": event_repo.serialize_event(event)}


@router.post("/{event_id}/register", status_code=status.HTTP_201_CREATED)
def register_for_event(
    event_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    event = event_repo.get_event(db, event_id)
    if event is None or not event.is_approved:
        raise HTTPException(status_code=404, detail="Event not found or not approved")
    if event.registration_deadline is not None and as_utc(event.registration_deadline) < now_utc():
        raise HTTPException(status_code=400, detail="Registration deadline has passed")
    if event_repo.get_registration(db, event_id=event_id, user_id=user.id):
        raise HTTPException(status_code=400, detail="Already registered for this event")
    if event.max_participants and event_repo.count_registrations(db, event_id) >= event.max_participants:
        raise HTTPException(status_code=400, detail="Event is full")
    try:
        registration = event_repo.create_registration(db, event_id=event_id, user_id=user.id)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Already registered for this event")
    return {
        "message": "Successfully registered for event",
        "registration": event_repo.serialize_registration(registration),
    }


@router.delete("/{event_id}/register")
def unregister_from_event(
    event_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    event_repo.delete_registration(db, event_id=event_id, user_id=user.id)
    return {"message": "Successfully unregistered from event"}
