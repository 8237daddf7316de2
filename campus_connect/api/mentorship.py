"""
Mentorship API endpoints.

Mentor discovery and profiles, the request workflow, and active mentorships.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from campus_connect.api.deps import get_current_user, require_roles
from campus_connect.db import models, schemas
from campus_connect.db.database import get_db
from campus_connect.db.repositories import mentorship as mentorship_repo
from campus_connect.utils.roles import ROLE_ADMIN, ROLE_MENTOR, ROLE_STUDENT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mentorship", tags=["mentorship"])


@router.get("/mentors")
def list_mentors(
    search: Optional[str] = Query(None),
    skill: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    mentors = mentorship_repo.list_mentors(
        db,
        search=(search or "").strip() or None,
        skill=(skill or "").strip() or None,
    )
    return {"mentors": mentors}


@router.get("/mentors/{user_id}")
def get_mentor(user_id: int, db: Session = Depends(get_db)):
    mentor = mentorship_repo.get_mentor(db, user_id)
    if mentor is None:
        raise HTTPException(status_code=404, detail="Mentor profile not found")
    return mentor


@router.post("/mentors", status_code=status.HTTP_201_CREATED)
def upsert_mentor_profile(
    payload: schemas.MentorProfileUpsert,
    response: Response,
    db: Session = Depends(get_db),
    user: models.User = Depends(require_roles(ROLE_MENTOR, ROLE_ADMIN)),
):
    profile, created = mentorship_repo.upsert_profile(db, user_id=user.id, payload=payload)
    body = mentorship_repo.serialize_profile(profile)
    if created:
        logger.info("mentor_profile_created user_id=%s", user.id)
        return {"message": "Mentor profile created", "profile": body}
    response.status_code = status.HTTP_200_OK
    return {"message": "Mentor profile updated", "profile": body}


@router.get("/requests")
def list_requests(
    status_filter: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    requests = mentorship_repo.list_requests(
        db,
        user_id=user.id,
        as_mentor=user.role == ROLE_MENTOR,
        status=(status_filter or "").strip() or None,
    )
    return {"requests": requests}


@router.post("/requests", status_code=status.HTTP_201_CREATED)
def create_request(
    payload: schemas.MentorshipRequestCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(require_roles(ROLE_STUDENT)),
):
    if mentorship_repo.get_profile_by_user(db, payload.mentor_id) is None:
        raise HTTPException(status_code=404, detail="Mentor not found")
    if payload.mentor_id == user.id:
        raise HTTPException(status_code=400, detail="Cannot request mentorship from yourself")
    if mentorship_repo.get_pending_request(db, student_id=user.id, mentor_id=payload.mentor_id):
        raise HTTPException(status_code=400, detail="Pending request already exists")
    if mentorship_repo.get_active_mentorship_between(db, student_id=user.id, mentor_id=payload.mentor_id):
        raise HTTPException(status_code=400, detail="Active mentorship already exists")
    req = mentorship_repo.create_request(db, student_id=user.id, mentor_id=payload.mentor_id, message=payload.message)
    logger.info("mentorship_request_created request_id=%s student_id=%s mentor_id=%s", req.id, user.id, payload.mentor_id)
    return {"message": "Mentorship request created", "request": mentorship_repo.serialize_request(req)}


@router.patch("/requests/{request_id}")
def decide_request(
    request_id: int,
    payload: schemas.MentorshipRequestDecision,
    db: Session = Depends(get_db),
    user: models.User = Depends(require_roles(ROLE_MENTOR)),
):
    req = mentorship_repo.get_request_for_mentor(db, request_id=request_id, mentor_id=user.id)
    if req is None:
        raise HTTPException(status_code=404, detail="Request not found")
    if req.status != mentorship_repo.STATUS_PENDING:
        raise HTTPException(status_code=400, detail="Request has already been processed")

    if payload.status == mentorship_repo.STATUS_ACCEPTED:
        profile = mentorship_repo.get_profile_by_user(db, user.id)
        capacity = profile.max_mentees if profile is not None else 0
        if mentorship_repo.count_active_mentees(db, user.id) >= capacity:
            raise HTTPException(status_code=400, detail="Mentor has reached maximum mentee capacity")
        mentorship = mentorship_repo.accept_request(db, req)
        logger.info("mentorship_started mentorship_id=%s request_id=%s", mentorship.id, req.id)
    else:
        mentorship_repo.reject_request(db, req)

    return {"message": f"Request {payload.status}", "status": payload.status}


@router.get("/mentorships")
def list_mentorships(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    mentorships = mentorship_repo.list_active_mentorships(db, user_id=user.id, as_mentor=user.role == ROLE_MENTOR)
    return {"mentorships": mentorships}


@router.patch("/mentorships/{mentorship_id}/complete")
def complete_mentorship(
    mentorship_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    mentorship = mentorship_repo.get_mentorship(db, mentorship_id)
    if mentorship is None or user.id not in (mentorship.student_id, mentorship.mentor_id):
        raise HTTPException(status_code=404, detail="Mentorship not found")
    if mentorship.status != mentorship_repo.MENTORSHIP_ACTIVE:
        raise HTTPException(status_code=400, detail="Mentorship is not active")
    mentorship = mentorship_repo.complete_mentorship(db, mentorship)
    logger.info("mentorship_completed mentorship_id=%s by_user_id=%s", mentorship.id, user.id)
    return {
        "message": "Mentorship completed",
        "mentorship": {
            "id": mentorship.id,
            "student_id": mentorship.student_id,
            "mentor_id": mentorship.mentor_id,
            "status": mentorship.status,
            "started_at": mentorship.started_at,
            "ended_at": mentorship.ended_at,
        },
    }
