"""
Authentication API endpoints.

Registration, login with account lockout, and the current user's profile.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from campus_connect.api.deps import get_current_user
from campus_connect.db import models, schemas
from campus_connect.db.database import get_db
from campus_connect.db.repositories import users as user_repo
from campus_connect.services.auth_service import LOGIN_LOCKED, AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_summary(user: models.User) -> dict:
    return schemas.UserSummary.model_validate(user).model_dump(mode="json", by_alias=True)


def _user_profile(user: models.User) -> dict:
    return schemas.UserProfile.model_validate(user).model_dump(mode="json", by_alias=True)


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: schemas.UserRegister, db: Session = Depends(get_db)):
    result = AuthService(db).register(payload)
    if not result.success:
        raise HTTPException(status_code=result.status_code, detail=result.message)
    return {
        "message": result.message,
        "token": result.token,
        "user": _user_summary(result.user),
    }


@router.post("/login")
def login(payload: schemas.UserLogin, db: Session = Depends(get_db)):
    result = AuthService(db).login(payload.email, payload.password)
    if result.success:
        return {
            "message": result.message,
            "token": result.token,
            "user": _user_summary(result.user),
        }
    if result.outcome == LOGIN_LOCKED:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": result.message, "lockedUntil": result.locked_until.isoformat()},
        )
    detail = {"message": result.message}
    if result.attempts_remaining is not None:
        detail["attemptsRemaining"] = result.attempts_remaining
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


@router.get("/me")
def read_me(user: models.User = Depends(get_current_user)):
    return _user_profile(user)


@router.patch("/me")
def update_me(
    payload: schemas.UserProfileUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    user = user_repo.update_profile(db, user, payload)
    return _user_profile(user)
