"""
Tags API endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from campus_connect.db.database import get_db
from campus_connect.db.repositories import tags as tag_repo

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("")
@router.get("/", include_in_schema=False)
def list_tags(db: Session = Depends(get_db)):
    return {"tags": tag_repo.list_tags_with_counts(db)}
