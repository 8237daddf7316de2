"""
Questions API endpoints.

Forum questions, answers, voting and answer acceptance.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from campus_connect.api.deps import get_current_user
from campus_connect.api.permissions import can_modify
from campus_connect.db import models, schemas
from campus_connect.db.database import get_db
from campus_connect.db.repositories import questions as question_repo
from campus_connect.db.repositories import votes as vote_repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/questions", tags=["questions"])


@router.get("")
@router.get("/", include_in_schema=False)
def list_questions(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    tag_id: Optional[int] = Query(None, alias="tagId"),
    sort_by: str = Query("created_at", alias="sortBy"),
    order: str = Query("DESC"),
    db: Session = Depends(get_db),
):
    page, limit = schemas.clamp_pagination(page, limit)
    items, total = question_repo.list_questions(
        db,
        page=page,
        limit=limit,
        search=(search or "").strip() or None,
        tag_id=tag_id,
        sort_by=sort_by,
        order=order,
    )
    return {"questions": items, "pagination": schemas.build_pagination(page, limit, total)}


@router.get("/{question_id}")
def get_question(question_id: int, db: Session = Depends(get_db)):
    if not question_repo.increment_views(db, question_id):
        raise HTTPException(status_code=404, detail="Question not found")
    detail = question_repo.get_question_detail(db, question_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Question not found")
    return detail


@router.post("", status_code=status.HTTP_201_CREATED)
@router.post("/", status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_question(
    payload: schemas.QuestionCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    question = question_repo.create_question(db, user_id=user.id, payload=payload)
    logger.info("question_created question_id=%s user_id=%s tags=%d", question.id, user.id, len(payload.tags))
    body = question_repo.serialize_question(question)
    body["tags"] = question_repo.tags_for_question(db, question.id)
    return {"message": "Question created successfully", "question": body}


@router.patch("/answers/{answer_id}/accept")
def accept_answer(
    answer_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    answer = question_repo.get_answer(db, answer_id)
    if answer is None:
        raise HTTPException(status_code=404, detail="Answer not found")
    question = question_repo.get_question(db, answer.question_id)
    if question is None or question.user_id != user.id:
        raise HTTPException(status_code=403, detail="Only question owner can accept answers")
    answer = question_repo.accept_answer(db, answer)
    return {"message": "Answer accepted", "answer": question_repo.serialize_answer(answer)}


@router.patch("/{question_id}")
def update_question(
    question_id: int,
    payload: schemas.QuestionUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    question = question_repo.get_question(db, question_id)
    if question is None:
        raise HTTPException(status_code=404, detail="Question not found")
    if not can_modify(question.user_id, user):
        raise HTTPException(status_code=403, detail="Permission denied")
    question = question_repo.update_question(db, question, payload)
    body = question_repo.serialize_question(question)
    body["tags"] = question_repo.tags_for_question(db, question.id)
    return {"message": "Question updated", "question": body}


@router.delete("/{question_id}")
def delete_question(
    question_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    question = question_repo.get_question(db, question_id)
    if question is None:
        raise HTTPException(status_code=404, detail="Question not found")
    if not can_modify(question.user_id, user):
        raise HTTPException(status_code=403, detail="Permission denied")
    question_repo.delete_question(db, question)
    logger.info("question_deleted question_id=%s by_user_id=%s", question_id, user.id)
    return {"message": "Question deleted successfully"}


@router.post("/{question_id}/answers", status_code=status.HTTP_201_CREATED)
def create_answer(
    question_id: int,
    payload: schemas.AnswerCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    if question_repo.get_question(db, question_id) is None:
        raise HTTPException(status_code=404, detail="Question not found")
    answer = question_repo.create_answer(db, question_id=question_id, user_id=user.id, content=payload.content)
    return {"message": "Answer created successfully", "answer": question_repo.serialize_answer(answer)}


@router.post("/{votable_id}/vote")
def vote(
    votable_id: int,
    payload: schemas.VoteRequest,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    """Toggle the caller's vote on a question or an answer identified by ``votable_id``."""
    if not vote_repo.votable_exists(db, payload.votable_type, votable_id):
        raise HTTPException(status_code=404, detail=f"{payload.votable_type.capitalize()} not found")
    outcome, vote_type = vote_repo.toggle_vote(
        db,
        user_id=user.id,
        votable_type=payload.votable_type,
        votable_id=votable_id,
        vote_type=payload.vote_type,
    )
    return {
        "message": f"Vote {outcome}",
        "voteType": vote_type,
        "votes": vote_repo.get_score(db, payload.votable_type, votable_id),
    }
