"""
Question and answer repository functions.

List/detail projections carry author fields, vote scores and answer counts
computed with correlated subqueries so joins never multiply aggregates.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from campus_connect.db import models, schemas
from campus_connect.db.repositories import tags as tag_repo
from campus_connect.db.repositories import votes as vote_repo

SORTABLE_COLUMNS = ("created_at", "views", "votes")


def like_pattern(term: str) -> str:
    """Lower-cased substring pattern with LIKE wildcards escaped."""
    escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _answer_count_subquery():
    return (
        select(func.count(models.Answer.id))
        .where(models.Answer.question_id == models.Question.id)
        .scalar_subquery()
    )


def _author_fields(user: Optional[models.User]) -> dict:
    return {
        "user_id": user.id if user else None,
        "first_name": user.first_name if user else None,
        "last_name": user.last_name if user else None,
        "email": user.email if user else None,
    }


def _question_fields(question: models.Question) -> dict:
    return {
        "id": question.id,
        "title": question.title,
        "content": question.content,
        "views": question.views,
        "created_at": question.created_at,
        "updated_at": question.updated_at,
    }


def get_question(db: Session, question_id: int) -> Optional[models.Question]:
    return db.query(models.Question).filter(models.Question.id == question_id).first()


def list_questions(
    db: Session,
    *,
    page: int = 1,
    limit: int = schemas.DEFAULT_PAGE_SIZE,
    search: Optional[str] = None,
    tag_id: Optional[int] = None,
    sort_by: str = "created_at",
    order: str = "DESC",
) -> Tuple[List[dict], int]:
    """Return (rows, total) for one page of questions."""
    votes = vote_repo.score_subquery("question", models.Question.id).label("votes")
    answer_count = _answer_count_subquery().label("answer_count")

    filters = []
    if search:
        pattern = like_pattern(search)
        filters.append(
            func.lower(models.Question.title).like(pattern, escape="\\")
            | func.lower(models.Question.content).like(pattern, escape="\\")
        )
    if tag_id is not None:
        filters.append(
            models.Question.id.in_(
                select(models.QuestionTag.question_id).where(models.QuestionTag.tag_id == tag_id)
            )
        )

    total = db.query(func.count(models.Question.id)).filter(*filters).scalar() or 0

    sort_columns = {
        "created_at": models.Question.created_at,
        "views": models.Question.views,
        "votes": votes,
    }
    sort_column = sort_columns.get(sort_by, models.Question.created_at)
    ascending = (order or "").upper() == "ASC"
    ordering = [
        sort_column.asc() if ascending else sort_column.desc(),
        models.Question.id.asc() if ascending else models.Question.id.desc(),
    ]

    rows = (
        db.query(models.Question, models.User, votes, answer_count)
        .outerjoin(models.User, models.User.id == models.Question.user_id)
        .filter(*filters)
        .order_by(*ordering)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    tags_by_question = tag_repo.get_tags_for_questions(db, [q.id for q, _u, _v, _c in rows])
    items = []
    for question, author, score, count in rows:
        item = _question_fields(question)
        item.update(_author_fields(author))
        item["votes"] = int(score or 0)
        item["answer_count"] = int(count or 0)
        item["tags"] = tags_by_question.get(question.id, [])
        items.append(item)
    return items, int(total)


def increment_views(db: Session, question_id: int) -> bool:
    updated = (
        db.query(models.Question)
        .filter(models.Question.id == question_id)
        .update({models.Question.views: models.Question.views + 1}, synchronize_session=False)
    )
    db.commit()
    return bool(updated)


def list_answers(db: Session, question_id: int) -> List[dict]:
    votes = vote_repo.score_subquery("answer", models.Answer.id).label("votes")
    rows = (
        db.query(models.Answer, models.User, votes)
        .outerjoin(models.User, models.User.id == models.Answer.user_id)
        .filter(models.Answer.question_id == question_id)
        .order_by(models.Answer.is_accepted.desc(), models.Answer.created_at.asc(), models.Answer.id.asc())
        .all()
    )
    answers = []
    for answer, author, score in rows:
        item = serialize_answer(answer)
        item.update(_author_fields(author))
        item["votes"] = int(score or 0)
        answers.append(item)
    return answers


def get_question_detail(db: Session, question_id: int) -> Optional[dict]:
    question = get_question(db, question_id)
    if question is None:
        return None
    item = _question_fields(question)
    item.update(_author_fields(question.author))
    item["votes"] = vote_repo.get_score(db, "question", question.id)
    item["tags"] = tag_repo.get_tags_for_questions(db, [question.id]).get(question.id, [])
    item["answers"] = list_answers(db, question.id)
    return item


def serialize_question(question: models.Question) -> dict:
    item = _question_fields(question)
    item["user_id"] = question.user_id
    return item


def serialize_answer(answer: models.Answer) -> dict:
    return {
        "id": answer.id,
        "question_id": answer.question_id,
        "content": answer.content,
        "is_accepted": bool(answer.is_accepted),
        "created_at": answer.created_at,
        "updated_at": answer.updated_at,
    }


def create_question(db: Session, *, user_id: int, payload: schemas.QuestionCreate) -> models.Question:
    question = models.Question(user_id=user_id, title=payload.title, content=payload.content, views=0)
    db.add(question)
    db.flush()
    tag_repo.set_question_tags(db, question, payload.tags)
    db.commit()
    db.refresh(question)
    return question


def update_question(db: Session, question: models.Question, payload: schemas.QuestionUpdate) -> models.Question:
    data = payload.model_dump(exclude_unset=True)
    tags = data.pop("tags", None)
    for key, value in data.items():
        if value is not None:
            setattr(question, key, value)
    if tags is not None:
        tag_repo.set_question_tags(db, question, tags)
    db.commit()
    db.refresh(question)
    return question


def delete_question(db: Session, question: models.Question) -> None:
    answer_ids = [a.id for a in question.answers]
    vote_repo.delete_votes_for(db, "answer", answer_ids)
    vote_repo.delete_votes_for(db, "question", [question.id])
    db.delete(question)
    db.commit()


def get_answer(db: Session, answer_id: int) -> Optional[models.Answer]:
    return db.query(models.Answer).filter(models.Answer.id == answer_id).first()


def create_answer(db: Session, *, question_id: int, user_id: int, content: str) -> models.Answer:
    answer = models.Answer(question_id=question_id, user_id=user_id, content=content, is_accepted=False)
    db.add(answer)
    db.commit()
    db.refresh(answer)
    return answer


def accept_answer(db: Session, answer: models.Answer) -> models.Answer:
    """Mark ``answer`` accepted and every sibling answer not accepted, in one commit."""
    db.query(models.Answer).filter(
        models.Answer.question_id == answer.question_id,
        models.Answer.id != answer.id,
    ).update({models.Answer.is_accepted: False}, synchronize_session=False)
    answer.is_accepted = True
    db.commit()
    db.refresh(answer)
    return answer


def tags_for_question(db: Session, question_id: int) -> List[Dict]:
    return tag_repo.get_tags_for_questions(db, [question_id]).get(question_id, [])
