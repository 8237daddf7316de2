"""
Tag repository functions.

Find-or-create by exact name, question links, and usage counts.
"""
from __future__ import annotations

from typing import Dict, List, Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from campus_connect.db import models


def get_tag_by_name(db: Session, name: str):
    return db.query(models.Tag).filter(models.Tag.name == name).first()


def find_or_create_tag(db: Session, name: str) -> models.Tag:
    """Return the tag called ``name``, creating it when missing.

    Flushes but does not commit; the caller owns the transaction.
    """
    existing = get_tag_by_name(db, name)
    if existing:
        return existing
    tag = models.Tag(name=name)
    db.add(tag)
    db.flush()
    return tag


def set_question_tags(db: Session, question: models.Question, names: Iterable[str]) -> None:
    """Replace the question's tag links with ``names`` (no commit)."""
    wanted = [find_or_create_tag(db, name) for name in names]
    wanted_ids = {t.id for t in wanted}
    for link in list(question.question_tags):
        if link.tag_id not in wanted_ids:
            question.question_tags.remove(link)
    linked_ids = {link.tag_id for link in question.question_tags}
    for tag in wanted:
        if tag.id not in linked_ids:
            question.question_tags.append(models.QuestionTag(tag_id=tag.id))
            linked_ids.add(tag.id)


def get_tags_for_questions(db: Session, question_ids: List[int]) -> Dict[int, List[dict]]:
    if not question_ids:
        return {}
    rows = (
        db.query(models.QuestionTag.question_id, models.Tag.id, models.Tag.name)
        .join(models.Tag, models.Tag.id == models.QuestionTag.tag_id)
        .filter(models.QuestionTag.question_id.in_(question_ids))
        .order_by(models.Tag.name.asc())
        .all()
    )
    by_question: Dict[int, List[dict]] = {qid: [] for qid in question_ids}
    for question_id, tag_id, name in rows:
        by_question[question_id].append({"id": tag_id, "name": name})
    return by_question


def list_tags_with_counts(db: Session) -> List[dict]:
    question_count = func.count(models.QuestionTag.question_id).label("question_count")
    rows = (
        db.query(models.Tag, question_count)
        .outerjoin(models.QuestionTag, models.QuestionTag.tag_id == models.Tag.id)
        .group_by(models.Tag.id)
        .order_by(question_count.desc(), models.Tag.name.asc())
        .all()
    )
    return [
        {
            "id": tag.id,
            "name": tag.name,
            "created_at": tag.created_at,
            "question_count": int(count or 0),
        }
        for tag, count in rows
    ]
