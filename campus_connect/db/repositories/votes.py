"""
Vote repository functions.

Votes are polymorphic over questions and answers; scores are SQL aggregates.
"""
from __future__ import annotations

from typing import Optional, Tuple

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from campus_connect.db import models

VOTABLE_MODELS = {
    "question": models.Question,
    "answer": models.Answer,
}


def _score_select(votable_type: str, id_expr):
    weight = case(
        (models.Vote.vote_type == "upvote", 1),
        (models.Vote.vote_type == "downvote", -1),
        else_=0,
    )
    return (
        select(func.coalesce(func.sum(weight), 0))
        .where(models.Vote.votable_type == votable_type, models.Vote.votable_id == id_expr)
    )


def score_subquery(votable_type: str, id_column):
    """Correlated scalar subquery computing upvotes minus downvotes for ``id_column``."""
    return _score_select(votable_type, id_column).scalar_subquery()


def get_score(db: Session, votable_type: str, votable_id: int) -> int:
    value = db.execute(_score_select(votable_type, votable_id)).scalar()
    return int(value or 0)


def votable_exists(db: Session, votable_type: str, votable_id: int) -> bool:
    model = VOTABLE_MODELS.get(votable_type)
    if model is None:
        return False
    return db.query(model.id).filter(model.id == votable_id).first() is not None


def get_vote(db: Session, *, user_id: int, votable_type: str, votable_id: int) -> Optional[models.Vote]:
    return (
        db.query(models.Vote)
        .filter(
            models.Vote.user_id == user_id,
            models.Vote.votable_type == votable_type,
            models.Vote.votable_id == votable_id,
        )
        .first()
    )


def toggle_vote(
    db: Session,
    *,
    user_id: int,
    votable_type: str,
    votable_id: int,
    vote_type: str,
) -> Tuple[str, Optional[str]]:
    """Apply toggle semantics and return (outcome, resulting vote type).

    Outcome is one of 'added', 'removed', 'updated'.
    """
    existing = get_vote(db, user_id=user_id, votable_type=votable_type, votable_id=votable_id)
    if existing is None:
        db.add(models.Vote(user_id=user_id, votable_type=votable_type, votable_id=votable_id, vote_type=vote_type))
        db.commit()
        return "added", vote_type
    if existing.vote_type == vote_type:
        db.delete(existing)
        db.commit()
        return "removed", None
    existing.vote_type = vote_type
    db.commit()
    return "updated", vote_type


def delete_votes_for(db: Session, votable_type: str, votable_ids) -> None:
    """Remove votes pointing at deleted targets (no commit)."""
    ids = list(votable_ids)
    if not ids:
        return
    db.query(models.Vote).filter(
        models.Vote.votable_type == votable_type,
        models.Vote.votable_id.in_(ids),
    ).delete(synchronize_session=False)
