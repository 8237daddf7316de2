"""
Create tables and seed default event categories.

Usage:
    python -m campus_connect.db.seed [--skip-create]

Table creation is a SQLite/dev convenience; Postgres deployments run
``alembic upgrade head`` instead, which seeds the same categories.
"""
import argparse
import logging
from typing import Iterable, Tuple

from sqlalchemy.orm import Session

from campus_connect.db import models

logger = logging.getLogger(__name__)

DEFAULT_EVENT_CATEGORIES: Tuple[Tuple[str, str], ...] = (
    ("Chorus", "Choir and singing events"),
    ("Debate", "Debate competitions and discussions"),
    ("Music", "Music concerts and performances"),
    ("Literary", "Literary events and book clubs"),
    ("Dance", "Dance performances and competitions"),
    ("Drama", "Theater and drama productions"),
    ("Sports", "Sports and athletic events"),
    ("Workshop", "Educational workshops and training sessions"),
    ("Social", "Social gatherings and networking events"),
    ("Cultural", "Cultural and artistic events"),
    ("Career", "Career development and job fairs"),
    ("Academic", "Academic conferences and seminars"),
    ("Tech", "Technology and coding events"),
    ("Art", "Art exhibitions and showcases"),
    ("Food", "Food festivals and culinary events"),
)


def seed_event_categories(db: Session, categories: Iterable[Tuple[str, str]] = DEFAULT_EVENT_CATEGORIES) -> int:
    """Insert categories whose name is missing; returns the number inserted."""
    existing = {name for (name,) in db.query(models.EventCategory.name).all()}
    inserted = 0
    for name, description in categories:
        if name in existing:
            continue
        db.add(models.EventCategory(name=name, description=description))
        existing.add(name)
        inserted += 1
    db.commit()
    return inserted


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create tables and seed default event categories.")
    parser.add_argument("--skip-create", action="store_true", help="Only seed; assume the schema exists")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    from campus_connect.db.database import SessionLocal, create_schema

    if not args.skip_create:
        create_schema()
        logger.info("schema created")
    db = SessionLocal()
    try:
        inserted = seed_event_categories(db)
    finally:
        db.close()
    logger.info("seeded %d event categories", inserted)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
