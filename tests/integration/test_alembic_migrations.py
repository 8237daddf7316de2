from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect, text

EXPECTED_TABLES = {
    "users",
    "questions",
    "answers",
    "votes",
    "tags",
    "question_tags",
    "mentor_profiles",
    "mentorship_requests",
    "mentorships",
    "event_categories",
    "events",
    "event_registrations",
}


def _make_alembic_config(database_url: str) -> Config:
    """Return an Alembic config pointing at the service migrations."""
    service_root = Path(__file__).resolve().parents[2]
    cfg = Config(str(service_root / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    cfg.set_main_option("script_location", str(service_root / "migrations"))
    cfg.attributes["configure_logger"] = False
    return cfg


@pytest.mark.integration
@pytest.mark.slow
def test_alembic_upgrade_and_downgrade_cycle(tmp_path, monkeypatch) -> None:
    """Migrations build the full schema with default categories and downgrade back to base."""
    monkeypatch.delenv("TEST_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    database_url = f"sqlite:///{tmp_path / 'migrations.db'}"
    cfg = _make_alembic_config(database_url)

    command.upgrade(cfg, "head")
    engine = create_engine(database_url)
    try:
        assert EXPECTED_TABLES <= set(inspect(engine).get_table_names())
        with engine.connect() as conn:
            assert conn.execute(text("SELECT count(*) FROM event_categories")).scalar() == 15

        command.downgrade(cfg, "base")
        assert not EXPECTED_TABLES & set(inspect(engine).get_table_names())

        command.upgrade(cfg, "head")
        assert EXPECTED_TABLES <= set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
