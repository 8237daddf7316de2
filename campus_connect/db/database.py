"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration with sensible
fallbacks (a local SQLite file for development, SQLite in-memory under
pytest) and exposes the FastAPI session dependency.
"""
import json
import os
import sys
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def _get_database_url() -> str:
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    db_user = os.getenv("POSTGRES_USER")
    db_password = os.getenv("POSTGRES_PASSWORD")
    db_host = os.getenv("POSTGRES_HOST")
    db_port = os.getenv("POSTGRES_PORT")
    db_name = os.getenv("POSTGRES_DB")

    components = [db_user, db_password, db_host, db_port, db_name]
    if all(components):
        return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"
    if any(components):
        missing = []
        if not db_user: missing.append("POSTGRES_USER")
        if not db_password: missing.append("POSTGRES_PASSWORD")
        if not db_host: missing.append("POSTGRES_HOST")
        if not db_port: missing.append("POSTGRES_PORT")
        if not db_name: missing.append("POSTGRES_DB")
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")

    # Nothing configured: local SQLite file so the service runs without setup
    sqlite_path = os.getenv("CAMPUS_CONNECT_SQLITE_PATH", "campus_connect.db")
    return f"sqlite:///{sqlite_path}"


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while a test runs, so also look for
    the pytest module which is imported before collection starts.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


def _json_serializer(value) -> str:
    # Keep non-ASCII text raw so stored JSON matches PostgreSQL's JSONB text form
    return json.dumps(value, ensure_ascii=False)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True, "json_serializer": _json_serializer}
    kwargs = {"connect_args": {"check_same_thread": False}, "json_serializer": _json_serializer}
    if ":memory:" in url:
        # One shared connection so the schema persists across sessions
        kwargs["poolclass"] = StaticPool
    return kwargs


explicit_test_db = os.getenv("CAMPUS_CONNECT_TEST_DB")

if explicit_test_db:
    DATABASE_URL = explicit_test_db
elif _is_pytest_runtime():
    DATABASE_URL = "sqlite+pysqlite:///:memory:"
else:
    DATABASE_URL = _get_database_url()

engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))

if DATABASE_URL.startswith("sqlite"):
    from sqlalchemy import event

    @event.listens_for(engine, "connect")
    def _configure_sqlite_connection(dbapi_connection, _record):  # pragma: no cover - driver hook
        # SQLite's built-in lower() only folds ASCII
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_schema() -> None:
    """Create all tables from model metadata (SQLite/dev and tests).

    Production databases are managed by Alembic migrations.
    """
    from campus_connect.db import models  # local import to avoid circular import at module load
    models.Base.metadata.create_all(bind=engine)


def ping() -> None:
    """Run a trivial query; raises when the database is unreachable."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def get_db():
    """Dependency to get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
