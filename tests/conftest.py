import os

# Settings are read lazily but cached; set the test environment before the
# app (and its engine) is imported.
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-campus-connect")
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "0"
os.environ["ADMIN_EMAILS"] = "admin@campus.edu"
os.environ["APP_ENV"] = "test"
os.environ.pop("CAMPUS_CONNECT_TEST_DB", None)

import pytest
from fastapi.testclient import TestClient

from campus_connect.api.main import app, reset_rate_limiter
from campus_connect.db import models
from campus_connect.db.database import SessionLocal, engine
from campus_connect.db.repositories import users as user_repo
from campus_connect.db.seed import seed_event_categories
from campus_connect.utils.credentials import create_access_token
from campus_connect.utils.settings import refresh_settings_cache

DEFAULT_PASSWORD = "Passw0rdOk"


@pytest.fixture(scope="session", autouse=True)
def _schema():
    models.Base.metadata.create_all(bind=engine)
    yield
    models.Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_tables(_schema):
    """Start every test with empty tables plus the default event categories."""
    with engine.begin() as conn:
        for table in reversed(models.Base.metadata.sorted_tables):
            conn.execute(table.delete())
    session = SessionLocal()
    try:
        seed_event_categories(session)
    finally:
        session.close()
    yield


@pytest.fixture(autouse=True)
def _fresh_settings():
    refresh_settings_cache()
    reset_rate_limiter()
    yield
    refresh_settings_cache()
    reset_rate_limiter()


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make(role="student", email=None, password=DEFAULT_PASSWORD, first_name="Test", last_name=None):
        counter["n"] += 1
        return user_repo.create_user(
            db_session,
            email=email or f"{role}{counter['n']}@campus.edu",
            password=password,
            first_name=first_name,
            last_name=last_name or f"User{counter['n']}",
            role=role,
        )

    return _make


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def student(make_user):
    return make_user("student")


@pytest.fixture
def mentor(make_user):
    return make_user("mentor")


@pytest.fixture
def admin(make_user):
    return make_user("admin", email="admin@campus.edu")
