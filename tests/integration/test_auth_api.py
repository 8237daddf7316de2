from datetime import timedelta

import pytest

from campus_connect.db import models
from campus_connect.db.models.base import now_utc
from campus_connect.utils.settings import refresh_settings_cache

DEFAULT_PASSWORD = "Passw0rdOk"


def _register(client, **overrides):
    body = {
        "email": "new.student@campus.edu",
        "password": "Passw0rdOk",
        "firstName": "New",
        "lastName": "Student",
    }
    body.update(overrides)
    return client.post("/api/auth/register", json=body)


def test_register_returns_token_and_user(client):
    r = _register(client, email="New.Student@Campus.edu")
    assert r.status_code == 201
    data = r.json()
    assert data["message"] == "User registered successfully"
    assert data["token"]
    assert data["user"] == {
        "id": data["user"]["id"],
        "email": "new.student@campus.edu",
        "firstName": "New",
        "lastName": "Student",
        "role": "student",
    }

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "new.student@campus.edu"
    assert "password_hash" not in me.json()
    assert "passwordHash" not in me.json()


def test_register_duplicate_email(client):
    assert _register(client).status_code == 201
    r = _register(client, email="NEW.student@campus.edu")
    assert r.status_code == 400
    assert r.json() == {"error": "User with this email already exists"}


def test_register_validation_errors_use_error_envelope(client):
    r = _register(client, password="weak")
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Password must be at least 8 characters"
    assert body["errors"]


def test_register_missing_field(client):
    r = client.post("/api/auth/register", json={"email": "a@campus.edu", "password": "Passw0rdOk", "lastName": "X"})
    assert r.status_code == 400
    assert r.json()["error"] == "First name is required"


def test_admin_role_restricted_to_configured_addresses(client):
    denied = _register(client, email="someone@campus.edu", role="admin")
    assert denied.status_code == 403

    allowed = _register(client, email="admin@campus.edu", role="admin")
    assert allowed.status_code == 201
    assert allowed.json()["user"]["role"] == "admin"


def test_login_success_resets_counter(client, db_session, student):
    student.failed_login_attempts = 2
    db_session.commit()

    r = client.post("/api/auth/login", json={"email": student.email.upper(), "password": DEFAULT_PASSWORD})
    assert r.status_code == 200
    assert r.json()["message"] == "Login successful"
    assert r.json()["user"]["id"] == student.id

    db_session.refresh(student)
    assert student.failed_login_attempts == 0
    assert student.account_locked_until is None


def test_login_unknown_email(client):
    r = client.post("/api/auth/login", json={"email": "ghost@campus.edu", "password": "whatever1A"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid email or password"}


def test_login_wrong_password_reports_attempts_remaining(client, student):
    r = client.post("/api/auth/login", json={"email": student.email, "password": "WrongPass1"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid email or password", "attemptsRemaining": 4}


def test_login_lockout_after_max_attempts(client, monkeypatch, student):
    monkeypatch.setenv("MAX_LOGIN_ATTEMPTS", "3")
    monkeypatch.setenv("LOCKOUT_TIME", "30m")
    refresh_settings_cache()

    for remaining in (2, 1):
        r = client.post("/api/auth/login", json={"email": student.email, "password": "WrongPass1"})
        assert r.status_code == 401
        assert r.json()["attemptsRemaining"] == remaining

    locked = client.post("/api/auth/login", json={"email": student.email, "password": "WrongPass1"})
    assert locked.status_code == 403
    assert locked.json()["error"] == "Account locked due to multiple failed login attempts"
    assert locked.json()["lockedUntil"]

    # Even the right password is refused while locked
    still = client.post("/api/auth/login", json={"email": student.email, "password": DEFAULT_PASSWORD})
    assert still.status_code == 403
    assert still.json()["error"] == "Account is locked due to multiple failed login attempts"


def test_expired_lock_starts_a_fresh_count(client, db_session, student):
    student.failed_login_attempts = 5
    student.account_locked_until = now_utc() - timedelta(minutes=1)
    db_session.commit()

    r = client.post("/api/auth/login", json={"email": student.email, "password": "WrongPass1"})
    assert r.status_code == 401
    assert r.json()["attemptsRemaining"] == 4


@pytest.mark.parametrize(
    "headers,error",
    [
        ({}, "No token provided"),
        ({"Authorization": "Basic abc"}, "No token provided"),
        ({"Authorization": "Bearer not-a-jwt"}, "Invalid or expired token"),
    ],
)
def test_me_requires_valid_token(client, headers, error):
    r = client.get("/api/auth/me", headers=headers)
    assert r.status_code == 401
    assert r.json() == {"error": error}


def test_me_for_deleted_user(client, db_session, student, headers_for):
    headers = headers_for(student)
    db_session.query(models.User).filter(models.User.id == student.id).delete()
    db_session.commit()
    r = client.get("/api/auth/me", headers=headers)
    assert r.status_code == 401
    assert r.json() == {"error": "User not found"}


def test_update_profile(client, student, headers_for):
    r = client.patch(
        "/api/auth/me",
        json={"bio": "  Physics major  ", "profileImageUrl": "https://img.campus.edu/me.png", "firstName": "Grace"},
        headers=headers_for(student),
    )
    assert r.status_code == 200
    data = r.json()
    assert data["firstName"] == "Grace"
    assert data["bio"] == "Physics major"
    assert data["profileImageUrl"] == "https://img.campus.edu/me.png"


def test_update_profile_rejects_bad_url(client, student, headers_for):
    r = client.patch("/api/auth/me", json={"profileImageUrl": "javascript:alert(1)"}, headers=headers_for(student))
    assert r.status_code == 400
    assert r.json()["error"] == "Profile image URL must be an http(s) URL"
