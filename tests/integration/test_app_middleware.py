from fastapi.testclient import TestClient

from campus_connect.api import main
from campus_connect.api.main import app, reset_rate_limiter
from campus_connect.utils.settings import refresh_settings_cache


def test_health_check(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {
        "status": "OK",
        "message": "Campus Connect API is running",
        "database": "connected",
    }


def test_health_check_reports_database_failure(client, monkeypatch):
    def _boom():
        raise RuntimeError("connection refused")

    monkeypatch.setattr(main, "ping", _boom)
    r = client.get("/api/health")
    assert r.status_code == 503
    body = r.json()
    assert body["status"] == "ERROR"
    assert body["database"] == "disconnected"
    assert body["error"] == "connection refused"


def test_security_headers_on_every_response(client):
    for path in ("/api/health", "/api/does-not-exist"):
        r = client.get(path)
        assert r.headers["X-Content-Type-Options"] == "nosniff"
        assert r.headers["X-Frame-Options"] == "DENY"


def test_unknown_route(client):
    r = client.get("/api/nothing-here")
    assert r.status_code == 404
    assert r.json() == {"error": "Route not found"}


def test_wrong_method_is_unknown_route(client):
    r = client.delete("/api/tags")
    assert r.status_code == 404
    assert r.json() == {"error": "Route not found"}


def test_trailing_slash_variants(client):
    assert client.get("/api/tags").status_code == 200
    assert client.get("/api/tags/").status_code == 200


def test_malformed_json(client):
    r = client.post(
        "/api/auth/login",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Malformed JSON body"


def test_path_parameter_validation(client):
    r = client.get("/api/questions/not-a-number")
    assert r.status_code == 400
    assert r.json()["error"].startswith("Question id")


def test_unhandled_errors_hide_details_in_production(monkeypatch):
    from campus_connect.db.repositories import tags as tag_repo

    def _explode(_db):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(tag_repo, "list_tags_with_counts", _explode)
    with TestClient(app, raise_server_exceptions=False) as c:
        assert c.get("/api/tags").json() == {"error": "secret internals"}

        monkeypatch.setenv("APP_ENV", "production")
        refresh_settings_cache()
        r = c.get("/api/tags")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"


def test_rate_limit_applies_to_api_routes(client, monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "2")
    monkeypatch.setenv("RATE_LIMIT_WINDOW", "15m")
    refresh_settings_cache()
    reset_rate_limiter()

    assert client.get("/api/health").status_code == 200
    assert client.get("/api/tags").status_code == 200
    limited = client.get("/api/health")
    assert limited.status_code == 429
    assert limited.json() == {"error": "Too many requests, please try again later."}
    assert int(limited.headers["Retry-After"]) >= 1
    assert limited.headers["X-Frame-Options"] == "DENY"

    # Non-API paths are not counted
    assert client.get("/docs").status_code == 200
