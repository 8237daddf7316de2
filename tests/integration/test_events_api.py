from datetime import timedelta

import pytest

from campus_connect.db.models.base import now_utc


def _iso(delta: timedelta) -> str:
    return (now_utc() + delta).isoformat()


def _payload(**overrides):
    body = {
        "title": "Robotics Club Kickoff",
        "description": "Meet the team and see this year's robots in action.",
        "location": "Engineering Hall 101",
        "eventDate": _iso(timedelta(days=7)),
    }
    body.update(overrides)
    return body


@pytest.fixture
def create_event(client, headers_for):
    def _create(user, **overrides):
        r = client.post("/api/events", json=_payload(**overrides), headers=headers_for(user))
        assert r.status_code == 201, r.text
        return r.json()["event"]

    return _create


def _category_id(client, name):
    categories = client.get("/api/events/categories/all").json()["categories"]
    return next(c["id"] for c in categories if c["name"] == name)


def test_categories_are_seeded_and_sorted(client):
    r = client.get("/api/events/categories/all")
    assert r.status_code == 200
    names = [c["name"] for c in r.json()["categories"]]
    assert len(names) == 15
    assert names == sorted(names)
    assert names[0] == "Academic"


def test_admin_events_are_approved_immediately(client, admin, headers_for):
    r = client.post("/api/events", json=_payload(), headers=headers_for(admin))
    assert r.status_code == 201
    assert r.json()["message"] == "Event created and approved"
    assert r.json()["event"]["is_approved"] is True


def test_student_events_wait_for_approval(client, student, admin, headers_for):
    r = client.post("/api/events", json=_payload(), headers=headers_for(student))
    assert r.status_code == 201
    assert r.json()["message"] == "Event created, pending approval"
    event = r.json()["event"]
    assert event["is_approved"] is False

    assert client.get("/api/events").json()["events"] == []
    # Non-admins cannot opt into pending events
    hidden = client.get("/api/events", params={"approvedOnly": "false"}, headers=headers_for(student))
    assert hidden.json()["events"] == []
    shown = client.get("/api/events", params={"approvedOnly": "false"}, headers=headers_for(admin))
    assert [e["id"] for e in shown.json()["events"]] == [event["id"]]

    denied = client.patch(f"/api/events/{event['id']}/approve", headers=headers_for(student))
    assert denied.status_code == 403
    approved = client.patch(f"/api/events/{event['id']}/approve", headers=headers_for(admin))
    assert approved.status_code == 200
    assert approved.json()["event"]["is_approved"] is True
    assert [e["id"] for e in client.get("/api/events").json()["events"]] == [event["id"]]


def test_event_validation(client, student, headers_for):
    missing_date = _payload()
    del missing_date["eventDate"]
    r = client.post("/api/events", json=missing_date, headers=headers_for(student))
    assert r.status_code == 400
    assert r.json()["error"] == "Valid event date is required"

    late_deadline = _payload(eventDate=_iso(timedelta(days=2)), registrationDeadline=_iso(timedelta(days=3)))
    r = client.post("/api/events", json=late_deadline, headers=headers_for(student))
    assert r.status_code == 400
    assert r.json()["error"] == "Registration deadline must not be after the event date"

    r = client.post("/api/events", json=_payload(categoryId=99999), headers=headers_for(student))
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid category"}


def test_zero_means_no_limit_or_category(client, admin, create_event):
    event = create_event(admin, maxParticipants=0, categoryId="")
    assert event["max_participants"] is None
    assert event["category_id"] is None


def test_list_events_filters_and_order(client, admin, create_event):
    tech = _category_id(client, "Tech")
    later = create_event(admin, title="Hackathon Finals", eventDate=_iso(timedelta(days=20)), categoryId=tech)
    sooner = create_event(admin, title="Poetry Night", eventDate=_iso(timedelta(days=3)))

    events = client.get("/api/events").json()
    assert [e["id"] for e in events["events"]] == [sooner["id"], later["id"]]
    assert events["pagination"]["total"] == 2
    assert events["events"][1]["category_name"] == "Tech"
    assert events["events"][1]["registered_count"] == 0
    assert events["events"][0]["first_name"] == admin.first_name

    by_category = client.get("/api/events", params={"categoryId": tech}).json()["events"]
    assert [e["id"] for e in by_category] == [later["id"]]

    by_search = client.get("/api/events", params={"search": "poetry"}).json()["events"]
    assert [e["id"] for e in by_search] == [sooner["id"]]

    window = client.get(
        "/api/events",
        params={"startDate": _iso(timedelta(days=10)), "endDate": _iso(timedelta(days=30))},
    ).json()["events"]
    assert [e["id"] for e in window] == [later["id"]]

    bad = client.get("/api/events", params={"startDate": "next tuesday"})
    assert bad.status_code == 400
    assert bad.json() == {"error": "Invalid startDate"}


def test_event_detail_lists_registrations(client, admin, make_user, headers_for, create_event):
    event = create_event(admin)
    first, second = make_user(), make_user()
    client.post(f"/api/events/{event['id']}/register", headers=headers_for(first))
    client.post(f"/api/events/{event['id']}/register", headers=headers_for(second))

    detail = client.get(f"/api/events/{event['id']}").json()
    assert detail["email"] == admin.email
    assert detail["registered_count"] == 2
    assert [r["user_id"] for r in detail["registrations"]] == [second.id, first.id]

    missing = client.get("/api/events/99999")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Event not found"}


def test_update_event_permissions_and_approval_reset(client, student, make_user, admin, headers_for):
    created = client.post("/api/events", json=_payload(), headers=headers_for(student)).json()["event"]
    client.patch(f"/api/events/{created['id']}/approve", headers=headers_for(admin))
    url = f"/api/events/{created['id']}"

    denied = client.put(url, json=_payload(title="Taken over event"), headers=headers_for(make_user()))
    assert denied.status_code == 403
    assert denied.json() == {"error": "Permission denied"}

    own = client.put(url, json=_payload(title="Robotics Kickoff v2"), headers=headers_for(student))
    assert own.status_code == 200
    assert own.json()["message"] == "Event updated, pending approval"
    assert own.json()["event"]["is_approved"] is False

    by_admin = client.put(url, json=_payload(title="Robotics Kickoff v3"), headers=headers_for(admin))
    assert by_admin.json()["message"] == "Event updated"
    assert by_admin.json()["event"]["is_approved"] is False

    assert client.put("/api/events/99999", json=_payload(), headers=headers_for(admin)).status_code == 404


def test_delete_event(client, student, make_user, admin, headers_for):
    event = client.post("/api/events", json=_payload(), headers=headers_for(student)).json()["event"]
    url = f"/api/events/{event['id']}"
    assert client.delete(url, headers=headers_for(make_user())).status_code == 403
    r = client.delete(url, headers=headers_for(admin))
    assert r.status_code == 200
    assert r.json() == {"message": "Event deleted successfully"}
    assert client.get(url).status_code == 404


def test_registration_rules(client, admin, student, make_user, headers_for, create_event):
    event = create_event(admin, maxParticipants=1)
    url = f"/api/events/{event['id']}/register"

    r = client.post(url, headers=headers_for(student))
    assert r.status_code == 201
    assert r.json()["message"] == "Successfully registered for event"
    assert r.json()["registration"]["user_id"] == student.id

    again = client.post(url, headers=headers_for(student))
    assert again.status_code == 400
    assert again.json() == {"error": "Already registered for this event"}

    full = client.post(url, headers=headers_for(make_user()))
    assert full.status_code == 400
    assert full.json() == {"error": "Event is full"}

    left = client.delete(url, headers=headers_for(student))
    assert left.status_code == 200
    assert left.json() == {"message": "Successfully unregistered from event"}
    # Leaving twice is harmless
    assert client.delete(url, headers=headers_for(student)).status_code == 200

    assert client.post(url, headers=headers_for(make_user())).status_code == 201


def test_registration_deadline_and_approval(client, admin, student, headers_for, create_event):
    closed = create_event(admin, registrationDeadline=_iso(timedelta(days=-1)))
    r = client.post(f"/api/events/{closed['id']}/register", headers=headers_for(student))
    assert r.status_code == 400
    assert r.json() == {"error": "Registration deadline has passed"}

    pending = create_event(student)
    r = client.post(f"/api/events/{pending['id']}/register", headers=headers_for(student))
    assert r.status_code == 404
    assert r.json() == {"error": "Event not found or not approved"}

    r = client.post("/api/events/99999/register", headers=headers_for(student))
    assert r.status_code == 404


def test_event_search_folds_non_ascii_case(client, admin, create_event):
    event = create_event(admin, title="École d'été open day")
    create_event(admin, title="Robotics Club Kickoff")
    hits = client.get("/api/events", params={"search": "école"}).json()["events"]
    assert [e["id"] for e in hits] == [event["id"]]


def test_event_list_ignores_unparseable_pagination(client):
    r = client.get("/api/events", params={"page": "two", "limit": "many"})
    assert r.status_code == 200
    assert r.json()["pagination"]["page"] == 1
    assert r.json()["pagination"]["limit"] == 10
