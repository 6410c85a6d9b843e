import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.database import get_db
from app.main import app
from app.models.generated import Availability, Users
from app.routers.scheduling import get_scheduler
from app.services import events as events_service
from app.services.scheduling import build_scheduler
from app.services.scheduling.dates import to_local_naive

from conftest import MONDAY, FakeAvailabilityStore, at, make_scheduler


@pytest.fixture()
def events(monkeypatch):
    emitted = []

    def fake_emit(event):
        emitted.append((event.type, event.model_dump()))

    monkeypatch.setattr(events_service, "emit_event", fake_emit)
    return emitted


@pytest.fixture()
def client(session_factory, events):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_scheduler] = lambda: build_scheduler(session_factory)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def people(session_factory):
    db = session_factory()
    teacher = Users(name="Anna", role="teacher")
    student = Users(name="Ben", role="student")
    db.add_all([teacher, student])
    db.commit()
    for user in (teacher, student):
        db.add(Availability(
            user_id=user.id,
            weekly_rules=json.dumps([{"day": 1, "start": "09:00", "end": "12:00"}]),
        ))
    db.commit()
    ids = teacher.id, student.id
    db.close()
    return ids


def lesson_payload(teacher_id, student_id, hour, minute=0, duration=60):
    return {
        "title": "Piano",
        "teacher_id": teacher_id,
        "student_id": student_id,
        "starts_at": at(MONDAY, hour, minute).isoformat(),
        "duration_minutes": duration,
    }


# ── Suggest ──────────────────────────────────────────────────────────────


def test_suggest_returns_slots_and_writes_log(client, people) -> None:
    teacher_id, student_id = people

    r = client.post("/scheduling/suggest", json={
        "teacher_id": teacher_id,
        "student_id": student_id,
        "from": at(MONDAY, 0).isoformat(),
        "days": 1,
        "max_suggestions": 2,
    })

    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert [s["start"] for s in body["suggestions"]] == ["2030-01-07T09:00:00", "2030-01-07T09:15:00"]
    assert body["suggestions"][0]["algorithm"] == "greedy"

    logs = client.get("/scheduling/logs", params={"teacher_id": teacher_id}).json()
    assert len(logs) == 1
    assert client.get(f"/scheduling/logs/{logs[0]['id']}").status_code == 200


def test_suggest_skips_existing_lesson(client, people) -> None:
    teacher_id, student_id = people
    assert client.post("/lessons/", json=lesson_payload(teacher_id, student_id, 9)).status_code == 201

    r = client.post("/scheduling/suggest", json={
        "teacher_id": teacher_id,
        "student_id": student_id,
        "from": at(MONDAY, 0).isoformat(),
        "days": 1,
        "buffer_minutes": 15,
        "algorithm": "Backtracking",
        "max_chunks": 1,
    })

    assert r.status_code == 200
    suggestions = r.json()["suggestions"]
    assert suggestions[0]["start"] == "2030-01-07T10:15:00"
    assert all(s["algorithm"] == "backtracking" for s in suggestions)


@pytest.mark.parametrize(
    "payload",
    [
        {"student_id": 2},
        {"teacher_id": 1},
        {"teacher_id": 1, "student_id": 2, "duration_minutes": 0},
        {"teacher_id": 1, "student_id": 2, "algorithm": "random"},
    ],
)
def test_suggest_rejects_invalid_requests(client, payload) -> None:
    r = client.post("/scheduling/suggest", json=payload)

    assert r.status_code == 400


def test_suggest_store_failure_is_503(client) -> None:
    scheduler, _ = make_scheduler(availability=FakeAvailabilityStore(fail=True))
    app.dependency_overrides[get_scheduler] = lambda: scheduler

    r = client.post("/scheduling/suggest", json={"teacher_id": 1, "student_id": 2})

    assert r.status_code == 503


# ── Lessons ──────────────────────────────────────────────────────────────


def test_create_lesson_conflict_is_409(client, people, events) -> None:
    teacher_id, student_id = people

    first = client.post("/lessons/", json=lesson_payload(teacher_id, student_id, 10))
    clash = client.post("/lessons/", json=lesson_payload(teacher_id, None, 10, 30))
    touching = client.post("/lessons/", json=lesson_payload(teacher_id, student_id, 11))

    assert first.status_code == 201
    assert first.json()["ends_at"] == "2030-01-07T11:00:00"
    assert clash.status_code == 409
    assert clash.json()["detail"] == "Teacher has another lesson near that time"
    assert touching.status_code == 201
    assert [e[0] for e in events] == ["lesson_created", "lesson_created"]


def test_cancel_frees_the_slot(client, people, events) -> None:
    teacher_id, student_id = people
    lesson = client.post("/lessons/", json=lesson_payload(teacher_id, student_id, 10)).json()

    r = client.patch(f"/lessons/{lesson['id']}/status", json={"status": "cancelled"})
    assert r.status_code == 200
    assert ("lesson_cancelled", lesson["id"]) in [(t, p["lesson_id"]) for t, p in events]

    assert client.post("/lessons/", json=lesson_payload(teacher_id, student_id, 10)).status_code == 201
    assert client.patch(f"/lessons/{lesson['id']}/status", json={"status": "scheduled"}).status_code == 409


def test_delete_lesson_not_allowed(client) -> None:
    assert client.delete("/lessons/1").status_code == 405


# ── Lesson requests ──────────────────────────────────────────────────────


def test_approve_request_creates_lesson(client, people, events) -> None:
    teacher_id, student_id = people
    req = client.post("/lesson_requests/", json={
        "teacher_id": teacher_id,
        "student_id": student_id,
        "starts_at": at(MONDAY, 9).isoformat(),
    }).json()

    r = client.post(f"/lesson_requests/{req['id']}/approve")

    assert r.status_code == 200
    assert r.json()["status"] == "approved"
    lesson = client.get(f"/lessons/{r.json()['lesson_id']}").json()
    assert lesson["starts_at"] == "2030-01-07T09:00:00"
    assert client.post(f"/lesson_requests/{req['id']}/approve").status_code == 404
    assert "lesson_request_approved" in [e[0] for e in events]


def test_approve_conflicting_request_is_409(client, people) -> None:
    teacher_id, student_id = people
    client.post("/lessons/", json=lesson_payload(teacher_id, None, 9, 30))
    req = client.post("/lesson_requests/", json={
        "teacher_id": teacher_id,
        "student_id": student_id,
        "starts_at": at(MONDAY, 9).isoformat(),
    }).json()

    r = client.post(f"/lesson_requests/{req['id']}/approve")

    assert r.status_code == 409
    pending = client.get("/lesson_requests/").json()
    assert [p["id"] for p in pending] == [req["id"]]


def test_reject_request(client, people) -> None:
    teacher_id, student_id = people
    req = client.post("/lesson_requests/", json={
        "teacher_id": teacher_id,
        "student_id": student_id,
        "starts_at": at(MONDAY, 9).isoformat(),
    }).json()

    r = client.post(f"/lesson_requests/{req['id']}/reject")

    assert r.json()["status"] == "rejected"
    assert r.json()["lesson_id"] is None


# ── Settings, holidays, availability ─────────────────────────────────────


def test_global_settings_default_and_update(client) -> None:
    default = client.get("/settings/global").json()
    assert (default["open_hour"], default["close_hour"]) == (0, 24)

    r = client.put("/settings/global", json={"open_hour": 10, "close_hour": 24, "days_open": [5, 1, 1]})
    assert r.status_code == 200
    assert r.json()["days_open"] == [1, 5]

    current = client.get("/settings/global").json()
    assert (current["open_hour"], current["close_hour"], current["days_open"]) == (10, 24, [1, 5])

    assert client.put("/settings/global", json={"open_hour": 12, "close_hour": 9}).status_code == 422


def test_global_settings_limit_suggestions(client, people) -> None:
    teacher_id, student_id = people
    client.put("/settings/global", json={"open_hour": 11, "close_hour": 21, "days_open": [1]})

    r = client.post("/scheduling/suggest", json={
        "teacher_id": teacher_id,
        "student_id": student_id,
        "from": at(MONDAY, 0).isoformat(),
        "days": 1,
    })

    assert [s["start"] for s in r.json()["suggestions"]] == ["2030-01-07T11:00:00"]


def test_duplicate_holiday_is_409(client) -> None:
    assert client.post("/holidays/", json={"date": "2030-01-08", "title": "Break"}).status_code == 201
    assert client.post("/holidays/", json={"date": "2030-01-08"}).status_code == 409
    assert client.patch("/holidays/1").status_code == 405


def test_holiday_blocks_suggestions(client, people) -> None:
    teacher_id, student_id = people
    client.post("/holidays/", json={"date": "2030-01-07"})

    r = client.post("/scheduling/suggest", json={
        "teacher_id": teacher_id,
        "student_id": student_id,
        "from": at(MONDAY, 0).isoformat(),
        "days": 1,
    })

    assert r.json()["suggestions"] == []


def test_availability_put_validates_and_replaces(client, people) -> None:
    teacher_id, _ = people

    bad = client.put(f"/availability/{teacher_id}", json={
        "weekly_rules": [{"day": 1, "start": "12:00", "end": "09:00"}],
    })
    assert bad.status_code == 422

    r = client.put(f"/availability/{teacher_id}", json={
        "weekly_rules": [{"day": 2, "start": "14:00", "end": "16:00"}],
        "exceptions": [{"date": "2030-01-08", "slots": []}],
    })
    assert r.status_code == 200

    doc = client.get(f"/availability/{teacher_id}").json()
    assert doc["weekly_rules"] == [{"day": 2, "start": "14:00", "end": "16:00"}]
    assert doc["exceptions"] == [{"date": "2030-01-08", "slots": []}]

    assert client.put("/availability/999", json={}).status_code == 404


def test_users_soft_delete(client) -> None:
    created = client.post("/users/", json={"name": "Clara", "role": "teacher"}).json()

    assert client.get("/users/", params={"role": "teacher"}).json()[0]["name"] == "Clara"
    assert client.delete(f"/users/{created['id']}").status_code == 204
    assert client.get("/users/").json() == []


def test_health_reports_redis_state(client, monkeypatch) -> None:
    from app import main

    def broken_ping():
        raise ConnectionError("redis down")

    monkeypatch.setattr(main.redis_client, "ping", broken_ping)

    assert client.get("/health").json() == {"redis": False}


def test_party_with_upcoming_lessons_cannot_be_deactivated(client, people) -> None:
    teacher_id, student_id = people
    lesson = client.post("/lessons/", json=lesson_payload(teacher_id, student_id, 10)).json()

    assert client.delete(f"/users/{teacher_id}").status_code == 409
    assert client.patch(f"/users/{student_id}", json={"role": "teacher"}).status_code == 409
    assert client.patch(f"/users/{student_id}", json={"notes": "grade 3"}).status_code == 200

    client.patch(f"/lessons/{lesson['id']}/status", json={"status": "cancelled"})
    assert client.delete(f"/users/{teacher_id}").status_code == 204


def test_availability_exception_with_utc_slot_is_kept(client, people) -> None:
    teacher_id, _ = people
    start_utc = datetime(2030, 1, 7, 9, tzinfo=timezone.utc)

    r = client.put(f"/availability/{teacher_id}", json={
        "weekly_rules": [{"day": 1, "start": "09:00", "end": "12:00"}],
        "exceptions": [{
            "date": "2030-01-07",
            "slots": [{"start": "2030-01-07T09:00:00Z", "end": "2030-01-07T10:00:00Z"}],
        }],
    })
    assert r.status_code == 200

    doc = client.get(f"/availability/{teacher_id}").json()
    slot = doc["exceptions"][0]["slots"][0]
    assert slot["start"] == to_local_naive(start_utc).isoformat()
    assert slot["end"] == to_local_naive(start_utc + timedelta(hours=1)).isoformat()


def test_closed_exception_day_replaces_weekly_rules(client, people) -> None:
    teacher_id, student_id = people
    client.put(f"/availability/{teacher_id}", json={
        "weekly_rules": [{"day": 1, "start": "09:00", "end": "12:00"}],
        "exceptions": [{"date": "2030-01-07", "slots": []}],
    })

    r = client.post("/scheduling/suggest", json={
        "teacher_id": teacher_id,
        "student_id": student_id,
        "from": at(MONDAY, 0).isoformat(),
        "days": 1,
    })

    assert r.json()["suggestions"] == []


# ── Reschedule and recurring series ──────────────────────────────────────


def test_reschedule_ignores_the_lesson_itself(client, people, events) -> None:
    teacher_id, student_id = people
    lesson = client.post("/lessons/", json=lesson_payload(teacher_id, student_id, 10)).json()

    r = client.put(f"/lessons/{lesson['id']}", json={"starts_at": at(MONDAY, 10, 30).isoformat()})

    assert r.status_code == 200
    assert r.json()["starts_at"] == "2030-01-07T10:30:00"
    assert r.json()["ends_at"] == "2030-01-07T11:30:00"
    assert events[-1][0] == "lesson_rescheduled"


def test_reschedule_into_other_lesson_is_409(client, people) -> None:
    teacher_id, student_id = people
    lesson = client.post("/lessons/", json=lesson_payload(teacher_id, student_id, 10)).json()
    client.post("/lessons/", json=lesson_payload(teacher_id, None, 12))

    moved = client.put(f"/lessons/{lesson['id']}", json={"starts_at": at(MONDAY, 12, 30).isoformat()})
    longer = client.put(f"/lessons/{lesson['id']}", json={"duration_minutes": 150})

    assert moved.status_code == 409
    assert moved.json()["detail"] == "Teacher conflict at new time"
    assert longer.status_code == 409

    unchanged = client.get(f"/lessons/{lesson['id']}").json()
    assert (unchanged["starts_at"], unchanged["duration_minutes"]) == ("2030-01-07T10:00:00", 60)


def test_reschedule_checks_student_too(client, people) -> None:
    teacher_id, student_id = people
    lesson = client.post("/lessons/", json=lesson_payload(teacher_id, student_id, 10)).json()
    other_teacher = client.post("/users/", json={"name": "Dora", "role": "teacher"}).json()
    client.post("/lessons/", json=lesson_payload(other_teacher["id"], student_id, 14))

    r = client.put(f"/lessons/{lesson['id']}", json={"starts_at": at(MONDAY, 14).isoformat()})

    assert r.status_code == 409
    assert r.json()["detail"] == "Student conflict at new time"


def test_retitle_only_and_missing_lesson(client, people) -> None:
    teacher_id, student_id = people
    lesson = client.post("/lessons/", json=lesson_payload(teacher_id, student_id, 10)).json()

    r = client.put(f"/lessons/{lesson['id']}", json={"title": "Theory"})

    assert r.status_code == 200
    assert r.json()["title"] == "Theory"
    assert client.put("/lessons/999", json={"title": "x"}).status_code == 404


def test_recurring_series_expands_weekly_occurrences(client, people, events) -> None:
    teacher_id, student_id = people

    r = client.post("/lessons/recurring", json={
        "title": "Violin",
        "teacher_id": teacher_id,
        "student_id": student_id,
        "starts_at": at(MONDAY, 10).isoformat(),
        "by_day": [3, 1],
        "count": 4,
    })

    assert r.status_code == 201
    body = r.json()
    assert body["created"] == 4
    assert [lesson["starts_at"] for lesson in body["lessons"]] == [
        "2030-01-07T10:00:00",
        "2030-01-09T10:00:00",
        "2030-01-14T10:00:00",
        "2030-01-16T10:00:00",
    ]
    listed = client.get("/lessons/", params={"series_id": body["series_id"]}).json()
    assert len(listed) == 4
    assert all(lesson["series_id"] == body["series_id"] for lesson in listed)
    assert [e[0] for e in events] == ["lesson_series_created"]


def test_recurring_series_with_conflict_creates_nothing(client, people) -> None:
    teacher_id, student_id = people
    client.post("/lessons/", json=lesson_payload(teacher_id, None, 10, 30) | {
        "starts_at": at(MONDAY + timedelta(days=7), 10, 30).isoformat(),
    })

    r = client.post("/lessons/recurring", json={
        "title": "Violin",
        "teacher_id": teacher_id,
        "student_id": student_id,
        "starts_at": at(MONDAY, 10).isoformat(),
        "count": 3,
    })

    assert r.status_code == 409
    assert r.json()["detail"] == "Teacher has another lesson near 2030-01-14 10:00"
    assert len(client.get("/lessons/", params={"teacher_id": teacher_id}).json()) == 1


def test_recurring_series_count_is_bounded(client, people) -> None:
    teacher_id, _ = people

    r = client.post("/lessons/recurring", json={
        "title": "Violin",
        "teacher_id": teacher_id,
        "starts_at": at(MONDAY, 10).isoformat(),
        "count": 101,
    })

    assert r.status_code == 422
