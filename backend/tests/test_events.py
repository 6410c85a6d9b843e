import json
from types import SimpleNamespace

from app.services import events as events_service

from conftest import MONDAY, at


def lesson(**overrides):
    fields = dict(id=7, teacher_id=1, student_id=2, starts_at=at(MONDAY, 10), series_id=None)
    fields.update(overrides)
    return SimpleNamespace(**fields)


class FakeRedis:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.pushed = []

    def rpush(self, queue, value):
        if self.fail:
            raise ConnectionError("redis down")
        self.pushed.append((queue, value))


def test_lesson_event_payload(monkeypatch) -> None:
    redis = FakeRedis()
    monkeypatch.setattr(events_service, "redis_client", redis)

    events_service.emit_lesson_event("lesson_rescheduled", lesson())

    queue, raw = redis.pushed[0]
    payload = json.loads(raw)
    assert queue == events_service.P2P_QUEUE
    assert payload["type"] == "lesson_rescheduled"
    assert (payload["lesson_id"], payload["teacher_id"], payload["student_id"]) == (7, 1, 2)
    assert payload["starts_at"] == "2030-01-07T10:00:00"
    assert isinstance(payload["ts"], int)


def test_redis_failure_does_not_reach_caller(monkeypatch) -> None:
    monkeypatch.setattr(events_service, "redis_client", FakeRedis(fail=True))

    events_service.emit_request_event(
        "lesson_request_rejected",
        SimpleNamespace(id=3, teacher_id=1, student_id=2, lesson_id=None),
    )
