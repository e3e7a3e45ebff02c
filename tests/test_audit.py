from app.routevault.audit import LOG_LIMIT, list_events, record_event
from app.routevault.models import Role, StoreDocument
from app.routevault.security import Claims

DEV = Claims(id=1, username="admin", role=Role.DEVELOPER)


def test_record_event_fields():
    doc = StoreDocument()
    entry = record_event(doc, actor=DEV, action="approve_submission", details={"submissionId": 5})
    assert list_events(doc) == [entry]
    assert entry.to_dict()["user"] == "admin"
    assert entry.to_dict()["userId"] == 1
    assert entry.to_dict()["role"] == "developer"
    assert entry.details == {"submissionId": 5}
    assert entry.timestamp.endswith("Z")


def test_newest_first_with_increasing_ids():
    doc = StoreDocument()
    for n in range(5):
        record_event(doc, actor=DEV, action=f"a{n}")
    events = list_events(doc)
    assert [e.action for e in events] == ["a4", "a3", "a2", "a1", "a0"]
    ids = [e.id for e in events]
    assert ids == sorted(ids, reverse=True)
    assert len(set(ids)) == 5


def test_log_is_capped_and_evicts_oldest():
    doc = StoreDocument()
    for n in range(LOG_LIMIT + 1):
        record_event(doc, actor=DEV, action="login", details={"n": n})

    events = list_events(doc)
    assert len(events) == LOG_LIMIT == 1000
    assert events[0].details["n"] == LOG_LIMIT
    assert events[-1].details["n"] == 1
    assert all(e.details["n"] != 0 for e in events)


def test_anonymous_actor_allowed():
    doc = StoreDocument()
    entry = record_event(doc, actor=None, action="system")
    assert entry.user is None and entry.user_id is None and entry.role is None
