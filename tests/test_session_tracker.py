from __future__ import annotations

from datetime import datetime, timedelta, timezone

from retreat_portal.application.services.session_tracker import SessionTracker
from retreat_portal.domain.exceptions import StorageUnavailableError


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
TTL = timedelta(hours=2)


class UnavailableSessionPort:
    def __getattr__(self, _name):
        def _raise(**_kwargs):
            raise StorageUnavailableError("no such table: sessions")

        return _raise


def test_open_session_stores_row_with_ttl(session_port):
    tracker = SessionTracker(session_port=session_port, ttl=TTL)

    session_id = tracker.open_session(user_type="attendee", user_ref="A1", now=NOW, ip="10.0.0.1", user_agent="ua")

    stored = session_port.sessions[session_id]
    assert stored.expires_at == NOW + TTL
    assert stored.last_activity == NOW
    assert stored.ip_address == "10.0.0.1"


def test_single_session_has_no_conflict(session_port):
    tracker = SessionTracker(session_port=session_port, ttl=TTL)
    session_id = tracker.open_session(user_type="attendee", user_ref="A1", now=NOW)

    status = tracker.touch(session_id=session_id, user_type="attendee", user_ref="A1", now=NOW + timedelta(minutes=1))

    assert status.has_conflict is False
    assert status.active_sessions == 1


def test_older_session_is_flagged_when_a_newer_one_exists(session_port):
    tracker = SessionTracker(session_port=session_port, ttl=TTL)
    first = tracker.open_session(user_type="attendee", user_ref="A1", now=NOW)
    second = tracker.open_session(user_type="attendee", user_ref="A1", now=NOW + timedelta(minutes=5))

    newest = tracker.touch(session_id=second, user_type="attendee", user_ref="A1", now=NOW + timedelta(minutes=6))
    older = tracker.touch(session_id=first, user_type="attendee", user_ref="A1", now=NOW + timedelta(minutes=7))

    assert newest.has_conflict is False
    assert older.has_conflict is True
    assert older.active_sessions == 2
    assert session_port.sessions[first].last_activity == NOW + timedelta(minutes=7)


def test_sessions_of_other_users_do_not_conflict(session_port):
    tracker = SessionTracker(session_port=session_port, ttl=TTL)
    mine = tracker.open_session(user_type="attendee", user_ref="A1", now=NOW)
    tracker.open_session(user_type="attendee", user_ref="B2", now=NOW + timedelta(minutes=1))
    tracker.open_session(user_type="admin", user_ref="A1", now=NOW + timedelta(minutes=1))

    status = tracker.touch(session_id=mine, user_type="attendee", user_ref="A1", now=NOW + timedelta(minutes=2))

    assert status.has_conflict is False


def test_token_without_session_id_is_never_flagged(session_port):
    tracker = SessionTracker(session_port=session_port, ttl=TTL)

    status = tracker.touch(session_id=None, user_type="attendee", user_ref="A1", now=NOW)

    assert status.has_conflict is False


def test_expired_sessions_are_removed_when_opening(session_port):
    tracker = SessionTracker(session_port=session_port, ttl=TTL)
    stale = tracker.open_session(user_type="attendee", user_ref="A1", now=NOW)

    fresh = tracker.open_session(user_type="attendee", user_ref="A1", now=NOW + TTL + timedelta(seconds=1))

    assert stale not in session_port.sessions
    assert fresh in session_port.sessions


def test_close_session_and_listing(session_port):
    tracker = SessionTracker(session_port=session_port, ttl=TTL)
    session_id = tracker.open_session(user_type="admin", user_ref="admin", now=NOW)

    assert [item.session_id for item in tracker.list_active_sessions(user_type="admin", user_ref="admin", now=NOW)] == [
        session_id
    ]
    tracker.close_session(session_id=session_id)

    assert tracker.list_active_sessions(user_type="admin", user_ref="admin", now=NOW) == []


def test_unavailable_storage_degrades_to_no_conflict():
    tracker = SessionTracker(session_port=UnavailableSessionPort(), ttl=TTL)

    session_id = tracker.open_session(user_type="attendee", user_ref="A1", now=NOW)
    status = tracker.touch(session_id=session_id, user_type="attendee", user_ref="A1", now=NOW)
    tracker.close_session(session_id=session_id)

    assert session_id
    assert status.has_conflict is False
    assert tracker.list_active_sessions(user_type="attendee", user_ref="A1", now=NOW) == []
