from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from retreat_portal.domain.entities.auth import ActiveSession
from retreat_portal.domain.exceptions import ConstraintKind, ConstraintViolationError, StorageUnavailableError
from retreat_portal.infrastructure.db.engine import build_engine, init_db
from retreat_portal.infrastructure.db.repositories.announcements_repository import SqlAnnouncementsRepository
from retreat_portal.infrastructure.db.repositories.attendees_repository import SqlAttendeesRepository
from retreat_portal.infrastructure.db.repositories.groups_repository import SqlGroupsRepository
from retreat_portal.infrastructure.db.repositories.login_attempts_repository import SqlLoginAttemptsRepository
from retreat_portal.infrastructure.db.repositories.login_history_repository import SqlLoginHistoryRepository
from retreat_portal.infrastructure.db.repositories.rooms_repository import SqlRoomsRepository
from retreat_portal.infrastructure.db.repositories.sessions_repository import SqlSessionsRepository


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


def _create_attendee(repo: SqlAttendeesRepository, ref_number: str, **overrides) -> int:
    values = {
        "name": f"Attendee {ref_number}",
        "ref_number": ref_number,
        "password_hash": "$pbkdf2$1000$00$00",
        "email": None,
        "phone": None,
        "room_id": None,
        "group_id": None,
        "payment_due": Decimal("0"),
        "payment_status": "pending",
        "created_at": NOW,
    }
    values.update(overrides)
    return repo.create_attendee(**values)


def test_attendee_summary_joins_room_and_group(engine):
    rooms = SqlRoomsRepository(engine)
    groups = SqlGroupsRepository(engine)
    attendees = SqlAttendeesRepository(engine)
    room_id = rooms.create_room(
        number="101", description="Sea view", capacity=2, floor="1", room_type="double", created_at=NOW
    )
    group_id = groups.create_group(name="Family", description=None, max_members=4, created_at=NOW)
    attendee_id = _create_attendee(
        attendees, "R100", name="Ana", room_id=room_id, group_id=group_id, payment_due=Decimal("150.50")
    )

    summary = attendees.get_attendee_summary(attendee_id=attendee_id)

    assert summary.room_number == "101"
    assert summary.room_description == "Sea view"
    assert summary.group_name == "Family"
    assert summary.payment_due == Decimal("150.50")
    assert attendees.get_attendee_summary_by_ref(ref_number="R100").id == attendee_id
    assert attendees.get_attendee_summary(attendee_id=999) is None


def test_attendee_update_and_lookup(engine):
    attendees = SqlAttendeesRepository(engine)
    attendee_id = _create_attendee(attendees, "R100")

    attendees.update_attendee(
        attendee_id=attendee_id,
        fields={"name": "Renamed", "payment_due": Decimal("20.25")},
        updated_at=NOW + timedelta(hours=1),
    )
    attendees.update_last_login(attendee_id=attendee_id, logged_in_at=NOW + timedelta(hours=2))
    attendees.update_password_hash(attendee_id=attendee_id, password_hash="$pbkdf2$1000$aa$bb")

    stored = attendees.get_attendee_by_ref(ref_number="R100")
    assert stored.name == "Renamed"
    assert stored.payment_due == Decimal("20.25")
    assert stored.password_hash == "$pbkdf2$1000$aa$bb"
    assert stored.updated_at == NOW + timedelta(hours=1)
    assert stored.last_login == NOW + timedelta(hours=2)
    assert attendees.ref_number_exists(ref_number="R100")
    assert not attendees.ref_number_exists(ref_number="R100", exclude_id=attendee_id)


def test_update_rejects_unknown_columns(engine):
    attendees = SqlAttendeesRepository(engine)
    attendee_id = _create_attendee(attendees, "R100")

    with pytest.raises(ValueError):
        attendees.update_attendee(attendee_id=attendee_id, fields={"id": 5}, updated_at=NOW)


def test_duplicate_reference_is_a_unique_violation(engine):
    attendees = SqlAttendeesRepository(engine)
    _create_attendee(attendees, "R100")

    with pytest.raises(ConstraintViolationError) as exc_info:
        _create_attendee(attendees, "R100")

    assert exc_info.value.kind is ConstraintKind.UNIQUE


def test_unknown_room_is_a_foreign_key_violation(engine):
    attendees = SqlAttendeesRepository(engine)

    with pytest.raises(ConstraintViolationError) as exc_info:
        _create_attendee(attendees, "R100", room_id=42)

    assert exc_info.value.kind is ConstraintKind.FOREIGN_KEY


def test_room_occupants_and_group_members(engine):
    rooms = SqlRoomsRepository(engine)
    groups = SqlGroupsRepository(engine)
    attendees = SqlAttendeesRepository(engine)
    room_id = rooms.create_room(
        number="101", description=None, capacity=2, floor=None, room_type="standard", created_at=NOW
    )
    rooms.create_room(number="102", description=None, capacity=2, floor=None, room_type="standard", created_at=NOW)
    group_id = groups.create_group(name="Family", description="Ana's family", max_members=None, created_at=NOW)
    _create_attendee(attendees, "R200", name="Bruno", room_id=room_id, group_id=group_id, payment_due=Decimal("10"))
    _create_attendee(attendees, "R100", name="Ana", room_id=room_id, group_id=group_id)

    listed = rooms.list_rooms(limit=10, offset=0)
    assert [(item.room.number, item.occupants) for item in listed] == [("101", ["Ana", "Bruno"]), ("102", [])]
    assert rooms.count_occupants(room_id=room_id) == 2

    group = groups.get_group_with_members(group_id=group_id)
    assert [member.ref_number for member in group.members] == ["R100", "R200"]
    assert groups.count_members(group_id=group_id) == 2

    members = attendees.list_group_members(group_id=group_id, exclude_ref="R100")
    assert [(member.name, member.payment_due) for member in members] == [("Bruno", Decimal("10"))]


def test_room_update_and_delete(engine):
    rooms = SqlRoomsRepository(engine)
    room_id = rooms.create_room(
        number="101", description=None, capacity=2, floor=None, room_type="standard", created_at=NOW
    )

    rooms.update_room(room_id=room_id, fields={"capacity": 3, "room_type": "family"}, updated_at=NOW)
    assert (rooms.get_room(room_id=room_id).capacity, rooms.get_room(room_id=room_id).room_type) == (3, "family")
    assert rooms.room_number_exists(number="101")

    rooms.delete_room(room_id=room_id)
    assert rooms.get_room(room_id=room_id) is None
    assert rooms.count_rooms() == 0


def test_announcement_round_trip_keeps_targets_and_times(engine):
    announcements = SqlAnnouncementsRepository(engine)
    announcement_id = announcements.create_announcement(
        title="Dinner",
        content="At eight",
        type="event",
        priority=4,
        is_active=True,
        target_audience="groups",
        target_groups=[1, 3],
        author_name="Staff",
        starts_at=NOW,
        expires_at=NOW + timedelta(days=1),
        created_at=NOW,
    )
    announcements.create_announcement(
        title="Hidden",
        content="Off",
        type="general",
        priority=1,
        is_active=False,
        target_audience="all",
        target_groups=None,
        author_name="Admin",
        starts_at=None,
        expires_at=None,
        created_at=NOW,
    )

    stored = announcements.get_announcement(announcement_id=announcement_id)
    assert stored.target_groups == [1, 3]
    assert stored.starts_at == NOW
    assert stored.expires_at == NOW + timedelta(days=1)
    assert stored.is_active is True
    assert [item.title for item in announcements.list_active_announcements()] == ["Dinner"]
    assert announcements.count_announcements() == 2

    announcements.update_announcement(
        announcement_id=announcement_id,
        fields={"target_audience": "all", "target_groups": None, "is_active": False},
        updated_at=NOW,
    )
    assert announcements.get_announcement(announcement_id=announcement_id).target_groups is None
    assert announcements.list_active_announcements() == []


def test_failed_attempt_summary_respects_window(engine):
    attempts = SqlLoginAttemptsRepository(engine)
    for minutes in (30, 10, 5):
        attempts.record_attempt(
            identifier="R100", user_type="attendee", success=False, attempted_at=NOW - timedelta(minutes=minutes)
        )
    attempts.record_attempt(identifier="R100", user_type="attendee", success=True, attempted_at=NOW)
    attempts.record_attempt(identifier="R100", user_type="admin", success=False, attempted_at=NOW)

    summary = attempts.summarize_failed_attempts(
        identifier="R100", user_type="attendee", since=NOW - timedelta(minutes=15)
    )

    assert summary.count == 2
    assert summary.oldest_attempt_at == NOW - timedelta(minutes=10)

    attempts.clear_failed_attempts(identifier="R100", user_type="attendee")
    assert attempts.summarize_failed_attempts(identifier="R100", user_type="attendee", since=NOW - timedelta(days=1)).count == 0
    assert attempts.delete_attempts_before(cutoff=NOW + timedelta(seconds=1)) == 2


def test_sessions_ordered_by_activity_and_expired_removed(engine):
    sessions = SqlSessionsRepository(engine)
    for session_id, offset in (("old", 0), ("new", 5)):
        started = NOW + timedelta(minutes=offset)
        sessions.create_session(
            session=ActiveSession(
                session_id=session_id,
                user_type="attendee",
                user_ref="R100",
                created_at=started,
                expires_at=started + timedelta(hours=2),
                last_activity=started,
                ip_address="10.0.0.1",
                user_agent="pytest",
            )
        )

    active = sessions.list_active_sessions(user_type="attendee", user_ref="R100", now=NOW + timedelta(minutes=10))
    assert [item.session_id for item in active] == ["new", "old"]

    sessions.touch_session(session_id="old", last_activity=NOW + timedelta(minutes=20))
    active = sessions.list_active_sessions(user_type="attendee", user_ref="R100", now=NOW + timedelta(minutes=21))
    assert [item.session_id for item in active] == ["old", "new"]

    assert sessions.delete_expired_sessions(now=NOW + timedelta(hours=2, minutes=1)) == 1
    sessions.delete_session(session_id="new")
    assert sessions.list_active_sessions(user_type="attendee", user_ref="R100", now=NOW) == []


def test_login_history_newest_first(engine):
    history = SqlLoginHistoryRepository(engine)
    history.record_login(user_type="attendee", user_id="R100", login_time=NOW)
    history.record_login(user_type="admin", user_id="admin", login_time=NOW + timedelta(minutes=1))

    entries = history.list_logins(limit=10, offset=0)

    assert history.count_logins() == 2
    assert [entry.user_id for entry in entries] == ["admin", "R100"]
    assert entries[0].login_time == NOW + timedelta(minutes=1)


def test_missing_tables_surface_as_storage_unavailable():
    engine = build_engine("sqlite://")

    with pytest.raises(StorageUnavailableError):
        SqlRoomsRepository(engine).count_rooms()


def test_out_of_range_ids_are_check_violations(engine):
    rooms = SqlRoomsRepository(engine)

    with pytest.raises(ConstraintViolationError) as exc_info:
        rooms.get_room(room_id=10**30)

    assert exc_info.value.kind is ConstraintKind.CHECK
