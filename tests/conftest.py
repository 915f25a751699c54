from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from retreat_portal.application.services.rate_limiter import LoginRateLimiter
from retreat_portal.application.services.session_tracker import SessionTracker
from retreat_portal.domain.entities.announcement import Announcement
from retreat_portal.domain.entities.attendee import Attendee, AttendeeSummary, GroupMember
from retreat_portal.domain.entities.auth import ActiveSession, FailedAttemptSummary, LoginHistoryEntry
from retreat_portal.domain.entities.group import Group, GroupMemberRef, GroupWithMembers
from retreat_portal.domain.entities.room import Room, RoomWithOccupants
from retreat_portal.infrastructure.security.password_hasher import PasswordHasher
from retreat_portal.infrastructure.security.token_service import HmacTokenService


@dataclass
class _Attempt:
    identifier: str
    user_type: str
    success: bool
    attempted_at: datetime


class FakeLoginAttemptPort:
    def __init__(self):
        self.attempts: list[_Attempt] = []

    def record_attempt(self, *, identifier, user_type, success, attempted_at) -> None:
        self.attempts.append(_Attempt(identifier, user_type, success, attempted_at))

    def summarize_failed_attempts(self, *, identifier, user_type, since) -> FailedAttemptSummary:
        failed = [
            item.attempted_at
            for item in self.attempts
            if item.identifier == identifier
            and item.user_type == user_type
            and not item.success
            and item.attempted_at > since
        ]
        return FailedAttemptSummary(count=len(failed), oldest_attempt_at=min(failed) if failed else None)

    def clear_failed_attempts(self, *, identifier, user_type) -> None:
        self.attempts = [
            item
            for item in self.attempts
            if not (item.identifier == identifier and item.user_type == user_type and not item.success)
        ]

    def delete_attempts_before(self, *, cutoff) -> int:
        before = len(self.attempts)
        self.attempts = [item for item in self.attempts if item.attempted_at >= cutoff]
        return before - len(self.attempts)


class FakeSessionPort:
    def __init__(self):
        self.sessions: dict[str, ActiveSession] = {}

    def create_session(self, *, session: ActiveSession) -> None:
        self.sessions[session.session_id] = session

    def list_active_sessions(self, *, user_type, user_ref, now) -> list[ActiveSession]:
        active = [
            session
            for session in self.sessions.values()
            if session.user_type == user_type and session.user_ref == user_ref and session.expires_at > now
        ]
        return sorted(active, key=lambda item: (item.last_activity, item.created_at), reverse=True)

    def touch_session(self, *, session_id, last_activity) -> None:
        if session_id in self.sessions:
            self.sessions[session_id] = replace(self.sessions[session_id], last_activity=last_activity)

    def delete_session(self, *, session_id) -> None:
        self.sessions.pop(session_id, None)

    def delete_expired_sessions(self, *, now) -> int:
        expired = [key for key, session in self.sessions.items() if session.expires_at <= now]
        for key in expired:
            del self.sessions[key]
        return len(expired)


class FakeLoginHistoryPort:
    def __init__(self):
        self.entries: list[LoginHistoryEntry] = []

    def record_login(self, *, user_type, user_id, login_time) -> None:
        self.entries.append(
            LoginHistoryEntry(id=len(self.entries) + 1, user_type=user_type, user_id=user_id, login_time=login_time)
        )

    def count_logins(self) -> int:
        return len(self.entries)

    def list_logins(self, *, limit, offset) -> list[LoginHistoryEntry]:
        newest_first = sorted(self.entries, key=lambda item: item.login_time, reverse=True)
        return newest_first[offset : offset + limit]


class FakeAttendeePort:
    def __init__(self):
        self.attendees: dict[int, Attendee] = {}
        self.rooms: dict[int, tuple[str, str | None]] = {}
        self.groups: dict[int, str] = {}
        self._next_id = 1

    def add(self, **overrides) -> Attendee:
        attendee_id = self._next_id
        self._next_id += 1
        values = {
            "id": attendee_id,
            "ref_number": f"REF{attendee_id:03d}",
            "name": f"Attendee {attendee_id}",
            "email": None,
            "password_hash": "",
            "phone": None,
            "room_id": None,
            "group_id": None,
            "payment_due": Decimal("0"),
            "payment_status": "pending",
            "created_at": None,
            "updated_at": None,
            "last_login": None,
        }
        values.update(overrides)
        attendee = Attendee(**values)
        self.attendees[attendee.id] = attendee
        return attendee

    def _summary(self, attendee: Attendee) -> AttendeeSummary:
        room_number, room_description = self.rooms.get(attendee.room_id, (None, None))
        return AttendeeSummary(
            id=attendee.id,
            ref_number=attendee.ref_number,
            name=attendee.name,
            email=attendee.email,
            phone=attendee.phone,
            payment_due=attendee.payment_due,
            payment_status=attendee.payment_status,
            room_id=attendee.room_id,
            group_id=attendee.group_id,
            room_number=room_number,
            room_description=room_description,
            group_name=self.groups.get(attendee.group_id),
        )

    def count_attendees(self) -> int:
        return len(self.attendees)

    def list_attendees(self, *, limit, offset) -> list[AttendeeSummary]:
        ordered = sorted(self.attendees.values(), key=lambda item: item.name)
        return [self._summary(item) for item in ordered[offset : offset + limit]]

    def get_attendee_summary(self, *, attendee_id) -> AttendeeSummary | None:
        attendee = self.attendees.get(attendee_id)
        return self._summary(attendee) if attendee else None

    def get_attendee_summary_by_ref(self, *, ref_number) -> AttendeeSummary | None:
        attendee = self.get_attendee_by_ref(ref_number=ref_number)
        return self._summary(attendee) if attendee else None

    def get_attendee_by_ref(self, *, ref_number) -> Attendee | None:
        for attendee in self.attendees.values():
            if attendee.ref_number == ref_number:
                return attendee
        return None

    def ref_number_exists(self, *, ref_number, exclude_id=None) -> bool:
        return any(
            item.ref_number == ref_number and item.id != exclude_id for item in self.attendees.values()
        )

    def create_attendee(self, *, created_at, **values) -> int:
        return self.add(created_at=created_at, updated_at=created_at, **values).id

    def update_attendee(self, *, attendee_id, fields, updated_at) -> None:
        self.attendees[attendee_id] = replace(self.attendees[attendee_id], updated_at=updated_at, **fields)

    def delete_attendee(self, *, attendee_id) -> None:
        del self.attendees[attendee_id]

    def update_password_hash(self, *, attendee_id, password_hash) -> None:
        self.attendees[attendee_id] = replace(self.attendees[attendee_id], password_hash=password_hash)

    def update_last_login(self, *, attendee_id, logged_in_at) -> None:
        self.attendees[attendee_id] = replace(self.attendees[attendee_id], last_login=logged_in_at)

    def list_group_members(self, *, group_id, exclude_ref=None) -> list[GroupMember]:
        return [
            GroupMember(name=item.name, ref_number=item.ref_number, payment_due=item.payment_due, email=item.email)
            for item in sorted(self.attendees.values(), key=lambda item: item.name)
            if item.group_id == group_id and item.ref_number != exclude_ref
        ]


class FakeRoomPort:
    def __init__(self):
        self.rooms: dict[int, Room] = {}
        self.occupants: dict[int, list[str]] = {}
        self._next_id = 1

    def count_rooms(self) -> int:
        return len(self.rooms)

    def list_rooms(self, *, limit, offset) -> list[RoomWithOccupants]:
        ordered = sorted(self.rooms.values(), key=lambda item: item.number)[offset : offset + limit]
        return [RoomWithOccupants(room=room, occupants=self.occupants.get(room.id, [])) for room in ordered]

    def get_room(self, *, room_id) -> Room | None:
        return self.rooms.get(room_id)

    def get_room_with_occupants(self, *, room_id) -> RoomWithOccupants | None:
        room = self.rooms.get(room_id)
        return RoomWithOccupants(room=room, occupants=self.occupants.get(room_id, [])) if room else None

    def room_number_exists(self, *, number, exclude_id=None) -> bool:
        return any(item.number == number and item.id != exclude_id for item in self.rooms.values())

    def create_room(self, *, number, description, capacity, floor, room_type, created_at) -> int:
        room_id = self._next_id
        self._next_id += 1
        self.rooms[room_id] = Room(
            id=room_id,
            number=number,
            description=description,
            capacity=capacity,
            floor=floor,
            room_type=room_type,
            created_at=created_at,
            updated_at=created_at,
        )
        return room_id

    def update_room(self, *, room_id, fields, updated_at) -> None:
        self.rooms[room_id] = replace(self.rooms[room_id], updated_at=updated_at, **fields)

    def count_occupants(self, *, room_id) -> int:
        return len(self.occupants.get(room_id, []))

    def delete_room(self, *, room_id) -> None:
        del self.rooms[room_id]


class FakeGroupPort:
    def __init__(self):
        self.groups: dict[int, Group] = {}
        self.members: dict[int, list[GroupMemberRef]] = {}
        self._next_id = 1

    def count_groups(self) -> int:
        return len(self.groups)

    def list_groups(self, *, limit, offset) -> list[GroupWithMembers]:
        ordered = sorted(self.groups.values(), key=lambda item: item.name)[offset : offset + limit]
        return [GroupWithMembers(group=group, members=self.members.get(group.id, [])) for group in ordered]

    def get_group(self, *, group_id) -> Group | None:
        return self.groups.get(group_id)

    def get_group_with_members(self, *, group_id) -> GroupWithMembers | None:
        group = self.groups.get(group_id)
        return GroupWithMembers(group=group, members=self.members.get(group_id, [])) if group else None

    def group_name_exists(self, *, name, exclude_id=None) -> bool:
        return any(item.name == name and item.id != exclude_id for item in self.groups.values())

    def create_group(self, *, name, description, max_members, created_at) -> int:
        group_id = self._next_id
        self._next_id += 1
        self.groups[group_id] = Group(
            id=group_id,
            name=name,
            description=description,
            max_members=max_members,
            created_at=created_at,
            updated_at=created_at,
        )
        return group_id

    def update_group(self, *, group_id, fields, updated_at) -> None:
        self.groups[group_id] = replace(self.groups[group_id], updated_at=updated_at, **fields)

    def count_members(self, *, group_id) -> int:
        return len(self.members.get(group_id, []))

    def delete_group(self, *, group_id) -> None:
        del self.groups[group_id]


class FakeAnnouncementPort:
    def __init__(self):
        self.announcements: dict[int, Announcement] = {}
        self._next_id = 1

    def add(self, **overrides) -> Announcement:
        announcement_id = self._next_id
        self._next_id += 1
        values = {
            "id": announcement_id,
            "title": f"Announcement {announcement_id}",
            "content": "Details",
            "type": "general",
            "priority": 1,
            "is_active": True,
            "target_audience": "all",
            "target_groups": None,
            "author_name": "Admin",
            "starts_at": None,
            "expires_at": None,
            "created_at": datetime.now(timezone.utc) - timedelta(days=2),
            "updated_at": None,
        }
        values.update(overrides)
        announcement = Announcement(**values)
        self.announcements[announcement.id] = announcement
        return announcement

    def count_announcements(self) -> int:
        return len(self.announcements)

    def list_announcements(self, *, limit, offset) -> list[Announcement]:
        ordered = sorted(self.announcements.values(), key=lambda item: item.id, reverse=True)
        return ordered[offset : offset + limit]

    def list_active_announcements(self) -> list[Announcement]:
        return [item for item in self.announcements.values() if item.is_active]

    def get_announcement(self, *, announcement_id) -> Announcement | None:
        return self.announcements.get(announcement_id)

    def create_announcement(self, *, created_at, **values) -> int:
        return self.add(created_at=created_at, updated_at=created_at, **values).id

    def update_announcement(self, *, announcement_id, fields, updated_at) -> None:
        self.announcements[announcement_id] = replace(
            self.announcements[announcement_id],
            updated_at=updated_at,
            **fields,
        )

    def delete_announcement(self, *, announcement_id) -> None:
        del self.announcements[announcement_id]


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher(iterations=1_000)


@pytest.fixture
def token_service() -> HmacTokenService:
    return HmacTokenService(admin_secret="admin-secret", attendee_secret="attendee-secret")


@pytest.fixture
def attempt_port() -> FakeLoginAttemptPort:
    return FakeLoginAttemptPort()


@pytest.fixture
def session_port() -> FakeSessionPort:
    return FakeSessionPort()


@pytest.fixture
def rate_limiter(attempt_port) -> LoginRateLimiter:
    return LoginRateLimiter(attempt_port=attempt_port)


@pytest.fixture
def session_tracker(session_port) -> SessionTracker:
    return SessionTracker(session_port=session_port, ttl=timedelta(hours=2))


@pytest.fixture
def login_history_port() -> FakeLoginHistoryPort:
    return FakeLoginHistoryPort()


@pytest.fixture
def attendee_port() -> FakeAttendeePort:
    return FakeAttendeePort()


@pytest.fixture
def room_port() -> FakeRoomPort:
    return FakeRoomPort()


@pytest.fixture
def group_port() -> FakeGroupPort:
    return FakeGroupPort()


@pytest.fixture
def announcement_port() -> FakeAnnouncementPort:
    return FakeAnnouncementPort()
