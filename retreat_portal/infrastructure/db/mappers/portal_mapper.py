from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any, Mapping

from retreat_portal.domain.entities.announcement import Announcement
from retreat_portal.domain.entities.attendee import Attendee, AttendeeSummary, GroupMember
from retreat_portal.domain.entities.auth import ActiveSession, LoginHistoryEntry
from retreat_portal.domain.entities.group import Group, GroupMemberRef
from retreat_portal.domain.entities.room import Room
from retreat_portal.infrastructure.db.types import as_utc


logger = logging.getLogger(__name__)


def _as_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _as_int_or_none(value: Any) -> int | None:
    return int(value) if value is not None else None


def parse_target_groups(raw: Any) -> list[int] | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, list):
        values = raw
    else:
        try:
            values = json.loads(raw)
        except ValueError:
            logger.warning("portal_mapper: unreadable target_groups value=%r", raw)
            return None
    if not isinstance(values, list):
        return None
    groups: list[int] = []
    for value in values:
        try:
            groups.append(int(value))
        except (TypeError, ValueError):
            continue
    return groups


def dump_target_groups(groups: list[int] | None) -> str | None:
    if groups is None:
        return None
    return json.dumps([int(group) for group in groups])


def map_row_to_attendee(row: Mapping[str, Any]) -> Attendee:
    return Attendee(
        id=int(row["id"]),
        ref_number=row["ref_number"],
        name=row["name"],
        email=row.get("email"),
        password_hash=row["password_hash"],
        phone=row.get("phone"),
        room_id=_as_int_or_none(row.get("room_id")),
        group_id=_as_int_or_none(row.get("group_id")),
        payment_due=_as_decimal(row.get("payment_due")),
        payment_status=row.get("payment_status") or "pending",
        created_at=as_utc(row.get("created_at")),
        updated_at=as_utc(row.get("updated_at")),
        last_login=as_utc(row.get("last_login")),
    )


def map_row_to_attendee_summary(row: Mapping[str, Any]) -> AttendeeSummary:
    return AttendeeSummary(
        id=int(row["id"]),
        ref_number=row["ref_number"],
        name=row["name"],
        email=row.get("email"),
        phone=row.get("phone"),
        payment_due=_as_decimal(row.get("payment_due")),
        payment_status=row.get("payment_status") or "pending",
        room_id=_as_int_or_none(row.get("room_id")),
        group_id=_as_int_or_none(row.get("group_id")),
        room_number=row.get("room_number"),
        room_description=row.get("room_description"),
        group_name=row.get("group_name"),
    )


def map_row_to_group_member(row: Mapping[str, Any]) -> GroupMember:
    return GroupMember(
        name=row["name"],
        ref_number=row["ref_number"],
        payment_due=_as_decimal(row.get("payment_due")),
        email=row.get("email"),
    )


def map_row_to_room(row: Mapping[str, Any]) -> Room:
    return Room(
        id=int(row["id"]),
        number=row["number"],
        description=row.get("description"),
        capacity=int(row["capacity"]) if row.get("capacity") is not None else 2,
        floor=row.get("floor"),
        room_type=row.get("room_type") or "standard",
        created_at=as_utc(row.get("created_at")),
        updated_at=as_utc(row.get("updated_at")),
    )


def map_row_to_group(row: Mapping[str, Any]) -> Group:
    return Group(
        id=int(row["id"]),
        name=row["name"],
        description=row.get("description"),
        max_members=_as_int_or_none(row.get("max_members")),
        created_at=as_utc(row.get("created_at")),
        updated_at=as_utc(row.get("updated_at")),
    )


def map_row_to_group_member_ref(row: Mapping[str, Any]) -> GroupMemberRef:
    return GroupMemberRef(name=row["name"], ref_number=row["ref_number"])


def map_row_to_announcement(row: Mapping[str, Any]) -> Announcement:
    return Announcement(
        id=int(row["id"]),
        title=row["title"],
        content=row["content"],
        type=row.get("type") or "general",
        priority=int(row["priority"]) if row.get("priority") is not None else 1,
        is_active=bool(row.get("is_active")),
        target_audience=row.get("target_audience") or "all",
        target_groups=parse_target_groups(row.get("target_groups")),
        author_name=row.get("author_name") or "",
        starts_at=as_utc(row.get("starts_at")),
        expires_at=as_utc(row.get("expires_at")),
        created_at=as_utc(row.get("created_at")),
        updated_at=as_utc(row.get("updated_at")),
    )


def map_row_to_login_history_entry(row: Mapping[str, Any]) -> LoginHistoryEntry:
    return LoginHistoryEntry(
        id=int(row["id"]),
        user_type=row["user_type"],
        user_id=row["user_id"],
        login_time=as_utc(row["login_time"]),
    )


def map_row_to_active_session(row: Mapping[str, Any]) -> ActiveSession:
    return ActiveSession(
        session_id=row["session_id"],
        user_type=row["user_type"],
        user_ref=row["user_ref"],
        created_at=as_utc(row["created_at"]),
        expires_at=as_utc(row["expires_at"]),
        last_activity=as_utc(row["last_activity"]),
        ip_address=row.get("ip_address"),
        user_agent=row.get("user_agent"),
    )
