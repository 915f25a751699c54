from __future__ import annotations

import logging

from retreat_portal.application.dto.announcement import (
    AttendeeAnnouncementOutput,
    AttendeeAnnouncementsOutput,
    CreateAnnouncementInput,
    ListAnnouncementsOutput,
    UpdateAnnouncementInput,
)
from retreat_portal.application.ports.announcement_port import AnnouncementPort
from retreat_portal.application.ports.attendee_port import AttendeePort
from retreat_portal.domain.entities.announcement import Announcement
from retreat_portal.domain.exceptions import ResourceNotFoundError
from retreat_portal.domain.services.announcements import is_new, select_for_attendee

from .common import clean_str, collect_changes, to_datetime, to_int, to_int_list, utcnow


logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "Admin"

_UPDATABLE_FIELDS = {
    "title": clean_str,
    "content": clean_str,
    "type": clean_str,
    "priority": to_int,
    "is_active": bool,
    "target_audience": clean_str,
    "target_groups": to_int_list,
    "starts_at": to_datetime,
    "expires_at": to_datetime,
}

# NOT NULL columns; a null in the payload leaves them as they are
_KEEP_ON_NULL = ("title", "content", "type", "priority", "is_active", "target_audience")


class ListAnnouncementsUseCase:
    def __init__(self, *, announcement_port: AnnouncementPort):
        self._announcement_port = announcement_port

    def execute(self, *, limit: int, offset: int) -> ListAnnouncementsOutput:
        total = self._announcement_port.count_announcements()
        items = self._announcement_port.list_announcements(limit=limit, offset=offset)
        return ListAnnouncementsOutput(items=items, total=total, limit=limit, offset=offset)


class GetAnnouncementUseCase:
    def __init__(self, *, announcement_port: AnnouncementPort):
        self._announcement_port = announcement_port

    def execute(self, announcement_id: int) -> Announcement:
        announcement = self._announcement_port.get_announcement(announcement_id=announcement_id)
        if announcement is None:
            raise ResourceNotFoundError("Announcement")
        return announcement


class CreateAnnouncementUseCase:
    def __init__(self, *, announcement_port: AnnouncementPort):
        self._announcement_port = announcement_port

    def execute(self, command: CreateAnnouncementInput) -> int:
        # target groups only mean something for a group-targeted announcement
        target_groups = command.target_groups if command.target_audience == "groups" else None
        announcement_id = self._announcement_port.create_announcement(
            title=command.title.strip(),
            content=command.content.strip(),
            type=command.type,
            priority=command.priority,
            is_active=command.is_active,
            target_audience=command.target_audience,
            target_groups=target_groups,
            author_name=clean_str(command.author_name) or DEFAULT_AUTHOR,
            starts_at=command.starts_at,
            expires_at=command.expires_at,
            created_at=utcnow(),
        )
        logger.info("announcements: created id=%s audience=%s", announcement_id, command.target_audience)
        return announcement_id


class UpdateAnnouncementUseCase:
    def __init__(self, *, announcement_port: AnnouncementPort):
        self._announcement_port = announcement_port

    def execute(self, command: UpdateAnnouncementInput) -> None:
        current = self._announcement_port.get_announcement(announcement_id=command.announcement_id)
        if current is None:
            raise ResourceNotFoundError("Announcement")
        fields = collect_changes(command.changes, _UPDATABLE_FIELDS, skip_null=_KEEP_ON_NULL)
        if fields.get("target_audience", current.target_audience) != "groups":
            fields["target_groups"] = None
        self._announcement_port.update_announcement(
            announcement_id=command.announcement_id,
            fields=fields,
            updated_at=utcnow(),
        )


class DeleteAnnouncementUseCase:
    def __init__(self, *, announcement_port: AnnouncementPort):
        self._announcement_port = announcement_port

    def execute(self, announcement_id: int) -> Announcement:
        announcement = self._announcement_port.get_announcement(announcement_id=announcement_id)
        if announcement is None:
            raise ResourceNotFoundError("Announcement")
        self._announcement_port.delete_announcement(announcement_id=announcement_id)
        logger.info("announcements: deleted id=%s", announcement_id)
        return announcement


class ListAttendeeAnnouncementsUseCase:
    """Announcements currently visible to one attendee."""

    def __init__(self, *, attendee_port: AttendeePort, announcement_port: AnnouncementPort):
        self._attendee_port = attendee_port
        self._announcement_port = announcement_port

    def execute(self, ref_number: str) -> AttendeeAnnouncementsOutput:
        attendee = self._attendee_port.get_attendee_summary_by_ref(ref_number=ref_number)
        if attendee is None:
            raise ResourceNotFoundError("Attendee")
        now = utcnow()
        visible = select_for_attendee(
            self._announcement_port.list_active_announcements(),
            group_id=attendee.group_id,
            group_name=attendee.group_name,
            now=now,
        )
        return AttendeeAnnouncementsOutput(
            announcements=[
                AttendeeAnnouncementOutput(announcement=item, is_new=is_new(item.created_at, now=now))
                for item in visible
            ],
            user_group=attendee.group_name,
        )
