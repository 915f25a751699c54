from __future__ import annotations

import logging

from retreat_portal.application.dto.announcement import AttendeeAnnouncementOutput
from retreat_portal.application.dto.me import MeGroupOutput, MeOutput, MeRoomOutput
from retreat_portal.application.ports.announcement_port import AnnouncementPort
from retreat_portal.application.ports.attendee_port import AttendeePort
from retreat_portal.domain.entities.attendee import AttendeeSummary
from retreat_portal.domain.exceptions import ResourceNotFoundError, StorageUnavailableError
from retreat_portal.domain.services.announcements import is_new, select_for_attendee
from retreat_portal.domain.services.group_finance import summarize_group_finances

from .common import utcnow


logger = logging.getLogger(__name__)

ME_ANNOUNCEMENT_LIMIT = 10


class GetMeUseCase:
    """Attendee dashboard: profile, room, group with finances, and announcements."""

    def __init__(self, *, attendee_port: AttendeePort, announcement_port: AnnouncementPort):
        self._attendee_port = attendee_port
        self._announcement_port = announcement_port

    def execute(self, ref_number: str) -> MeOutput:
        attendee = self._attendee_port.get_attendee_summary_by_ref(ref_number=ref_number)
        if attendee is None:
            raise ResourceNotFoundError("Attendee")

        room = None
        if attendee.room_number:
            room = MeRoomOutput(number=attendee.room_number, description=attendee.room_description or "")

        return MeOutput(
            ref_number=attendee.ref_number,
            name=attendee.name,
            email=attendee.email,
            payment_due=attendee.payment_due,
            payment_status=attendee.payment_status,
            room=room,
            group=self._build_group(attendee),
            announcements=self._announcements(attendee),
        )

    def _build_group(self, attendee: AttendeeSummary) -> MeGroupOutput | None:
        if attendee.group_id is None or not attendee.group_name:
            return None
        members = self._attendee_port.list_group_members(
            group_id=attendee.group_id,
            exclude_ref=attendee.ref_number,
        )
        financial = summarize_group_finances([member.payment_due for member in members] + [attendee.payment_due])
        return MeGroupOutput(name=attendee.group_name, members=members, financial=financial)

    def _announcements(self, attendee: AttendeeSummary) -> list[AttendeeAnnouncementOutput]:
        try:
            active = self._announcement_port.list_active_announcements()
        except StorageUnavailableError as exc:
            logger.warning("get_me: announcements unavailable ref=%s error=%s", attendee.ref_number, exc)
            return []
        now = utcnow()
        visible = select_for_attendee(
            active,
            group_id=attendee.group_id,
            group_name=attendee.group_name,
            now=now,
        )
        return [
            AttendeeAnnouncementOutput(announcement=item, is_new=is_new(item.created_at, now=now))
            for item in visible[:ME_ANNOUNCEMENT_LIMIT]
        ]
