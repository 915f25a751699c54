from __future__ import annotations

from fastapi import APIRouter, Depends

from retreat_portal.api import errors
from retreat_portal.api.deps import get_current_attendee, get_list_attendee_announcements_use_case
from retreat_portal.api.schemas.announcements import (
    AttendeeAnnouncementResponse,
    AttendeeAnnouncementsResponse,
)
from retreat_portal.application.use_cases.announcements import ListAttendeeAnnouncementsUseCase
from retreat_portal.domain.entities.auth import AttendeePrincipal
from retreat_portal.domain.exceptions import ResourceNotFoundError


router = APIRouter()


@router.get("/api/announcements", response_model=AttendeeAnnouncementsResponse)
def list_my_announcements(
    current_attendee: AttendeePrincipal = Depends(get_current_attendee),
    use_case: ListAttendeeAnnouncementsUseCase = Depends(get_list_attendee_announcements_use_case),
):
    try:
        output = use_case.execute(current_attendee.ref)
    except ResourceNotFoundError as exc:
        raise errors.from_domain_error(exc) from exc

    items = [
        AttendeeAnnouncementResponse(
            id=item.announcement.id,
            title=item.announcement.title,
            content=item.announcement.content,
            type=item.announcement.type,
            priority=item.announcement.priority,
            author_name=item.announcement.author_name,
            created_at=item.announcement.created_at,
            starts_at=item.announcement.starts_at,
            expires_at=item.announcement.expires_at,
            is_new=item.is_new,
        )
        for item in output.announcements
    ]
    return AttendeeAnnouncementsResponse(
        announcements=items,
        user_group=output.user_group,
        total_count=len(items),
    )
