from __future__ import annotations

from fastapi import APIRouter, Depends

from retreat_portal.api import errors
from retreat_portal.api.deps import (
    get_current_attendee,
    get_get_me_use_case,
    get_list_active_sessions_use_case,
)
from retreat_portal.api.schemas.auth import ActiveSessionResponse, ActiveSessionsResponse
from retreat_portal.api.schemas.me import (
    BadgeResponse,
    MeAnnouncementResponse,
    MeGroupFinancialResponse,
    MeGroupMemberResponse,
    MeGroupResponse,
    MeResponse,
    MeRoomResponse,
)
from retreat_portal.application.dto.announcement import AttendeeAnnouncementOutput
from retreat_portal.application.use_cases.get_me import GetMeUseCase
from retreat_portal.application.use_cases.sessions import ListActiveSessionsUseCase
from retreat_portal.domain.entities.auth import AttendeePrincipal
from retreat_portal.domain.exceptions import ResourceNotFoundError
from retreat_portal.domain.services.announcements import Badge, priority_badge, type_badge


router = APIRouter()


def _badge(badge: Badge) -> BadgeResponse:
    return BadgeResponse(text=badge.text, css_class=badge.css_class, icon=badge.icon)


def _announcement(item: AttendeeAnnouncementOutput) -> MeAnnouncementResponse:
    announcement = item.announcement
    return MeAnnouncementResponse(
        id=announcement.id,
        title=announcement.title,
        content=announcement.content,
        type=announcement.type,
        priority=announcement.priority,
        author_name=announcement.author_name,
        created_at=announcement.created_at,
        starts_at=announcement.starts_at,
        expires_at=announcement.expires_at,
        is_new=item.is_new,
        type_badge=_badge(type_badge(announcement.type)),
        priority_badge=_badge(priority_badge(announcement.priority)),
    )


@router.get("/api/me", response_model=MeResponse)
def get_me(
    current_attendee: AttendeePrincipal = Depends(get_current_attendee),
    use_case: GetMeUseCase = Depends(get_get_me_use_case),
):
    try:
        output = use_case.execute(current_attendee.ref)
    except ResourceNotFoundError as exc:
        raise errors.from_domain_error(exc) from exc

    group = None
    if output.group is not None:
        financial = output.group.financial
        group = MeGroupResponse(
            name=output.group.name,
            members=[
                MeGroupMemberResponse(
                    name=member.name,
                    ref_number=member.ref_number,
                    payment_due=float(member.payment_due),
                    email=member.email,
                )
                for member in output.group.members
            ],
            financial=MeGroupFinancialResponse(
                totalOutstanding=float(financial.total_outstanding),
                membersWithPayments=financial.members_with_payments,
                totalMembers=financial.total_members,
            ),
        )

    return MeResponse(
        ref_number=output.ref_number,
        name=output.name,
        email=output.email,
        payment_due=float(output.payment_due),
        payment_status=output.payment_status,
        room=MeRoomResponse(number=output.room.number, description=output.room.description) if output.room else None,
        group=group,
        announcements=[_announcement(item) for item in output.announcements],
    )


@router.get("/api/me/sessions", response_model=ActiveSessionsResponse)
def list_my_sessions(
    current_attendee: AttendeePrincipal = Depends(get_current_attendee),
    use_case: ListActiveSessionsUseCase = Depends(get_list_active_sessions_use_case),
):
    sessions = use_case.execute(user_type="attendee", user_ref=current_attendee.ref)
    return ActiveSessionsResponse(
        sessions=[
            ActiveSessionResponse(
                session_id=session.session_id,
                created_at=session.created_at,
                expires_at=session.expires_at,
                last_activity=session.last_activity,
                ip_address=session.ip_address,
                user_agent=session.user_agent,
                is_current=session.session_id == current_attendee.session_id,
            )
            for session in sessions
        ],
        total_count=len(sessions),
    )
