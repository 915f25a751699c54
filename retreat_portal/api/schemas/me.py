from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from retreat_portal.api.schemas.announcements import AttendeeAnnouncementResponse


class BadgeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    css_class: str = Field(alias="class")
    icon: str


class MeAnnouncementResponse(AttendeeAnnouncementResponse):
    type_badge: BadgeResponse
    priority_badge: BadgeResponse


class MeRoomResponse(BaseModel):
    number: str
    description: str


class MeGroupMemberResponse(BaseModel):
    name: str
    ref_number: str
    payment_due: float
    email: str | None


class MeGroupFinancialResponse(BaseModel):
    totalOutstanding: float
    membersWithPayments: int
    totalMembers: int


class MeGroupResponse(BaseModel):
    name: str
    members: list[MeGroupMemberResponse]
    financial: MeGroupFinancialResponse


class MeResponse(BaseModel):
    ref_number: str
    name: str
    email: str | None
    payment_due: float
    payment_status: str
    room: MeRoomResponse | None
    group: MeGroupResponse | None
    announcements: list[MeAnnouncementResponse]
