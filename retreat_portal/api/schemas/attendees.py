from __future__ import annotations

from pydantic import BaseModel

from retreat_portal.api.schemas.common import PaginationMetaResponse


class AttendeeResponse(BaseModel):
    id: int
    ref_number: str
    name: str
    email: str | None
    phone: str | None
    payment_due: float
    payment_status: str
    room_id: int | None
    group_id: int | None
    room_number: str | None
    room_description: str | None
    group_name: str | None


class AttendeeListResponse(BaseModel):
    data: list[AttendeeResponse]
    pagination: PaginationMetaResponse


class DeletedAttendeeResponse(BaseModel):
    id: int
    name: str
    ref_number: str


class AttendeeDeletedResponse(BaseModel):
    success: bool = True
    message: str
    deleted_attendee: DeletedAttendeeResponse
