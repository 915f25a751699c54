from __future__ import annotations

from fastapi import APIRouter, Depends

from retreat_portal.api import errors
from retreat_portal.api.deps import (
    get_create_attendee_use_case,
    get_current_admin,
    get_delete_attendee_use_case,
    get_get_attendee_use_case,
    get_json_body,
    get_list_attendees_use_case,
    get_pagination,
    get_update_attendee_use_case,
)
from retreat_portal.api.schemas.attendees import (
    AttendeeDeletedResponse,
    AttendeeListResponse,
    AttendeeResponse,
    DeletedAttendeeResponse,
)
from retreat_portal.api.schemas.common import CreatedResponse, UpdatedResponse
from retreat_portal.application.dto.attendee import CreateAttendeeInput, UpdateAttendeeInput
from retreat_portal.application.use_cases.attendees import (
    CreateAttendeeUseCase,
    DeleteAttendeeUseCase,
    GetAttendeeUseCase,
    ListAttendeesUseCase,
    UpdateAttendeeUseCase,
)
from retreat_portal.application.use_cases.common import clean_str, to_decimal, to_int
from retreat_portal.application.validation import attendee_create_schema, attendee_update_schema, validate
from retreat_portal.domain.entities.attendee import AttendeeSummary
from retreat_portal.domain.entities.auth import AdminPrincipal
from retreat_portal.domain.exceptions import DomainError
from retreat_portal.shared.pagination import PaginationParams, create_paginated_response


router = APIRouter()


def _attendee_response(attendee: AttendeeSummary) -> AttendeeResponse:
    return AttendeeResponse(
        id=attendee.id,
        ref_number=attendee.ref_number,
        name=attendee.name,
        email=attendee.email,
        phone=attendee.phone,
        payment_due=float(attendee.payment_due),
        payment_status=attendee.payment_status,
        room_id=attendee.room_id,
        group_id=attendee.group_id,
        room_number=attendee.room_number,
        room_description=attendee.room_description,
        group_name=attendee.group_name,
    )


@router.get("/api/admin/attendees", response_model=AttendeeListResponse)
def list_attendees(
    pagination: PaginationParams = Depends(get_pagination),
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: ListAttendeesUseCase = Depends(get_list_attendees_use_case),
):
    output = use_case.execute(limit=pagination.limit, offset=pagination.offset)
    return create_paginated_response(
        [_attendee_response(item) for item in output.items],
        output.total,
        output.limit,
        output.offset,
    )


@router.post("/api/admin/attendees", response_model=CreatedResponse, status_code=201)
def create_attendee(
    _admin: AdminPrincipal = Depends(get_current_admin),
    body: dict = Depends(get_json_body),
    use_case: CreateAttendeeUseCase = Depends(get_create_attendee_use_case),
):
    errors.ensure_valid(validate(body, attendee_create_schema))
    try:
        attendee_id = use_case.execute(
            CreateAttendeeInput(
                name=str(body["name"]),
                ref_number=str(body["ref_number"]),
                password=str(body["password"]),
                email=clean_str(body.get("email")),
                phone=clean_str(body.get("phone")),
                room_id=to_int(body.get("room_id")),
                group_id=to_int(body.get("group_id")),
                payment_due=to_decimal(body.get("payment_due")),
                payment_status=clean_str(body.get("payment_status")) or "pending",
            )
        )
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return CreatedResponse(id=attendee_id, message="Attendee created successfully")


@router.get("/api/admin/attendees/{attendee_id}", response_model=AttendeeResponse)
def get_attendee(
    attendee_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: GetAttendeeUseCase = Depends(get_get_attendee_use_case),
):
    try:
        attendee = use_case.execute(attendee_id)
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return _attendee_response(attendee)


@router.put("/api/admin/attendees/{attendee_id}", response_model=UpdatedResponse)
def update_attendee(
    attendee_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    body: dict = Depends(get_json_body),
    use_case: UpdateAttendeeUseCase = Depends(get_update_attendee_use_case),
):
    errors.ensure_valid(validate(body, attendee_update_schema))
    try:
        use_case.execute(UpdateAttendeeInput(attendee_id=attendee_id, changes=body))
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return UpdatedResponse(message="Attendee updated successfully", id=attendee_id)


@router.delete("/api/admin/attendees/{attendee_id}", response_model=AttendeeDeletedResponse)
def delete_attendee(
    attendee_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: DeleteAttendeeUseCase = Depends(get_delete_attendee_use_case),
):
    try:
        attendee = use_case.execute(attendee_id)
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return AttendeeDeletedResponse(
        message=f"Attendee {attendee.name} deleted successfully",
        deleted_attendee=DeletedAttendeeResponse(
            id=attendee.id,
            name=attendee.name,
            ref_number=attendee.ref_number,
        ),
    )
