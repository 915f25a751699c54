from __future__ import annotations

from fastapi import APIRouter, Depends

from retreat_portal.api import errors
from retreat_portal.api.deps import (
    get_create_room_use_case,
    get_current_admin,
    get_delete_room_use_case,
    get_get_room_use_case,
    get_json_body,
    get_list_rooms_use_case,
    get_pagination,
    get_update_room_use_case,
)
from retreat_portal.api.schemas.common import CreatedResponse, DeletedResponse, UpdatedResponse
from retreat_portal.api.schemas.rooms import RoomListResponse, RoomResponse
from retreat_portal.application.dto.room import CreateRoomInput, UpdateRoomInput
from retreat_portal.application.use_cases.common import clean_str, to_int
from retreat_portal.application.use_cases.rooms import (
    CreateRoomUseCase,
    DeleteRoomUseCase,
    GetRoomUseCase,
    ListRoomsUseCase,
    UpdateRoomUseCase,
)
from retreat_portal.application.validation import room_create_schema, room_update_schema, validate
from retreat_portal.domain.entities.auth import AdminPrincipal
from retreat_portal.domain.entities.room import RoomWithOccupants
from retreat_portal.domain.exceptions import DomainError
from retreat_portal.shared.pagination import PaginationParams, create_paginated_response


router = APIRouter()


def _room_response(item: RoomWithOccupants) -> RoomResponse:
    room = item.room
    return RoomResponse(
        id=room.id,
        number=room.number,
        description=room.description,
        capacity=room.capacity,
        floor=room.floor,
        room_type=room.room_type,
        created_at=room.created_at,
        updated_at=room.updated_at,
        occupant_count=len(item.occupants),
        occupants=item.occupants,
    )


@router.get("/api/admin/rooms", response_model=RoomListResponse)
def list_rooms(
    pagination: PaginationParams = Depends(get_pagination),
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: ListRoomsUseCase = Depends(get_list_rooms_use_case),
):
    output = use_case.execute(limit=pagination.limit, offset=pagination.offset)
    return create_paginated_response(
        [_room_response(item) for item in output.items],
        output.total,
        output.limit,
        output.offset,
    )


@router.post("/api/admin/rooms", response_model=CreatedResponse, status_code=201)
def create_room(
    _admin: AdminPrincipal = Depends(get_current_admin),
    body: dict = Depends(get_json_body),
    use_case: CreateRoomUseCase = Depends(get_create_room_use_case),
):
    errors.ensure_valid(validate(body, room_create_schema))
    try:
        room_id = use_case.execute(
            CreateRoomInput(
                number=str(body["number"]),
                description=clean_str(body.get("description")),
                capacity=to_int(body.get("capacity")),
                floor=clean_str(body.get("floor")),
                room_type=clean_str(body.get("room_type")),
            )
        )
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return CreatedResponse(id=room_id, message="Room created successfully")


@router.get("/api/admin/rooms/{room_id}", response_model=RoomResponse)
def get_room(
    room_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: GetRoomUseCase = Depends(get_get_room_use_case),
):
    try:
        room = use_case.execute(room_id)
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return _room_response(room)


@router.put("/api/admin/rooms/{room_id}", response_model=UpdatedResponse)
def update_room(
    room_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    body: dict = Depends(get_json_body),
    use_case: UpdateRoomUseCase = Depends(get_update_room_use_case),
):
    errors.ensure_valid(validate(body, room_update_schema))
    try:
        use_case.execute(UpdateRoomInput(room_id=room_id, changes=body))
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return UpdatedResponse(message="Room updated successfully", id=room_id)


@router.delete("/api/admin/rooms/{room_id}", response_model=DeletedResponse)
def delete_room(
    room_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: DeleteRoomUseCase = Depends(get_delete_room_use_case),
):
    try:
        room = use_case.execute(room_id)
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return DeletedResponse(message=f"Room {room.number} deleted successfully")
