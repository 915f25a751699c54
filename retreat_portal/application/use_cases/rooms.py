from __future__ import annotations

import logging

from retreat_portal.application.dto.room import CreateRoomInput, ListRoomsOutput, UpdateRoomInput
from retreat_portal.application.ports.room_port import RoomPort
from retreat_portal.domain.entities.room import Room, RoomWithOccupants
from retreat_portal.domain.exceptions import (
    DuplicateResourceError,
    ResourceInUseError,
    ResourceNotFoundError,
)

from .common import clean_str, collect_changes, to_int, utcnow


logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 2
DEFAULT_ROOM_TYPE = "standard"

_UPDATABLE_FIELDS = {
    "number": clean_str,
    "description": clean_str,
    "capacity": to_int,
    "floor": clean_str,
    "room_type": clean_str,
}


class ListRoomsUseCase:
    def __init__(self, *, room_port: RoomPort):
        self._room_port = room_port

    def execute(self, *, limit: int, offset: int) -> ListRoomsOutput:
        total = self._room_port.count_rooms()
        items = self._room_port.list_rooms(limit=limit, offset=offset)
        return ListRoomsOutput(items=items, total=total, limit=limit, offset=offset)


class GetRoomUseCase:
    def __init__(self, *, room_port: RoomPort):
        self._room_port = room_port

    def execute(self, room_id: int) -> RoomWithOccupants:
        room = self._room_port.get_room_with_occupants(room_id=room_id)
        if room is None:
            raise ResourceNotFoundError("Room")
        return room


class CreateRoomUseCase:
    def __init__(self, *, room_port: RoomPort):
        self._room_port = room_port

    def execute(self, command: CreateRoomInput) -> int:
        number = command.number.strip()
        if self._room_port.room_number_exists(number=number):
            raise DuplicateResourceError("Room number already exists")
        room_id = self._room_port.create_room(
            number=number,
            description=clean_str(command.description),
            capacity=command.capacity or DEFAULT_CAPACITY,
            floor=clean_str(command.floor),
            room_type=command.room_type or DEFAULT_ROOM_TYPE,
            created_at=utcnow(),
        )
        logger.info("rooms: created id=%s number=%s", room_id, number)
        return room_id


class UpdateRoomUseCase:
    def __init__(self, *, room_port: RoomPort):
        self._room_port = room_port

    def execute(self, command: UpdateRoomInput) -> None:
        if self._room_port.get_room(room_id=command.room_id) is None:
            raise ResourceNotFoundError("Room")
        fields = collect_changes(command.changes, _UPDATABLE_FIELDS)
        number = fields.get("number")
        if number and self._room_port.room_number_exists(number=number, exclude_id=command.room_id):
            raise DuplicateResourceError("Room number already exists")
        self._room_port.update_room(room_id=command.room_id, fields=fields, updated_at=utcnow())


class DeleteRoomUseCase:
    def __init__(self, *, room_port: RoomPort):
        self._room_port = room_port

    def execute(self, room_id: int) -> Room:
        room = self._room_port.get_room(room_id=room_id)
        if room is None:
            raise ResourceNotFoundError("Room")
        occupants = self._room_port.count_occupants(room_id=room_id)
        if occupants:
            raise ResourceInUseError(
                f"Cannot delete room with {occupants} occupant(s). Please reassign attendees first."
            )
        self._room_port.delete_room(room_id=room_id)
        logger.info("rooms: deleted id=%s", room_id)
        return room
