from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from retreat_portal.domain.entities.room import RoomWithOccupants


@dataclass(frozen=True)
class CreateRoomInput:
    number: str
    description: str | None = None
    capacity: int | None = None
    floor: str | None = None
    room_type: str | None = None


@dataclass(frozen=True)
class UpdateRoomInput:
    room_id: int
    changes: dict[str, Any]


@dataclass(frozen=True)
class ListRoomsOutput:
    items: list[RoomWithOccupants]
    total: int
    limit: int
    offset: int
