from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


RoomType = Literal["single", "double", "suite", "family", "standard"]


@dataclass(frozen=True)
class Room:
    id: int
    number: str
    description: str | None
    capacity: int
    floor: str | None
    room_type: RoomType
    created_at: datetime | None
    updated_at: datetime | None


@dataclass(frozen=True)
class RoomWithOccupants:
    room: Room
    occupants: list[str]
