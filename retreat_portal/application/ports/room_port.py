from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from retreat_portal.domain.entities.room import Room, RoomWithOccupants


class RoomPort(Protocol):
    def count_rooms(self) -> int:
        ...

    def list_rooms(self, *, limit: int, offset: int) -> list[RoomWithOccupants]:
        ...

    def get_room(self, *, room_id: int) -> Room | None:
        ...

    def get_room_with_occupants(self, *, room_id: int) -> RoomWithOccupants | None:
        ...

    def room_number_exists(self, *, number: str, exclude_id: int | None = None) -> bool:
        ...

    def create_room(
        self,
        *,
        number: str,
        description: str | None,
        capacity: int,
        floor: str | None,
        room_type: str,
        created_at: datetime,
    ) -> int:
        ...

    def update_room(self, *, room_id: int, fields: dict[str, Any], updated_at: datetime) -> None:
        ...

    def count_occupants(self, *, room_id: int) -> int:
        ...

    def delete_room(self, *, room_id: int) -> None:
        ...
