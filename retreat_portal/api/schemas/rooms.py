from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from retreat_portal.api.schemas.common import PaginationMetaResponse


class RoomResponse(BaseModel):
    id: int
    number: str
    description: str | None
    capacity: int
    floor: str | None
    room_type: str
    created_at: datetime | None
    updated_at: datetime | None
    occupant_count: int
    occupants: list[str]


class RoomListResponse(BaseModel):
    data: list[RoomResponse]
    pagination: PaginationMetaResponse
