from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Any

from sqlalchemy import bindparam, text

from retreat_portal.application.ports.room_port import RoomPort
from retreat_portal.domain.entities.room import Room, RoomWithOccupants
from retreat_portal.infrastructure.db.errors import translate_db_errors
from retreat_portal.infrastructure.db.mappers.portal_mapper import map_row_to_room
from retreat_portal.infrastructure.db.sql import build_update, typed_text
from retreat_portal.infrastructure.db.types import TIMESTAMP


_ROOM_COLUMNS = "id, number, description, capacity, floor, room_type, created_at, updated_at"
_UPDATABLE_COLUMNS = {"number", "description", "capacity", "floor", "room_type"}


class SqlRoomsRepository(RoomPort):
    def __init__(self, engine):
        self._engine = engine

    def _occupants(self, conn, room_ids: list[int]) -> dict[int, list[str]]:
        if not room_ids:
            return {}
        statement = text(
            "SELECT room_id, name FROM attendees WHERE room_id IN :room_ids ORDER BY name"
        ).bindparams(bindparam("room_ids", expanding=True))
        occupants: dict[int, list[str]] = defaultdict(list)
        for row in conn.execute(statement, {"room_ids": room_ids}).mappings():
            occupants[int(row["room_id"])].append(row["name"])
        return occupants

    @translate_db_errors()
    def count_rooms(self) -> int:
        with self._engine.connect() as conn:
            return int(conn.execute(text("SELECT COUNT(*) FROM rooms")).scalar_one())

    @translate_db_errors()
    def list_rooms(self, *, limit: int, offset: int) -> list[RoomWithOccupants]:
        sql = f"""
            SELECT {_ROOM_COLUMNS}
            FROM rooms
            ORDER BY number
            LIMIT :limit OFFSET :offset
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), {"limit": limit, "offset": offset}).mappings().all()
            rooms = [map_row_to_room(row) for row in rows]
            occupants = self._occupants(conn, [room.id for room in rooms])
        return [RoomWithOccupants(room=room, occupants=occupants.get(room.id, [])) for room in rooms]

    @translate_db_errors()
    def get_room(self, *, room_id: int) -> Room | None:
        sql = f"SELECT {_ROOM_COLUMNS} FROM rooms WHERE id = :room_id"
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"room_id": room_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_room(row)

    @translate_db_errors()
    def get_room_with_occupants(self, *, room_id: int) -> RoomWithOccupants | None:
        sql = f"SELECT {_ROOM_COLUMNS} FROM rooms WHERE id = :room_id"
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"room_id": room_id}).mappings().first()
            if row is None:
                return None
            room = map_row_to_room(row)
            occupants = self._occupants(conn, [room.id])
        return RoomWithOccupants(room=room, occupants=occupants.get(room.id, []))

    @translate_db_errors()
    def room_number_exists(self, *, number: str, exclude_id: int | None = None) -> bool:
        sql = "SELECT id FROM rooms WHERE number = :number"
        params: dict[str, Any] = {"number": number}
        if exclude_id is not None:
            sql += " AND id != :exclude_id"
            params["exclude_id"] = exclude_id
        with self._engine.connect() as conn:
            return conn.execute(text(sql + " LIMIT 1"), params).first() is not None

    @translate_db_errors()
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
        sql = """
            INSERT INTO rooms (number, description, capacity, floor, room_type, created_at, updated_at)
            VALUES (:number, :description, :capacity, :floor, :room_type, :created_at, :created_at)
            RETURNING id
        """
        params = {
            "number": number,
            "description": description,
            "capacity": capacity,
            "floor": floor,
            "room_type": room_type,
            "created_at": created_at,
        }
        with self._engine.begin() as conn:
            return int(conn.execute(typed_text(sql, created_at=TIMESTAMP), params).scalar_one())

    @translate_db_errors()
    def update_room(self, *, room_id: int, fields: dict[str, Any], updated_at: datetime) -> None:
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown room columns: {sorted(unknown)}")
        values = {**fields, "updated_at": updated_at}
        statement = build_update("rooms", key_column="id", fields=values, column_types={"updated_at": TIMESTAMP})
        with self._engine.begin() as conn:
            conn.execute(statement, {**values, "key": room_id})

    @translate_db_errors()
    def count_occupants(self, *, room_id: int) -> int:
        with self._engine.connect() as conn:
            result = conn.execute(
                text("SELECT COUNT(*) FROM attendees WHERE room_id = :room_id"),
                {"room_id": room_id},
            )
            return int(result.scalar_one())

    @translate_db_errors()
    def delete_room(self, *, room_id: int) -> None:
        with self._engine.begin() as conn:
            conn.execute(text("DELETE FROM rooms WHERE id = :room_id"), {"room_id": room_id})
