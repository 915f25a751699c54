from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Any

from sqlalchemy import bindparam, text

from retreat_portal.application.ports.group_port import GroupPort
from retreat_portal.domain.entities.group import Group, GroupMemberRef, GroupWithMembers
from retreat_portal.infrastructure.db.errors import translate_db_errors
from retreat_portal.infrastructure.db.mappers.portal_mapper import (
    map_row_to_group,
    map_row_to_group_member_ref,
)
from retreat_portal.infrastructure.db.sql import build_update, typed_text
from retreat_portal.infrastructure.db.types import TIMESTAMP


_GROUP_COLUMNS = "id, name, description, max_members, created_at, updated_at"
_UPDATABLE_COLUMNS = {"name", "description", "max_members"}


class SqlGroupsRepository(GroupPort):
    def __init__(self, engine):
        self._engine = engine

    def _members(self, conn, group_ids: list[int]) -> dict[int, list[GroupMemberRef]]:
        if not group_ids:
            return {}
        statement = text(
            "SELECT group_id, name, ref_number FROM attendees WHERE group_id IN :group_ids ORDER BY name"
        ).bindparams(bindparam("group_ids", expanding=True))
        members: dict[int, list[GroupMemberRef]] = defaultdict(list)
        for row in conn.execute(statement, {"group_ids": group_ids}).mappings():
            members[int(row["group_id"])].append(map_row_to_group_member_ref(row))
        return members

    @translate_db_errors()
    def count_groups(self) -> int:
        with self._engine.connect() as conn:
            return int(conn.execute(text("SELECT COUNT(*) FROM groups")).scalar_one())

    @translate_db_errors()
    def list_groups(self, *, limit: int, offset: int) -> list[GroupWithMembers]:
        sql = f"""
            SELECT {_GROUP_COLUMNS}
            FROM groups
            ORDER BY name
            LIMIT :limit OFFSET :offset
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), {"limit": limit, "offset": offset}).mappings().all()
            groups = [map_row_to_group(row) for row in rows]
            members = self._members(conn, [group.id for group in groups])
        return [GroupWithMembers(group=group, members=members.get(group.id, [])) for group in groups]

    @translate_db_errors()
    def get_group(self, *, group_id: int) -> Group | None:
        sql = f"SELECT {_GROUP_COLUMNS} FROM groups WHERE id = :group_id"
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"group_id": group_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_group(row)

    @translate_db_errors()
    def get_group_with_members(self, *, group_id: int) -> GroupWithMembers | None:
        sql = f"SELECT {_GROUP_COLUMNS} FROM groups WHERE id = :group_id"
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"group_id": group_id}).mappings().first()
            if row is None:
                return None
            group = map_row_to_group(row)
            members = self._members(conn, [group.id])
        return GroupWithMembers(group=group, members=members.get(group.id, []))

    @translate_db_errors()
    def group_name_exists(self, *, name: str, exclude_id: int | None = None) -> bool:
        sql = "SELECT id FROM groups WHERE name = :name"
        params: dict[str, Any] = {"name": name}
        if exclude_id is not None:
            sql += " AND id != :exclude_id"
            params["exclude_id"] = exclude_id
        with self._engine.connect() as conn:
            return conn.execute(text(sql + " LIMIT 1"), params).first() is not None

    @translate_db_errors()
    def create_group(
        self,
        *,
        name: str,
        description: str | None,
        max_members: int | None,
        created_at: datetime,
    ) -> int:
        sql = """
            INSERT INTO groups (name, description, max_members, created_at, updated_at)
            VALUES (:name, :description, :max_members, :created_at, :created_at)
            RETURNING id
        """
        params = {
            "name": name,
            "description": description,
            "max_members": max_members,
            "created_at": created_at,
        }
        with self._engine.begin() as conn:
            return int(conn.execute(typed_text(sql, created_at=TIMESTAMP), params).scalar_one())

    @translate_db_errors()
    def update_group(self, *, group_id: int, fields: dict[str, Any], updated_at: datetime) -> None:
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown group columns: {sorted(unknown)}")
        values = {**fields, "updated_at": updated_at}
        statement = build_update("groups", key_column="id", fields=values, column_types={"updated_at": TIMESTAMP})
        with self._engine.begin() as conn:
            conn.execute(statement, {**values, "key": group_id})

    @translate_db_errors()
    def count_members(self, *, group_id: int) -> int:
        with self._engine.connect() as conn:
            result = conn.execute(
                text("SELECT COUNT(*) FROM attendees WHERE group_id = :group_id"),
                {"group_id": group_id},
            )
            return int(result.scalar_one())

    @translate_db_errors()
    def delete_group(self, *, group_id: int) -> None:
        with self._engine.begin() as conn:
            conn.execute(text("DELETE FROM groups WHERE id = :group_id"), {"group_id": group_id})
