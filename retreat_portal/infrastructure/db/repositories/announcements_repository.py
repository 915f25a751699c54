from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import text

from retreat_portal.application.ports.announcement_port import AnnouncementPort
from retreat_portal.domain.entities.announcement import Announcement
from retreat_portal.infrastructure.db.errors import translate_db_errors
from retreat_portal.infrastructure.db.mappers.portal_mapper import (
    dump_target_groups,
    map_row_to_announcement,
)
from retreat_portal.infrastructure.db.sql import build_update, typed_text
from retreat_portal.infrastructure.db.types import TIMESTAMP


_ANNOUNCEMENT_COLUMNS = """
    id, title, content, type, priority, is_active, target_audience, target_groups,
    author_name, starts_at, expires_at, created_at, updated_at
"""

_UPDATABLE_COLUMNS = {
    "title",
    "content",
    "type",
    "priority",
    "is_active",
    "target_audience",
    "target_groups",
    "starts_at",
    "expires_at",
}

_COLUMN_TYPES = {"starts_at": TIMESTAMP, "expires_at": TIMESTAMP, "updated_at": TIMESTAMP}


class SqlAnnouncementsRepository(AnnouncementPort):
    def __init__(self, engine):
        self._engine = engine

    @translate_db_errors()
    def count_announcements(self) -> int:
        with self._engine.connect() as conn:
            return int(conn.execute(text("SELECT COUNT(*) FROM announcements")).scalar_one())

    @translate_db_errors()
    def list_announcements(self, *, limit: int, offset: int) -> list[Announcement]:
        sql = f"""
            SELECT {_ANNOUNCEMENT_COLUMNS}
            FROM announcements
            ORDER BY priority DESC, created_at DESC, id DESC
            LIMIT :limit OFFSET :offset
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), {"limit": limit, "offset": offset}).mappings().all()
        return [map_row_to_announcement(row) for row in rows]

    @translate_db_errors()
    def list_active_announcements(self) -> list[Announcement]:
        sql = f"""
            SELECT {_ANNOUNCEMENT_COLUMNS}
            FROM announcements
            WHERE is_active = :is_active
            ORDER BY priority DESC, created_at DESC, id DESC
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), {"is_active": True}).mappings().all()
        return [map_row_to_announcement(row) for row in rows]

    @translate_db_errors()
    def get_announcement(self, *, announcement_id: int) -> Announcement | None:
        sql = f"SELECT {_ANNOUNCEMENT_COLUMNS} FROM announcements WHERE id = :announcement_id"
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"announcement_id": announcement_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_announcement(row)

    @translate_db_errors()
    def create_announcement(
        self,
        *,
        title: str,
        content: str,
        type: str,
        priority: int,
        is_active: bool,
        target_audience: str,
        target_groups: list[int] | None,
        author_name: str,
        starts_at: datetime | None,
        expires_at: datetime | None,
        created_at: datetime,
    ) -> int:
        sql = """
            INSERT INTO announcements (
                title, content, type, priority, is_active, target_audience, target_groups,
                author_name, starts_at, expires_at, created_at, updated_at
            ) VALUES (
                :title, :content, :type, :priority, :is_active, :target_audience, :target_groups,
                :author_name, :starts_at, :expires_at, :created_at, :created_at
            )
            RETURNING id
        """
        params = {
            "title": title,
            "content": content,
            "type": type,
            "priority": priority,
            "is_active": is_active,
            "target_audience": target_audience,
            "target_groups": dump_target_groups(target_groups),
            "author_name": author_name,
            "starts_at": starts_at,
            "expires_at": expires_at,
            "created_at": created_at,
        }
        statement = typed_text(sql, starts_at=TIMESTAMP, expires_at=TIMESTAMP, created_at=TIMESTAMP)
        with self._engine.begin() as conn:
            return int(conn.execute(statement, params).scalar_one())

    @translate_db_errors()
    def update_announcement(self, *, announcement_id: int, fields: dict[str, Any], updated_at: datetime) -> None:
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown announcement columns: {sorted(unknown)}")
        values = dict(fields)
        if "target_groups" in values:
            values["target_groups"] = dump_target_groups(values["target_groups"])
        values["updated_at"] = updated_at
        statement = build_update("announcements", key_column="id", fields=values, column_types=_COLUMN_TYPES)
        with self._engine.begin() as conn:
            conn.execute(statement, {**values, "key": announcement_id})

    @translate_db_errors()
    def delete_announcement(self, *, announcement_id: int) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                text("DELETE FROM announcements WHERE id = :announcement_id"),
                {"announcement_id": announcement_id},
            )
