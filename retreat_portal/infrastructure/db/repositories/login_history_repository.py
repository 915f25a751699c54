from __future__ import annotations

from datetime import datetime

from sqlalchemy import text

from retreat_portal.application.ports.login_history_port import LoginHistoryPort
from retreat_portal.domain.entities.auth import LoginHistoryEntry, UserType
from retreat_portal.infrastructure.db.errors import translate_db_errors
from retreat_portal.infrastructure.db.mappers.portal_mapper import map_row_to_login_history_entry
from retreat_portal.infrastructure.db.sql import typed_text
from retreat_portal.infrastructure.db.types import TIMESTAMP


class SqlLoginHistoryRepository(LoginHistoryPort):
    def __init__(self, engine):
        self._engine = engine

    @translate_db_errors()
    def record_login(self, *, user_type: UserType, user_id: str, login_time: datetime) -> None:
        sql = """
            INSERT INTO login_history (user_type, user_id, login_time)
            VALUES (:user_type, :user_id, :login_time)
        """
        with self._engine.begin() as conn:
            conn.execute(
                typed_text(sql, login_time=TIMESTAMP),
                {"user_type": user_type, "user_id": user_id, "login_time": login_time},
            )

    @translate_db_errors()
    def count_logins(self) -> int:
        with self._engine.connect() as conn:
            return int(conn.execute(text("SELECT COUNT(*) FROM login_history")).scalar_one())

    @translate_db_errors()
    def list_logins(self, *, limit: int, offset: int) -> list[LoginHistoryEntry]:
        sql = """
            SELECT id, user_type, user_id, login_time
            FROM login_history
            ORDER BY login_time DESC, id DESC
            LIMIT :limit OFFSET :offset
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), {"limit": limit, "offset": offset}).mappings().all()
        return [map_row_to_login_history_entry(row) for row in rows]
