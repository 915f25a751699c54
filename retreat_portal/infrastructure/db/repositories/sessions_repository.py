from __future__ import annotations

from datetime import datetime

from sqlalchemy import text

from retreat_portal.application.ports.session_port import SessionPort
from retreat_portal.domain.entities.auth import ActiveSession, UserType
from retreat_portal.infrastructure.db.errors import translate_db_errors
from retreat_portal.infrastructure.db.mappers.portal_mapper import map_row_to_active_session
from retreat_portal.infrastructure.db.sql import typed_text
from retreat_portal.infrastructure.db.types import TIMESTAMP


class SqlSessionsRepository(SessionPort):
    def __init__(self, engine):
        self._engine = engine

    @translate_db_errors()
    def create_session(self, *, session: ActiveSession) -> None:
        sql = """
            INSERT INTO sessions (
                session_id, user_type, user_ref, created_at, expires_at, last_activity, ip_address, user_agent
            ) VALUES (
                :session_id, :user_type, :user_ref, :created_at, :expires_at, :last_activity, :ip_address, :user_agent
            )
        """
        params = {
            "session_id": session.session_id,
            "user_type": session.user_type,
            "user_ref": session.user_ref,
            "created_at": session.created_at,
            "expires_at": session.expires_at,
            "last_activity": session.last_activity,
            "ip_address": session.ip_address,
            "user_agent": session.user_agent,
        }
        statement = typed_text(sql, created_at=TIMESTAMP, expires_at=TIMESTAMP, last_activity=TIMESTAMP)
        with self._engine.begin() as conn:
            conn.execute(statement, params)

    @translate_db_errors()
    def list_active_sessions(self, *, user_type: UserType, user_ref: str, now: datetime) -> list[ActiveSession]:
        sql = """
            SELECT session_id, user_type, user_ref, created_at, expires_at, last_activity, ip_address, user_agent
            FROM sessions
            WHERE user_type = :user_type AND user_ref = :user_ref AND expires_at > :now
            ORDER BY last_activity DESC, created_at DESC
        """
        params = {"user_type": user_type, "user_ref": user_ref, "now": now}
        with self._engine.connect() as conn:
            rows = conn.execute(typed_text(sql, now=TIMESTAMP), params).mappings().all()
        return [map_row_to_active_session(row) for row in rows]

    @translate_db_errors()
    def touch_session(self, *, session_id: str, last_activity: datetime) -> None:
        sql = "UPDATE sessions SET last_activity = :last_activity WHERE session_id = :session_id"
        with self._engine.begin() as conn:
            conn.execute(
                typed_text(sql, last_activity=TIMESTAMP),
                {"last_activity": last_activity, "session_id": session_id},
            )

    @translate_db_errors()
    def delete_session(self, *, session_id: str) -> None:
        with self._engine.begin() as conn:
            conn.execute(text("DELETE FROM sessions WHERE session_id = :session_id"), {"session_id": session_id})

    @translate_db_errors()
    def delete_expired_sessions(self, *, now: datetime) -> int:
        sql = "DELETE FROM sessions WHERE expires_at <= :now"
        with self._engine.begin() as conn:
            result = conn.execute(typed_text(sql, now=TIMESTAMP), {"now": now})
        return result.rowcount or 0
