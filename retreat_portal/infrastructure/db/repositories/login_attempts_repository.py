from __future__ import annotations

from datetime import datetime

from retreat_portal.application.ports.login_attempt_port import LoginAttemptPort
from retreat_portal.domain.entities.auth import FailedAttemptSummary, UserType
from retreat_portal.infrastructure.db.errors import translate_db_errors
from retreat_portal.infrastructure.db.sql import typed_text
from retreat_portal.infrastructure.db.types import TIMESTAMP, as_utc


class SqlLoginAttemptsRepository(LoginAttemptPort):
    def __init__(self, engine):
        self._engine = engine

    @translate_db_errors()
    def record_attempt(
        self,
        *,
        identifier: str,
        user_type: UserType,
        success: bool,
        attempted_at: datetime,
    ) -> None:
        sql = """
            INSERT INTO login_attempts (identifier, user_type, success, attempted_at)
            VALUES (:identifier, :user_type, :success, :attempted_at)
        """
        params = {
            "identifier": identifier,
            "user_type": user_type,
            "success": success,
            "attempted_at": attempted_at,
        }
        with self._engine.begin() as conn:
            conn.execute(typed_text(sql, attempted_at=TIMESTAMP), params)

    @translate_db_errors()
    def summarize_failed_attempts(
        self,
        *,
        identifier: str,
        user_type: UserType,
        since: datetime,
    ) -> FailedAttemptSummary:
        sql = """
            SELECT COUNT(*) AS failed_count, MIN(attempted_at) AS oldest_attempt_at
            FROM login_attempts
            WHERE identifier = :identifier
              AND user_type = :user_type
              AND success = :success
              AND attempted_at > :since
        """
        params = {"identifier": identifier, "user_type": user_type, "success": False, "since": since}
        with self._engine.connect() as conn:
            row = conn.execute(typed_text(sql, since=TIMESTAMP), params).mappings().one()
        return FailedAttemptSummary(
            count=int(row["failed_count"] or 0),
            oldest_attempt_at=as_utc(row["oldest_attempt_at"]),
        )

    @translate_db_errors()
    def clear_failed_attempts(self, *, identifier: str, user_type: UserType) -> None:
        sql = """
            DELETE FROM login_attempts
            WHERE identifier = :identifier AND user_type = :user_type AND success = :success
        """
        with self._engine.begin() as conn:
            conn.execute(
                typed_text(sql),
                {"identifier": identifier, "user_type": user_type, "success": False},
            )

    @translate_db_errors()
    def delete_attempts_before(self, *, cutoff: datetime) -> int:
        sql = "DELETE FROM login_attempts WHERE attempted_at < :cutoff"
        with self._engine.begin() as conn:
            result = conn.execute(typed_text(sql, cutoff=TIMESTAMP), {"cutoff": cutoff})
        return result.rowcount or 0
