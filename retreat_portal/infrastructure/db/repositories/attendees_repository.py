from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import text

from retreat_portal.application.ports.attendee_port import AttendeePort
from retreat_portal.domain.entities.attendee import Attendee, AttendeeSummary, GroupMember
from retreat_portal.infrastructure.db.errors import translate_db_errors
from retreat_portal.infrastructure.db.mappers.portal_mapper import (
    map_row_to_attendee,
    map_row_to_attendee_summary,
    map_row_to_group_member,
)
from retreat_portal.infrastructure.db.sql import build_update, typed_text
from retreat_portal.infrastructure.db.types import MONEY, TIMESTAMP


_SUMMARY_SELECT = """
    SELECT
        a.id,
        a.ref_number,
        a.name,
        a.email,
        a.phone,
        a.payment_due,
        a.payment_status,
        a.room_id,
        a.group_id,
        r.number AS room_number,
        r.description AS room_description,
        g.name AS group_name
    FROM attendees a
    LEFT JOIN rooms r ON a.room_id = r.id
    LEFT JOIN groups g ON a.group_id = g.id
"""

_UPDATABLE_COLUMNS = {
    "name",
    "email",
    "ref_number",
    "phone",
    "room_id",
    "group_id",
    "payment_due",
    "payment_status",
    "password_hash",
}

_COLUMN_TYPES = {"payment_due": MONEY, "updated_at": TIMESTAMP}


class SqlAttendeesRepository(AttendeePort):
    def __init__(self, engine):
        self._engine = engine

    @translate_db_errors()
    def count_attendees(self) -> int:
        with self._engine.connect() as conn:
            return int(conn.execute(text("SELECT COUNT(*) FROM attendees")).scalar_one())

    @translate_db_errors()
    def list_attendees(self, *, limit: int, offset: int) -> list[AttendeeSummary]:
        sql = _SUMMARY_SELECT + """
            ORDER BY a.name, a.id
            LIMIT :limit OFFSET :offset
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), {"limit": limit, "offset": offset}).mappings().all()
        return [map_row_to_attendee_summary(row) for row in rows]

    @translate_db_errors()
    def get_attendee_summary(self, *, attendee_id: int) -> AttendeeSummary | None:
        sql = _SUMMARY_SELECT + " WHERE a.id = :attendee_id"
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"attendee_id": attendee_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_attendee_summary(row)

    @translate_db_errors()
    def get_attendee_summary_by_ref(self, *, ref_number: str) -> AttendeeSummary | None:
        sql = _SUMMARY_SELECT + " WHERE a.ref_number = :ref_number"
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"ref_number": ref_number}).mappings().first()
        if row is None:
            return None
        return map_row_to_attendee_summary(row)

    @translate_db_errors()
    def get_attendee_by_ref(self, *, ref_number: str) -> Attendee | None:
        sql = """
            SELECT id, ref_number, name, email, password_hash, phone, room_id, group_id,
                   payment_due, payment_status, created_at, updated_at, last_login
            FROM attendees
            WHERE ref_number = :ref_number
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"ref_number": ref_number}).mappings().first()
        if row is None:
            return None
        return map_row_to_attendee(row)

    @translate_db_errors()
    def ref_number_exists(self, *, ref_number: str, exclude_id: int | None = None) -> bool:
        sql = "SELECT id FROM attendees WHERE ref_number = :ref_number"
        params: dict[str, Any] = {"ref_number": ref_number}
        if exclude_id is not None:
            sql += " AND id != :exclude_id"
            params["exclude_id"] = exclude_id
        with self._engine.connect() as conn:
            return conn.execute(text(sql + " LIMIT 1"), params).first() is not None

    @translate_db_errors()
    def create_attendee(
        self,
        *,
        name: str,
        ref_number: str,
        password_hash: str,
        email: str | None,
        phone: str | None,
        room_id: int | None,
        group_id: int | None,
        payment_due: Decimal,
        payment_status: str,
        created_at: datetime,
    ) -> int:
        sql = """
            INSERT INTO attendees (
                name, ref_number, password_hash, email, phone, room_id, group_id,
                payment_due, payment_status, created_at, updated_at
            ) VALUES (
                :name, :ref_number, :password_hash, :email, :phone, :room_id, :group_id,
                :payment_due, :payment_status, :created_at, :created_at
            )
            RETURNING id
        """
        params = {
            "name": name,
            "ref_number": ref_number,
            "password_hash": password_hash,
            "email": email,
            "phone": phone,
            "room_id": room_id,
            "group_id": group_id,
            "payment_due": payment_due,
            "payment_status": payment_status,
            "created_at": created_at,
        }
        statement = typed_text(sql, payment_due=MONEY, created_at=TIMESTAMP)
        with self._engine.begin() as conn:
            return int(conn.execute(statement, params).scalar_one())

    @translate_db_errors()
    def update_attendee(self, *, attendee_id: int, fields: dict[str, Any], updated_at: datetime) -> None:
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown attendee columns: {sorted(unknown)}")
        values = {**fields, "updated_at": updated_at}
        statement = build_update("attendees", key_column="id", fields=values, column_types=_COLUMN_TYPES)
        with self._engine.begin() as conn:
            conn.execute(statement, {**values, "key": attendee_id})

    @translate_db_errors()
    def delete_attendee(self, *, attendee_id: int) -> None:
        with self._engine.begin() as conn:
            conn.execute(text("DELETE FROM attendees WHERE id = :attendee_id"), {"attendee_id": attendee_id})

    @translate_db_errors()
    def update_password_hash(self, *, attendee_id: int, password_hash: str) -> None:
        sql = "UPDATE attendees SET password_hash = :password_hash WHERE id = :attendee_id"
        with self._engine.begin() as conn:
            conn.execute(text(sql), {"password_hash": password_hash, "attendee_id": attendee_id})

    @translate_db_errors()
    def update_last_login(self, *, attendee_id: int, logged_in_at: datetime) -> None:
        sql = "UPDATE attendees SET last_login = :logged_in_at WHERE id = :attendee_id"
        statement = typed_text(sql, logged_in_at=TIMESTAMP)
        with self._engine.begin() as conn:
            conn.execute(statement, {"logged_in_at": logged_in_at, "attendee_id": attendee_id})

    @translate_db_errors()
    def list_group_members(self, *, group_id: int, exclude_ref: str | None = None) -> list[GroupMember]:
        sql = "SELECT name, ref_number, payment_due, email FROM attendees WHERE group_id = :group_id"
        params: dict[str, Any] = {"group_id": group_id}
        if exclude_ref is not None:
            sql += " AND ref_number != :exclude_ref"
            params["exclude_ref"] = exclude_ref
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql + " ORDER BY name"), params).mappings().all()
        return [map_row_to_group_member(row) for row in rows]
