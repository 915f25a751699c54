from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol

from retreat_portal.domain.entities.attendee import Attendee, AttendeeSummary, GroupMember


class AttendeePort(Protocol):
    def count_attendees(self) -> int:
        ...

    def list_attendees(self, *, limit: int, offset: int) -> list[AttendeeSummary]:
        ...

    def get_attendee_summary(self, *, attendee_id: int) -> AttendeeSummary | None:
        ...

    def get_attendee_summary_by_ref(self, *, ref_number: str) -> AttendeeSummary | None:
        ...

    def get_attendee_by_ref(self, *, ref_number: str) -> Attendee | None:
        ...

    def ref_number_exists(self, *, ref_number: str, exclude_id: int | None = None) -> bool:
        ...

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
        ...

    def update_attendee(self, *, attendee_id: int, fields: dict[str, Any], updated_at: datetime) -> None:
        ...

    def delete_attendee(self, *, attendee_id: int) -> None:
        ...

    def update_password_hash(self, *, attendee_id: int, password_hash: str) -> None:
        ...

    def update_last_login(self, *, attendee_id: int, logged_in_at: datetime) -> None:
        ...

    def list_group_members(self, *, group_id: int, exclude_ref: str | None = None) -> list[GroupMember]:
        ...
