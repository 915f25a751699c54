from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from retreat_portal.domain.entities.attendee import AttendeeSummary


@dataclass(frozen=True)
class CreateAttendeeInput:
    name: str
    ref_number: str
    password: str
    email: str | None = None
    phone: str | None = None
    room_id: int | None = None
    group_id: int | None = None
    payment_due: Decimal = Decimal("0")
    payment_status: str = "pending"


@dataclass(frozen=True)
class UpdateAttendeeInput:
    attendee_id: int
    changes: dict[str, Any]


@dataclass(frozen=True)
class ListAttendeesOutput:
    items: list[AttendeeSummary]
    total: int
    limit: int
    offset: int
