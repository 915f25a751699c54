from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Literal


PaymentStatus = Literal["pending", "partial", "paid", "overdue"]


@dataclass(frozen=True)
class Attendee:
    id: int
    ref_number: str
    name: str
    email: str | None
    password_hash: str
    phone: str | None
    room_id: int | None
    group_id: int | None
    payment_due: Decimal
    payment_status: PaymentStatus
    created_at: datetime | None
    updated_at: datetime | None
    last_login: datetime | None


@dataclass(frozen=True)
class AttendeeSummary:
    id: int
    ref_number: str
    name: str
    email: str | None
    phone: str | None
    payment_due: Decimal
    payment_status: PaymentStatus
    room_id: int | None
    group_id: int | None
    room_number: str | None
    room_description: str | None
    group_name: str | None


@dataclass(frozen=True)
class GroupMember:
    name: str
    ref_number: str
    payment_due: Decimal
    email: str | None
