from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from retreat_portal.application.dto.announcement import AttendeeAnnouncementOutput
from retreat_portal.domain.entities.attendee import GroupMember
from retreat_portal.domain.services.group_finance import GroupFinancialSummary


@dataclass(frozen=True)
class MeRoomOutput:
    number: str
    description: str


@dataclass(frozen=True)
class MeGroupOutput:
    name: str
    members: list[GroupMember]
    financial: GroupFinancialSummary


@dataclass(frozen=True)
class MeOutput:
    ref_number: str
    name: str
    email: str | None
    payment_due: Decimal
    payment_status: str
    room: MeRoomOutput | None
    group: MeGroupOutput | None
    announcements: list[AttendeeAnnouncementOutput]
