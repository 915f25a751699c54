from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class GroupFinancialSummary:
    total_outstanding: Decimal
    members_with_payments: int
    total_members: int


def summarize_group_finances(payment_dues: list[Decimal]) -> GroupFinancialSummary:
    """Totals over every member of the group, the requesting attendee included."""
    total = sum(payment_dues, Decimal("0"))
    with_payments = sum(1 for due in payment_dues if due > 0)
    return GroupFinancialSummary(
        total_outstanding=total,
        members_with_payments=with_payments,
        total_members=len(payment_dues),
    )
