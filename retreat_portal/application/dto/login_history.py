from __future__ import annotations

from dataclasses import dataclass

from retreat_portal.domain.entities.auth import LoginHistoryEntry


@dataclass(frozen=True)
class ListLoginHistoryOutput:
    items: list[LoginHistoryEntry]
    total: int
    limit: int
    offset: int
