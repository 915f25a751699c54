from __future__ import annotations

from retreat_portal.application.dto.login_history import ListLoginHistoryOutput
from retreat_portal.application.ports.login_history_port import LoginHistoryPort


class ListLoginHistoryUseCase:
    def __init__(self, *, login_history_port: LoginHistoryPort):
        self._login_history_port = login_history_port

    def execute(self, *, limit: int, offset: int) -> ListLoginHistoryOutput:
        total = self._login_history_port.count_logins()
        items = self._login_history_port.list_logins(limit=limit, offset=offset)
        return ListLoginHistoryOutput(items=items, total=total, limit=limit, offset=offset)
