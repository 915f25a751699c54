from __future__ import annotations

from fastapi import APIRouter, Depends

from retreat_portal.api.deps import get_current_admin, get_list_login_history_use_case, get_pagination
from retreat_portal.api.schemas.reports import LoginHistoryListResponse, LoginHistoryResponse
from retreat_portal.application.use_cases.list_login_history import ListLoginHistoryUseCase
from retreat_portal.domain.entities.auth import AdminPrincipal
from retreat_portal.shared.pagination import PaginationParams, create_paginated_response


router = APIRouter()


@router.get("/api/admin/reports/login-history", response_model=LoginHistoryListResponse)
def login_history(
    pagination: PaginationParams = Depends(get_pagination),
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: ListLoginHistoryUseCase = Depends(get_list_login_history_use_case),
):
    output = use_case.execute(limit=pagination.limit, offset=pagination.offset)
    data = [
        LoginHistoryResponse(
            id=entry.id,
            user_type=entry.user_type,
            user_id=entry.user_id,
            login_time=entry.login_time,
        )
        for entry in output.items
    ]
    return create_paginated_response(data, output.total, output.limit, output.offset)
