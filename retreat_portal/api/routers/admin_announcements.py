from __future__ import annotations

from fastapi import APIRouter, Depends

from retreat_portal.api import errors
from retreat_portal.api.deps import (
    get_create_announcement_use_case,
    get_current_admin,
    get_delete_announcement_use_case,
    get_get_announcement_use_case,
    get_json_body,
    get_list_announcements_use_case,
    get_pagination,
    get_update_announcement_use_case,
)
from retreat_portal.api.schemas.announcements import AnnouncementListResponse, AnnouncementResponse
from retreat_portal.api.schemas.common import CreatedResponse, DeletedResponse, UpdatedResponse
from retreat_portal.application.dto.announcement import CreateAnnouncementInput, UpdateAnnouncementInput
from retreat_portal.application.use_cases.announcements import (
    CreateAnnouncementUseCase,
    DeleteAnnouncementUseCase,
    GetAnnouncementUseCase,
    ListAnnouncementsUseCase,
    UpdateAnnouncementUseCase,
)
from retreat_portal.application.use_cases.common import clean_str, to_datetime, to_int, to_int_list
from retreat_portal.application.validation import (
    announcement_create_schema,
    announcement_update_schema,
    validate,
)
from retreat_portal.domain.entities.announcement import Announcement
from retreat_portal.domain.entities.auth import AdminPrincipal
from retreat_portal.domain.exceptions import DomainError
from retreat_portal.shared.pagination import PaginationParams, create_paginated_response


router = APIRouter()


def _announcement_response(announcement: Announcement) -> AnnouncementResponse:
    return AnnouncementResponse(
        id=announcement.id,
        title=announcement.title,
        content=announcement.content,
        type=announcement.type,
        priority=announcement.priority,
        is_active=announcement.is_active,
        target_audience=announcement.target_audience,
        target_groups=announcement.target_groups,
        author_name=announcement.author_name,
        starts_at=announcement.starts_at,
        expires_at=announcement.expires_at,
        created_at=announcement.created_at,
        updated_at=announcement.updated_at,
    )


@router.get("/api/admin/announcements", response_model=AnnouncementListResponse)
def list_announcements(
    pagination: PaginationParams = Depends(get_pagination),
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: ListAnnouncementsUseCase = Depends(get_list_announcements_use_case),
):
    output = use_case.execute(limit=pagination.limit, offset=pagination.offset)
    return create_paginated_response(
        [_announcement_response(item) for item in output.items],
        output.total,
        output.limit,
        output.offset,
    )


@router.post("/api/admin/announcements", response_model=CreatedResponse, status_code=201)
def create_announcement(
    _admin: AdminPrincipal = Depends(get_current_admin),
    body: dict = Depends(get_json_body),
    use_case: CreateAnnouncementUseCase = Depends(get_create_announcement_use_case),
):
    errors.ensure_valid(validate(body, announcement_create_schema))
    is_active = body.get("is_active")
    try:
        announcement_id = use_case.execute(
            CreateAnnouncementInput(
                title=str(body["title"]),
                content=str(body["content"]),
                author_name=clean_str(body.get("author_name")) or "",
                type=clean_str(body.get("type")) or "general",
                priority=to_int(body.get("priority")) or 1,
                is_active=True if is_active is None else bool(is_active),
                target_audience=clean_str(body.get("target_audience")) or "all",
                target_groups=to_int_list(body.get("target_groups")),
                starts_at=to_datetime(body.get("starts_at")),
                expires_at=to_datetime(body.get("expires_at")),
            )
        )
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return CreatedResponse(id=announcement_id, message="Announcement created successfully")


@router.get("/api/admin/announcements/{announcement_id}", response_model=AnnouncementResponse)
def get_announcement(
    announcement_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: GetAnnouncementUseCase = Depends(get_get_announcement_use_case),
):
    try:
        announcement = use_case.execute(announcement_id)
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return _announcement_response(announcement)


@router.put("/api/admin/announcements/{announcement_id}", response_model=UpdatedResponse)
def update_announcement(
    announcement_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    body: dict = Depends(get_json_body),
    use_case: UpdateAnnouncementUseCase = Depends(get_update_announcement_use_case),
):
    errors.ensure_valid(validate(body, announcement_update_schema))
    try:
        use_case.execute(UpdateAnnouncementInput(announcement_id=announcement_id, changes=body))
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return UpdatedResponse(message="Announcement updated successfully", id=announcement_id)


@router.delete("/api/admin/announcements/{announcement_id}", response_model=DeletedResponse)
def delete_announcement(
    announcement_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: DeleteAnnouncementUseCase = Depends(get_delete_announcement_use_case),
):
    try:
        announcement = use_case.execute(announcement_id)
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return DeletedResponse(message=f"Announcement {announcement.title} deleted successfully")
