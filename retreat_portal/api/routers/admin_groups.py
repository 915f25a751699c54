from __future__ import annotations

from fastapi import APIRouter, Depends

from retreat_portal.api import errors
from retreat_portal.api.deps import (
    get_create_group_use_case,
    get_current_admin,
    get_delete_group_use_case,
    get_get_group_use_case,
    get_json_body,
    get_list_groups_use_case,
    get_pagination,
    get_update_group_use_case,
)
from retreat_portal.api.schemas.common import CreatedResponse, DeletedResponse, UpdatedResponse
from retreat_portal.api.schemas.groups import GroupListResponse, GroupMemberRefResponse, GroupResponse
from retreat_portal.application.dto.group import CreateGroupInput, UpdateGroupInput
from retreat_portal.application.use_cases.common import clean_str, to_int
from retreat_portal.application.use_cases.groups import (
    CreateGroupUseCase,
    DeleteGroupUseCase,
    GetGroupUseCase,
    ListGroupsUseCase,
    UpdateGroupUseCase,
)
from retreat_portal.application.validation import group_create_schema, group_update_schema, validate
from retreat_portal.domain.entities.auth import AdminPrincipal
from retreat_portal.domain.entities.group import GroupWithMembers
from retreat_portal.domain.exceptions import DomainError
from retreat_portal.shared.pagination import PaginationParams, create_paginated_response


router = APIRouter()


def _group_response(item: GroupWithMembers) -> GroupResponse:
    group = item.group
    return GroupResponse(
        id=group.id,
        name=group.name,
        description=group.description,
        max_members=group.max_members,
        created_at=group.created_at,
        updated_at=group.updated_at,
        member_count=len(item.members),
        members=[GroupMemberRefResponse(name=member.name, ref_number=member.ref_number) for member in item.members],
    )


@router.get("/api/admin/groups", response_model=GroupListResponse)
def list_groups(
    pagination: PaginationParams = Depends(get_pagination),
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: ListGroupsUseCase = Depends(get_list_groups_use_case),
):
    output = use_case.execute(limit=pagination.limit, offset=pagination.offset)
    return create_paginated_response(
        [_group_response(item) for item in output.items],
        output.total,
        output.limit,
        output.offset,
    )


@router.post("/api/admin/groups", response_model=CreatedResponse, status_code=201)
def create_group(
    _admin: AdminPrincipal = Depends(get_current_admin),
    body: dict = Depends(get_json_body),
    use_case: CreateGroupUseCase = Depends(get_create_group_use_case),
):
    errors.ensure_valid(validate(body, group_create_schema))
    try:
        group_id = use_case.execute(
            CreateGroupInput(
                name=str(body["name"]),
                description=clean_str(body.get("description")),
                max_members=to_int(body.get("max_members")),
            )
        )
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return CreatedResponse(id=group_id, message="Group created successfully")


@router.get("/api/admin/groups/{group_id}", response_model=GroupResponse)
def get_group(
    group_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: GetGroupUseCase = Depends(get_get_group_use_case),
):
    try:
        group = use_case.execute(group_id)
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return _group_response(group)


@router.put("/api/admin/groups/{group_id}", response_model=UpdatedResponse)
def update_group(
    group_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    body: dict = Depends(get_json_body),
    use_case: UpdateGroupUseCase = Depends(get_update_group_use_case),
):
    errors.ensure_valid(validate(body, group_update_schema))
    try:
        use_case.execute(UpdateGroupInput(group_id=group_id, changes=body))
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return UpdatedResponse(message="Group updated successfully", id=group_id)


@router.delete("/api/admin/groups/{group_id}", response_model=DeletedResponse)
def delete_group(
    group_id: int,
    _admin: AdminPrincipal = Depends(get_current_admin),
    use_case: DeleteGroupUseCase = Depends(get_delete_group_use_case),
):
    try:
        group = use_case.execute(group_id)
    except DomainError as exc:
        raise errors.from_domain_error(exc) from exc
    return DeletedResponse(message=f"Group {group.name} deleted successfully")
