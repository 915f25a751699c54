from __future__ import annotations

import logging

from retreat_portal.application.dto.group import CreateGroupInput, ListGroupsOutput, UpdateGroupInput
from retreat_portal.application.ports.group_port import GroupPort
from retreat_portal.domain.entities.group import Group, GroupWithMembers
from retreat_portal.domain.exceptions import (
    DuplicateResourceError,
    ResourceInUseError,
    ResourceNotFoundError,
)

from .common import clean_str, collect_changes, to_int, utcnow


logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {
    "name": clean_str,
    "description": clean_str,
    "max_members": to_int,
}


class ListGroupsUseCase:
    def __init__(self, *, group_port: GroupPort):
        self._group_port = group_port

    def execute(self, *, limit: int, offset: int) -> ListGroupsOutput:
        total = self._group_port.count_groups()
        items = self._group_port.list_groups(limit=limit, offset=offset)
        return ListGroupsOutput(items=items, total=total, limit=limit, offset=offset)


class GetGroupUseCase:
    def __init__(self, *, group_port: GroupPort):
        self._group_port = group_port

    def execute(self, group_id: int) -> GroupWithMembers:
        group = self._group_port.get_group_with_members(group_id=group_id)
        if group is None:
            raise ResourceNotFoundError("Group")
        return group


class CreateGroupUseCase:
    def __init__(self, *, group_port: GroupPort):
        self._group_port = group_port

    def execute(self, command: CreateGroupInput) -> int:
        name = command.name.strip()
        if self._group_port.group_name_exists(name=name):
            raise DuplicateResourceError("Group name already exists")
        group_id = self._group_port.create_group(
            name=name,
            description=clean_str(command.description),
            max_members=command.max_members,
            created_at=utcnow(),
        )
        logger.info("groups: created id=%s name=%s", group_id, name)
        return group_id


class UpdateGroupUseCase:
    def __init__(self, *, group_port: GroupPort):
        self._group_port = group_port

    def execute(self, command: UpdateGroupInput) -> None:
        if self._group_port.get_group(group_id=command.group_id) is None:
            raise ResourceNotFoundError("Group")
        fields = collect_changes(command.changes, _UPDATABLE_FIELDS)
        name = fields.get("name")
        if name and self._group_port.group_name_exists(name=name, exclude_id=command.group_id):
            raise DuplicateResourceError("Group name already exists")
        self._group_port.update_group(group_id=command.group_id, fields=fields, updated_at=utcnow())


class DeleteGroupUseCase:
    def __init__(self, *, group_port: GroupPort):
        self._group_port = group_port

    def execute(self, group_id: int) -> Group:
        group = self._group_port.get_group(group_id=group_id)
        if group is None:
            raise ResourceNotFoundError("Group")
        members = self._group_port.count_members(group_id=group_id)
        if members:
            raise ResourceInUseError(
                f"Cannot delete group with {members} member(s). Please reassign attendees first."
            )
        self._group_port.delete_group(group_id=group_id)
        logger.info("groups: deleted id=%s", group_id)
        return group
