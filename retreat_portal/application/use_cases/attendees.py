from __future__ import annotations

import logging

from retreat_portal.application.dto.attendee import (
    CreateAttendeeInput,
    ListAttendeesOutput,
    UpdateAttendeeInput,
)
from retreat_portal.application.ports.attendee_port import AttendeePort
from retreat_portal.application.ports.password_hasher_port import PasswordHasherPort
from retreat_portal.domain.entities.attendee import AttendeeSummary
from retreat_portal.domain.exceptions import (
    DuplicateResourceError,
    NoFieldsToUpdateError,
    ResourceNotFoundError,
)

from .common import clean_str, collect_changes, to_decimal, to_int, utcnow


logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {
    "name": clean_str,
    "email": clean_str,
    "ref_number": clean_str,
    "phone": clean_str,
    "room_id": to_int,
    "group_id": to_int,
    "payment_due": to_decimal,
    "payment_status": clean_str,
}


class ListAttendeesUseCase:
    def __init__(self, *, attendee_port: AttendeePort):
        self._attendee_port = attendee_port

    def execute(self, *, limit: int, offset: int) -> ListAttendeesOutput:
        total = self._attendee_port.count_attendees()
        items = self._attendee_port.list_attendees(limit=limit, offset=offset)
        return ListAttendeesOutput(items=items, total=total, limit=limit, offset=offset)


class GetAttendeeUseCase:
    def __init__(self, *, attendee_port: AttendeePort):
        self._attendee_port = attendee_port

    def execute(self, attendee_id: int) -> AttendeeSummary:
        attendee = self._attendee_port.get_attendee_summary(attendee_id=attendee_id)
        if attendee is None:
            raise ResourceNotFoundError("Attendee")
        return attendee


class CreateAttendeeUseCase:
    def __init__(self, *, attendee_port: AttendeePort, password_hasher: PasswordHasherPort):
        self._attendee_port = attendee_port
        self._password_hasher = password_hasher

    def execute(self, command: CreateAttendeeInput) -> int:
        ref_number = command.ref_number.strip()
        if self._attendee_port.ref_number_exists(ref_number=ref_number):
            raise DuplicateResourceError("Reference number already exists")

        attendee_id = self._attendee_port.create_attendee(
            name=command.name.strip(),
            ref_number=ref_number,
            password_hash=self._password_hasher.hash(command.password),
            email=clean_str(command.email),
            phone=clean_str(command.phone),
            room_id=command.room_id,
            group_id=command.group_id,
            payment_due=command.payment_due,
            payment_status=command.payment_status,
            created_at=utcnow(),
        )
        logger.info("attendees: created id=%s ref=%s", attendee_id, ref_number)
        return attendee_id


class UpdateAttendeeUseCase:
    """Partial update. A blank password leaves the stored credential untouched."""

    def __init__(self, *, attendee_port: AttendeePort, password_hasher: PasswordHasherPort):
        self._attendee_port = attendee_port
        self._password_hasher = password_hasher

    def execute(self, command: UpdateAttendeeInput) -> None:
        if self._attendee_port.get_attendee_summary(attendee_id=command.attendee_id) is None:
            raise ResourceNotFoundError("Attendee")

        fields: dict = {}
        password = command.changes.get("password")
        if isinstance(password, str) and password.strip():
            fields["password_hash"] = self._password_hasher.hash(password)
        try:
            fields.update(collect_changes(command.changes, _UPDATABLE_FIELDS))
        except NoFieldsToUpdateError:
            if not fields:
                raise

        ref_number = fields.get("ref_number")
        if ref_number and self._attendee_port.ref_number_exists(
            ref_number=ref_number,
            exclude_id=command.attendee_id,
        ):
            raise DuplicateResourceError("Reference number already exists")

        self._attendee_port.update_attendee(
            attendee_id=command.attendee_id,
            fields=fields,
            updated_at=utcnow(),
        )


class DeleteAttendeeUseCase:
    def __init__(self, *, attendee_port: AttendeePort):
        self._attendee_port = attendee_port

    def execute(self, attendee_id: int) -> AttendeeSummary:
        attendee = self._attendee_port.get_attendee_summary(attendee_id=attendee_id)
        if attendee is None:
            raise ResourceNotFoundError("Attendee")
        self._attendee_port.delete_attendee(attendee_id=attendee_id)
        logger.info("attendees: deleted id=%s ref=%s", attendee_id, attendee.ref_number)
        return attendee
