"""Declarative request validation.

A validator is a plain callable ``(value, field_name) -> message | None``.
A schema maps a field name to an ordered list of validators; the first failing
validator of a field wins. Every validator except ``required`` treats a
missing, ``None`` or empty-string value as absent and accepts it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Mapping, Sequence

from pydantic import TypeAdapter, ValidationError


Validator = Callable[[Any, str], "str | None"]
ValidationSchema = Mapping[str, Sequence[Validator]]

_MISSING = object()
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_DATETIME_ADAPTER = TypeAdapter(datetime)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: dict[str, str] = field(default_factory=dict)


def _is_absent(value: Any) -> bool:
    return value is _MISSING or value is None or value == ""


def _as_number(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        raw = value
    elif isinstance(value, str):
        raw = value.strip()
    else:
        return None
    try:
        number = Decimal(str(raw)) if not isinstance(raw, Decimal) else raw
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 date or datetime string; naive values are taken as UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = _DATETIME_ADAPTER.validate_python(value.strip())
    except ValidationError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def required(value: Any, field_name: str) -> str | None:
    if value is _MISSING or value is None or (isinstance(value, str) and value.strip() == ""):
        return f"{field_name} is required"
    return None


def email(value: Any, field_name: str) -> str | None:
    if _is_absent(value):
        return None
    if not isinstance(value, str) or not _EMAIL_RE.match(value):
        return f"{field_name} must be a valid email address"
    return None


def min_length(minimum: int) -> Validator:
    def _validator(value: Any, field_name: str) -> str | None:
        if _is_absent(value):
            return None
        if isinstance(value, str) and len(value) < minimum:
            return f"{field_name} must be at least {minimum} characters"
        return None

    return _validator


def max_length(maximum: int) -> Validator:
    def _validator(value: Any, field_name: str) -> str | None:
        if _is_absent(value):
            return None
        if isinstance(value, str) and len(value) > maximum:
            return f"{field_name} must be at most {maximum} characters"
        return None

    return _validator


def one_of(allowed: Sequence[str]) -> Validator:
    allowed_values = tuple(allowed)

    def _validator(value: Any, field_name: str) -> str | None:
        if _is_absent(value):
            return None
        if not isinstance(value, str) or value not in allowed_values:
            return f"{field_name} must be one of: {', '.join(allowed_values)}"
        return None

    return _validator


def value_range(minimum: int | float, maximum: int | float) -> Validator:
    def _validator(value: Any, field_name: str) -> str | None:
        if _is_absent(value):
            return None
        number = _as_number(value)
        if number is None or number < Decimal(str(minimum)) or number > Decimal(str(maximum)):
            return f"{field_name} must be between {minimum} and {maximum}"
        return None

    return _validator


def integer(value: Any, field_name: str) -> str | None:
    if _is_absent(value):
        return None
    number = _as_number(value)
    if number is None or number != number.to_integral_value():
        return f"{field_name} must be an integer"
    return None


def non_negative_number(value: Any, field_name: str) -> str | None:
    if _is_absent(value):
        return None
    number = _as_number(value)
    if number is None or number < 0:
        return f"{field_name} must be a positive number"
    return None


def array(value: Any, field_name: str) -> str | None:
    if value is _MISSING or value is None:
        return None
    if not isinstance(value, list):
        return f"{field_name} must be an array"
    return None


def integer_items(minimum: int, maximum: int) -> Validator:
    def _validator(value: Any, field_name: str) -> str | None:
        if not isinstance(value, list):
            return None
        for item in value:
            number = _as_number(item)
            if number is None or number != number.to_integral_value() or not minimum <= number <= maximum:
                return f"{field_name} must only contain integers between {minimum} and {maximum}"
        return None

    return _validator


def non_empty_array(value: Any, field_name: str) -> str | None:
    if value is _MISSING or value is None:
        return None
    if not isinstance(value, list) or not value:
        return f"{field_name} must be a non-empty array"
    return None


def date(value: Any, field_name: str) -> str | None:
    if _is_absent(value):
        return None
    if not isinstance(value, str):
        return f"{field_name} must be a valid date string"
    if parse_datetime(value) is None:
        return f"{field_name} must be a valid date"
    return None


def boolean(value: Any, field_name: str) -> str | None:
    if value is _MISSING or value is None:
        return None
    if not isinstance(value, bool):
        return f"{field_name} must be a boolean"
    return None


def validate(data: Any, schema: ValidationSchema) -> ValidationResult:
    """Run ``schema`` over ``data``. Total over any input: non-mappings validate as empty."""
    payload = data if isinstance(data, Mapping) else {}
    errors: dict[str, str] = {}
    for field_name, validators in schema.items():
        value = payload.get(field_name, _MISSING)
        for validator in validators:
            message = validator(value, field_name)
            if message:
                errors[field_name] = message
                break
    return ValidationResult(valid=not errors, errors=errors)


PAYMENT_STATUSES = ("pending", "partial", "paid", "overdue")
ROOM_TYPES = ("single", "double", "suite", "family", "standard")
ANNOUNCEMENT_TYPES = ("general", "urgent", "event", "reminder")
TARGET_AUDIENCES = ("all", "vip", "groups")
MAX_ID = 2**63 - 1
MAX_AMOUNT = 99_999_999.99


attendee_create_schema: ValidationSchema = {
    "name": [required, max_length(255)],
    "ref_number": [required, max_length(50)],
    "password": [required, min_length(6)],
    "email": [email],
    "phone": [max_length(50)],
    "payment_due": [non_negative_number, value_range(0, MAX_AMOUNT)],
    "payment_status": [one_of(PAYMENT_STATUSES)],
    "room_id": [integer, value_range(1, MAX_ID)],
    "group_id": [integer, value_range(1, MAX_ID)],
}

attendee_update_schema: ValidationSchema = {
    "name": [max_length(255)],
    "ref_number": [max_length(50)],
    "email": [email],
    "phone": [max_length(50)],
    "payment_due": [non_negative_number, value_range(0, MAX_AMOUNT)],
    "payment_status": [one_of(PAYMENT_STATUSES)],
    "room_id": [integer, value_range(1, MAX_ID)],
    "group_id": [integer, value_range(1, MAX_ID)],
    "password": [min_length(6)],
}

room_create_schema: ValidationSchema = {
    "number": [required, max_length(50)],
    "description": [max_length(500)],
    "capacity": [integer, value_range(1, 100)],
    "floor": [max_length(50)],
    "room_type": [one_of(ROOM_TYPES)],
}

room_update_schema: ValidationSchema = {
    "number": [max_length(50)],
    "description": [max_length(500)],
    "capacity": [integer, value_range(1, 100)],
    "floor": [max_length(50)],
    "room_type": [one_of(ROOM_TYPES)],
}

group_create_schema: ValidationSchema = {
    "name": [required, max_length(255)],
    "description": [max_length(1000)],
    "max_members": [integer, value_range(1, 1000)],
}

group_update_schema: ValidationSchema = {
    "name": [max_length(255)],
    "description": [max_length(1000)],
    "max_members": [integer, value_range(1, 1000)],
}

announcement_create_schema: ValidationSchema = {
    "title": [required, max_length(255)],
    "content": [required, max_length(10000)],
    "type": [one_of(ANNOUNCEMENT_TYPES)],
    "priority": [integer, value_range(1, 5)],
    "is_active": [boolean],
    "target_audience": [one_of(TARGET_AUDIENCES)],
    "target_groups": [array, integer_items(1, MAX_ID)],
    "author_name": [max_length(255)],
    "starts_at": [date],
    "expires_at": [date],
}

announcement_update_schema: ValidationSchema = {
    "title": [max_length(255)],
    "content": [max_length(10000)],
    "type": [one_of(ANNOUNCEMENT_TYPES)],
    "priority": [integer, value_range(1, 5)],
    "is_active": [boolean],
    "target_audience": [one_of(TARGET_AUDIENCES)],
    "target_groups": [array, integer_items(1, MAX_ID)],
    "starts_at": [date],
    "expires_at": [date],
}

login_schema: ValidationSchema = {
    "ref": [required],
    "password": [required],
}

admin_login_schema: ValidationSchema = {
    "user": [required],
    "pass": [required],
}
