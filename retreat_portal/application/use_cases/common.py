from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Collection, Mapping

from retreat_portal.application.validation import parse_datetime
from retreat_portal.domain.exceptions import NoFieldsToUpdateError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clean_str(value: Any) -> str | None:
    """Trimmed string, or ``None`` for missing and blank values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(Decimal(str(value)))


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    if value is None or value == "":
        return default
    return Decimal(str(value))


def to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return parse_datetime(value)


def to_int_list(value: Any) -> list[int] | None:
    if value is None:
        return None
    return [int(Decimal(str(item))) for item in value]


def collect_changes(
    changes: Mapping[str, Any],
    converters: Mapping[str, Callable[[Any], Any]],
    *,
    skip_null: Collection[str] = (),
) -> dict[str, Any]:
    """Keep the fields a resource accepts, converted to their column types.

    A ``null`` for a field in ``skip_null`` means "leave unchanged".

    Raises ``NoFieldsToUpdateError`` when nothing is left.
    """
    fields: dict[str, Any] = {}
    for name, convert in converters.items():
        if name in changes:
            if changes[name] is None and name in skip_null:
                continue
            fields[name] = convert(changes[name])
    if not fields:
        raise NoFieldsToUpdateError("No valid fields to update")
    return fields
