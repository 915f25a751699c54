from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence


DEFAULT_LIMIT = 50
MAX_LIMIT = 500
MIN_LIMIT = 1


@dataclass(frozen=True)
class PaginationParams:
    limit: int
    offset: int


def _parse_int(raw: Any) -> int | None:
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def parse_pagination_params(query: Mapping[str, Any]) -> PaginationParams:
    """``limit``/``offset`` (or ``page``) from query parameters.

    Non-numeric values fall back to the defaults; ``limit`` is clamped to
    ``[MIN_LIMIT, MAX_LIMIT]`` and ``offset`` to ``>= 0``. A valid ``page``
    wins over ``offset``.
    """
    limit = _parse_int(query.get("limit"))
    if limit is None:
        limit = DEFAULT_LIMIT
    limit = max(MIN_LIMIT, min(MAX_LIMIT, limit))

    offset = _parse_int(query.get("offset"))
    if offset is None:
        offset = 0
    offset = max(0, offset)

    page = _parse_int(query.get("page"))
    if page is not None and page >= 1:
        offset = (page - 1) * limit
    return PaginationParams(limit=limit, offset=offset)


def create_pagination_meta(total: int, limit: int, offset: int) -> dict[str, Any]:
    return {
        "total": total,
        "limit": limit,
        "offset": offset,
        "hasMore": offset + limit < total,
    }


def create_paginated_response(data: Sequence[Any], total: int, limit: int, offset: int) -> dict[str, Any]:
    return {"data": list(data), "pagination": create_pagination_meta(total, limit, offset)}
