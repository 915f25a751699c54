from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import bindparam, text
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeEngine


def typed_text(sql: str, **param_types: TypeEngine) -> TextClause:
    """``text(sql)`` with explicit types for the named bind parameters.

    Timestamps and money need the column type at bind time so SQLite stores and
    compares them in the same format as the ORM-created columns.
    """
    statement = text(sql)
    if param_types:
        statement = statement.bindparams(
            *(bindparam(name, type_=param_type) for name, param_type in param_types.items())
        )
    return statement


def build_update(
    table: str,
    *,
    key_column: str,
    fields: Mapping[str, Any],
    column_types: Mapping[str, TypeEngine],
) -> TextClause:
    """``UPDATE table SET ... WHERE key_column = :key`` over the given columns.

    Column names must come from a fixed whitelist; they are interpolated.
    """
    assignments = ", ".join(f"{column} = :{column}" for column in fields)
    sql = f"UPDATE {table} SET {assignments} WHERE {key_column} = :key"
    types = {column: column_types[column] for column in fields if column in column_types}
    return typed_text(sql, **types)
