"""
Builders for the INSERT, UPDATE and DELETE statements issued by persistence
operations. Each builder returns a ``(sql, params)`` pair.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Sequence, Tuple

from ..core.columns import Column
from ..dialects.base import Dialect

if TYPE_CHECKING:
    from ..core.table import Table


Assignment = Tuple[Column, Any]


def _table_sql(table: type["Table"], dialect: Dialect) -> str:
    return dialect.format_table(table._meta.table)


def identity_predicate(identity: Sequence[Assignment], dialect: Dialect) -> Tuple[str, List[Any]]:
    """
    ``"pk1" = ? AND "pk2" = ?`` over the supplied primary-key values.
    """
    if not identity:
        raise ValueError("An identity predicate needs at least one primary-key column.")
    placeholder = dialect.parameter_placeholder()
    clauses = [f"{dialect.quote_identifier(column.column_name())} = {placeholder}" for column, _ in identity]
    return " AND ".join(clauses), [value for _, value in identity]


def insert_statement(
    table: type["Table"],
    dialect: Dialect,
    assignments: Sequence[Assignment],
    *,
    returning: Column | None = None,
) -> Tuple[str, List[Any]]:
    if not assignments:
        raise ValueError(f"Nothing to insert into {table._meta.table_name}.")
    columns_sql = ", ".join(dialect.quote_identifier(column.column_name()) for column, _ in assignments)
    placeholders = ", ".join(dialect.parameter_placeholder() for _ in assignments)
    sql = f"INSERT INTO {_table_sql(table, dialect)} ({columns_sql}) VALUES ({placeholders})"
    if returning is not None:
        clause = dialect.returning_clause(returning.column_name())
        if clause:
            sql = f"{sql} {clause}"
    return sql, [value for _, value in assignments]


def update_statement(
    table: type["Table"],
    dialect: Dialect,
    assignments: Sequence[Assignment],
    identity: Sequence[Assignment],
) -> Tuple[str, List[Any]]:
    if not assignments:
        raise ValueError(f"Nothing to update on {table._meta.table_name}.")
    placeholder = dialect.parameter_placeholder()
    set_sql = ", ".join(
        f"{dialect.quote_identifier(column.column_name())} = {placeholder}" for column, _ in assignments
    )
    where_sql, where_params = identity_predicate(identity, dialect)
    sql = f"UPDATE {_table_sql(table, dialect)} SET {set_sql} WHERE {where_sql}"
    return sql, [value for _, value in assignments] + where_params


def delete_statement(
    table: type["Table"],
    dialect: Dialect,
    where: Tuple[str, Sequence[Any]] | None = None,
) -> Tuple[str, List[Any]]:
    """
    ``DELETE FROM table`` with an optional pre-compiled ``(sql, params)``
    condition. Without one every row is deleted.
    """
    sql = f"DELETE FROM {_table_sql(table, dialect)}"
    if where is None or not where[0]:
        return sql, []
    where_sql, where_params = where
    return f"{sql} WHERE {where_sql}", list(where_params)
