"""
SQL compilation utilities translating entity queries into SQL strings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from ..core.bindings import ReferenceBinding
from ..core.columns import Column
from ..core.entity import Entity
from ..dialects.base import Dialect
from .expressions import Q

if TYPE_CHECKING:
    from ..core.table import Table
    from ..persistence.materializer import JoinPlan


LOOKUP_OPERATORS = {
    "exact": "=",
    "iexact": "=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "contains": "LIKE",
    "in": "IN",
}


class SQLCompiler:
    """
    Compile entity query state into SQL statements and parameters.

    Select queries name every column as ``"table"."column"`` and alias it with
    the column label. Predicates compiled for DML statements (``qualified``
    false) use bare column names and may only touch the root table.
    """

    def __init__(
        self,
        table: type["Table"],
        dialect: Dialect,
        plan: Optional["JoinPlan"] = None,
        where: Q | None = None,
        ordering: tuple[str, ...] = (),
        limit: int | None = None,
        offset: int | None = None,
        distinct: bool = False,
    ) -> None:
        self.table = table
        self.dialect = dialect
        self.plan = plan
        self.where = where
        self.ordering = ordering
        self.limit = limit
        self.offset = offset
        self.distinct = distinct

    def compile(self) -> Tuple[str, List[Any]]:
        keyword = "SELECT DISTINCT" if self.distinct else "SELECT"
        sql_parts: List[str] = [f"{keyword} {self._build_select_list()}", "FROM", self._table_sql(self.table)]
        sql_parts.extend(self._build_joins())
        params: List[Any] = []

        if self.where is not None and not self.where.is_empty():
            where_sql, where_params = self.compile_predicate(self.where)
            if where_sql:
                sql_parts.append("WHERE")
                sql_parts.append(where_sql)
                params.extend(where_params)

        if self.ordering:
            order_sql = ", ".join(self._compile_ordering(name) for name in self.ordering)
            sql_parts.append("ORDER BY")
            sql_parts.append(order_sql)

        limit_clause = self.dialect.limit_clause(self.limit, self.offset)
        if limit_clause:
            sql_parts.append(limit_clause)

        return " ".join(sql_parts), params

    def compile_predicate(self, q: Q, *, qualified: bool = True) -> Tuple[str, List[Any]]:
        if not q.children:
            return "", []

        parts: List[str] = []
        params: List[Any] = []

        for child in q.children:
            if isinstance(child, Q):
                child_sql, child_params = self.compile_predicate(child, qualified=qualified)
                if child_sql:
                    parts.append(f"({child_sql})")
                    params.extend(child_params)
            elif isinstance(child, tuple):
                lookup_path, value = child
                sql, child_params = self._compile_lookup(lookup_path, value, qualified=qualified)
                parts.append(sql)
                params.extend(child_params)
            else:
                raise TypeError(f"Unsupported predicate node {child!r}")

        if not parts:
            return "", []

        sql = f" {q.connector} ".join(parts)
        if q.negated:
            sql = f"NOT ({sql})"
        return sql, params

    # Helpers -----------------------------------------------------------
    def _table_sql(self, table: type["Table"]) -> str:
        return self.dialect.format_table(table._meta.table)

    def _qualified(self, column: Column) -> str:
        table = column.require_table()
        return f"{self._table_sql(table)}.{self.dialect.quote_identifier(column.column_name())}"

    def _tables(self) -> tuple[type["Table"], ...]:
        if self.plan is None:
            return (self.table,)
        return tuple(self.plan.tables)

    def _build_select_list(self) -> str:
        columns: List[str] = []
        for table in self._tables():
            for column in table._meta.get_columns():
                columns.append(f"{self._qualified(column)} AS {self.dialect.quote_identifier(column.label)}")
        return ", ".join(columns)

    def _build_joins(self) -> List[str]:
        if self.plan is None:
            return []
        joins: List[str] = []
        for join in self.plan.joins:
            right_pk = join.right_table._meta.primary_key
            joins.append(
                f"LEFT JOIN {self._table_sql(join.right_table)} "
                f"ON {self._qualified(join.column)} = {self._qualified(right_pk)}"
            )
        return joins

    def resolve_column(self, path: str, *, qualified: bool = True) -> Column:
        """
        Resolve ``name`` or ``reference_column__name`` (any depth) to a column.
        """
        segments = path.split("__")
        table = self.table
        column = table._meta.get_column(segments[0])
        for segment in segments[1:]:
            binding = column.binding
            if not isinstance(binding, ReferenceBinding):
                raise ValueError(
                    f"Column '{column.name}' on table '{table.__name__}' is not a reference; cannot resolve '{path}'."
                )
            if not qualified:
                raise ValueError(f"Lookup '{path}' crosses a reference, which DML statements cannot express.")
            table = binding.reference_table
            if table not in self._tables():
                raise ValueError(f"Table '{table.__name__}' is not joined in this query; cannot resolve '{path}'.")
            column = table._meta.get_column(segment)
        return column

    # Compilation helpers -----------------------------------------------
    def _column_sql(self, column: Column, qualified: bool) -> str:
        if qualified:
            return self._qualified(column)
        return self.dialect.quote_identifier(column.column_name())

    def _compile_ordering(self, name: str) -> str:
        descending = name.startswith("-")
        path = name[1:] if descending else name
        clause = self._qualified(self.resolve_column(path))
        if descending:
            clause += " DESC"
        return clause

    def _compile_lookup(self, lookup_path: str, value: Any, *, qualified: bool) -> Tuple[str, List[Any]]:
        path, lookup = lookup_path, "exact"
        head, sep, tail = lookup_path.rpartition("__")
        if sep and tail in LOOKUP_OPERATORS:
            path, lookup = head, tail

        column = self.resolve_column(path, qualified=qualified)
        column_sql = self._column_sql(column, qualified)
        placeholder = self.dialect.parameter_placeholder()

        if value is None:
            if lookup != "exact":
                raise ValueError("NULL comparison only supported for equality.")
            return f"{column_sql} IS NULL", []

        if lookup == "in":
            values = [_db_value(column, item) for item in value]
            if not values:
                return "1 = 0", []
            placeholders = ", ".join(placeholder for _ in values)
            return f"{column_sql} IN ({placeholders})", values
        if lookup == "contains":
            return f"{column_sql} LIKE {placeholder}", [f"%{value}%"]
        if lookup == "iexact":
            return f"LOWER({column_sql}) = {placeholder}", [str(value).lower()]

        operator = LOOKUP_OPERATORS[lookup]
        return f"{column_sql} {operator} {placeholder}", [_db_value(column, value)]


def _db_value(column: Column, value: Any) -> Any:
    # Entities compared against a reference column match on their primary key.
    binding = column.binding
    if isinstance(value, Entity) and isinstance(binding, ReferenceBinding):
        return value.primary_key_value(binding.reference_table)
    return column.to_db(value)
