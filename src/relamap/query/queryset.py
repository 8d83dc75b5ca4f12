"""
EntityQuery: a chainable, table-scoped query returning entity graphs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Optional, Tuple

from ..core.entity import Entity
from ..errors import MultipleResultsError, QueryModifiedError
from ..persistence.materializer import JoinPlan, join_references
from .compiler import SQLCompiler
from .expressions import Q, to_predicate

if TYPE_CHECKING:
    from ..core.table import Table
    from ..persistence.session import Session


class EntityQuery:
    """
    Query over one table that joins every referenced table and materializes
    each row into a full entity graph.

    Chain methods return new queries. Manipulation methods (``add``,
    ``remove_if`` and ``clear``) are only allowed on an unmodified query.
    """

    def __init__(
        self,
        table: type["Table"],
        session: "Session",
        *,
        where: Optional[Q] = None,
        ordering: Tuple[str, ...] = (),
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        distinct: bool = False,
    ) -> None:
        self.table = table
        self.session = session
        self.dialect = session.dialect
        self._where = where or Q()
        self._ordering = ordering
        self._limit = limit
        self._offset = offset
        self._distinct = distinct

    def __repr__(self) -> str:
        return f"<EntityQuery {self.table.__name__}>"

    # Public API --------------------------------------------------------
    def filter(self, **lookups: Any) -> "EntityQuery":
        return self._clone(where=self._where & Q(**lookups))

    def exclude(self, **lookups: Any) -> "EntityQuery":
        return self._clone(where=self._where & ~Q(**lookups))

    def where(self, q_object: Q) -> "EntityQuery":
        return self._clone(where=self._where & q_object)

    def order_by(self, *fields: str) -> "EntityQuery":
        return self._clone(ordering=tuple(fields))

    def limit(self, value: int) -> "EntityQuery":
        return self._clone(limit=value)

    def offset(self, value: int) -> "EntityQuery":
        return self._clone(offset=value)

    def distinct(self) -> "EntityQuery":
        return self._clone(distinct=True)

    @property
    def join_plan(self) -> JoinPlan:
        return join_references(self.table)

    @property
    def is_modified(self) -> bool:
        return (
            not self._where.is_empty()
            or bool(self._ordering)
            or self._limit is not None
            or self._offset is not None
            or self._distinct
        )

    def to_sql(self) -> tuple[str, list[Any]]:
        compiler = SQLCompiler(
            table=self.table,
            dialect=self.dialect,
            plan=self.join_plan,
            where=self._where,
            ordering=self._ordering,
            limit=self._limit,
            offset=self._offset,
            distinct=self._distinct,
        )
        return compiler.compile()

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.to_list())

    def to_list(self) -> List[Entity]:
        sql, params = self.to_sql()
        return self.session._fetch(self.table, sql, params)

    # Finding -------------------------------------------------------------
    def find_all(self) -> List[Entity]:
        return self.to_list()

    def find_list(self, predicate: Q | None = None, **lookups: Any) -> List[Entity]:
        return self.where(to_predicate(predicate, **lookups)).to_list()

    def find_one(self, predicate: Q | None = None, **lookups: Any) -> Optional[Entity]:
        """
        The single entity matching the predicate, or None. More than one
        match is an error.
        """
        results = self.find_list(predicate, **lookups)
        if len(results) > 1:
            raise MultipleResultsError(
                f"Expected one result(or null) to be returned by find_one(), but found: {len(results)}"
            )
        return results[0] if results else None

    def find_by_id(self, id: Any) -> Optional[Entity]:
        return self.find_one(Q(**{self._pk_name(): id}))

    def find_list_by_ids(self, ids: Iterable[Any]) -> List[Entity]:
        values = list(ids)
        if not values:
            return []
        return self.find_list(Q(**{f"{self._pk_name()}__in": values}))

    def find_by_ids(self, ids: Iterable[Any]) -> Dict[Any, Entity]:
        """
        Entities keyed by primary key, in the order of ``ids``. Ids with no
        matching row are left out.
        """
        values = list(ids)
        pk = self.table._meta.primary_key
        found = {entity.primary_key_value(self.table): entity for entity in self.find_list_by_ids(values)}
        result: Dict[Any, Entity] = {}
        for value in values:
            key = pk.to_python(value)
            if key in found:
                result[key] = found[key]
        return result

    # Manipulation -------------------------------------------------------
    def add(self, entity: Entity) -> int:
        self._check_unmodified()
        return self.session.add(entity, self.table)

    def remove_if(self, predicate: Q | None = None, **lookups: Any) -> int:
        self._check_unmodified()
        combined = to_predicate(predicate, **lookups)
        if combined.is_empty():
            raise ValueError("remove_if() requires a predicate; use clear() to delete every row.")
        return self.session._delete_where(self.table, combined)

    def clear(self) -> int:
        self._check_unmodified()
        return self.session._delete_where(self.table, None)

    # Internal helpers --------------------------------------------------
    def _check_unmodified(self) -> None:
        if self.is_modified:
            raise QueryModifiedError(
                "Entity manipulation functions are not supported by this query object. "
                "Please call on the origin query returned from session.query(table)."
            )

    def _pk_name(self) -> str:
        return self.table._meta.primary_key.require_name()

    def _clone(self, **overrides: Any) -> "EntityQuery":
        return EntityQuery(
            self.table,
            self.session,
            where=overrides.get("where", self._where),
            ordering=overrides.get("ordering", self._ordering),
            limit=overrides.get("limit", self._limit),
            offset=overrides.get("offset", self._offset),
            distinct=overrides.get("distinct", self._distinct),
        )
