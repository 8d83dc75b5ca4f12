"""
Session coordinating adapters, transactions and entity persistence.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Dict, Generator, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from ..adapters.base import Connection, ConnectionConfig, DatabaseAdapter
from ..core.entity import Entity
from ..core.table import table_registry
from ..dialects.base import Dialect
from ..errors import EntityNotAttachedError
from ..query.compiler import SQLCompiler
from ..query.expressions import Q
from ..query.rows import QueryRow
from ..query.statements import delete_statement, identity_predicate, insert_statement, update_statement
from ..security import redact_params
from ..utils import get_logger, time_call
from .changes import (
    check_unexpected_discarding,
    discard_bound_changes,
    find_changed_columns,
    find_insert_columns,
    identity_condition,
)
from .materializer import materialize
from .transaction import Transaction, TransactionIsolation, TransactionManager

if TYPE_CHECKING:
    from ..core.table import Table
    from ..query.queryset import EntityQuery

T = TypeVar("T")


class Session:
    """
    Entry point for querying and persisting entities against one database.

    Statements run on the current transaction's connection when one is
    active, otherwise on a fresh connection that is closed straight after.
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        *,
        connection_config: Optional[ConnectionConfig] = None,
        dsn: Optional[str] = None,
        default_isolation: Optional[TransactionIsolation] = None,
    ) -> None:
        if connection_config is not None and dsn is not None:
            raise ValueError("Pass either connection_config or dsn, not both.")
        if dsn is not None:
            connection_config = ConnectionConfig.from_dsn(dsn)
        if connection_config is None:
            raise ValueError("A Session requires a connection_config or a dsn.")
        self.adapter = adapter
        self.dialect: Dialect = adapter.dialect
        self.connection_config = connection_config
        if default_isolation is None:
            configured = self.connection_config.isolation_level
            default_isolation = (
                TransactionIsolation.parse(configured) if configured else TransactionIsolation.REPEATABLE_READ
            )
        self.transaction_manager = TransactionManager(self._connect, default_isolation=default_isolation)
        self.logger = get_logger("persistence.session")

    def __repr__(self) -> str:
        return f"<Session {self.dialect.name} {self.connection_config.descriptive_label()}>"

    # ------------------------------------------------------------------ #
    # Connections and statement execution
    # ------------------------------------------------------------------ #
    def _connect(self) -> Connection:
        return self.adapter.connect(self.connection_config)

    @contextmanager
    def use_connection(self) -> Generator[Connection, None, None]:
        transaction = self.transaction_manager.current_transaction
        if transaction is not None:
            yield transaction.connection
            return
        connection = self.transaction_manager.new_connection()
        try:
            yield connection
        finally:
            connection.close()

    def _execute(self, connection: Connection, sql: str, params: Iterable[Any] | None) -> Any:
        param_list = list(params or [])
        with time_call(
            "session.execute",
            self.logger,
            sql=sql,
            params=redact_params(param_list),
            threshold_ms=self.adapter.slow_query_ms,
        ):
            return self.adapter.execute(connection, sql, param_list)

    def execute_query(self, sql: str, params: Iterable[Any] | None = None) -> List[Dict[str, Any]]:
        with self.use_connection() as connection:
            cursor = self._execute(connection, sql, params)
            return [self._row_to_dict(cursor, row) for row in cursor.fetchall()]

    def execute_update(self, sql: str, params: Iterable[Any] | None = None) -> int:
        with self.use_connection() as connection:
            cursor = self._execute(connection, sql, params)
            return cursor.rowcount

    def execute_update_and_retrieve_keys(
        self,
        sql: str,
        params: Iterable[Any] | None = None,
        *,
        table: str,
        pk_column: str,
    ) -> Tuple[int, Any]:
        with self.use_connection() as connection:
            cursor = self._execute(connection, sql, params)
            key = self.adapter.last_insert_id(cursor, table, pk_column)
            return cursor.rowcount, key

    @staticmethod
    def _row_to_dict(cursor: Any, row: Any) -> Dict[str, Any]:
        if hasattr(row, "keys"):
            return {key: row[key] for key in row.keys()}
        if getattr(cursor, "description", None):
            columns = [col[0] for col in cursor.description]
            return {col: row[idx] for idx, col in enumerate(columns)}
        raise ValueError("Unable to map database row to dictionary.")

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def run_in_transaction(
        self,
        body: Callable[[Transaction], T],
        isolation: Optional[TransactionIsolation] = None,
    ) -> T:
        return self.transaction_manager.run_in_transaction(body, isolation)

    def transaction(self, isolation: Optional[TransactionIsolation] = None):
        return self.transaction_manager.transaction(isolation)

    # ------------------------------------------------------------------ #
    # Querying
    # ------------------------------------------------------------------ #
    def query(self, table: Type["Table"]) -> "EntityQuery":
        from ..query.queryset import EntityQuery

        return EntityQuery(table, self)

    def materialize(self, row: Mapping[str, Any] | QueryRow, table: Type["Table"]) -> Entity:
        return materialize(row, table, self)

    def find_by_id(self, table: Type["Table"], id: Any) -> Optional[Entity]:
        return self.query(table).find_by_id(id)

    def find_list_by_ids(self, table: Type["Table"], ids: Iterable[Any]) -> List[Entity]:
        return self.query(table).find_list_by_ids(ids)

    def find_by_ids(self, table: Type["Table"], ids: Iterable[Any]) -> Dict[Any, Entity]:
        return self.query(table).find_by_ids(ids)

    def find_one(self, table: Type["Table"], predicate: Q | None = None, **lookups: Any) -> Optional[Entity]:
        return self.query(table).find_one(predicate, **lookups)

    def find_all(self, table: Type["Table"]) -> List[Entity]:
        return self.query(table).find_all()

    def find_list(self, table: Type["Table"], predicate: Q | None = None, **lookups: Any) -> List[Entity]:
        return self.query(table).find_list(predicate, **lookups)

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #
    def add(self, entity: Entity, table: Optional[Type["Table"]] = None) -> int:
        """
        Insert ``entity`` into ``table`` (by default the single table mapped
        to the entity's class) and attach it to this session.

        Returns the affected row count, 0 when no bound column has a value.
        """
        if table is None:
            table = table_registry.for_entity(type(entity))
        check_unexpected_discarding(entity, table)

        assignments = find_insert_columns(entity, table)
        if not assignments:
            return 0

        primary_keys = table._meta.primary_keys
        retrieve_key = (
            len(primary_keys) == 1
            and primary_keys[0].binding is not None
            and entity.get_column_value(primary_keys[0].binding) is None
        )

        if not retrieve_key:
            sql, params = insert_statement(table, self.dialect, assignments)
            effects = self.execute_update(sql, params)
        else:
            pk = primary_keys[0]
            sql, params = insert_statement(table, self.dialect, assignments, returning=pk)
            effects, generated_key = self.execute_update_and_retrieve_keys(
                sql, params, table=table._meta.table_name, pk_column=pk.column_name()
            )
            if generated_key is not None:
                generated_key = pk.to_python(generated_key)
                self.logger.debug("Generated Key: %s", generated_key)
                entity.set_column_value(pk.binding, generated_key)

        entity.attach(table, self)
        discard_bound_changes(entity, table)
        return effects

    def flush(self, entity: Entity) -> int:
        """
        Write the entity's changed columns back to the row it came from.

        Returns the affected row count; 0 without a statement when nothing
        bound has changed.
        """
        table = self._require_persisted(entity)
        check_unexpected_discarding(entity, table)

        assignments = find_changed_columns(entity, table)
        if not assignments:
            return 0

        sql, params = update_statement(table, self.dialect, assignments, identity_condition(entity, table))
        effects = self.execute_update(sql, params)
        discard_bound_changes(entity, table)
        return effects

    def delete(self, entity: Entity) -> int:
        table = self._require_persisted(entity)
        where = identity_predicate(identity_condition(entity, table), self.dialect)
        sql, params = delete_statement(table, self.dialect, where)
        return self.execute_update(sql, params)

    def remove_if(self, table: Type["Table"], predicate: Q | None = None, **lookups: Any) -> int:
        return self.query(table).remove_if(predicate, **lookups)

    def clear(self, table: Type["Table"]) -> int:
        return self.query(table).clear()

    def _delete_where(self, table: Type["Table"], predicate: Q | None) -> int:
        where = None
        if predicate is not None:
            where = SQLCompiler(table, self.dialect).compile_predicate(predicate, qualified=False)
        sql, params = delete_statement(table, self.dialect, where)
        return self.execute_update(sql, params)

    def _require_persisted(self, entity: Entity) -> Type["Table"]:
        if entity.parent is not None or entity.session is None or entity.source_table is None:
            raise EntityNotAttachedError("The entity is not associated with any database yet.")
        return entity.source_table

    # Helpers used by EntityQuery --------------------------------------
    def _fetch(self, table: Type["Table"], sql: str, params: List[Any]) -> List[Entity]:
        rows = self.execute_query(sql, params)
        return [materialize(QueryRow(row), table, self) for row in rows]

