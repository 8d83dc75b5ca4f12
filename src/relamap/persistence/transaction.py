"""
Transaction manager binding one lazily connected transaction to the current
execution context.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import Callable, Generator, Optional, TypeVar, Union

from ..adapters.base import Connection
from ..errors import TransactionError
from ..utils import get_logger

T = TypeVar("T")


class TransactionIsolation(Enum):
    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"

    @classmethod
    def parse(cls, value: Union[str, "TransactionIsolation"]) -> "TransactionIsolation":
        """Accept ``"repeatable_read"``, ``"REPEATABLE READ"`` or a member."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown transaction isolation level: {value!r}") from exc


class TransactionState(Enum):
    ACTIVE = "active"
    CONNECTED = "connected"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled back"
    CLOSED = "closed"


class Transaction:
    """
    One unit of work. The connection is opened on first access, switched to
    the desired isolation with autocommit off, and restored when the
    transaction closes.
    """

    def __init__(self, manager: "TransactionManager", isolation: TransactionIsolation) -> None:
        self.manager = manager
        self.isolation = isolation
        self.state = TransactionState.ACTIVE
        self._connection: Optional[Connection] = None
        self._original_isolation: Optional[str] = None
        self._original_autocommit = True

    def __repr__(self) -> str:
        return f"<Transaction {self.state.value} isolation={self.isolation.value}>"

    @property
    def connected(self) -> bool:
        return self._connection is not None

    @property
    def connection(self) -> Connection:
        if self.state is TransactionState.CLOSED:
            raise TransactionError("The transaction is already closed.")
        if self._connection is None:
            if self.state is not TransactionState.ACTIVE:
                raise TransactionError(f"The transaction is already {self.state.value}.")
            self._connection = self._open()
            self.state = TransactionState.CONNECTED
        return self._connection

    def commit(self) -> None:
        if self._connection is not None:
            self._connection.commit()
        self.state = TransactionState.COMMITTED

    def rollback(self) -> None:
        if self._connection is not None and not self._connection.closed:
            self._connection.rollback()
        self.state = TransactionState.ROLLED_BACK

    def close(self) -> None:
        try:
            if self._connection is not None and not self._connection.closed:
                self._close_quietly(self._connection)
        finally:
            self.state = TransactionState.CLOSED
            self.manager._release(self)

    # Internal helpers -------------------------------------------------
    def _open(self) -> Connection:
        connection = self.manager.new_connection()
        try:
            self._original_isolation = connection.isolation
            if self._original_isolation != self.isolation.value:
                connection.isolation = self.isolation.value
            self._original_autocommit = connection.autocommit
            if self._original_autocommit:
                connection.autocommit = False
        except Exception:
            self._close_quietly(connection)
            raise
        self.manager.logger.debug("Transaction connected (isolation=%s)", self.isolation.value)
        return connection

    def _close_quietly(self, connection: Connection) -> None:
        logger = self.manager.logger
        try:
            if self._original_isolation != self.isolation.value:
                connection.isolation = self._original_isolation
            if self._original_autocommit:
                connection.autocommit = True
        except Exception:
            logger.error("Error restoring connection %r", connection, exc_info=True)
        finally:
            try:
                connection.close()
            except Exception:
                logger.error("Error closing connection %r", connection, exc_info=True)


class TransactionManager:
    """
    Hands out transactions bound to the calling thread or asyncio task.

    ``connector`` opens a fresh connection; each transaction calls it at most
    once. Tasks created inside a transaction inherit it together with its
    connection, so do not run statements from them concurrently with the
    body. Once the transaction closes they see no current transaction.
    """

    def __init__(
        self,
        connector: Callable[[], Connection],
        *,
        default_isolation: TransactionIsolation = TransactionIsolation.REPEATABLE_READ,
    ) -> None:
        self.connector = connector
        self.default_isolation = default_isolation
        self.logger = get_logger("persistence.transaction")
        self._current: ContextVar[Optional[Transaction]] = ContextVar(
            f"relamap_transaction_{id(self)}", default=None
        )

    @property
    def current_transaction(self) -> Optional[Transaction]:
        # Contexts copied while a transaction was open still hold it after close.
        transaction = self._current.get()
        if transaction is not None and transaction.state is TransactionState.CLOSED:
            return None
        return transaction

    def new_transaction(self, isolation: Optional[TransactionIsolation] = None) -> Transaction:
        if self.current_transaction is not None:
            raise TransactionError("Current thread is already in a transaction.")
        transaction = Transaction(self, isolation or self.default_isolation)
        self._current.set(transaction)
        self.logger.debug("Transaction started (isolation=%s)", transaction.isolation.value)
        return transaction

    def new_connection(self) -> Connection:
        return self.connector()

    def run_in_transaction(
        self,
        body: Callable[[Transaction], T],
        isolation: Optional[TransactionIsolation] = None,
    ) -> T:
        """
        Run ``body`` in the current transaction, or in a new one that is
        committed on success, rolled back on failure and always closed.
        Nested calls join the outer transaction and never finalize it.
        """
        current = self.current_transaction
        is_outer = current is None
        transaction = current if current is not None else self.new_transaction(isolation)
        try:
            result = body(transaction)
            if is_outer:
                transaction.commit()
            return result
        except BaseException:
            if is_outer:
                transaction.rollback()
            raise
        finally:
            if is_outer:
                transaction.close()

    @contextmanager
    def transaction(self, isolation: Optional[TransactionIsolation] = None) -> Generator[Transaction, None, None]:
        current = self.current_transaction
        if current is not None:
            yield current
            return
        transaction = self.new_transaction(isolation)
        try:
            yield transaction
            transaction.commit()
        except BaseException:
            transaction.rollback()
            raise
        finally:
            transaction.close()

    def _release(self, transaction: Transaction) -> None:
        if self._current.get() is transaction:
            self._current.set(None)
