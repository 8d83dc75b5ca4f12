"""
SQLite connection factory built on the stdlib sqlite3 module.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Optional, Sequence

from ..dialects.sqlite import SQLiteDialect
from ..utils import get_logger, time_call
from ..utils.performance import resolve_slow_query_ms
from .base import ConnectionConfig, DatabaseAdapter, DBAPIConnection


class SQLiteConnection(DBAPIConnection):
    """
    sqlite3 connection wrapper.

    SQLite only distinguishes serializable reads from ``read_uncommitted``
    reads of a shared cache, so every other level maps to ``SERIALIZABLE``.
    """

    raw: sqlite3.Connection

    def __init__(self, raw: sqlite3.Connection) -> None:
        super().__init__(raw)
        self._closed = False

    @property
    def autocommit(self) -> bool:
        return self.raw.isolation_level is None

    @autocommit.setter
    def autocommit(self, value: bool) -> None:
        self.raw.isolation_level = None if value else "DEFERRED"

    @property
    def isolation(self) -> Optional[str]:
        (read_uncommitted,) = self.raw.execute("PRAGMA read_uncommitted").fetchone()
        return "READ UNCOMMITTED" if read_uncommitted else "SERIALIZABLE"

    @isolation.setter
    def isolation(self, value: Optional[str]) -> None:
        flag = 1 if value == "READ UNCOMMITTED" else 0
        self.raw.execute(f"PRAGMA read_uncommitted = {flag}")

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self.raw.close()
        self._closed = True


class SQLiteAdapter(DatabaseAdapter):
    """
    Adapter opening one sqlite3 connection per request.
    """

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self.dialect = SQLiteDialect()
        self.logger = get_logger("adapters.sqlite")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    def connect(self, config: ConnectionConfig) -> SQLiteConnection:
        path = self._normalize_path(config.url)
        timeout = config.timeout if config.timeout is not None else 5.0

        raw = sqlite3.connect(
            path,
            isolation_level=None if config.autocommit else "DEFERRED",
            timeout=timeout,
            check_same_thread=False,
        )
        raw.row_factory = sqlite3.Row
        raw.execute("PRAGMA foreign_keys = ON")
        self.logger.debug("Opened SQLite connection to %s (autocommit=%s)", path, config.autocommit)
        return SQLiteConnection(raw)

    def execute(self, connection: SQLiteConnection, sql: str, params: Sequence[Any] | None = None) -> sqlite3.Cursor:
        cursor = connection.cursor()
        params = params or ()
        with time_call("sqlite.execute", self.logger, sql=sql, threshold_ms=self.slow_query_ms):
            cursor.execute(sql, params)
        return cursor

    def last_insert_id(self, cursor: sqlite3.Cursor, table: str, pk_column: str) -> Any:
        return cursor.lastrowid

    @staticmethod
    def _normalize_path(url: str) -> str:
        if url == "sqlite:///:memory:":
            return ":memory:"
        prefix = "sqlite:///"
        if url.startswith(prefix):
            return url[len(prefix) :]
        return url
