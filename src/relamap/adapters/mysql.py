"""
MySQL connection factory built on PyMySQL.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..dialects.mysql import MySQLDialect
from ..utils import get_logger, time_call
from ..utils.performance import resolve_slow_query_ms
from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    ConnectionConfig,
    DatabaseAdapter,
    DBAPIConnection,
    validate_format_params,
)

ISOLATION_LEVELS = ("READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE")


def _load_driver():
    try:
        import pymysql  # type: ignore[import-untyped]

        return pymysql
    except ImportError:
        return None


class MySQLConnection(DBAPIConnection):
    """
    PyMySQL connection wrapper. Isolation is read from and written to the
    session variables since PyMySQL has no attribute for it.
    """

    @property
    def autocommit(self) -> bool:
        return bool(self.raw.get_autocommit())

    @autocommit.setter
    def autocommit(self, value: bool) -> None:
        self.raw.autocommit(bool(value))

    @property
    def isolation(self) -> Optional[str]:
        cursor = self.raw.cursor()
        try:
            cursor.execute("SELECT @@SESSION.transaction_isolation")
            row = cursor.fetchone()
        finally:
            cursor.close()
        if not row or row[0] is None:
            return None
        return str(row[0]).replace("-", " ").upper()

    @isolation.setter
    def isolation(self, value: Optional[str]) -> None:
        if value is None:
            return
        if value not in ISOLATION_LEVELS:
            raise AdapterConfigurationError(f"Unknown isolation level {value!r}")
        cursor = self.raw.cursor()
        try:
            cursor.execute(f"SET SESSION TRANSACTION ISOLATION LEVEL {value}")
        finally:
            cursor.close()

    @property
    def closed(self) -> bool:
        return not self.raw.open


class MySQLAdapter(DatabaseAdapter):
    """
    Adapter opening PyMySQL connections from a DSN-based config.
    """

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self.dialect = MySQLDialect()
        self.logger = get_logger("adapters.mysql")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    def connect(self, config: ConnectionConfig) -> MySQLConnection:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError("PyMySQL is required to use MySQLAdapter.")
        if not config.dsn:
            raise AdapterConfigurationError(
                "ConnectionConfig must be built from a DSN for MySQL connections."
            )

        options = dict(config.options or {})
        if config.ssl:
            for key, value in config.ssl.mysql_options().items():
                options.setdefault(key, value)
        if config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(config.timeout)

        self.logger.info(
            "Connecting to MySQL %s (autocommit=%s)",
            config.descriptive_label(),
            config.autocommit,
        )

        dsn = config.dsn
        connect_kwargs = {
            "host": dsn.host or "localhost",
            "user": dsn.username,
            "password": dsn.password,
            "database": dsn.database,
            "autocommit": bool(config.autocommit),
            **options,
        }
        if dsn.port:
            connect_kwargs["port"] = dsn.port

        try:
            raw = driver.connect(**connect_kwargs)
        except Exception as exc:
            raise AdapterConnectionError("Failed to connect to MySQL.") from exc
        return MySQLConnection(raw)

    def execute(self, connection: MySQLConnection, sql: str, params: Sequence[Any] | None = None) -> Any:
        cursor = connection.cursor()
        params = params or ()
        validate_format_params(sql, params)
        with time_call("mysql.execute", self.logger, sql=sql, threshold_ms=self.slow_query_ms):
            cursor.execute(sql, params)
        return cursor

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        return cursor.lastrowid
