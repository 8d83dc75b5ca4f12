"""
PostgreSQL connection factory built on psycopg.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..dialects.postgres import PostgresDialect
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


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


class PostgresConnection(DBAPIConnection):
    """
    psycopg connection wrapper translating ``IsolationLevel`` members to SQL
    level names.
    """

    def __init__(self, raw: Any, driver: Any) -> None:
        super().__init__(raw)
        self.driver = driver

    @property
    def autocommit(self) -> bool:
        return bool(self.raw.autocommit)

    @autocommit.setter
    def autocommit(self, value: bool) -> None:
        self.raw.autocommit = bool(value)

    @property
    def isolation(self) -> Optional[str]:
        level = self.raw.isolation_level
        if level is None:
            return None
        return level.name.replace("_", " ")

    @isolation.setter
    def isolation(self, value: Optional[str]) -> None:
        if value is None:
            self.raw.isolation_level = None
            return
        self.raw.isolation_level = self.driver.IsolationLevel[value.replace(" ", "_")]

    @property
    def closed(self) -> bool:
        return bool(self.raw.closed)


class PostgresAdapter(DatabaseAdapter):
    """
    Adapter opening psycopg connections.
    """

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self.dialect = PostgresDialect()
        self.logger = get_logger("adapters.postgres")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    def connect(self, config: ConnectionConfig) -> PostgresConnection:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError("psycopg is required to use PostgresAdapter.")

        options = dict(config.options or {})
        if config.ssl:
            for key, value in config.ssl.postgres_options().items():
                options.setdefault(key, value)
        if config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(config.timeout)

        self.logger.info(
            "Connecting to PostgreSQL %s (autocommit=%s)",
            config.descriptive_label(),
            config.autocommit,
        )

        try:
            # Query keys were parsed into the config; only driver options travel on.
            raw = driver.connect(config.url.split("?", 1)[0], **options)
        except Exception as exc:
            raise AdapterConnectionError("Failed to connect to PostgreSQL.") from exc
        raw.autocommit = bool(config.autocommit)
        return PostgresConnection(raw, driver)

    def execute(self, connection: PostgresConnection, sql: str, params: Sequence[Any] | None = None) -> Any:
        cursor = connection.cursor()
        params = params or ()
        validate_format_params(sql, params)
        with time_call("postgres.execute", self.logger, sql=sql, threshold_ms=self.slow_query_ms):
            cursor.execute(sql, params)
        return cursor

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        row = cursor.fetchone()
        if not row:
            return None
        return row[0]
