"""
Connection factory contracts and configuration shared by relamap adapters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

from ..dialects.base import Dialect
from ..security.dsns import DSNConfig, parse_dsn


class AdapterError(RuntimeError):
    """Base error for adapter-related failures."""


class AdapterConfigurationError(AdapterError):
    """Raised when configuration or required driver modules are invalid."""


class AdapterConnectionError(AdapterError):
    """Raised when a connection cannot be established."""


class AdapterExecutionError(AdapterError):
    """Raised when statement parameters do not match the SQL."""


@dataclass
class SSLConfig:
    mode: str | None = None
    rootcert: str | None = None
    cert: str | None = None
    key: str | None = None
    ca: str | None = None
    check_hostname: bool | None = None

    def postgres_options(self) -> dict[str, Any]:
        pairs = {
            "sslmode": self.mode,
            "sslrootcert": self.rootcert,
            "sslcert": self.cert,
            "sslkey": self.key,
        }
        return {key: value for key, value in pairs.items() if value}

    def mysql_options(self) -> dict[str, Any]:
        ssl: dict[str, Any] = {key: value for key, value in (("ca", self.ca), ("cert", self.cert), ("key", self.key)) if value}
        if self.check_hostname is not None:
            ssl["check_hostname"] = self.check_hostname
        return {"ssl": ssl} if ssl else {}


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

# DSN query key -> SSLConfig attribute
_SSL_KEYS = {
    "sslmode": "mode",
    "sslrootcert": "rootcert",
    "sslcert": "cert",
    "sslkey": "key",
    "ssl_ca": "ca",
    "ssl_cert": "cert",
    "ssl_key": "key",
}


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise AdapterConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_number(value: str, *, key: str, kind: type) -> Any:
    try:
        return kind(value)
    except ValueError as exc:
        raise AdapterConfigurationError(f"Invalid {kind.__name__} value for '{key}': {value!r}") from exc


def _parse_ssl(query: dict[str, str]) -> SSLConfig | None:
    ssl = SSLConfig()
    found = False
    for key, attribute in _SSL_KEYS.items():
        if key in query:
            setattr(ssl, attribute, query.pop(key))
            found = True
    if "ssl_check_hostname" in query:
        ssl.check_hostname = _parse_bool(query.pop("ssl_check_hostname"), key="ssl_check_hostname")
        found = True
    return ssl if found else None


@dataclass
class ConnectionConfig:
    """
    Normalized connection configuration for adapters.

    ``autocommit`` applies to connections used outside a transaction; a
    transaction switches it off for the connection it owns and restores it
    on close. ``isolation_level`` names the default transaction isolation.
    """

    url: str
    autocommit: bool = True
    isolation_level: str | None = None
    timeout: float | None = None
    options: dict[str, Any] | None = None
    ssl: SSLConfig | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a connection config by parsing the DSN string. Recognised query
        keys become config fields; the rest are passed to the driver.
        """
        parsed = parse_dsn(dsn)
        query = dict(parsed.query)

        autocommit = _parse_bool(query.pop("autocommit"), key="autocommit") if "autocommit" in query else True
        timeout = _parse_number(query.pop("timeout"), key="timeout", kind=float) if "timeout" in query else None
        isolation_level = query.pop("isolation_level", None)
        ssl = _parse_ssl(query)

        options: dict[str, Any] = {}
        for key, value in query.items():
            options[key] = _parse_number(value, key=key, kind=int) if key == "connect_timeout" else value
        options.update(kwargs.pop("options", None) or {})

        return cls(
            url=dsn,
            dsn=parsed,
            autocommit=kwargs.pop("autocommit", autocommit),
            isolation_level=kwargs.pop("isolation_level", isolation_level),
            timeout=kwargs.pop("timeout", timeout),
            options=options or None,
            ssl=kwargs.pop("ssl", ssl),
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        value = os.getenv(env_var)
        if not value:
            raise AdapterConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    def redacted_dsn(self) -> str:
        if self.dsn:
            return self.dsn.redacted()
        return self.url

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


class Connection(Protocol):
    """
    Connection handed out by an adapter. ``isolation`` holds an SQL isolation
    level name such as ``"READ COMMITTED"`` (``None`` when the driver leaves
    it to the server).
    """

    isolation: Optional[str]
    autocommit: bool

    @property
    def closed(self) -> bool: ...

    def cursor(self) -> Any: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def close(self) -> None: ...


class DBAPIConnection:
    """
    Base wrapper delegating to a DB-API connection. Subclasses translate the
    driver's isolation and autocommit controls.
    """

    def __init__(self, raw: Any) -> None:
        self.raw = raw

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} raw={self.raw!r}>"

    def cursor(self) -> Any:
        return self.raw.cursor()

    def commit(self) -> None:
        self.raw.commit()

    def rollback(self) -> None:
        self.raw.rollback()

    def close(self) -> None:
        self.raw.close()


class DatabaseAdapter(Protocol):
    """
    Connection factory for one database backend.
    """

    dialect: Dialect
    slow_query_ms: int

    def connect(self, config: ConnectionConfig) -> Connection:
        """
        Open a new connection. The caller owns it and must close it.
        """

    def execute(self, connection: Connection, sql: str, params: Sequence[Any] | None = None) -> Any:
        """
        Execute one statement on ``connection`` and return the cursor.
        """

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        """
        Retrieve the primary key generated by the insert just run on ``cursor``.
        """


def count_format_placeholders(sql: str) -> int:
    count = 0
    idx = 0
    while idx < len(sql) - 1:
        pair = sql[idx : idx + 2]
        if pair == "%s":
            count += 1
            idx += 2
        elif pair == "%%":
            idx += 2
        else:
            idx += 1
    return count


def validate_format_params(sql: str, params: Sequence[Any]) -> None:
    """Check ``%s`` placeholders against the parameter count."""
    placeholder_count = count_format_placeholders(sql)
    if placeholder_count == 0:
        if params:
            raise AdapterExecutionError("Parameters provided but SQL statement has no placeholders.")
        return
    if placeholder_count != len(params):
        raise AdapterExecutionError(
            f"Parameter count mismatch: expected {placeholder_count}, received {len(params)}."
        )
