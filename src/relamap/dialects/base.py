"""
Dialect strategy describing how statements are rendered for one backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Protocol


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend capabilities.
    """

    supports_returning: bool = False
    supports_schema_namespaces: bool = False


class Dialect(Protocol):
    """
    Strategy interface consumed by the query compiler and statement builders.
    """

    @property
    def name(self) -> str: ...

    @property
    def param_style(self) -> str: ...

    @property
    def capabilities(self) -> DialectCapabilities: ...

    def quote_identifier(self, identifier: str) -> str: ...

    def format_table(self, table_name: str) -> str: ...

    def limit_clause(self, limit: int | None, offset: int | None) -> str: ...

    def parameter_placeholder(self, position: int | None = None) -> str: ...

    def returning_clause(self, column: str) -> str: ...


class BaseDialect:
    """
    Shared rendering rules. Backends override the class attributes; only
    the genuinely different pieces are methods.
    """

    name: ClassVar[str] = "generic"
    param_style: ClassVar[str] = "qmark"
    capabilities: ClassVar[DialectCapabilities] = DialectCapabilities()
    quote_char: ClassVar[str] = '"'
    placeholder: ClassVar[str] = "?"
    # LIMIT value standing for "no limit" when only OFFSET is requested.
    unbounded_limit: ClassVar[Optional[str]] = None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"

    def quote_identifier(self, identifier: str) -> str:
        quote = self.quote_char
        return f"{quote}{identifier.replace(quote, quote * 2)}{quote}"

    def format_table(self, table_name: str) -> str:
        if self.capabilities.supports_schema_namespaces and "." in table_name:
            schema, table = table_name.split(".", 1)
            return f"{self.quote_identifier(schema)}.{self.quote_identifier(table)}"
        return self.quote_identifier(table_name)

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        elif offset is not None and self.unbounded_limit is not None:
            parts.append(f"LIMIT {self.unbounded_limit}")
        if offset is not None:
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)

    def parameter_placeholder(self, position: int | None = None) -> str:
        return self.placeholder

    def returning_clause(self, column: str) -> str:
        if not self.capabilities.supports_returning:
            return ""
        return f"RETURNING {self.quote_identifier(column)}"
