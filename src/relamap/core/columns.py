"""
Column definitions for relamap tables.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional, Union

from ..errors import ConfigurationError
from ..utils.naming import column_label
from .bindings import Binding, parse_binding

if TYPE_CHECKING:
    from .table import Table


class Column:
    """
    Base class for table columns.

    A column knows its physical name and SQL type, converts values between
    the driver and Python, and owns at most one binding to entity properties.
    """

    _creation_counter = 0

    def __init__(
        self,
        *,
        primary_key: bool = False,
        nullable: bool = True,
        db_type: Optional[str] = None,
        db_column: Optional[str] = None,
        bind: Optional[str] = None,
        references: Union[type, str, None] = None,
        help_text: Optional[str] = None,
    ) -> None:
        self.primary_key = primary_key
        self.nullable = nullable and not primary_key
        self.db_type = db_type
        self.db_column = db_column
        self.help_text = help_text
        self.binding: Optional[Binding] = parse_binding(bind, references)

        self.table: type["Table"] | None = None  # Set by contribute_to_class
        self.name: str | None = None
        self.creation_counter = Column._creation_counter
        Column._creation_counter += 1

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self}>"

    def __str__(self) -> str:
        if self.table is None:
            return self.name or "?"
        return f"{self.table._meta.table_name}.{self.column_name()}"

    # Metadata helpers ----------------------------------------------------
    def contribute_to_class(self, table: type["Table"], name: str) -> None:
        if self.table is not None:
            raise ConfigurationError(
                f"Column '{name}' is already bound to table '{self.table.__name__}'."
            )
        self.table = table
        self.name = name
        if self.db_column is None:
            self.db_column = name
        setattr(table, name, self)

    def require_name(self) -> str:
        if self.name is None:
            raise ConfigurationError("Column name is not set.")
        return self.name

    def require_table(self) -> type["Table"]:
        if self.table is None:
            raise ConfigurationError(f"Column '{self.name}' is not attached to a table.")
        return self.table

    def column_name(self) -> str:
        return self.db_column or self.require_name()

    @property
    def label(self) -> str:
        return column_label(self.require_table()._meta.table_name, self.column_name())

    # Conversion ------------------------------------------------------------
    def to_python(self, value: Any) -> Any:
        return value

    def to_db(self, value: Any) -> Any:
        return value


class IntegerColumn(Column):
    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "INTEGER")
        super().__init__(**kwargs)

    def to_python(self, value: Any) -> int | None:
        if value is None:
            return value
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid integer value '{value}' for column '{self}'") from exc


class FloatColumn(Column):
    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "REAL")
        super().__init__(**kwargs)

    def to_python(self, value: Any) -> float | None:
        if value is None:
            return value
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid float value '{value}' for column '{self}'") from exc


class BooleanColumn(Column):
    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "BOOLEAN")
        super().__init__(**kwargs)

    def to_python(self, value: Any) -> bool | None:
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.lower()
            if lowered in {"true", "t", "1"}:
                return True
            if lowered in {"false", "f", "0"}:
                return False
        if isinstance(value, (int, float)):
            return bool(value)
        raise ValueError(f"Invalid boolean value '{value}' for column '{self}'")


class StringColumn(Column):
    def __init__(self, *, max_length: int = 255, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "TEXT")
        super().__init__(**kwargs)
        self.max_length = max_length

    def to_python(self, value: Any) -> str | None:
        if value is None:
            return value
        return str(value)

    def to_db(self, value: Any) -> str | None:
        if value is None:
            return value
        result = str(value)
        if self.max_length and len(result) > self.max_length:
            raise ValueError(f"Value for column '{self}' exceeds max_length {self.max_length}")
        return result


class DateTimeColumn(Column):
    """
    Timestamp column. Values travel to the driver as ISO-8601 text, which
    SQLite, PostgreSQL and MySQL all accept.
    """

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "TIMESTAMP")
        super().__init__(**kwargs)

    def to_python(self, value: Any) -> datetime | None:
        if value is None or isinstance(value, datetime):
            return value
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError as exc:
                raise ValueError(f"Invalid datetime value '{value}' for column '{self}'") from exc
        raise ValueError(f"Expected datetime for column '{self}', received {value!r}")

    def to_db(self, value: Any) -> str | None:
        if value is None:
            return value
        if isinstance(value, datetime):
            return value.isoformat(sep=" ")
        return str(value)
