"""
Table base class and metadata orchestration for relamap.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Type, Union

from ..errors import ConfigurationError
from ..utils import camel_to_snake
from .columns import Column


@dataclass
class TableOptions:
    """
    Container for table metadata calculated by :class:`TableMeta`.
    """

    table_class: Type["Table"]
    table_name: str = ""
    schema: Optional[str] = None
    entity: Union[type, str, None] = None
    columns: "OrderedDict[str, Column]" = field(default_factory=OrderedDict)
    primary_keys: List[Column] = field(default_factory=list)

    def add_column(self, column: Column) -> None:
        name = column.require_name()
        if name in self.columns:
            raise ConfigurationError(
                f"Duplicate column '{name}' on table '{self.table_class.__name__}'"
            )
        self.columns[name] = column
        if column.primary_key:
            self.primary_keys.append(column)

    @property
    def table(self) -> str:
        if self.schema:
            return f"{self.schema}.{self.table_name}"
        return self.table_name

    @property
    def primary_key(self) -> Column:
        """
        The single primary-key column. Composite keys are rejected here since
        id-based lookups need exactly one.
        """
        if not self.primary_keys:
            raise ConfigurationError(f"Table {self.table_name} doesn't have a primary key.")
        if len(self.primary_keys) > 1:
            raise ConfigurationError(
                f"Table {self.table_name} has a composite primary key; exactly one is required."
            )
        return self.primary_keys[0]

    @property
    def entity_class(self) -> type:
        from .entity import entity_registry

        if self.entity is None:
            raise ConfigurationError(f"No entity class configured for table: {self.table_name}")
        resolved = entity_registry.resolve(self.entity, module=self.table_class.__module__)
        if resolved is None:
            raise ConfigurationError(
                f"Entity class '{self.entity}' for table {self.table_name} is not defined."
            )
        return resolved

    def get_column(self, name: str) -> Column:
        try:
            return self.columns[name]
        except KeyError as exc:
            raise KeyError(
                f"Unknown column '{name}' on table '{self.table_class.__name__}'"
            ) from exc

    def get_columns(self) -> Iterable[Column]:
        return self.columns.values()


class TableMeta(type):
    """
    Metaclass collecting columns and establishing table metadata.
    """

    def __new__(mcls, name: str, bases: tuple[type, ...], attrs: Dict[str, Any]) -> "TableMeta":
        if not bases:
            return super().__new__(mcls, name, bases, attrs)

        declared: Dict[str, Column] = {}
        for attr_name, value in list(attrs.items()):
            if isinstance(value, Column):
                declared[attr_name] = attrs.pop(attr_name)

        cls = super().__new__(mcls, name, bases, attrs)

        meta = getattr(cls, "Meta", None)
        options = TableOptions(table_class=cls, table_name=camel_to_snake(name))
        if meta:
            options.table_name = getattr(meta, "table", options.table_name)
            options.schema = getattr(meta, "schema", None)
            options.entity = getattr(meta, "entity", None)
        cls._meta = options

        for attr_name, column in sorted(declared.items(), key=lambda item: item[1].creation_counter):
            column.contribute_to_class(cls, attr_name)
            options.add_column(column)

        table_registry.register(cls)
        return cls


class Table(metaclass=TableMeta):
    """
    Base class for table declarations. Tables are used as classes and never
    instantiated; entities are the runtime objects.
    """

    _meta: TableOptions

    def __init__(self) -> None:
        raise TypeError(f"{self.__class__.__name__} is a table declaration and cannot be instantiated.")


class TableRegistry:
    def __init__(self) -> None:
        self.tables: Dict[str, Type[Table]] = {}
        self.qualified: Dict[str, Type[Table]] = {}

    def register(self, table: Type[Table]) -> None:
        self.tables[table.__name__] = table
        self.qualified[f"{table.__module__}.{table.__name__}"] = table

    def resolve(self, target: Union[type, str]) -> Optional[Type[Table]]:
        if isinstance(target, type):
            return target
        if target in self.qualified:
            return self.qualified[target]
        return self.tables.get(target.split(".")[-1])

    def for_entity(self, entity_class: type) -> Type[Table]:
        """
        Find the single table whose ``Meta.entity`` is ``entity_class``.
        """
        matches = []
        for table in self.tables.values():
            entity = table._meta.entity
            if entity is entity_class or entity == entity_class.__name__:
                matches.append(table)
        if not matches:
            raise ConfigurationError(f"No table is configured for entity {entity_class.__name__}.")
        if len(matches) > 1:
            names = ", ".join(sorted(table.__name__ for table in matches))
            raise ConfigurationError(
                f"Entity {entity_class.__name__} is mapped by several tables ({names}); pass the table explicitly."
            )
        return matches[0]


table_registry = TableRegistry()
