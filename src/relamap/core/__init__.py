"""
Core building blocks: the binding model, table metadata and entities.
"""

from .bindings import Binding, NestedBinding, ReferenceBinding, SimpleBinding, parse_binding
from .columns import (
    BooleanColumn,
    Column,
    DateTimeColumn,
    FloatColumn,
    IntegerColumn,
    StringColumn,
)
from .entity import Entity, EntityMeta, Property, entity_registry
from .table import Table, TableMeta, TableOptions, table_registry

__all__ = [
    "Binding",
    "SimpleBinding",
    "NestedBinding",
    "ReferenceBinding",
    "parse_binding",
    "Column",
    "IntegerColumn",
    "FloatColumn",
    "BooleanColumn",
    "StringColumn",
    "DateTimeColumn",
    "Entity",
    "EntityMeta",
    "Property",
    "entity_registry",
    "Table",
    "TableMeta",
    "TableOptions",
    "table_registry",
]
