"""
Turns fetched rows into entity graphs and plans the joins that feed them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Protocol, Tuple, Type, Union

from ..core.bindings import NestedBinding, ReferenceBinding, SimpleBinding
from ..core.columns import Column
from ..core.entity import Entity
from ..errors import ConfigurationError, MaterializationError, RelamapError

if TYPE_CHECKING:
    from ..core.table import Table
    from .session import Session


class RowSource(Protocol):
    def has_column(self, column: Column) -> bool: ...

    def __getitem__(self, column: Column) -> Any: ...


@dataclass(frozen=True)
class Join:
    """``LEFT JOIN right_table ON left_table.column = right_table.<pk>``."""

    left_table: Type["Table"]
    column: Column
    right_table: Type["Table"]


@dataclass(frozen=True)
class JoinPlan:
    root: Type["Table"]
    tables: Tuple[Type["Table"], ...]
    joins: Tuple[Join, ...]


def join_references(table: Type["Table"]) -> JoinPlan:
    """
    Plan a left-join chain across every reference column reachable from
    ``table``, depth first in column declaration order.

    A table may appear once per plan; reference cycles, self references and
    a second reference to an already joined table are rejected.
    """
    tables: List[Type["Table"]] = [table]
    joins: List[Join] = []

    def visit(current: Type["Table"], path: Tuple[str, ...]) -> None:
        for column in current._meta.get_columns():
            binding = column.binding
            if not isinstance(binding, ReferenceBinding):
                continue
            right = binding.reference_table
            hop = path + (f"{current.__name__}.{column.name}",)
            if right in tables:
                raise ConfigurationError(
                    f"Table {right._meta.table_name} is joined twice while planning {table.__name__} "
                    f"(via {' -> '.join(hop)}); reference cycles and repeated references are not supported."
                )
            if not right._meta.primary_keys:
                raise ConfigurationError(f"Table {right._meta.table_name} doesn't have a primary key.")
            tables.append(right)
            joins.append(Join(current, column, right))
            visit(right, hop)

    visit(table, ())
    return JoinPlan(root=table, tables=tuple(tables), joins=tuple(joins))


def materialize(
    row: Union[RowSource, Mapping[str, Any]],
    table: Type["Table"],
    session: Optional["Session"] = None,
) -> Entity:
    """
    Build a clean entity of ``table`` from one row.

    Referenced entities are built from the same row and attached only when
    their primary key is present; each carries its own provenance.
    """
    if isinstance(row, Mapping):
        from ..query.rows import QueryRow

        row = QueryRow(row)
    return _create_entity(row, table, session)


def _create_entity(row: RowSource, table: Type["Table"], session: Optional["Session"]) -> Entity:
    entity = table._meta.entity_class()
    entity.attach(table, session)
    for column in table._meta.get_columns():
        try:
            _retrieve_column(row, column, entity, session)
        except RelamapError:
            raise
        except Exception as exc:
            raise MaterializationError(
                f"Error occurred while retrieving column: {column}, binding: {column.binding}"
            ) from exc
    entity.discard_changes_recursively()
    return entity


def _retrieve_column(row: RowSource, column: Column, entity: Entity, session: Optional["Session"]) -> None:
    binding = column.binding
    if binding is None or not row.has_column(column):
        return

    if isinstance(binding, SimpleBinding):
        entity.set(binding.property, row[column])
    elif isinstance(binding, NestedBinding):
        current = entity
        *path, leaf = binding.properties
        for prop in path:
            child = current.get(prop)
            if child is None:
                child = current._new_holder(prop)
                current.set(prop, child)
            current = child
        current.set(leaf, row[column])
        current.discard_changes()
    elif isinstance(binding, ReferenceBinding):
        reference_table = binding.reference_table
        child = _create_entity(row, reference_table, session)
        if child.primary_key_value(reference_table) is not None:
            entity.set(binding.on_property, child)
