"""
Binding-aware walks over an entity's change state.

These functions decide which columns an INSERT or UPDATE carries, build the
identity of a persisted row, clear change state after a successful write
and refuse writes that would silently drop changes on a shared entity.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Tuple, Type

from ..core.bindings import NestedBinding, ReferenceBinding
from ..core.columns import Column
from ..core.entity import Entity
from ..errors import ConfigurationError, UnexpectedDiscardError

if TYPE_CHECKING:
    from ..core.table import Table


Assignment = Tuple[Column, Any]


def find_insert_columns(entity: Entity, table: Type["Table"]) -> List[Assignment]:
    """Every bound column whose resolved value is not null."""
    assignments: List[Assignment] = []
    for column in table._meta.get_columns():
        if column.binding is None:
            continue
        value = entity.get_column_value(column.binding)
        if value is not None:
            assignments.append((column, column.to_db(value)))
    return assignments


def find_changed_columns(entity: Entity, table: Type["Table"]) -> List[Assignment]:
    """
    Bound columns whose value changed since the entity was last clean.

    A path binding is dirty when any entity along the path has the hop's
    property in its own change set, so replacing a whole holder counts as
    much as assigning one of its leaves.
    """
    assignments: List[Assignment] = []
    for column in table._meta.get_columns():
        binding = column.binding
        if binding is None:
            continue

        if isinstance(binding, ReferenceBinding):
            if entity.is_changed(binding.on_property):
                assignments.append((column, column.to_db(entity.get_column_value(binding))))
            continue

        any_changed = False
        current: Any = entity
        for prop in binding.properties:
            if current is None:
                break
            if not isinstance(current, Entity):
                raise ConfigurationError(
                    f"Binding '{binding}' of column {column} passes through a non-entity value."
                )
            if current.is_changed(prop):
                any_changed = True
            current = current.get(prop)
        if any_changed:
            assignments.append((column, column.to_db(current)))
    return assignments


def identity_condition(entity: Entity, table: Type["Table"]) -> List[Assignment]:
    """``(pk_column, value)`` pairs identifying the row ``entity`` came from."""
    primary_keys = table._meta.primary_keys
    if not primary_keys:
        raise ConfigurationError(f"Table {table._meta.table_name} doesn't have a primary key.")
    identity: List[Assignment] = []
    for pk in primary_keys:
        if pk.binding is None:
            raise ConfigurationError(f"Primary column {pk} has no bindings to any entity field.")
        identity.append((pk, pk.to_db(entity.get_column_value(pk.binding))))
    return identity


def discard_bound_changes(entity: Entity, table: Type["Table"]) -> None:
    """
    Remove each bound property from the change set of every entity along its
    binding path. Unbound properties keep their changed state.
    """
    for column in table._meta.get_columns():
        binding = column.binding
        if binding is None:
            continue
        if isinstance(binding, ReferenceBinding):
            entity.discard_change(binding.on_property)
            continue
        current: Any = entity
        for prop in binding.properties:
            if not isinstance(current, Entity):
                break
            current.discard_change(prop)
            current = current.get(prop)


def check_unexpected_discarding(entity: Entity, table: Type["Table"]) -> None:
    """
    Refuse a write that would clear changes on an entity owned by another
    root.

    Past the first hop of a nested binding, a changed property held by an
    entity with its own provenance and a different root would have its
    change state cleared by this write even though that entity was never
    persisted through its own table.
    """
    for column in table._meta.get_columns():
        binding = column.binding
        if not isinstance(binding, NestedBinding):
            continue
        current: Any = entity
        for index, prop in enumerate(binding.properties):
            if current is None:
                break
            if not isinstance(current, Entity):
                raise ConfigurationError(
                    f"Binding '{binding}' of column {column} passes through a non-entity value."
                )
            if index > 0 and current.is_changed(prop):
                if current.source_table is not None and current.root is not entity:
                    raise UnexpectedDiscardError(".".join(binding.properties[: index + 1]))
            current = current.get(prop)
