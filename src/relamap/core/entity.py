"""
Entity base class, property descriptors and per-entity change tracking.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, Type, Union

from ..errors import ConfigurationError, EntityNotAttachedError
from .bindings import Binding, ReferenceBinding

if TYPE_CHECKING:
    from ..persistence.session import Session
    from .table import Table


class Property:
    """
    Declares one property of an entity.

    ``kind`` names the entity class a nested holder or referenced entity is
    built from when the property has to be populated from a row.
    """

    def __init__(self, kind: Union[type, str, None] = None, *, help_text: Optional[str] = None) -> None:
        self.kind = kind
        self.help_text = help_text
        self.name: str | None = None
        self.owner: type | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.owner = owner
        self.name = name

    def __get__(self, instance: Optional["Entity"], owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.get(self.name)

    def __set__(self, instance: "Entity", value: Any) -> None:
        instance.set(self.name, value)

    def resolve_kind(self) -> Optional[Type["Entity"]]:
        if self.kind is None:
            return None
        module = self.owner.__module__ if self.owner is not None else None
        return entity_registry.resolve(self.kind, module=module)


class EntityMeta(type):
    """
    Metaclass collecting declared properties, including inherited ones.
    """

    def __new__(mcls, name: str, bases: tuple[type, ...], attrs: Dict[str, Any]) -> "EntityMeta":
        cls = super().__new__(mcls, name, bases, attrs)
        properties: "OrderedDict[str, Property]" = OrderedDict()
        for base in reversed(cls.__mro__[1:]):
            properties.update(getattr(base, "_properties", {}))
        for attr_name, value in attrs.items():
            if isinstance(value, Property):
                properties[attr_name] = value
        cls._properties = properties
        if bases:
            entity_registry.register(cls)
        return cls


class Entity(metaclass=EntityMeta):
    """
    A property bag with a closed, declared property set.

    Every entity records which of its own properties were assigned since it
    was last clean. Roots carry provenance (source table and session); child
    holders carry the parent that owns them instead.
    """

    _properties: "OrderedDict[str, Property]"

    def __init__(self, **values: Any) -> None:
        self._values: Dict[str, Any] = {}
        self._changed: set[str] = set()
        self._parent: Optional[Entity] = None
        self._source_table: Optional[Type[Table]] = None
        self._session: Optional[Session] = None
        for name, value in values.items():
            self.set(name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or name in self._properties:
            object.__setattr__(self, name, value)
            return
        raise AttributeError(f"'{self.__class__.__name__}' has no property '{name}'")

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{name}={'<' + type(value).__name__ + '>' if isinstance(value, Entity) else repr(value)}"
            for name, value in self._values.items()
        )
        return f"<{self.__class__.__name__} {parts}>"

    # Property access ------------------------------------------------------
    def _check_property(self, name: str) -> None:
        if name not in self._properties:
            raise AttributeError(f"'{self.__class__.__name__}' has no property '{name}'")

    def get(self, name: str) -> Any:
        self._check_property(name)
        return self._values.get(name)

    def set(self, name: str, value: Any) -> None:
        """
        Assign a property and record it as changed. Re-assigning the current
        value is not a change.
        """
        self._check_property(name)
        if name in self._values and _same_value(self._values[name], value):
            return
        if (
            isinstance(value, Entity)
            and value._parent is None
            and value._source_table is None
            and not _is_ancestor(value, self)
        ):
            value._parent = self
        self._values[name] = value
        self._changed.add(name)

    def has_value(self, name: str) -> bool:
        self._check_property(name)
        return name in self._values

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(list(self._values.items()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            name: value.to_dict() if isinstance(value, Entity) else value
            for name, value in self._values.items()
        }

    # Change tracking ------------------------------------------------------
    @property
    def changed_properties(self) -> frozenset[str]:
        return frozenset(self._changed)

    def is_changed(self, name: str) -> bool:
        return name in self._changed

    def discard_change(self, name: str) -> None:
        self._changed.discard(name)

    def discard_changes(self) -> None:
        """Forget local changes only; nested entities keep theirs."""
        self._changed.clear()

    def discard_changes_recursively(self) -> None:
        """Forget changes on this entity and every entity reachable from it."""
        pending = [self]
        seen: set[int] = set()
        while pending:
            current = pending.pop()
            if id(current) in seen:
                continue
            seen.add(id(current))
            current._changed.clear()
            pending.extend(value for value in current._values.values() if isinstance(value, Entity))

    # Ownership and provenance --------------------------------------------
    @property
    def parent(self) -> Optional["Entity"]:
        return self._parent

    @property
    def root(self) -> "Entity":
        current = self
        while current._parent is not None:
            current = current._parent
        return current

    @property
    def source_table(self) -> Optional[Type["Table"]]:
        return self._source_table

    @property
    def session(self) -> Optional["Session"]:
        return self._session

    def attach(self, table: Type["Table"], session: Optional["Session"]) -> None:
        # An attached entity is a root, even if it was adopted before insert.
        self._parent = None
        self._source_table = table
        self._session = session

    # Column values --------------------------------------------------------
    def get_column_value(self, binding: Binding) -> Any:
        if isinstance(binding, ReferenceBinding):
            child = self.get(binding.on_property)
            if child is None:
                return None
            _require_entity(child, binding)
            return child.primary_key_value(binding.reference_table)

        current: Any = self
        for prop in binding.properties:
            if current is None:
                return None
            _require_entity(current, binding)
            current = current.get(prop)
        return current

    def set_column_value(self, binding: Binding, value: Any) -> None:
        """
        Write ``value`` through ``binding``, creating missing holders (or the
        referenced entity) from the declared property kinds.
        """
        if isinstance(binding, ReferenceBinding):
            reference_table = binding.reference_table
            child = self.get(binding.on_property)
            if child is None:
                child = reference_table._meta.entity_class()
                self.set(binding.on_property, child)
            _require_entity(child, binding)
            child.set_column_value(_primary_key_binding(reference_table), value)
            return

        current: Entity = self
        *path, leaf = binding.properties
        for prop in path:
            child = current.get(prop)
            if child is None:
                child = current._new_holder(prop)
                current.set(prop, child)
            _require_entity(child, binding)
            current = child
        current.set(leaf, value)

    def _new_holder(self, name: str) -> "Entity":
        kind = self._properties[name].resolve_kind()
        if kind is None:
            raise ConfigurationError(
                f"Property '{self.__class__.__name__}.{name}' needs a declared kind to hold nested values."
            )
        return kind()

    def primary_key_value(self, table: Type["Table"]) -> Any:
        return self.get_column_value(_primary_key_binding(table))

    # Persistence shortcuts ------------------------------------------------
    def flush_changes(self) -> int:
        if self._session is None:
            raise EntityNotAttachedError("The entity is not associated with any database yet.")
        return self._session.flush(self)

    def delete(self) -> int:
        if self._session is None:
            raise EntityNotAttachedError("The entity is not associated with any database yet.")
        return self._session.delete(self)


def _same_value(current: Any, value: Any) -> bool:
    if current is value:
        return True
    if isinstance(current, Entity) or isinstance(value, Entity):
        return False
    return type(current) is type(value) and bool(current == value)


def _is_ancestor(candidate: "Entity", entity: "Entity") -> bool:
    current: Optional[Entity] = entity
    while current is not None:
        if current is candidate:
            return True
        current = current._parent
    return False


def _require_entity(value: Any, binding: Binding) -> None:
    if not isinstance(value, Entity):
        raise ConfigurationError(
            f"Binding '{binding}' passes through a non-entity value of type {type(value).__name__}."
        )


def _primary_key_binding(table: Type["Table"]) -> Binding:
    pk = table._meta.primary_key
    if pk.binding is None:
        raise ConfigurationError(f"Primary column {pk} has no bindings to any entity field.")
    return pk.binding


class EntityRegistry:
    """
    Entity classes by name. Bare names resolve against the caller's module
    first, then against the most recently declared class of that name.
    """

    def __init__(self) -> None:
        self.entities: Dict[str, Type[Entity]] = {}
        self.qualified: Dict[str, Type[Entity]] = {}

    def register(self, entity: Type[Entity]) -> None:
        self.entities[entity.__name__] = entity
        self.qualified[f"{entity.__module__}.{entity.__name__}"] = entity

    def resolve(self, target: Union[type, str], module: Optional[str] = None) -> Optional[Type[Entity]]:
        if isinstance(target, type):
            return target
        if target in self.qualified:
            return self.qualified[target]
        if module is not None and f"{module}.{target}" in self.qualified:
            return self.qualified[f"{module}.{target}"]
        return self.entities.get(target.split(".")[-1])


entity_registry = EntityRegistry()
