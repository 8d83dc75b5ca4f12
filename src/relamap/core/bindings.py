"""
Binding model describing how a column maps onto entity properties.

Bindings are immutable and side-effect free so the materializer, the change
tracker and the persistence layer can all walk them independently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from ..errors import ConfigurationError

if TYPE_CHECKING:
    from .table import Table


@dataclass(frozen=True)
class SimpleBinding:
    """Column <-> a single top-level property."""

    property: str

    @property
    def properties(self) -> tuple[str, ...]:
        return (self.property,)

    def __str__(self) -> str:
        return self.property


@dataclass(frozen=True)
class NestedBinding:
    """Column <-> a dotted property path through transient holder objects."""

    properties: tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.properties) < 2:
            raise ConfigurationError("A nested binding needs at least two properties.")

    def __str__(self) -> str:
        return ".".join(self.properties)


@dataclass(frozen=True)
class ReferenceBinding:
    """
    Column <-> a property holding a whole entity of another table, identified
    by that table's primary key.
    """

    target: Union[type, str]
    on_property: str

    @property
    def properties(self) -> tuple[str, ...]:
        return (self.on_property,)

    @property
    def reference_table(self) -> type["Table"]:
        from .table import table_registry

        table = table_registry.resolve(self.target)
        if table is None:
            raise ConfigurationError(f"Referenced table '{self.target}' is not registered.")
        return table

    def __str__(self) -> str:
        target = self.target if isinstance(self.target, str) else self.target.__name__
        return f"{self.on_property} -> {target}"


Binding = Union[SimpleBinding, NestedBinding, ReferenceBinding]


def parse_binding(bind: Optional[str], references: Union[type, str, None] = None) -> Optional[Binding]:
    """
    Build a binding from the ``bind``/``references`` column arguments.
    """
    if references is not None:
        if not bind or "." in bind:
            raise ConfigurationError(
                "A reference column must bind to a single top-level property."
            )
        return ReferenceBinding(target=references, on_property=bind)
    if not bind:
        return None
    segments = tuple(bind.split("."))
    if any(not segment for segment in segments):
        raise ConfigurationError(f"Invalid binding path '{bind}'.")
    if len(segments) == 1:
        return SimpleBinding(segments[0])
    return NestedBinding(segments)
