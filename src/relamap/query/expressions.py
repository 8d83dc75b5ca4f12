"""
Expression tree primitives for entity query predicates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Tuple


AND = "AND"
OR = "OR"


@dataclass
class Q:
    """
    Boolean predicate tree in the style of Django's Q objects.

    Leaves are ``(lookup, value)`` pairs such as ``("salary__gte", 1000)`` or
    ``("department_id__name", "Tech")``; inner nodes are other ``Q`` objects
    combined with ``&``, ``|`` and ``~``.
    """

    children: List[Any] = field(default_factory=list)
    connector: str = AND
    negated: bool = False

    def __init__(self, *children: Any, **lookups: Any) -> None:
        self.children = list(children)
        self.children.extend(lookups.items())
        self.connector = AND
        self.negated = False

    def __or__(self, other: "Q") -> "Q":
        return self._combine(other, OR)

    def __and__(self, other: "Q") -> "Q":
        return self._combine(other, AND)

    def __invert__(self) -> "Q":
        q = self._clone()
        q.negated = not q.negated
        return q

    def is_empty(self) -> bool:
        return not self.children

    def lookups(self) -> Iterator[Tuple[str, Any]]:
        """Yield every ``(lookup, value)`` leaf of the tree, depth first."""
        for child in self.children:
            if isinstance(child, Q):
                yield from child.lookups()
            else:
                yield child

    # Internal helpers -------------------------------------------------
    def _clone(self) -> "Q":
        clone = Q()
        clone.children = list(self.children)
        clone.connector = self.connector
        clone.negated = self.negated
        return clone

    def _combine(self, other: "Q", connector: str) -> "Q":
        if not isinstance(other, Q):
            raise TypeError(f"Cannot combine Q with {type(other).__name__}")
        if other.is_empty():
            return self._clone()
        if self.is_empty():
            return other._clone()
        q = Q()
        q.children = [self._clone(), other._clone()]
        q.connector = connector
        return q


def to_predicate(predicate: Q | None = None, **lookups: Any) -> Q:
    """
    Normalise the ``(Q, **lookups)`` argument pair accepted by finders into a
    single predicate tree.
    """
    if predicate is not None and not isinstance(predicate, Q):
        raise TypeError(f"Expected a Q predicate, got {type(predicate).__name__}")
    result = predicate if predicate is not None else Q()
    if lookups:
        result = result & Q(**lookups)
    return result
