"""
Exception hierarchy shared across relamap packages.
"""

from __future__ import annotations


class RelamapError(Exception):
    """Base error for every failure raised by relamap itself."""


class ConfigurationError(RelamapError):
    """Raised when tables, columns, or entities are declared inconsistently."""


class MaterializationError(RelamapError):
    """Raised when a fetched row cannot be turned into an entity."""


class PreconditionError(RelamapError, RuntimeError):
    """Raised when an operation is invoked in a state that does not allow it."""


class QueryModifiedError(PreconditionError):
    """Raised when a filtered or sorted query is used to manipulate rows."""


class MultipleResultsError(PreconditionError):
    """Raised when a single-row finder matches more than one row."""


class EntityNotAttachedError(PreconditionError):
    """Raised when an entity without provenance is flushed or deleted."""


class TransactionError(PreconditionError):
    """Raised on invalid transaction state transitions."""


class UnexpectedDiscardError(RelamapError, RuntimeError):
    """
    Raised before a flush that would silently discard changes made to an
    entity that is shared with another root.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"this.{path} may be unexpectedly discarded, please save it to database first."
        )
