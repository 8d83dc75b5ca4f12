"""
relamap public package initialization.

Tables declare columns and their bindings onto entity properties; sessions
materialize joined rows into entity graphs, track changes and write them back
inside transactions.
"""

from .errors import (  # noqa: F401
    ConfigurationError,
    EntityNotAttachedError,
    MaterializationError,
    MultipleResultsError,
    PreconditionError,
    QueryModifiedError,
    RelamapError,
    TransactionError,
    UnexpectedDiscardError,
)
from .core import (  # noqa: F401
    BooleanColumn,
    DateTimeColumn,
    Entity,
    FloatColumn,
    IntegerColumn,
    Property,
    StringColumn,
    Table,
)
from .adapters import ConnectionConfig, MySQLAdapter, PostgresAdapter, SQLiteAdapter  # noqa: F401
from .query import EntityQuery, Q  # noqa: F401
from .persistence import (  # noqa: F401
    Session,
    TransactionIsolation,
    TransactionManager,
    join_references,
    materialize,
)

__all__ = [
    "Table",
    "Entity",
    "Property",
    "IntegerColumn",
    "FloatColumn",
    "BooleanColumn",
    "StringColumn",
    "DateTimeColumn",
    "ConnectionConfig",
    "SQLiteAdapter",
    "PostgresAdapter",
    "MySQLAdapter",
    "Session",
    "TransactionIsolation",
    "TransactionManager",
    "EntityQuery",
    "Q",
    "materialize",
    "join_references",
    "RelamapError",
    "ConfigurationError",
    "MaterializationError",
    "PreconditionError",
    "QueryModifiedError",
    "MultipleResultsError",
    "EntityNotAttachedError",
    "TransactionError",
    "UnexpectedDiscardError",
]
