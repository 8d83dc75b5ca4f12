"""
Query construction: predicates, SQL compilation, DML statements and entity
queries.
"""

from .expressions import AND, OR, Q
from .rows import QueryRow
from .compiler import SQLCompiler
from .statements import delete_statement, identity_predicate, insert_statement, update_statement
from .queryset import EntityQuery

__all__ = [
    "AND",
    "OR",
    "Q",
    "QueryRow",
    "SQLCompiler",
    "insert_statement",
    "update_statement",
    "delete_statement",
    "identity_predicate",
    "EntityQuery",
]
