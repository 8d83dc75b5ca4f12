"""
Persistence layer: materialization, change tracking walks, sessions and
transactions.
"""

from .materializer import Join, JoinPlan, join_references, materialize
from .changes import (
    check_unexpected_discarding,
    discard_bound_changes,
    find_changed_columns,
    find_insert_columns,
    identity_condition,
)
from .transaction import Transaction, TransactionIsolation, TransactionManager, TransactionState
from .session import Session

__all__ = [
    "Join",
    "JoinPlan",
    "join_references",
    "materialize",
    "check_unexpected_discarding",
    "discard_bound_changes",
    "find_changed_columns",
    "find_insert_columns",
    "identity_condition",
    "Transaction",
    "TransactionIsolation",
    "TransactionManager",
    "TransactionState",
    "Session",
]
