"""
SQLite dialect.
"""

from __future__ import annotations

from .base import BaseDialect, DialectCapabilities


class SQLiteDialect(BaseDialect):
    """
    qmark placeholders; generated keys come from ``cursor.lastrowid``.
    """

    name = "sqlite"
    param_style = "qmark"
    capabilities = DialectCapabilities(supports_returning=False, supports_schema_namespaces=False)
    placeholder = "?"
    unbounded_limit = "-1"
