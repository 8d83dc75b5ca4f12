"""
PostgreSQL dialect.
"""

from __future__ import annotations

from .base import BaseDialect, DialectCapabilities


class PostgresDialect(BaseDialect):
    """
    psycopg ``%s`` placeholders; generated keys are read back through
    ``RETURNING``.
    """

    name = "postgresql"
    param_style = "pyformat"
    capabilities = DialectCapabilities(supports_returning=True, supports_schema_namespaces=True)
    placeholder = "%s"
