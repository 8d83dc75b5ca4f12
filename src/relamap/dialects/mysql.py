"""
MySQL dialect.
"""

from __future__ import annotations

from .base import BaseDialect, DialectCapabilities


class MySQLDialect(BaseDialect):
    name = "mysql"
    param_style = "pyformat"
    capabilities = DialectCapabilities(supports_returning=False, supports_schema_namespaces=True)
    quote_char = "`"
    placeholder = "%s"
    # Largest unsigned BIGINT; MySQL has no OFFSET without LIMIT.
    unbounded_limit = "18446744073709551615"
