"""
Naming helpers for tables and selected columns.
"""

import re

# Between a lowercase letter or digit and an uppercase one, or inside an
# acronym right before its last capital ("HTTPServer" -> "HTTP_Server").
_WORD_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def camel_to_snake(name: str) -> str:
    return _WORD_BOUNDARY_RE.sub("_", name).lower()


def column_label(table_name: str, column_name: str) -> str:
    """
    Alias a column is selected under, unique across the tables of a join.
    """
    return f"{table_name.replace('.', '_')}__{column_name}"
