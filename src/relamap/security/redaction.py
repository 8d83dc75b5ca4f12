"""Masking of secrets in DSN query strings and logged statement parameters."""

from __future__ import annotations

import re
from typing import Any, Iterable

REDACTED_VALUE = "***"

# Matched against keys with separators stripped, so "ssl_key" and "sslkey" agree.
_SENSITIVE_KEY_RE = re.compile(r"passw(or)?d|pwd|secret|token|apikey|accesskey|privatekey|sslkey")
_SENSITIVE_VALUE_RE = re.compile(r"passw(or)?d|secret|token|api_?key|bearer|authorization", re.IGNORECASE)


def is_sensitive_key(key: str) -> bool:
    compact = re.sub(r"[^a-z0-9]", "", key.lower())
    return _SENSITIVE_KEY_RE.search(compact) is not None


def is_sensitive_value(value: str) -> bool:
    return _SENSITIVE_VALUE_RE.search(value) is not None


def redact_query_params(query: dict[str, str]) -> dict[str, str]:
    return {key: REDACTED_VALUE if is_sensitive_key(key) else value for key, value in query.items()}


def redact_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return type(value)(redact_value(item) for item in value)
    if isinstance(value, bytes):
        text = value.decode("utf-8", errors="ignore")
        return REDACTED_VALUE if is_sensitive_value(text) else value
    if isinstance(value, str) and is_sensitive_value(value):
        return REDACTED_VALUE
    return value


def redact_params(params: Iterable[Any]) -> list[Any]:
    """Copy of ``params`` safe to attach to log records."""
    return [redact_value(value) for value in params]
