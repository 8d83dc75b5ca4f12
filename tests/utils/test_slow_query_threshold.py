import pytest

from relamap.utils.performance import SLOW_QUERY_ENV_VAR, resolve_slow_query_ms


def test_override_wins(monkeypatch):
    monkeypatch.setenv(SLOW_QUERY_ENV_VAR, "50")
    assert resolve_slow_query_ms(override=5) == 5


def test_environment_variable_is_used(monkeypatch):
    monkeypatch.setenv(SLOW_QUERY_ENV_VAR, "250")
    assert resolve_slow_query_ms() == 250


def test_default_when_unset(monkeypatch):
    monkeypatch.delenv(SLOW_QUERY_ENV_VAR, raising=False)
    assert resolve_slow_query_ms(default=42) == 42
    monkeypatch.setenv(SLOW_QUERY_ENV_VAR, "  ")
    assert resolve_slow_query_ms(default=42) == 42


def test_invalid_values_raise(monkeypatch):
    monkeypatch.setenv(SLOW_QUERY_ENV_VAR, "fast")
    with pytest.raises(ValueError, match=SLOW_QUERY_ENV_VAR):
        resolve_slow_query_ms()
    monkeypatch.setenv(SLOW_QUERY_ENV_VAR, "-1")
    with pytest.raises(ValueError):
        resolve_slow_query_ms()
    with pytest.raises(ValueError):
        resolve_slow_query_ms(override=-3)
