import sqlite3

import pytest

from relamap.adapters import ConnectionConfig, SQLiteAdapter
from relamap.adapters.sqlite import SQLiteConnection


@pytest.fixture
def connection(tmp_path):
    adapter = SQLiteAdapter()
    connection = adapter.connect(ConnectionConfig(url=f"sqlite:///{tmp_path / 'adapter.db'}"))
    yield connection
    if not connection.closed:
        connection.close()


def test_connect_creates_database(connection):
    assert isinstance(connection, SQLiteConnection)
    assert isinstance(connection.raw, sqlite3.Connection)
    assert connection.raw.row_factory is sqlite3.Row
    assert connection.autocommit is True
    assert connection.raw.execute("PRAGMA foreign_keys").fetchone()[0] == 1


def test_execute_and_last_insert_id(tmp_path):
    adapter = SQLiteAdapter()
    connection = adapter.connect(ConnectionConfig(url=f"sqlite:///{tmp_path / 'exec.db'}"))
    adapter.execute(connection, "CREATE TABLE example (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
    cursor = adapter.execute(connection, "INSERT INTO example (name) VALUES (?)", ("Alice",))
    inserted_id = adapter.last_insert_id(cursor, "example", "id")
    assert inserted_id == 1
    rows = adapter.execute(connection, "SELECT name FROM example WHERE id = ?", (inserted_id,)).fetchall()
    assert rows[0]["name"] == "Alice"
    connection.close()


def test_autocommit_toggle_controls_transactions(tmp_path):
    adapter = SQLiteAdapter()
    connection = adapter.connect(ConnectionConfig(url=f"sqlite:///{tmp_path / 'txn.db'}"))
    adapter.execute(connection, "CREATE TABLE item (id INTEGER PRIMARY KEY, value INTEGER)")

    connection.autocommit = False
    adapter.execute(connection, "INSERT INTO item (value) VALUES (?)", (10,))
    connection.commit()
    adapter.execute(connection, "INSERT INTO item (value) VALUES (?)", (20,))
    connection.rollback()
    connection.autocommit = True

    assert adapter.execute(connection, "SELECT COUNT(*) FROM item").fetchone()[0] == 1
    connection.close()


def test_isolation_maps_read_uncommitted_pragma(connection):
    assert connection.isolation == "SERIALIZABLE"
    connection.isolation = "READ UNCOMMITTED"
    assert connection.isolation == "READ UNCOMMITTED"
    connection.isolation = "REPEATABLE READ"
    assert connection.isolation == "SERIALIZABLE"


def test_config_can_disable_autocommit(tmp_path):
    adapter = SQLiteAdapter()
    connection = adapter.connect(ConnectionConfig(url=f"sqlite:///{tmp_path / 'manual.db'}", autocommit=False))
    assert connection.autocommit is False
    connection.close()
    assert connection.closed


def test_in_memory_url_is_normalized():
    assert SQLiteAdapter._normalize_path("sqlite:///:memory:") == ":memory:"
    assert SQLiteAdapter._normalize_path("sqlite:///data/app.db") == "data/app.db"
    assert SQLiteAdapter._normalize_path("plain.db") == "plain.db"
