from relamap.dialects import SQLiteDialect


def test_sqlite_identifier_quoting():
    dialect = SQLiteDialect()
    assert dialect.quote_identifier("table") == '"table"'
    assert dialect.quote_identifier('bad"name') == '"bad""name"'
    assert dialect.format_table("main.items") == '"main.items"'


def test_sqlite_limit_clause():
    dialect = SQLiteDialect()
    assert dialect.limit_clause(10, None) == "LIMIT 10"
    assert dialect.limit_clause(10, 5) == "LIMIT 10 OFFSET 5"
    assert dialect.limit_clause(None, 5) == "LIMIT -1 OFFSET 5"


def test_sqlite_placeholder_and_keys():
    dialect = SQLiteDialect()
    assert dialect.parameter_placeholder() == "?"
    assert dialect.returning_clause("id") == ""
