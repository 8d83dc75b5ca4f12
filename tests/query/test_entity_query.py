import pytest

from relamap.adapters import ConnectionConfig, SQLiteAdapter
from relamap.core import Entity, IntegerColumn, Property, StringColumn, Table
from relamap.dialects import PostgresDialect, SQLiteDialect
from relamap.errors import MultipleResultsError, QueryModifiedError
from relamap.persistence import Session, identity_condition
from relamap.query import Q, SQLCompiler, delete_statement, insert_statement, update_statement


class Team(Entity):
    id = Property()
    name = Property()


class Player(Entity):
    id = Property()
    name = Property()
    score = Property()
    team = Property(Team)


class QryTeams(Table):
    id = IntegerColumn(primary_key=True, bind="id")
    name = StringColumn(bind="name")

    class Meta:
        table = "qry_team"
        entity = Team


class QryPlayers(Table):
    id = IntegerColumn(primary_key=True, bind="id")
    name = StringColumn(bind="name")
    score = IntegerColumn(bind="score")
    team_id = IntegerColumn(references=QryTeams, bind="team")

    class Meta:
        table = "qry_player"
        entity = Player


class CountingAdapter(SQLiteAdapter):
    def __init__(self):
        super().__init__()
        self.executed = 0

    def execute(self, connection, sql, params=None):
        self.executed += 1
        return super().execute(connection, sql, params)


@pytest.fixture
def session(tmp_path):
    adapter = CountingAdapter()
    session = Session(adapter, connection_config=ConnectionConfig(url=f"sqlite:///{tmp_path / 'query.db'}"))
    session.execute_update('CREATE TABLE "qry_team" (id INTEGER PRIMARY KEY, name TEXT)')
    session.execute_update(
        'CREATE TABLE "qry_player" (id INTEGER PRIMARY KEY, name TEXT, score INTEGER, team_id INTEGER)'
    )
    session.add(Team(id=1, name="Red"))
    session.add(Team(id=2, name="Blue"))
    for player_id, name, score, team in (
        (1, "Ann", 30, 1),
        (2, "Bob", 10, 1),
        (3, "Cid", 20, 2),
        (4, "Dee", 40, None),
    ):
        session.execute_update(
            'INSERT INTO "qry_player" (id, name, score, team_id) VALUES (?, ?, ?, ?)',
            [player_id, name, score, team],
        )
    adapter.executed = 0
    return session


def test_select_joins_references_with_labels(session):
    sql, params = session.query(QryPlayers).to_sql()
    assert sql == (
        'SELECT "qry_player"."id" AS "qry_player__id", "qry_player"."name" AS "qry_player__name", '
        '"qry_player"."score" AS "qry_player__score", "qry_player"."team_id" AS "qry_player__team_id", '
        '"qry_team"."id" AS "qry_team__id", "qry_team"."name" AS "qry_team__name" '
        'FROM "qry_player" LEFT JOIN "qry_team" ON "qry_player"."team_id" = "qry_team"."id"'
    )
    assert params == []


def test_filter_order_limit_offset_distinct_compile(session):
    query = (
        session.query(QryPlayers)
        .filter(score__gte=10, team_id__name="Red")
        .exclude(name__contains="o")
        .order_by("-score", "team_id__name")
        .limit(2)
        .offset(1)
        .distinct()
    )
    sql, params = query.to_sql()
    assert sql.startswith("SELECT DISTINCT ")
    assert (
        'WHERE ("qry_player"."score" >= ? AND "qry_team"."name" = ?) AND (NOT ("qry_player"."name" LIKE ?))'
    ) in sql
    assert sql.endswith('ORDER BY "qry_player"."score" DESC, "qry_team"."name" LIMIT 2 OFFSET 1')
    assert params == [10, "Red", "%o%"]


def test_lookups_select_expected_rows(session):
    players = session.query(QryPlayers)
    assert sorted(p.name for p in players.find_list(id__in=[1, 3])) == ["Ann", "Cid"]
    assert [p.name for p in players.find_list(name__iexact="bob")] == ["Bob"]
    assert [p.name for p in players.find_list(team_id=None)] == ["Dee"]
    assert [p.name for p in players.find_list(team_id__name="Blue")] == ["Cid"]
    assert sorted(p.name for p in players.find_list(Q(score__lt=15) | Q(score__gt=35))) == ["Bob", "Dee"]
    assert players.find_list(id__in=[]) == []


def test_reference_lookup_accepts_entity(session):
    red = session.find_by_id(QryTeams, 1)
    names = sorted(player.name for player in session.find_list(QryPlayers, team_id=red))
    assert names == ["Ann", "Bob"]


def test_iteration_materializes_entities(session):
    query = session.query(QryPlayers).order_by("score")
    players = list(query)
    assert [player.score for player in players] == [10, 20, 30, 40]
    assert players[0].team.name == "Red"
    assert players[-1].team is None


def test_find_one_rejects_multiple_matches(session):
    with pytest.raises(MultipleResultsError, match="but found: 2"):
        session.find_one(QryPlayers, team_id=1)
    assert session.find_one(QryPlayers, name="Nobody") is None


def test_find_by_ids_follows_input_order(session):
    found = session.find_by_ids(QryPlayers, [3, 1, 99])
    assert list(found) == [3, 1]
    assert found[1].name == "Ann"


def test_find_by_ids_without_ids_runs_no_statement(session):
    assert session.find_list_by_ids(QryPlayers, []) == []
    assert session.find_by_ids(QryPlayers, []) == {}
    assert session.adapter.executed == 0


def test_modified_query_refuses_manipulation(session):
    query = session.query(QryPlayers)
    assert not query.is_modified
    assert not query.filter().is_modified

    for modified in (
        query.filter(score=10),
        query.order_by("name"),
        query.limit(1),
        query.offset(1),
        query.distinct(),
    ):
        assert modified.is_modified
        with pytest.raises(QueryModifiedError):
            modified.add(Player(name="Eve"))
        with pytest.raises(QueryModifiedError):
            modified.remove_if(name="Ann")
        with pytest.raises(QueryModifiedError):
            modified.clear()
    assert session.adapter.executed == 0


def test_origin_query_manipulates_rows(session):
    query = session.query(QryPlayers)
    player = Player(id=5, name="Eve", score=5)
    assert query.add(player) == 1
    assert player.source_table is QryPlayers

    with pytest.raises(ValueError):
        query.remove_if()
    assert query.remove_if(Q(score__lt=15)) == 2
    assert query.clear() == 3


def test_remove_if_rejects_reference_paths(session):
    with pytest.raises(ValueError):
        session.remove_if(QryPlayers, team_id__name="Red")


def test_statement_builders_use_dialect():
    dialect = PostgresDialect()
    assignments = [(QryPlayers.name, "Ann"), (QryPlayers.score, 3)]

    sql, params = insert_statement(QryPlayers, dialect, assignments, returning=QryPlayers.id)
    assert sql == 'INSERT INTO "qry_player" ("name", "score") VALUES (%s, %s) RETURNING "id"'
    assert params == ["Ann", 3]

    identity = identity_condition(Player(id=7), QryPlayers)
    sql, params = update_statement(QryPlayers, dialect, assignments, identity)
    assert sql == 'UPDATE "qry_player" SET "name" = %s, "score" = %s WHERE "id" = %s'
    assert params == ["Ann", 3, 7]

    assert delete_statement(QryPlayers, dialect) == ('DELETE FROM "qry_player"', [])


def test_compiler_without_join_plan_cannot_cross_references():
    compiler = SQLCompiler(QryPlayers, SQLiteDialect(), where=Q(team_id__name="Red"))
    with pytest.raises(ValueError, match="not joined"):
        compiler.compile()
