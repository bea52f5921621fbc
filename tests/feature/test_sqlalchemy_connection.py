"""Feature tests running rendered predicates against SQLite through SQLAlchemy."""

from __future__ import annotations

from typing import Iterator, List

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from config.database import get_engine
from scopedquery import (
    InvalidFieldException, OwnershipPolicy, QueryModel, SQLAlchemyConnection
)
from scopedquery.Scopes import ActiveScope

EVENTS = [
    (1, 'standup', 1, '2024-01-01', 'active', 1, 'private'),
    (2, 'retro', 0, '2024-01-01', 'active', 2, 'public'),
    (3, 'planning', 1, '2024-01-02', 'active', 2, 'private'),
    (4, 'offsite', 0, '2024-01-01', 'cancelled', 1, 'public'),
]


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as connection:
        connection.execute(text(
            "CREATE TABLE events (id INTEGER PRIMARY KEY, name TEXT, repeating INTEGER, "
            "date TEXT, status TEXT, user_id INTEGER, visibility TEXT)"
        ))
        connection.execute(
            text("INSERT INTO events VALUES (:id, :name, :repeating, :date, :status, :user_id, :visibility)"),
            [
                dict(zip(['id', 'name', 'repeating', 'date', 'status', 'user_id', 'visibility'], row))
                for row in EVENTS
            ],
        )
    yield engine
    engine.dispose()


@pytest.fixture
def events(engine: Engine) -> QueryModel:
    model = QueryModel(
        'events',
        visibility=OwnershipPolicy(public_column='visibility'),
        connection=SQLAlchemyConnection(engine, 'events', log_queries=True),
    )
    model.registry.register_default('active', ActiveScope())
    model.registry.register('relevant', lambda q: q.where('repeating', 'eq', True))
    return model


def names(rows: List[dict]) -> List[str]:
    return sorted(row['name'] for row in rows)


class TestSQLAlchemyConnection:
    """End to end execution through the storage collaborator."""

    def test_compile_rewrites_placeholders(self, engine: Engine) -> None:
        connection = SQLAlchemyConnection(engine, 'events')

        sql, bindings = connection.compile("a = ? OR (b = ? AND c IN (?, ?))", [1, 2, 3, 4])

        assert sql == "SELECT * FROM events WHERE a = :p0 OR (b = :p1 AND c IN (:p2, :p3))"
        assert bindings == {'p0': 1, 'p1': 2, 'p2': 3, 'p3': 4}

    def test_compile_without_predicate(self, engine: Engine) -> None:
        assert SQLAlchemyConnection(engine, 'events').compile("", []) == ("SELECT * FROM events", {})

    def test_compile_parameter_mismatch(self, engine: Engine) -> None:
        with pytest.raises(ValueError):
            SQLAlchemyConnection(engine, 'events').compile("a = ?", [])

    def test_invalid_table_name(self, engine: Engine) -> None:
        with pytest.raises(InvalidFieldException):
            SQLAlchemyConnection(engine, 'events; DROP TABLE events')

    def test_from_config_uses_configured_engine(self) -> None:
        connection = SQLAlchemyConnection.from_config('events')

        assert connection.engine is get_engine()
        assert connection.compile("", []) == ("SELECT * FROM events", {})

    def test_default_scope_applies(self, events: QueryModel) -> None:
        assert names(events.query().get()) == ['planning', 'retro', 'standup']

    def test_without_global_scopes(self, events: QueryModel) -> None:
        assert len(events.without_global_scopes().get()) == 4

    def test_scopes_and_wrapped_conditions(self, events: QueryModel) -> None:
        rows = (
            events.query()
            .apply_named_scope('relevant')
            .where_wrapped(lambda q: q.where('date', 'eq', '2024-01-02').or_where('user_id', 'eq', 1))
            .get()
        )

        assert names(rows) == ['planning', 'standup']

    def test_index_restricts_to_visible_rows(self, events: QueryModel) -> None:
        rows = events.query().index({'id': 1}).get()

        assert names(rows) == ['retro', 'standup']

    def test_empty_in_matches_nothing(self, events: QueryModel) -> None:
        assert events.query().where_in('id', []).get() == []

    def test_query_log(self, events: QueryModel) -> None:
        events.query().where('id', 'eq', 1).get()

        log = events.connection.get_query_log()

        assert log[-1]['query'] == "SELECT * FROM events WHERE status = :p0 AND id = :p1"
        assert log[-1]['bindings'] == {'p0': 'active', 'p1': 1}
