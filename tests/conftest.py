from __future__ import annotations

from typing import Iterator, List

import pytest

from scopedquery import QueryBuilder, ScopeRegistry
from scopedquery.Log import LogManager, set_log_manager


@pytest.fixture(autouse=True)
def quiet_log_manager() -> Iterator[LogManager]:
    """Route every log channel to a null handler for the duration of a test."""
    manager = LogManager({'default': 'null', 'channels': {'null': {'driver': 'null'}}})
    set_log_manager(manager)
    yield manager
    set_log_manager(None)


@pytest.fixture
def calls() -> List[str]:
    return []


@pytest.fixture
def registry(calls: List[str]) -> ScopeRegistry:
    """Registry with the scopes used across the suite."""
    registry = ScopeRegistry(name='events')

    @registry.scope('relevant')
    def relevant(builder: QueryBuilder) -> None:
        calls.append('relevant')
        builder.where('repeating', 'eq', True)

    @registry.scope('on_date')
    def on_date(builder: QueryBuilder, day: str) -> None:
        calls.append('on_date')
        builder.where('date', 'eq', day)

    return registry


@pytest.fixture
def builder(registry: ScopeRegistry) -> QueryBuilder:
    return QueryBuilder(registry)
