"""Tests for ScopeRegistry registration, lookup and inheritance."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from scopedquery import AnonymousScope, DuplicateScope, QueryBuilder, Scope, ScopeRegistry, UnknownScope
from scopedquery.Scopes import (
    ActiveScope, DateRangeScope, StatusScope, TenantScope, create_scope
)


class PublishedScope(Scope):
    def apply(self, builder: QueryBuilder, *args: Any, **kwargs: Any) -> None:
        builder.where_not_null('published_at')


class TestRegistration:
    """register/resolve contract."""

    def test_duplicate_registration(self) -> None:
        registry = ScopeRegistry()
        registry.register('relevant', lambda q: q)

        with pytest.raises(DuplicateScope) as exc_info:
            registry.register('relevant', lambda q: q)

        assert exc_info.value.name == 'relevant'

    def test_duplicate_default_registration(self) -> None:
        registry = ScopeRegistry()
        registry.register_default('active', ActiveScope())

        with pytest.raises(DuplicateScope):
            registry.register_default('active', ActiveScope())

    def test_callables_are_wrapped(self) -> None:
        registry = ScopeRegistry({'relevant': lambda q: q.where('repeating', 'eq', True)})
        scope = registry.resolve('relevant')

        assert isinstance(scope, AnonymousScope)
        assert scope.get_name() == 'relevant'

    def test_scope_instances_kept(self) -> None:
        published = PublishedScope()
        registry = ScopeRegistry().register('published', published)

        assert registry.resolve('published') is published

    def test_decorator_uses_function_name(self) -> None:
        registry = ScopeRegistry()

        @registry.scope()
        def upcoming(builder: QueryBuilder) -> None:
            builder.where('date', 'gte', '2024-01-01')

        assert registry.has('upcoming')
        assert 'upcoming' in registry

    def test_resolve_unknown_lists_available(self) -> None:
        registry = ScopeRegistry({'a': lambda q: q, 'b': lambda q: q})

        with pytest.raises(UnknownScope) as exc_info:
            registry.resolve('c')

        assert exc_info.value.available_scopes == ['a', 'b']

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(TypeError):
            ScopeRegistry().register('broken', 42)  # type: ignore[arg-type]


class TestHierarchy:
    """Derived registries see base entries unless shadowed."""

    def test_child_sees_base_entries(self) -> None:
        base = ScopeRegistry({'relevant': lambda q: q.where('repeating', 'eq', True)}, name='events')
        child = base.extend('meetings')

        assert child.resolve('relevant') is base.resolve('relevant')
        assert child.names() == ['relevant']

    def test_child_may_register_base_name(self) -> None:
        base = ScopeRegistry({'relevant': lambda q: q.where('repeating', 'eq', True)})
        child = base.extend()
        child.register('relevant', lambda q: q.where('priority', 'gt', 3))

        assert QueryBuilder(child).apply_named_scope('relevant').render() == ("priority > ?", [3])
        assert QueryBuilder(base).apply_named_scope('relevant').render() == ("repeating = ?", [True])

    def test_shadowing_replaces_in_place(self) -> None:
        base = ScopeRegistry(defaults={'active': ActiveScope(), 'tenant': TenantScope(lambda: 1)})
        child = base.extend()
        replacement = ActiveScope(column='is_enabled', value=True)
        child.register_default('active', replacement)
        child.register_default('published', PublishedScope())

        defaults = child.default_scopes()

        assert [name for name, _ in defaults] == ['active', 'tenant', 'published']
        assert defaults[0][1] is replacement

    def test_base_additions_visible_to_child(self) -> None:
        base = ScopeRegistry()
        child = base.extend()
        base.register('late', lambda q: q)

        assert child.has('late')

    def test_debug_info(self) -> None:
        base = ScopeRegistry({'a': lambda q: q}, name='base')
        child = base.extend('child').register('b', lambda q: q)

        info = child.debug_info()

        assert info['parent'] == 'base'
        assert info['own_scopes'] == ['b']
        assert info['scopes'] == ['a', 'b']


class TestCommonScopes:
    """Reusable scope fragments."""

    def test_active_scope(self) -> None:
        builder = QueryBuilder(ScopeRegistry({'active': ActiveScope()}))
        assert builder.apply_named_scope('active').render() == ("status = ?", ['active'])

    def test_status_scope_with_call_arguments(self) -> None:
        registry = ScopeRegistry({'status': StatusScope(['published'])})

        assert QueryBuilder(registry).apply_named_scope('status').render() == (
            "status IN (?)", ['published']
        )
        assert QueryBuilder(registry).scopes([('status', ['draft', 'review'])]).render() == (
            "status IN (?, ?)", ['draft', 'review']
        )

    def test_date_range_scope(self) -> None:
        registry = ScopeRegistry({'january': DateRangeScope('date', date(2024, 1, 1), date(2024, 1, 31))})
        builder = QueryBuilder(registry).apply_named_scope('january')

        assert builder.render() == ("date >= ? AND date <= ?", [date(2024, 1, 1), date(2024, 1, 31)])

    def test_date_range_open_end(self) -> None:
        registry = ScopeRegistry({'since': DateRangeScope('date')})
        builder = QueryBuilder(registry).apply_named_scope('since', '2024-01-01')

        assert builder.render() == ("date >= ?", ['2024-01-01'])

    def test_tenant_scope_without_tenant_matches_nothing(self) -> None:
        registry = ScopeRegistry(defaults={'tenant': TenantScope(lambda: None)})
        assert QueryBuilder(registry).render() == ("1 = 0", [])

    def test_tenant_scope(self) -> None:
        registry = ScopeRegistry(defaults={'tenant': TenantScope(lambda: 9, column='org_id')})
        assert QueryBuilder(registry).render() == ("org_id = ?", [9])

    def test_create_scope(self) -> None:
        scope = create_scope(lambda q: q.where('a', 'eq', 1), name='a')
        builder = QueryBuilder()
        scope(builder)
        assert builder.render() == ("a = ?", [1])
