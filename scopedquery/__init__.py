from __future__ import annotations

"""
Composable query predicates with nested conditions, named scopes and
visibility filtering.

Usage:
    from scopedquery import QueryModel, ScopeRegistry

    events = QueryModel('events')
    events.registry.register('relevant', lambda q: q.where('repeating', 'eq', True))

    events.query().apply_named_scope('relevant').where('date', 'eq', '2024-01-01').render()
    # ('repeating = ? AND date = ?', [True, '2024-01-01'])
"""

from .Exceptions import (
    QueryBuilderException,
    InvalidOperatorException,
    InvalidBooleanException,
    InvalidFieldException,
    UnknownScopeException,
    DuplicateScopeException,
    CallbackException,
    InvalidOperator,
    UnknownScope,
    DuplicateScope,
    CallbackError
)
from .Conditions import Operator, Boolean, Leaf, Group, ConditionTree
from .Scopes import Scope, AnonymousScope, ScopeRegistry
from .Policies import Indexable, VisibilityPolicy, OwnershipPolicy
from .Database import QueryBuilder, ConnectionInterface, SQLAlchemyConnection, QueryModel

__version__ = "1.0.0"

__all__ = [
    'QueryBuilderException',
    'InvalidOperatorException',
    'InvalidBooleanException',
    'InvalidFieldException',
    'UnknownScopeException',
    'DuplicateScopeException',
    'CallbackException',
    'InvalidOperator',
    'UnknownScope',
    'DuplicateScope',
    'CallbackError',

    'Operator',
    'Boolean',
    'Leaf',
    'Group',
    'ConditionTree',

    'Scope',
    'AnonymousScope',
    'ScopeRegistry',

    'Indexable',
    'VisibilityPolicy',
    'OwnershipPolicy',

    'QueryBuilder',
    'ConnectionInterface',
    'SQLAlchemyConnection',
    'QueryModel',
]
