from __future__ import annotations

"""
Named and default scopes.

Classes:
- Scope: Abstract base class for creating custom scopes
- ScopeInterface: Protocol for scope implementations
- AnonymousScope: For inline scope definitions
- ScopeRegistry: Per-model registry of named and default scopes

Common Scopes:
- ActiveScope: Filter by active status
- StatusScope: Filter by a set of statuses
- DateRangeScope: Filter by an inclusive date range
- TenantScope: Multi-tenant filtering

Usage:
    from scopedquery.Scopes import ScopeRegistry, ActiveScope

    registry = ScopeRegistry()
    registry.register_default('active', ActiveScope())
    registry.register('relevant', lambda builder: builder.where('repeating', 'eq', True))
"""

from .Scope import (
    Scope,
    ScopeInterface,
    AnonymousScope,
    create_scope,
    as_scope
)

from .ScopeRegistry import ScopeRegistry

from .CommonScopes import (
    ActiveScope,
    StatusScope,
    DateRangeScope,
    TenantScope,
    active_scope,
    status_scope,
    date_range_scope,
    tenant_scope
)

__all__ = [
    'Scope',
    'ScopeInterface',
    'AnonymousScope',
    'create_scope',
    'as_scope',

    'ScopeRegistry',

    'ActiveScope',
    'StatusScope',
    'DateRangeScope',
    'TenantScope',

    'active_scope',
    'status_scope',
    'date_range_scope',
    'tenant_scope'
]
