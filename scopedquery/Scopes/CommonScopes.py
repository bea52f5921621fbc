from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Iterable, Optional, TYPE_CHECKING, Union

from .Scope import Scope

if TYPE_CHECKING:
    from scopedquery.Database.QueryBuilder import QueryBuilder

DateLike = Union[date, datetime, str]


class ActiveScope(Scope):
    """
    Scope to only include active records.

    Usage:
        registry.register_default('active', ActiveScope())
        registry.register('enabled', ActiveScope(column='is_enabled', value=True))
    """

    def __init__(self, column: str = 'status', value: Any = 'active', name: Optional[str] = None):
        """
        Initialize the active scope.

        @param column: Column name to check (default: 'status')
        @param value: Value that indicates active (default: 'active')
        @param name: Optional name for the scope
        """
        super().__init__(name or 'ActiveScope')
        self.column = column
        self.value = value

    def apply(self, builder: QueryBuilder, *args: Any, **kwargs: Any) -> None:
        builder.where(self.column, 'eq', self.value)


class StatusScope(Scope):
    """
    Scope filtering by one or more status values.

    The statuses given at construction can be overridden per call:
        builder.apply_named_scope('status', ['draft', 'review'])
    """

    def __init__(self, statuses: Iterable[Any] = (), column: str = 'status', name: Optional[str] = None):
        super().__init__(name or 'StatusScope')
        self.statuses = list(statuses)
        self.column = column

    def apply(self, builder: QueryBuilder, *args: Any, **kwargs: Any) -> None:
        statuses = list(args[0]) if args else self.statuses
        builder.where_in(self.column, statuses)


class DateRangeScope(Scope):
    """
    Scope restricting a date column to an inclusive range. Either bound may
    be omitted; call-time arguments ``(start, end)`` replace the defaults.
    """

    def __init__(
        self,
        column: str = 'created_at',
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        name: Optional[str] = None
    ):
        super().__init__(name or 'DateRangeScope')
        self.column = column
        self.start = start
        self.end = end

    def apply(self, builder: QueryBuilder, *args: Any, **kwargs: Any) -> None:
        start = args[0] if len(args) > 0 else kwargs.get('start', self.start)
        end = args[1] if len(args) > 1 else kwargs.get('end', self.end)

        if start is not None:
            builder.where(self.column, 'gte', start)
        if end is not None:
            builder.where(self.column, 'lte', end)


class TenantScope(Scope):
    """
    Scope limiting rows to the current tenant.

    Usage:
        registry.register_default('tenant', TenantScope(lambda: current_tenant.id))
    """

    def __init__(
        self,
        tenant_resolver: Callable[[], Any],
        column: str = 'tenant_id',
        name: Optional[str] = None
    ):
        """
        @param tenant_resolver: Function returning the current tenant id
        @param column: Column holding the tenant id (default: 'tenant_id')
        @param name: Optional name for the scope
        """
        super().__init__(name or 'TenantScope')
        self.tenant_resolver = tenant_resolver
        self.column = column

    def apply(self, builder: QueryBuilder, *args: Any, **kwargs: Any) -> None:
        tenant_id = self.tenant_resolver()
        if tenant_id is None:
            logging.getLogger(__name__).warning(
                f"No current tenant for scope '{self.name}', excluding all rows"
            )
            builder.where_in(self.column, [])
            return
        builder.where(self.column, 'eq', tenant_id)


# Factory functions for common scopes

def active_scope(column: str = 'status', value: Any = 'active') -> ActiveScope:
    """Create an active scope."""
    return ActiveScope(column, value)


def status_scope(statuses: Iterable[Any], column: str = 'status') -> StatusScope:
    """Create a status scope."""
    return StatusScope(statuses, column)


def date_range_scope(
    column: str = 'created_at',
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None
) -> DateRangeScope:
    """Create a date range scope."""
    return DateRangeScope(column, start, end)


def tenant_scope(tenant_resolver: Callable[[], Any], column: str = 'tenant_id') -> TenantScope:
    """Create a tenant scope."""
    return TenantScope(tenant_resolver, column)
