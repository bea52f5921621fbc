from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from scopedquery.Database.QueryBuilder import QueryBuilder

ScopeCallable = Callable[..., Any]


@runtime_checkable
class ScopeInterface(Protocol):
    """
    Laravel-style scope interface.

    A scope mutates the builder it is given in place; any return value is
    ignored.
    """

    def apply(self, builder: QueryBuilder, *args: Any, **kwargs: Any) -> Any:
        """
        Apply the scope to a given query builder.

        @param builder: The query builder instance
        @param args: Extra scope parameters supplied by the caller
        """
        ...


class Scope(ABC):
    """
    Abstract base class for named, reusable query constraints.

    Scopes are registered on a ScopeRegistry and applied either by name
    (``builder.scopes(['active'])`` / ``builder.apply_named_scope('active')``)
    or, for default scopes, automatically when a builder is created.

    Usage:
        class ActiveScope(Scope):
            def apply(self, builder, *args, **kwargs):
                builder.where('status', 'eq', 'active')

        registry.register('active', ActiveScope())
        builder.apply_named_scope('active')
    """

    def __init__(self, name: Optional[str] = None) -> None:
        """
        Initialize the scope with an optional name.

        @param name: Optional name for the scope (defaults to class name)
        """
        self.name = name or self.__class__.__name__

    @abstractmethod
    def apply(self, builder: QueryBuilder, *args: Any, **kwargs: Any) -> Any:
        """
        Apply the scope to a given query builder.

        @param builder: The query builder to modify in place
        @param args: Extra scope parameters
        """
        pass

    def __call__(self, builder: QueryBuilder, *args: Any, **kwargs: Any) -> Any:
        return self.apply(builder, *args, **kwargs)

    def get_name(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name='{self.name}')>"


class AnonymousScope(Scope):
    """
    Scope built from a plain callable.

    Usage:
        relevant = AnonymousScope(
            lambda builder: builder.where('repeating', 'eq', True),
            name='relevant'
        )
    """

    def __init__(self, callback: ScopeCallable, name: Optional[str] = None) -> None:
        """
        @param callback: Function taking the builder (and scope parameters)
        @param name: Optional name for the scope
        """
        if not callable(callback):
            raise TypeError(f"Scope callback must be callable, got {type(callback).__name__}")
        super().__init__(name or getattr(callback, '__name__', None) or 'anonymous')
        self.callback = callback

    def apply(self, builder: QueryBuilder, *args: Any, **kwargs: Any) -> Any:
        """Apply the callback to modify the query."""
        return self.callback(builder, *args, **kwargs)


def create_scope(apply_func: ScopeCallable, name: Optional[str] = None) -> AnonymousScope:
    """
    Factory function to create an anonymous scope.

    @param apply_func: Function to apply scope modifications
    @param name: Optional name for the scope
    @return: Anonymous scope instance
    """
    return AnonymousScope(apply_func, name)


def as_scope(scope: Any, name: Optional[str] = None) -> Scope:
    """Normalise a Scope, ScopeInterface or callable into a Scope instance."""
    if isinstance(scope, Scope):
        return scope
    if isinstance(scope, ScopeInterface):
        return AnonymousScope(scope.apply, name)
    if callable(scope):
        return AnonymousScope(scope, name)
    raise TypeError("Scope must implement ScopeInterface or be callable")
