from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union, final

from scopedquery.Exceptions import DuplicateScopeException, UnknownScopeException

from .Scope import Scope, ScopeCallable, ScopeInterface, as_scope

ScopeLike = Union[Scope, ScopeInterface, ScopeCallable]

logger = logging.getLogger(__name__)


@final
class ScopeRegistry:
    """
    Named scopes and default (global) scopes for one model type.

    Registries form a hierarchy: a registry created with ``extend()`` sees
    every entry of its parent unless it registers the same name itself, in
    which case its own entry replaces the parent's. Names are unique within
    a single registry instance.

    A registry is shared by reference between every builder of a model.
    Register scopes up front; after that it is only read.

    Usage:
        registry = ScopeRegistry({'relevant': lambda b: b.where('repeating', 'eq', True)})
        registry.register_default('active', ActiveScope())

        @registry.scope('recent')
        def recent(builder, since):
            builder.where('date', 'gte', since)
    """

    def __init__(
        self,
        scopes: Optional[Mapping[str, ScopeLike]] = None,
        defaults: Optional[Mapping[str, ScopeLike]] = None,
        parent: Optional[ScopeRegistry] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        @param scopes: Static set of named scopes
        @param defaults: Static set of default scopes
        @param parent: Registry of the base model, if any
        @param name: Label used in logs and repr
        """
        self.parent = parent
        self.name = name or (f"{parent.name}:child" if parent else "default")
        self._scopes: OrderedDict[str, Scope] = OrderedDict()
        self._defaults: OrderedDict[str, Scope] = OrderedDict()

        for scope_name, scope in (scopes or {}).items():
            self.register(scope_name, scope)
        for scope_name, scope in (defaults or {}).items():
            self.register_default(scope_name, scope)

    def __repr__(self) -> str:
        return (f"<ScopeRegistry(name='{self.name}', scopes={len(self._scopes)}, "
                f"defaults={len(self._defaults)}, parent={self.parent.name if self.parent else None})>")

    def register(self, name: str, scope: ScopeLike) -> ScopeRegistry:
        """
        Register a named scope.

        @param name: Unique name within this registry
        @param scope: Scope instance, ScopeInterface or callable
        @return: Self for method chaining
        """
        if name in self._scopes:
            raise DuplicateScopeException(name)

        self._scopes[name] = as_scope(scope, name)
        logger.debug(f"Registered scope '{name}' on registry '{self.name}'")
        return self

    def register_default(self, name: str, scope: ScopeLike) -> ScopeRegistry:
        """
        Register a default scope, applied to every new root builder unless
        the builder opts out.

        @param name: Unique name within this registry's default set
        @param scope: Scope instance, ScopeInterface or callable
        @return: Self for method chaining
        """
        if name in self._defaults:
            raise DuplicateScopeException(name)

        self._defaults[name] = as_scope(scope, name)
        logger.debug(f"Registered default scope '{name}' on registry '{self.name}'")
        return self

    def scope(self, name: Optional[str] = None) -> Callable[[ScopeCallable], ScopeCallable]:
        """Decorator registering a function as a named scope."""
        def decorator(func: ScopeCallable) -> ScopeCallable:
            self.register(name or func.__name__, func)
            return func
        return decorator

    def resolve(self, name: str) -> Scope:
        """
        Look a scope up by name, walking up to the base registries.

        @param name: Scope name
        @return: The registered Scope
        """
        registry: Optional[ScopeRegistry] = self
        while registry is not None:
            if name in registry._scopes:
                return registry._scopes[name]
            registry = registry.parent

        raise UnknownScopeException(name, self.names())

    def has(self, name: str) -> bool:
        try:
            self.resolve(name)
        except UnknownScopeException:
            return False
        return True

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def names(self) -> List[str]:
        """Every visible scope name, base registries first."""
        return list(self._merged('_scopes').keys())

    def default_scopes(self) -> List[Tuple[str, Scope]]:
        """Visible default scopes in application order, base registries first."""
        return list(self._merged('_defaults').items())

    def extend(self, name: Optional[str] = None) -> ScopeRegistry:
        """Create a child registry for a derived model."""
        return ScopeRegistry(parent=self, name=name)

    def _merged(self, attribute: str) -> Dict[str, Scope]:
        chain: List[ScopeRegistry] = []
        registry: Optional[ScopeRegistry] = self
        while registry is not None:
            chain.append(registry)
            registry = registry.parent

        merged: Dict[str, Scope] = {}
        for registry in reversed(chain):
            for scope_name, scope in getattr(registry, attribute).items():
                # Shadowing keeps the base position but swaps the entry
                merged[scope_name] = scope
        return merged

    def debug_info(self) -> Dict[str, Any]:
        """
        Get debugging information about the registry.

        @return: Dictionary with debug information
        """
        return {
            'name': self.name,
            'parent': self.parent.name if self.parent else None,
            'own_scopes': list(self._scopes.keys()),
            'own_defaults': list(self._defaults.keys()),
            'scopes': self.names(),
            'defaults': [scope_name for scope_name, _ in self.default_scopes()],
        }
