from __future__ import annotations

import logging
from typing import (
    Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union,
    TYPE_CHECKING
)

from typing_extensions import Self

from scopedquery.Conditions import Boolean, ConditionTree, Group, Leaf, Operator, RenderResult
from scopedquery.Exceptions import CallbackException, QueryBuilderException, UnknownScopeException
from scopedquery.Scopes.Scope import Scope
from scopedquery.Scopes.ScopeRegistry import ScopeRegistry

if TYPE_CHECKING:
    from scopedquery.Database.Connection import ConnectionInterface
    from scopedquery.Policies.VisibilityPolicy import VisibilityPolicy

# A scope reference: a name, or a tuple of name followed by scope parameters
ScopeReference = Union[str, Tuple[Any, ...]]

logger = logging.getLogger(__name__)


class QueryBuilder:
    """
    Accumulates where-conditions, scopes and visibility restrictions into a
    condition tree.

    Conditions chained with ``where`` and ``or_where`` follow SQL precedence:
    the builder's root is an OR of AND-terms, ``where`` extends the current
    term and ``or_where`` starts a new one. Default scopes from the registry
    and ``index()`` restrictions are kept apart from those terms and ANDed
    with the whole of them, so an ``or_where`` can never escape them.

    A builder is used for one query: once ``get()`` has run it refuses any
    further use.

    Usage:
        builder = QueryBuilder(registry)
        builder.where('repeating', 'eq', True).or_where_wrapped(
            lambda query: query.where('date', '>=', '2024-01-01').where('date', '<', '2024-02-01')
        )
        builder.render()
        # ('repeating = ? OR (date >= ? AND date < ?)', [True, '2024-01-01', '2024-02-01'])
    """

    def __init__(
        self,
        registry: Optional[ScopeRegistry] = None,
        *,
        connection: Optional[ConnectionInterface] = None,
        visibility: Optional[VisibilityPolicy] = None,
        scopes_disabled: bool = False,
        without_scopes: Iterable[str] = (),
    ) -> None:
        """
        Initialize the query builder.

        @param registry: Scope registry shared with every builder of the model
        @param connection: Storage collaborator used by get()
        @param visibility: Policy used by index(); None means no restriction
        @param scopes_disabled: Skip the registry's default scopes
        @param without_scopes: Names of default scopes to skip; each must be a
            default scope of the registry, else UnknownScopeException
        """
        self.registry = registry if registry is not None else ScopeRegistry()
        self.connection = connection
        self.visibility = visibility
        self._scopes_disabled = scopes_disabled
        self._tree = ConditionTree(Boolean.OR)
        self._constraints: List[Group] = []
        self._consumed = False

        if not scopes_disabled:
            self._apply_default_scopes(set(without_scopes))

    def __repr__(self) -> str:
        return (f"<QueryBuilder(registry='{self.registry.name}', "
                f"scopes_disabled={self._scopes_disabled}, predicate={self.to_sql()!r})>")

    @property
    def scopes_disabled(self) -> bool:
        return self._scopes_disabled

    @property
    def consumed(self) -> bool:
        return self._consumed

    # Basic where clauses
    def where(self, field: str, operator: Union[str, Operator] = Operator.EQ, value: Any = None) -> Self:
        """Add a where clause joined with AND."""
        return self._add_leaf(Boolean.AND, field, operator, value)

    def or_where(self, field: str, operator: Union[str, Operator] = Operator.EQ, value: Any = None) -> Self:
        """Add a where clause joined with OR."""
        return self._add_leaf(Boolean.OR, field, operator, value)

    def where_in(self, field: str, values: Iterable[Any]) -> Self:
        """Add a where in clause; an empty set matches nothing."""
        return self.where(field, Operator.IN, list(values))

    def where_null(self, field: str) -> Self:
        return self.where(field, Operator.EQ, None)

    def where_not_null(self, field: str) -> Self:
        return self.where(field, Operator.NE, None)

    # Nested conditions
    def where_wrapped(self, callback: Callable[[QueryBuilder], Any], boolean: Union[str, Boolean] = Boolean.AND) -> Self:
        """
        Add a parenthesised group of conditions built by ``callback``.

        The callback receives a fresh nested builder (default scopes off) and
        runs to completion before its conditions are merged into this builder
        as one group joined with ``boolean``. A callback that adds nothing
        leaves the predicate unchanged.

        @param callback: Function receiving the nested builder
        @param boolean: 'and' or 'or'
        @return: Self for method chaining
        """
        self._ensure_usable()
        joined_with = Boolean.parse(boolean)

        if not callable(callback):
            raise CallbackException(
                f"Nested where callback must be callable, got {type(callback).__name__}", callback
            )

        nested = self.for_nested()
        try:
            callback(nested)
        except Exception as e:
            raise CallbackException(f"Nested where callback failed: {e}", callback) from e

        self._open_term(joined_with)
        self._tree.attach(nested._combined_root().copy())
        return self

    def or_where_wrapped(self, callback: Callable[[QueryBuilder], Any]) -> Self:
        """Add a nested group of conditions joined with OR."""
        return self.where_wrapped(callback, Boolean.OR)

    def for_nested(self) -> QueryBuilder:
        """Create an empty builder for a nested group, sharing registry and collaborators."""
        return QueryBuilder(
            self.registry,
            connection=self.connection,
            visibility=self.visibility,
            scopes_disabled=True,
        )

    # Scopes
    def scopes(self, names: Sequence[ScopeReference]) -> Self:
        """
        Apply named scopes in order.

        Every name is resolved before any scope runs, so an unknown name
        leaves the builder untouched. Each later scope sees the conditions
        added by the earlier ones.

        @param names: Scope names, or tuples of (name, *parameters)
        @return: Self for method chaining
        """
        self._ensure_usable()
        if isinstance(names, str):
            names = [names]

        resolved: List[Tuple[Scope, Tuple[Any, ...]]] = []
        for reference in names:
            name, parameters = self._split_reference(reference)
            resolved.append((self.registry.resolve(name), parameters))

        for scope, parameters in resolved:
            logger.debug(f"Applying scope '{scope.get_name()}' on registry '{self.registry.name}'")
            scope.apply(self, *parameters)

        return self

    def apply_named_scope(self, name: str, *args: Any, **kwargs: Any) -> Self:
        """
        Apply one registered scope as if it were a builder method.

        @param name: Registered scope name
        @param args: Scope parameters
        @return: Self for method chaining
        """
        self._ensure_usable()
        scope = self.registry.resolve(name)
        logger.debug(f"Applying scope '{name}' on registry '{self.registry.name}'")
        scope.apply(self, *args, **kwargs)
        return self

    # Visibility
    def index(self, principal: Any) -> Self:
        """
        Restrict results to rows visible to ``principal``.

        Without a visibility policy this is a no-op. The restriction is ANDed
        with everything else on the builder.
        """
        self._ensure_usable()
        if self.visibility is None:
            return self

        restricted = self.for_nested()
        self.visibility.apply(restricted, principal)
        self._constraints.append(restricted._combined_root().copy())
        return self

    # Conditional clauses
    def when(
        self,
        condition: Any,
        callback: Callable[[QueryBuilder, Any], Any],
        default: Optional[Callable[[QueryBuilder, Any], Any]] = None
    ) -> Self:
        """Apply ``callback`` only when ``condition`` is truthy, else ``default``."""
        self._ensure_usable()
        if condition:
            callback(self, condition)
        elif default is not None:
            default(self, condition)
        return self

    # Rendering and execution
    def render(self) -> RenderResult:
        """
        Render the accumulated conditions.

        @return: (predicate_string, parameter_list)
        """
        return ConditionTree(root=self._combined_root()).render()

    def to_sql(self) -> str:
        """Get the predicate fragment without its parameters."""
        return self.render()[0]

    def get(self) -> List[Dict[str, Any]]:
        """Execute the query through the connection and consume the builder."""
        self._ensure_usable()
        if self.connection is None:
            raise QueryBuilderException("Query builder has no connection to execute against")

        predicate, parameters = self.render()
        self._consumed = True
        return self.connection.execute(predicate, parameters)

    def first(self) -> Optional[Dict[str, Any]]:
        """Execute the query and get the first row."""
        rows = self.get()
        return rows[0] if rows else None

    def clone(self) -> QueryBuilder:
        """Create a copy of this query builder."""
        clone = QueryBuilder(
            self.registry,
            connection=self.connection,
            visibility=self.visibility,
            scopes_disabled=True,
        )
        clone._scopes_disabled = self._scopes_disabled
        clone._tree = self._tree.copy()
        clone._constraints = [constraint.copy() for constraint in self._constraints]
        return clone

    # Internals
    def _add_leaf(self, boolean: Boolean, field: str, operator: Union[str, Operator], value: Any) -> Self:
        self._ensure_usable()
        leaf = Leaf.make(field, operator, value)
        self._open_term(boolean)
        self._tree.attach(leaf)
        return self

    def _open_term(self, boolean: Boolean) -> None:
        """Make sure an AND-term is open, starting a new one for OR."""
        if self._tree.depth and boolean is Boolean.AND:
            return
        if self._tree.depth:
            self._tree.close_group()
        self._tree.add_group(Boolean.AND)

    def _combined_root(self) -> Group:
        if not self._constraints:
            return self._tree.root
        return Group(Boolean.AND, [*self._constraints, self._tree.root])

    def _apply_default_scopes(self, without: set) -> None:
        defaults = self.registry.default_scopes()
        default_names = [name for name, _ in defaults]
        for name in sorted(without):
            if name not in default_names:
                raise UnknownScopeException(name, default_names)

        for name, scope in defaults:
            if name in without:
                continue
            scoped = self.for_nested()
            scope.apply(scoped)
            self._constraints.append(scoped._combined_root().copy())
            logger.debug(f"Applied default scope '{name}' on registry '{self.registry.name}'")

    def _ensure_usable(self) -> None:
        if self._consumed:
            raise QueryBuilderException("Query builder has already been executed; create a new one")

    @staticmethod
    def _split_reference(reference: ScopeReference) -> Tuple[str, Tuple[Any, ...]]:
        if isinstance(reference, tuple):
            if not reference:
                raise QueryBuilderException("Empty scope reference")
            return reference[0], tuple(reference[1:])
        return reference, ()


__all__ = ['QueryBuilder', 'ScopeReference']
