from __future__ import annotations

from typing import Optional, final

from scopedquery.Conditions.ConditionNode import validate_field
from scopedquery.Database.Connection import ConnectionInterface
from scopedquery.Database.QueryBuilder import QueryBuilder
from scopedquery.Policies.VisibilityPolicy import VisibilityPolicy
from scopedquery.Scopes.ScopeRegistry import ScopeRegistry


@final
class QueryModel:
    """
    Per-model entry point for building queries.

    Holds what every builder of a model shares: its scope registry, its
    visibility policy and its connection. A derived model is made with
    ``extend()`` and gets a child registry, so it sees its base's scopes
    and may shadow them.

    Usage:
        events = QueryModel('events', connection=SQLAlchemyConnection(engine, 'events'))
        events.registry.register('relevant', lambda q: q.where('repeating', 'eq', True))

        rows = events.query().apply_named_scope('relevant').get()
    """

    def __init__(
        self,
        table: str,
        registry: Optional[ScopeRegistry] = None,
        visibility: Optional[VisibilityPolicy] = None,
        connection: Optional[ConnectionInterface] = None,
    ) -> None:
        self.table = validate_field(table)
        self.registry = registry if registry is not None else ScopeRegistry(name=table)
        self.visibility = visibility
        self.connection = connection

    def __repr__(self) -> str:
        return f"<QueryModel(table='{self.table}', registry={self.registry!r})>"

    def query(self) -> QueryBuilder:
        """Start a new query with the model's default scopes applied."""
        return QueryBuilder(
            self.registry,
            connection=self.connection,
            visibility=self.visibility,
        )

    def without_global_scopes(self, *names: str) -> QueryBuilder:
        """
        Start a new query skipping default scopes.

        @param names: Default scopes to skip; none given skips them all
        """
        if not names:
            return QueryBuilder(
                self.registry,
                connection=self.connection,
                visibility=self.visibility,
                scopes_disabled=True,
            )
        return QueryBuilder(
            self.registry,
            connection=self.connection,
            visibility=self.visibility,
            without_scopes=names,
        )

    def extend(
        self,
        table: Optional[str] = None,
        visibility: Optional[VisibilityPolicy] = None,
        connection: Optional[ConnectionInterface] = None,
    ) -> QueryModel:
        """Create a derived model whose registry inherits from this one."""
        derived_table = table or self.table
        return QueryModel(
            derived_table,
            registry=self.registry.extend(name=derived_table),
            visibility=visibility if visibility is not None else self.visibility,
            connection=connection if connection is not None else self.connection,
        )
