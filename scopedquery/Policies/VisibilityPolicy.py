from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Protocol, TYPE_CHECKING, runtime_checkable

from typing_extensions import Self

if TYPE_CHECKING:
    from scopedquery.Database.QueryBuilder import QueryBuilder


@runtime_checkable
class Indexable(Protocol):
    """Contract for builders that can be restricted to what a principal may see."""

    def index(self, principal: Any) -> Self:
        """Restrict results to rows visible to ``principal``."""
        ...


class VisibilityPolicy(ABC):
    """
    Row visibility rules injected into a QueryBuilder.

    A policy is only consulted when the caller explicitly invokes
    ``builder.index(principal)``; it is never applied implicitly.
    """

    @abstractmethod
    def apply(self, builder: QueryBuilder, principal: Any) -> None:
        """
        Add the conditions restricting ``builder`` to rows ``principal`` can see.

        @param builder: The query builder to modify in place
        @param principal: The acting user or context
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class OwnershipPolicy(VisibilityPolicy):
    """
    Visibility by ownership, optionally widened to public rows.

    Usage:
        policy = OwnershipPolicy(column='user_id', public_column='visibility')
        builder = QueryBuilder(registry, visibility=policy)
        builder.index(current_user)
        # user_id = ? OR visibility = ?

    The principal's id is read from ``attribute`` on an object, or the same
    key on a mapping. Without a principal only public rows remain, or none
    at all when there is no public column.
    """

    def __init__(
        self,
        column: str = 'user_id',
        attribute: str = 'id',
        public_column: Optional[str] = None,
        public_value: Any = 'public',
    ) -> None:
        self.column = column
        self.attribute = attribute
        self.public_column = public_column
        self.public_value = public_value

    def __repr__(self) -> str:
        return (f"<OwnershipPolicy(column='{self.column}', attribute='{self.attribute}', "
                f"public_column={self.public_column!r})>")

    def owner_id(self, principal: Any) -> Any:
        if principal is None:
            return None
        if isinstance(principal, Mapping):
            return principal.get(self.attribute)
        return getattr(principal, self.attribute, None)

    def apply(self, builder: QueryBuilder, principal: Any) -> None:
        owner_id = self.owner_id(principal)

        if owner_id is None:
            if self.public_column is None:
                builder.where_in(self.column, [])
            else:
                builder.where(self.public_column, 'eq', self.public_value)
            return

        if self.public_column is None:
            builder.where(self.column, 'eq', owner_id)
            return

        builder.where_wrapped(
            lambda query: query
            .where(self.column, 'eq', owner_id)
            .or_where(self.public_column, 'eq', self.public_value)
        )
