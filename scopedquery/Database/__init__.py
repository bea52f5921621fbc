from __future__ import annotations

from .QueryBuilder import QueryBuilder
from .Connection import ConnectionInterface, SQLAlchemyConnection
from .Model import QueryModel

__all__ = ['QueryBuilder', 'ConnectionInterface', 'SQLAlchemyConnection', 'QueryModel']
