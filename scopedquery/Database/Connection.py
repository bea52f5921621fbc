from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple, final

from sqlalchemy import text
from sqlalchemy.engine import Engine

from config.database import get_engine
from config.settings import settings
from scopedquery.Conditions.ConditionNode import validate_field
from scopedquery.Conditions.ConditionTree import PLACEHOLDER
from scopedquery.Log import get_log_manager


class ConnectionInterface(ABC):
    """Storage collaborator that turns a rendered predicate into rows."""

    @abstractmethod
    def execute(self, predicate: str, parameters: Sequence[Any]) -> List[Dict[str, Any]]:
        """
        Run a query restricted by ``predicate``.

        @param predicate: Predicate fragment with positional `?` placeholders
        @param parameters: Values for the placeholders, in order
        @return: Matching rows as dictionaries
        """
        pass


@final
class SQLAlchemyConnection(ConnectionInterface):
    """
    Executes predicates against one table through a SQLAlchemy engine.

    The statement is assembled here (``SELECT * FROM <table> WHERE ...``);
    positional placeholders are rewritten to SQLAlchemy named binds.
    """

    def __init__(self, engine: Engine, table: str, log_queries: Optional[bool] = None) -> None:
        self.engine = engine
        self.table = validate_field(table)
        self.logger = logging.getLogger(f"{self.__class__.__name__}.{table}")
        self._enable_query_log = settings.QUERY_LOG if log_queries is None else log_queries
        self._query_log: List[Dict[str, Any]] = []

    def __repr__(self) -> str:
        return f"<SQLAlchemyConnection(table='{self.table}', url='{self.engine.url}')>"

    @classmethod
    def from_config(cls, table: str, log_queries: Optional[bool] = None) -> SQLAlchemyConnection:
        """Connect ``table`` through the engine configured by DATABASE_URL."""
        return cls(get_engine(), table, log_queries)

    def execute(self, predicate: str, parameters: Sequence[Any]) -> List[Dict[str, Any]]:
        sql, bindings = self.compile(predicate, parameters)
        start_time = time.time()

        try:
            with self.engine.connect() as connection:
                result = connection.execute(text(sql), bindings)
                rows = [dict(row._mapping) for row in result]
        except Exception as e:
            self.logger.error(f"Query execution failed: {sql[:100]}... Error: {str(e)}")
            raise

        if self._enable_query_log:
            self._log_query(sql, bindings, start_time)

        return rows

    def compile(self, predicate: str, parameters: Sequence[Any]) -> Tuple[str, Dict[str, Any]]:
        """
        Build the full statement and its named bindings.

        @param predicate: Rendered predicate, possibly empty
        @param parameters: Positional parameters for the predicate
        @return: (sql, bindings)
        """
        pieces = predicate.split(PLACEHOLDER)
        if len(pieces) - 1 != len(parameters):
            raise ValueError(
                f"Predicate has {len(pieces) - 1} placeholder(s) but {len(parameters)} parameter(s) were given"
            )

        bindings: Dict[str, Any] = {}
        sql_predicate = pieces[0]
        for index, (value, piece) in enumerate(zip(parameters, pieces[1:])):
            key = f"p{index}"
            bindings[key] = value
            sql_predicate += f":{key}{piece}"

        sql = f"SELECT * FROM {self.table}"
        if sql_predicate:
            sql += f" WHERE {sql_predicate}"
        return sql, bindings

    def get_query_log(self) -> List[Dict[str, Any]]:
        return list(self._query_log)

    def flush_query_log(self) -> None:
        self._query_log.clear()

    def _log_query(self, sql: str, bindings: Dict[str, Any], start_time: float) -> None:
        """Log query execution details."""
        execution_time = (time.time() - start_time) * 1000

        log_entry = {
            'query': sql,
            'bindings': bindings,
            'time': execution_time,
            'table': self.table,
        }

        self._query_log.append(log_entry)

        # Keep only last 1000 queries to prevent memory issues
        if len(self._query_log) > 1000:
            self._query_log = self._query_log[-1000:]

        get_log_manager().channel('query').debug(f"Query executed in {execution_time:.2f}ms", log_entry)


__all__ = ['ConnectionInterface', 'SQLAlchemyConnection']
