from __future__ import annotations

from typing import Any, List, Optional


class QueryBuilderException(Exception):
    """Base exception for query builder errors."""
    pass


class InvalidOperatorException(QueryBuilderException):
    """Exception raised when an operator is unknown or does not fit its value."""

    def __init__(self, operator: Any, value: Any = None, reason: Optional[str] = None) -> None:
        self.operator = operator
        self.value = value

        message = f"Invalid operator `{operator}`"
        if reason:
            message += f": {reason}"

        super().__init__(message)


class InvalidBooleanException(QueryBuilderException):
    """Exception raised when a group combinator is neither AND nor OR."""

    def __init__(self, boolean: Any) -> None:
        self.boolean = boolean
        super().__init__(f"Invalid boolean `{boolean}`, expected 'and' or 'or'.")


class InvalidFieldException(QueryBuilderException):
    """Exception raised when a field or table name is not a plain identifier."""

    def __init__(self, field: Any) -> None:
        self.field = field
        super().__init__(f"Invalid field name `{field}`.")


class UnknownScopeException(QueryBuilderException):
    """Exception raised when a scope name is not registered."""

    def __init__(self, name: str, available_scopes: Optional[List[str]] = None) -> None:
        self.name = name
        self.available_scopes = available_scopes or []

        available_str = ", ".join(self.available_scopes)

        super().__init__(
            f"Scope `{name}` is not registered. "
            f"Available scope(s) are `{available_str}`."
        )


class DuplicateScopeException(QueryBuilderException):
    """Exception raised when a scope name is registered twice on one registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Scope `{name}` is already registered.")


class CallbackException(QueryBuilderException):
    """Exception raised when a nested-condition callback breaks its contract."""

    def __init__(self, message: str, callback: Any = None) -> None:
        self.callback = callback
        super().__init__(message)


# Short names used throughout the builder API
InvalidOperator = InvalidOperatorException
UnknownScope = UnknownScopeException
DuplicateScope = DuplicateScopeException
CallbackError = CallbackException


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
]
