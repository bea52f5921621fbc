from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Tuple, Union

from typing_extensions import TypeAlias

from scopedquery.Exceptions import InvalidBooleanException, InvalidFieldException, InvalidOperatorException

# Identifier, optionally qualified with a table name
FIELD_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$')

SET_TYPES = (list, tuple, set, frozenset)

# Iterable, but compared as a single value
SCALAR_TEXT_TYPES = (str, bytes)


class Operator(Enum):
    """Comparison operators a leaf condition can use."""

    EQ = "="
    NE = "!="
    GTE = ">="
    LTE = "<="
    GT = ">"
    LT = "<"
    IN = "IN"

    @classmethod
    def parse(cls, operator: Union[str, Operator]) -> Operator:
        """
        Resolve an operator given as a member, a name or an SQL symbol.

        @param operator: Operator, e.g. Operator.EQ, 'eq', '=' or 'in'
        @return: The matching Operator member
        """
        if isinstance(operator, Operator):
            return operator

        if not isinstance(operator, str):
            raise InvalidOperatorException(operator, reason="operator must be a string or Operator")

        op = operator.strip()
        resolved = OPERATOR_ALIASES.get(op.lower())
        if resolved is None:
            raise InvalidOperatorException(operator, reason="unsupported operator")
        return resolved


OPERATOR_ALIASES = {
    'eq': Operator.EQ, '=': Operator.EQ, '==': Operator.EQ,
    'ne': Operator.NE, '!=': Operator.NE, '<>': Operator.NE,
    'gte': Operator.GTE, '>=': Operator.GTE,
    'lte': Operator.LTE, '<=': Operator.LTE,
    'gt': Operator.GT, '>': Operator.GT,
    'lt': Operator.LT, '<': Operator.LT,
    'in': Operator.IN,
}


class Boolean(Enum):
    """Combinator joining the children of a group."""

    AND = "AND"
    OR = "OR"

    @classmethod
    def parse(cls, boolean: Union[str, Boolean]) -> Boolean:
        if isinstance(boolean, Boolean):
            return boolean
        try:
            return cls(str(boolean).strip().upper())
        except ValueError:
            raise InvalidBooleanException(boolean) from None


def validate_field(name: Any) -> str:
    """Ensure a field (or table) name is a plain, optionally dotted, identifier."""
    if not isinstance(name, str) or not FIELD_PATTERN.match(name):
        raise InvalidFieldException(name)
    return name


def is_set_valued(value: Any) -> bool:
    return isinstance(value, SET_TYPES)


def is_scalar(value: Any) -> bool:
    """A value a comparison operator can bind as one parameter."""
    if isinstance(value, SCALAR_TEXT_TYPES):
        return True
    return not isinstance(value, (Mapping, Iterable))


@dataclass(frozen=True)
class Leaf:
    """A single `field <operator> value` comparison."""

    field: str
    operator: Operator
    value: Any

    @classmethod
    def make(cls, field_name: str, operator: Union[str, Operator], value: Any) -> Leaf:
        """
        Build a leaf, checking that the operator and value fit together.

        @param field_name: Column the comparison applies to
        @param operator: Operator member, name or SQL symbol
        @param value: Comparison value; a collection for `in`
        @return: A validated Leaf
        """
        validate_field(field_name)
        op = Operator.parse(operator)

        if op is Operator.IN:
            if not is_set_valued(value):
                raise InvalidOperatorException(op.value, value, "`in` requires a list, tuple or set value")
            value = tuple(value)
        elif is_set_valued(value):
            raise InvalidOperatorException(op.value, value, "a collection value needs the `in` operator")
        elif not is_scalar(value):
            raise InvalidOperatorException(
                op.value, value, f"cannot compare against a {type(value).__name__} value"
            )
        elif value is None and op not in (Operator.EQ, Operator.NE):
            raise InvalidOperatorException(op.value, value, "only `=` and `!=` can compare against null")

        return cls(field_name, op, value)


@dataclass
class Group:
    """Boolean combination of child nodes; immutable by convention once rendered."""

    boolean: Boolean = Boolean.AND
    children: List[ConditionNode] = field(default_factory=list)

    def add(self, node: ConditionNode) -> ConditionNode:
        self.children.append(node)
        return node

    def is_empty(self) -> bool:
        """True when no leaf exists anywhere below this group."""
        return all(isinstance(child, Group) and child.is_empty() for child in self.children)

    def copy(self) -> Group:
        return Group(
            self.boolean,
            [child.copy() if isinstance(child, Group) else child for child in self.children],
        )


ConditionNode: TypeAlias = Union[Leaf, Group]

RenderResult: TypeAlias = Tuple[str, List[Any]]


__all__ = [
    'Operator',
    'Boolean',
    'Leaf',
    'Group',
    'ConditionNode',
    'RenderResult',
    'validate_field',
    'is_set_valued',
]
