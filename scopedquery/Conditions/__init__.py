from __future__ import annotations

from .ConditionNode import (
    Operator,
    Boolean,
    Leaf,
    Group,
    ConditionNode,
    RenderResult,
)
from .ConditionTree import ConditionTree

__all__ = [
    'Operator',
    'Boolean',
    'Leaf',
    'Group',
    'ConditionNode',
    'RenderResult',
    'ConditionTree',
]
