from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Union

from scopedquery.Conditions.ConditionNode import (
    Boolean, ConditionNode, Group, Leaf, Operator, RenderResult
)
from scopedquery.Exceptions import QueryBuilderException

PLACEHOLDER = "?"

# Rendered in place of `field IN ()`, which most databases reject
EMPTY_IN_PREDICATE = "1 = 0"


class ConditionTree:
    """
    Composable predicate tree with a cursor.

    Leaves are appended to the current group. ``add_group`` opens a child
    group and moves the cursor into it until ``close_group`` is called, so
    callers can build nested conditions without holding node references.

    Usage:
        tree = ConditionTree()
        tree.add_leaf('status', 'eq', 'active')
        with tree.group(Boolean.OR):
            tree.add_leaf('user_id', 'eq', 7)
            tree.add_leaf('visibility', 'eq', 'public')

        tree.render()
        # ('status = ? AND (user_id = ? OR visibility = ?)', ['active', 7, 'public'])
    """

    def __init__(self, boolean: Union[str, Boolean] = Boolean.AND, root: Optional[Group] = None) -> None:
        self.root = root if root is not None else Group(Boolean.parse(boolean))
        self._stack: List[Group] = [self.root]

    def __repr__(self) -> str:
        return f"<ConditionTree(depth={len(self._stack)}, predicate={self.render()[0]!r})>"

    @property
    def current(self) -> Group:
        """The group new leaves are appended to."""
        return self._stack[-1]

    @property
    def depth(self) -> int:
        return len(self._stack) - 1

    def add_leaf(self, field: str, operator: Union[str, Operator], value: Any) -> Leaf:
        """
        Append a comparison to the current group.

        @param field: Column name
        @param operator: Operator member, name or SQL symbol
        @param value: Comparison value
        @return: The appended leaf
        """
        leaf = Leaf.make(field, operator, value)
        self.current.add(leaf)
        return leaf

    def add_group(self, boolean: Union[str, Boolean] = Boolean.AND) -> Group:
        """
        Attach a new child group under the current group and enter it.

        @param boolean: Combinator for the new group's children
        @return: The new group
        """
        group = Group(Boolean.parse(boolean))
        self.current.add(group)
        self._stack.append(group)
        return group

    def close_group(self) -> Group:
        """Leave the current group and return it."""
        if len(self._stack) == 1:
            raise QueryBuilderException("Cannot close the root group of a condition tree")
        return self._stack.pop()

    @contextmanager
    def group(self, boolean: Union[str, Boolean] = Boolean.AND) -> Iterator[Group]:
        """Context manager form of add_group/close_group."""
        group = self.add_group(boolean)
        try:
            yield group
        finally:
            self.close_group()

    def attach(self, node: ConditionNode) -> ConditionNode:
        """Append an existing node under the current group."""
        return self.current.add(node)

    def is_empty(self) -> bool:
        return self.root.is_empty()

    def copy(self) -> ConditionTree:
        """
        Deep copy of the tree. The cursor of the copy follows the same path
        through the copied groups.
        """
        clone = ConditionTree(root=self.root.copy())
        node = clone.root
        for original_parent, original in zip(self._stack, self._stack[1:]):
            index = next(i for i, child in enumerate(original_parent.children) if child is original)
            node = node.children[index]
            clone._stack.append(node)
        return clone

    def render(self) -> RenderResult:
        """
        Render the tree into a predicate fragment and its ordered parameters.

        Traversal is depth first, left to right. Empty groups contribute
        nothing and single-child groups render as their child. Groups of two
        or more children are parenthesised when their parent uses the other
        boolean.

        @return: (predicate_string, parameter_list)
        """
        node = _collapse(self.root)
        if node is None:
            return "", []

        parameters: List[Any] = []
        predicate = _render_node(node, None, parameters)
        return predicate, parameters


def _collapse(node: ConditionNode) -> Optional[ConditionNode]:
    """Drop empty groups and unwrap single-child groups; returns a new tree."""
    if isinstance(node, Leaf):
        return node

    children = [c for c in (_collapse(child) for child in node.children) if c is not None]
    if not children:
        return None
    if len(children) == 1:
        return children[0]
    return Group(node.boolean, children)


def _render_node(node: ConditionNode, parent: Optional[Boolean], parameters: List[Any]) -> str:
    if isinstance(node, Leaf):
        return _render_leaf(node, parameters)

    glue = f" {node.boolean.value} "
    predicate = glue.join(_render_node(child, node.boolean, parameters) for child in node.children)

    if parent is not None and parent is not node.boolean:
        return f"({predicate})"
    return predicate


def _render_leaf(leaf: Leaf, parameters: List[Any]) -> str:
    if leaf.operator is Operator.IN:
        if not leaf.value:
            return EMPTY_IN_PREDICATE
        parameters.extend(leaf.value)
        placeholders = ", ".join(PLACEHOLDER for _ in leaf.value)
        return f"{leaf.field} IN ({placeholders})"

    if leaf.value is None:
        null_check = "IS NULL" if leaf.operator is Operator.EQ else "IS NOT NULL"
        return f"{leaf.field} {null_check}"

    parameters.append(leaf.value)
    return f"{leaf.field} {leaf.operator.value} {PLACEHOLDER}"


__all__ = ['ConditionTree', 'PLACEHOLDER', 'EMPTY_IN_PREDICATE']
