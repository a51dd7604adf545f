"""Helpers for walking tree-sitter syntax trees."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tree_sitter import Node

FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)

# Functions that bind their own `this`.
THIS_BINDING_TYPES = FUNCTION_TYPES - {"arrow_function"}

CLASS_TYPES = frozenset({"class_declaration", "abstract_class_declaration", "class"})


def safe_decode_text(node: Node | None) -> str | None:
    """Safely decode text from a tree-sitter node."""
    if node is not None and node.text:
        return node.text.decode("utf-8")
    return None


def node_line(node: Node) -> int:
    return node.start_point[0] + 1


def node_key(node: Node) -> tuple[int, int, str]:
    return (node.start_byte, node.end_byte, node.type)


def has_keyword(node: Node, keyword: str) -> bool:
    return any(not child.is_named and child.type == keyword for child in node.children)


def walk_tree(node: Node, target_types: set[str] | frozenset[str]) -> list[Node]:
    """Walk tree and collect nodes of specified types in source order."""
    results = []
    stack = [node]

    while stack:
        current = stack.pop()
        if current.type in target_types:
            results.append(current)
        stack.extend(reversed(current.children))

    return results


def iter_descendants(node: Node, stop_types: frozenset[str] = frozenset()) -> Iterator[Node]:
    """Yield descendants in source order without entering `stop_types` subtrees."""
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        yield current
        if current.type in stop_types:
            continue
        stack.extend(reversed(current.children))


def iter_ancestors(node: Node) -> Iterator[Node]:
    current = node.parent
    while current is not None:
        yield current
        current = current.parent


def enclosing(node: Node, node_types: frozenset[str] | set[str]) -> Node | None:
    for ancestor in iter_ancestors(node):
        if ancestor.type in node_types:
            return ancestor
    return None


def enclosing_this_scope(node: Node) -> Node | None:
    """The nearest ancestor that binds `this` for `node`."""
    for ancestor in iter_ancestors(node):
        if ancestor.type in THIS_BINDING_TYPES or ancestor.type == "class_static_block":
            return ancestor
        if ancestor.type == "class_body":
            # field initializers see the instance
            return ancestor
    return None


def is_same_node(a: Node | None, b: Node | None) -> bool:
    if a is None or b is None:
        return False
    return node_key(a) == node_key(b)


def leading_comment(node: Node) -> Node | None:
    """The comment immediately preceding `node`, or its export statement."""
    target = node
    if target.parent is not None and target.parent.type == "export_statement":
        target = target.parent
    sibling = target.prev_sibling
    while sibling is not None and sibling.type == "decorator":
        sibling = sibling.prev_sibling
    if sibling is not None and sibling.type == "comment":
        return sibling
    return None
