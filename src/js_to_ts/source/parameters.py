"""Views over the formal parameters of functions, methods and constructors.

Both grammars are handled: plain JavaScript parameters (`a`, `a = 1`,
`...rest`, `{a}`) and TypeScript's `required_parameter`/`optional_parameter`
wrappers, whose `pattern` field holds the same shapes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from js_to_ts.parsing.nodes import safe_decode_text

if TYPE_CHECKING:
    from tree_sitter import Node

BINDING_PATTERN_TYPES = frozenset({"object_pattern", "array_pattern"})
WRAPPED_PARAMETER_TYPES = frozenset({"required_parameter", "optional_parameter"})


@dataclass
class Parameter:
    node: Node

    @property
    def pattern(self) -> Node:
        if self.node.type in WRAPPED_PARAMETER_TYPES:
            return self.node.child_by_field_name("pattern")
        if self.node.type == "assignment_pattern":
            return self.node.child_by_field_name("left")
        return self.node

    @property
    def name(self) -> str | None:
        pattern = self.pattern
        if pattern.type == "rest_pattern":
            pattern = pattern.named_children[0] if pattern.named_children else pattern
        if pattern.type in ("identifier", "this"):
            return safe_decode_text(pattern)
        return None

    @property
    def is_rest(self) -> bool:
        return self.pattern.type == "rest_pattern"

    @property
    def is_this(self) -> bool:
        return self.pattern.type == "this"

    @property
    def is_binding_pattern(self) -> bool:
        return self.pattern.type in BINDING_PATTERN_TYPES

    @property
    def has_default(self) -> bool:
        if self.node.type == "assignment_pattern":
            return True
        return self.node.type in WRAPPED_PARAMETER_TYPES and self.node.child_by_field_name("value") is not None

    @property
    def is_optional(self) -> bool:
        return self.node.type == "optional_parameter"

    @property
    def has_type(self) -> bool:
        return self.node.type in WRAPPED_PARAMETER_TYPES and self.node.child_by_field_name("type") is not None

    @property
    def optional_marker_offset(self) -> int:
        """Where a `?` goes: right after the pattern."""
        return self.pattern.end_byte

    @property
    def type_offset(self) -> int:
        """Where a `: T` annotation goes: after the pattern and any `?`."""
        offset = self.pattern.end_byte
        for child in self.node.children:
            if child.type == "?":
                offset = max(offset, child.end_byte)
        return offset


def parameter_list(callable_node: Node) -> Node | None:
    return callable_node.child_by_field_name("parameters")


def parameters(callable_node: Node, include_this: bool = False) -> list[Parameter]:
    """Declared parameters in order; the TypeScript `this` parameter is dropped by default."""
    params_node = parameter_list(callable_node)
    if params_node is None:
        return []
    result = []
    for child in params_node.named_children:
        if child.type == "comment":
            continue
        param = Parameter(child)
        if param.is_this and not include_this:
            continue
        result.append(param)
    return result
