"""Read-only views over class declarations in a syntax tree."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from js_to_ts.core.types import CallableKind
from js_to_ts.parsing.nodes import has_keyword, safe_decode_text

if TYPE_CHECKING:
    from tree_sitter import Node

    from js_to_ts.source.source_file import SourceFile

FIELD_TYPES = frozenset({"field_definition", "public_field_definition"})
PARAMETER_PROPERTY_MODIFIERS = frozenset({"accessibility_modifier", "readonly", "override_modifier"})


def member_name(member: Node) -> str | None:
    """Static name of a class member; None for computed names."""
    name_node = member.child_by_field_name("name") or member.child_by_field_name("property")
    if name_node is None:
        return None
    match name_node.type:
        case "property_identifier" | "identifier" | "private_property_identifier":
            return safe_decode_text(name_node)
        case "string":
            text = safe_decode_text(name_node)
            return text[1:-1] if text else None
        case "number":
            return safe_decode_text(name_node)
        case _:
            return None


def method_kind(method: Node) -> CallableKind:
    if has_keyword(method, "get"):
        return CallableKind.GETTER
    if has_keyword(method, "set"):
        return CallableKind.SETTER
    if member_name(method) == "constructor" and not is_static(method):
        return CallableKind.CONSTRUCTOR
    return CallableKind.METHOD


def is_static(member: Node) -> bool:
    return has_keyword(member, "static")


@dataclass
class ClassView:
    source_file: SourceFile
    node: Node

    @property
    def name(self) -> str | None:
        return safe_decode_text(self.node.child_by_field_name("name"))

    @property
    def body(self) -> Node:
        return self.node.child_by_field_name("body")

    @property
    def members(self) -> list[Node]:
        body = self.body
        return list(body.named_children) if body is not None else []

    @property
    def heritage_expression(self) -> Node | None:
        """The expression after `extends`, if any."""
        heritage = next((c for c in self.node.named_children if c.type == "class_heritage"), None)
        if heritage is None:
            return None
        for child in heritage.named_children:
            if child.type == "extends_clause":
                return child.child_by_field_name("value")
            if child.type in ("implements_clause", "comment"):
                continue
            return child
        return None

    @property
    def superclass_identifier(self) -> Node | None:
        expression = self.heritage_expression
        if expression is not None and expression.type == "identifier":
            return expression
        return None

    def methods(self, include_static: bool = True) -> list[Node]:
        return [
            member
            for member in self.members
            if member.type == "method_definition" and (include_static or not is_static(member))
        ]

    def method_names(self) -> set[str]:
        """Instance method and accessor names, excluding the constructor."""
        names = set()
        for method in self.methods(include_static=False):
            name = member_name(method)
            if name and method_kind(method) != CallableKind.CONSTRUCTOR:
                names.add(name)
        return names

    def find_method(self, name: str, static: bool = False) -> Node | None:
        for method in self.methods():
            if member_name(method) != name or is_static(method) != static:
                continue
            if method_kind(method) in (CallableKind.GETTER, CallableKind.SETTER):
                continue
            return method
        return None

    @property
    def constructor(self) -> Node | None:
        for method in self.methods(include_static=False):
            if method_kind(method) == CallableKind.CONSTRUCTOR:
                return method
        return None

    def declared_field_names(self) -> list[str]:
        """Instance fields declared in the body or as constructor parameter properties."""
        names: list[str] = []
        for member in self.members:
            if member.type in FIELD_TYPES and not is_static(member):
                name = member_name(member)
                if name and name not in names:
                    names.append(name)

        for name in self.parameter_property_names():
            if name not in names:
                names.append(name)
        return names

    def parameter_property_names(self) -> list[str]:
        constructor = self.constructor
        if constructor is None:
            return []
        params = constructor.child_by_field_name("parameters")
        if params is None:
            return []
        names = []
        for param in params.named_children:
            if param.type not in ("required_parameter", "optional_parameter"):
                continue
            if not any(child.type in PARAMETER_PROPERTY_MODIFIERS for child in param.children):
                continue
            pattern = param.child_by_field_name("pattern")
            if pattern is not None and pattern.type == "identifier":
                name = safe_decode_text(pattern)
                if name:
                    names.append(name)
        return names

    def accessor_names(self) -> set[str]:
        names = set()
        for method in self.methods(include_static=False):
            name = member_name(method)
            if name and method_kind(method) in (CallableKind.GETTER, CallableKind.SETTER):
                names.add(name)
        return names
