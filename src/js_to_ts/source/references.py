"""Call-site lookup for function declarations, methods and constructors.

The index is built once over the whole project and keyed by declaration. A
call site is attributed to a declaration when its callee resolves to it:

- `f()` through lexical scope, imports and exports;
- `new C()` and `super()` to the constructor of C, or of the nearest
  ancestor of C that declares one;
- `this.m()`, `super.m()`, `C.m()` for static methods, and `x.m()` where `x`
  was initialized with `new C()`, by looking `m` up the class hierarchy.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from js_to_ts.core.errors import ReferenceResolutionError
from js_to_ts.core.types import SyntaxKind
from js_to_ts.parsing.nodes import CLASS_TYPES, enclosing, enclosing_this_scope, safe_decode_text, walk_tree
from js_to_ts.source.classes import ClassView, is_static, member_name
from js_to_ts.source.symbols import Resolution, SymbolResolver

if TYPE_CHECKING:
    from tree_sitter import Node

    from js_to_ts.source.project import Project
    from js_to_ts.source.source_file import SourceFile

logger = logging.getLogger(__name__)

DeclarationKey = tuple[Path, int, int]

MAX_HIERARCHY_DEPTH = 64


@dataclass(frozen=True)
class CallSite:
    path: Path
    line: int
    arg_count: int


def declaration_key(source_file: SourceFile, node: Node) -> DeclarationKey:
    return (source_file.path, node.start_byte, node.end_byte)


def argument_count(call: Node) -> int:
    """Arguments at a call site; a spread counts as one."""
    args = call.child_by_field_name("arguments")
    if args is None:
        return 0
    return sum(1 for child in args.named_children if child.type != "comment")


class ReferenceResolver:
    """Finds the call sites of callables across the analyzed set.

    The call-site index is built on first use from the current trees, so a
    resolver must not outlive edits to the files it indexed.
    """

    def __init__(self, project: Project, symbols: SymbolResolver | None = None):
        self.project = project
        self.symbols = symbols or SymbolResolver(project)
        self._index: dict[DeclarationKey, list[CallSite]] | None = None

    def find_call_sites(self, source_file: SourceFile, declaration: Node) -> list[CallSite]:
        """All resolved call sites of a function, method or constructor.

        Raises:
            ReferenceResolutionError: The declaration has no static name.
        """
        if declaration.type == "method_definition":
            if member_name(declaration) is None:
                raise ReferenceResolutionError(
                    f"Method at line {declaration.start_point[0] + 1} of {source_file.path} has a computed name"
                )
        elif declaration.child_by_field_name("name") is None:
            raise ReferenceResolutionError(
                f"Function at line {declaration.start_point[0] + 1} of {source_file.path} has no name"
            )

        if self._index is None:
            self._index = self._build_index()
        return self._index.get(declaration_key(source_file, declaration), [])

    def _build_index(self) -> dict[DeclarationKey, list[CallSite]]:
        index: dict[DeclarationKey, list[CallSite]] = defaultdict(list)
        total = 0
        for source_file in self.project:
            for call in walk_tree(source_file.root_node, {"call_expression", "new_expression"}):
                target = self._resolve_callee(source_file, call)
                if target is None:
                    continue
                target_file, target_node = target
                index[declaration_key(target_file, target_node)].append(
                    CallSite(source_file.path, call.start_point[0] + 1, argument_count(call))
                )
                total += 1
        logger.debug(f"Indexed {total} resolved call sites")
        return index

    def _resolve_callee(self, source_file: SourceFile, call: Node) -> tuple[SourceFile, Node] | None:
        match SyntaxKind.classify(call):
            case SyntaxKind.NEW:
                constructor = call.child_by_field_name("constructor")
                if constructor is None or constructor.type != "identifier":
                    return None
                resolution = self.symbols.resolve(source_file, constructor)
                if not resolution.is_class:
                    return None
                return self.constructor_of(ClassView(resolution.source_file, resolution.node))
            case SyntaxKind.CALL:
                callee = call.child_by_field_name("function")
                if callee is None:
                    return None
                return self._resolve_call(source_file, callee)
            case (
                SyntaxKind.MEMBER_ACCESS
                | SyntaxKind.INDEXED_ACCESS
                | SyntaxKind.VARIABLE_BINDING
                | SyntaxKind.DESTRUCTURING_ELEMENT
                | None
            ):
                return None

    def _resolve_call(self, source_file: SourceFile, callee: Node) -> tuple[SourceFile, Node] | None:
        if callee.type == "super":
            view = self._enclosing_class(source_file, callee)
            superclass = self.superclass_of(view) if view is not None else None
            return self.constructor_of(superclass) if superclass is not None else None

        if callee.type == "identifier":
            resolution = self.symbols.resolve(source_file, callee)
            if resolution.is_function:
                return resolution.source_file, resolution.node
            return None

        if callee.type != "member_expression":
            return None
        obj = callee.child_by_field_name("object")
        prop = callee.child_by_field_name("property")
        name = safe_decode_text(prop) if prop is not None and prop.type == "property_identifier" else None
        if obj is None or name is None:
            return None

        match obj.type:
            case "this":
                scope = enclosing_this_scope(obj)
                view = self._enclosing_class(source_file, obj)
                if view is None or scope is None or scope.type != "method_definition":
                    return None
                return self.lookup_method(view, name, static=is_static(scope))
            case "super":
                scope = enclosing_this_scope(obj)
                view = self._enclosing_class(source_file, obj)
                superclass = self.superclass_of(view) if view is not None else None
                if superclass is None or scope is None:
                    return None
                return self.lookup_method(superclass, name, static=is_static(scope))
            case "identifier":
                resolution = self.symbols.resolve(source_file, obj)
                if resolution.is_class:
                    return self.lookup_method(ClassView(resolution.source_file, resolution.node), name, static=True)
                instance_class = self._instance_class(resolution)
                if instance_class is not None:
                    return self.lookup_method(instance_class, name, static=False)
        return None

    def _instance_class(self, resolution: Resolution) -> ClassView | None:
        """The class of a variable initialized with `new C(...)`."""
        node = resolution.node
        if resolution.source_file is None or node is None or node.type != "variable_declarator":
            return None
        if node.child_by_field_name("name").type != "identifier":
            return None
        value = node.child_by_field_name("value")
        if value is None or value.type != "new_expression":
            return None
        constructor = value.child_by_field_name("constructor")
        if constructor is None or constructor.type != "identifier":
            return None
        class_resolution = self.symbols.resolve(resolution.source_file, constructor)
        if not class_resolution.is_class:
            return None
        return ClassView(class_resolution.source_file, class_resolution.node)

    def _enclosing_class(self, source_file: SourceFile, node: Node) -> ClassView | None:
        class_node = enclosing(node, CLASS_TYPES)
        return ClassView(source_file, class_node) if class_node is not None else None

    def superclass_of(self, view: ClassView) -> ClassView | None:
        identifier = view.superclass_identifier
        if identifier is None:
            return None
        resolution = self.symbols.resolve(view.source_file, identifier)
        if not resolution.is_class:
            return None
        return ClassView(resolution.source_file, resolution.node)

    def constructor_of(self, view: ClassView) -> tuple[SourceFile, Node] | None:
        current: ClassView | None = view
        for _ in range(MAX_HIERARCHY_DEPTH):
            if current is None:
                return None
            constructor = current.constructor
            if constructor is not None:
                return current.source_file, constructor
            current = self.superclass_of(current)
        return None

    def lookup_method(self, view: ClassView, name: str, static: bool) -> tuple[SourceFile, Node] | None:
        current: ClassView | None = view
        for _ in range(MAX_HIERARCHY_DEPTH):
            if current is None:
                return None
            method = current.find_method(name, static=static)
            if method is not None:
                return current.source_file, method
            current = self.superclass_of(current)
        return None
