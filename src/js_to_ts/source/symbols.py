"""Identifier resolution across the analyzed set.

An identifier is resolved by walking its enclosing scopes outward, then the
file's imports, then the exports of the imported file. Only declarations the
converter can act on (classes and function declarations) resolve to
DECLARED; other bindings resolve to LOCAL so that they shadow outer names.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from js_to_ts.parsing.models import DEFAULT_EXPORT, ImportBinding
from js_to_ts.parsing.nodes import CLASS_TYPES, is_same_node, iter_ancestors, safe_decode_text
from js_to_ts.parsing.import_processor import require_specifier, strip_quotes

if TYPE_CHECKING:
    from tree_sitter import Node

    from js_to_ts.source.project import Project
    from js_to_ts.source.source_file import SourceFile

logger = logging.getLogger(__name__)

DECLARATION_TYPES = frozenset(
    {
        "class_declaration",
        "abstract_class_declaration",
        "function_declaration",
        "generator_function_declaration",
    }
)

VARIABLE_DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})


class ResolutionStatus(str, Enum):
    DECLARED = "declared"
    LOCAL = "local"
    EXTERNAL = "external"
    UNRESOLVED = "unresolved"
    GLOBAL = "global"


@dataclass
class Resolution:
    status: ResolutionStatus
    source_file: SourceFile | None = None
    node: Node | None = None
    name: str | None = None
    # file on disk behind an EXTERNAL result that is outside the analyzed set
    path: Path | None = None

    @property
    def is_declared(self) -> bool:
        return self.status == ResolutionStatus.DECLARED

    @property
    def is_class(self) -> bool:
        return self.is_declared and self.node is not None and self.node.type in CLASS_TYPES

    @property
    def is_function(self) -> bool:
        return self.is_declared and self.node is not None and self.node.type not in CLASS_TYPES


def pattern_names(node: Node | None) -> list[str]:
    """Names bound by a parameter or declarator pattern."""
    if node is None:
        return []
    match node.type:
        case "identifier" | "shorthand_property_identifier_pattern":
            name = safe_decode_text(node)
            return [name] if name else []
        case "required_parameter" | "optional_parameter":
            return pattern_names(node.child_by_field_name("pattern"))
        case "assignment_pattern" | "object_assignment_pattern":
            return pattern_names(node.child_by_field_name("left"))
        case "pair_pattern":
            return pattern_names(node.child_by_field_name("value"))
        case "rest_pattern" | "object_pattern" | "array_pattern":
            names = []
            for child in node.named_children:
                names.extend(pattern_names(child))
            return names
        case _:
            return []


def _is_require(value: Node | None) -> bool:
    """`require('m')` or `require('m').name`."""
    if value is not None and value.type == "member_expression":
        value = value.child_by_field_name("object")
    return require_specifier(value) is not None


class SymbolResolver:
    """Resolves identifiers to the declarations they refer to.

    Lookup is purely syntactic: scopes are walked on demand for each query
    and nothing is cached, so results always reflect the current trees.
    """

    def __init__(self, project: Project):
        self.project = project

    def resolve(self, source_file: SourceFile, identifier: Node) -> Resolution:
        """Resolve an identifier node to the declaration it refers to."""
        name = safe_decode_text(identifier)
        if not name:
            return Resolution(ResolutionStatus.UNRESOLVED)
        return self.resolve_name(source_file, name, identifier)

    def resolve_name(self, source_file: SourceFile, name: str, at: Node) -> Resolution:
        for scope in iter_ancestors(at):
            found = self._lookup_in_scope(source_file, scope, name)
            if found is not None:
                return found

        binding = self.project.imports.find_binding(source_file, name)
        if binding is not None:
            return self._resolve_binding(source_file, binding)

        return Resolution(ResolutionStatus.GLOBAL, name=name)

    def _resolve_binding(self, source_file: SourceFile, binding: ImportBinding) -> Resolution:
        name = binding.local_name
        if binding.is_external or binding.resolved_path is None:
            if not binding.is_external:
                return Resolution(ResolutionStatus.UNRESOLVED, name=name)
            return Resolution(ResolutionStatus.EXTERNAL, name=name, path=binding.resolved_path)
        if binding.is_namespace:
            return Resolution(ResolutionStatus.LOCAL, source_file, None, name)
        return self.resolve_export(binding.resolved_path, binding.imported_name)

    def _lookup_in_scope(self, source_file: SourceFile, scope: Node, name: str) -> Resolution | None:
        match scope.type:
            case "program" | "statement_block" | "class_static_block" | "switch_body":
                for statement in scope.named_children:
                    found = self._lookup_in_statement(source_file, statement, name)
                    if found is not None:
                        return found
            case (
                "function_declaration"
                | "generator_function_declaration"
                | "function_expression"
                | "function"
                | "generator_function"
                | "arrow_function"
                | "method_definition"
            ):
                params = scope.child_by_field_name("parameters")
                if params is None:
                    params = scope.child_by_field_name("parameter")
                    if params is not None and name in pattern_names(params):
                        return Resolution(ResolutionStatus.LOCAL, source_file, params, name)
                elif any(name in pattern_names(p) for p in params.named_children):
                    return Resolution(ResolutionStatus.LOCAL, source_file, params, name)
                if scope.type in ("function_expression", "function", "generator_function"):
                    if safe_decode_text(scope.child_by_field_name("name")) == name:
                        return Resolution(ResolutionStatus.LOCAL, source_file, scope, name)
            case "class":
                if safe_decode_text(scope.child_by_field_name("name")) == name:
                    return Resolution(ResolutionStatus.DECLARED, source_file, scope, name)
            case "catch_clause":
                if name in pattern_names(scope.child_by_field_name("parameter")):
                    return Resolution(ResolutionStatus.LOCAL, source_file, scope, name)
            case "for_statement":
                for child in scope.named_children:
                    if child.type in VARIABLE_DECLARATION_TYPES:
                        found = self._lookup_in_statement(source_file, child, name)
                        if found is not None:
                            return found
            case "for_in_statement":
                kind = scope.child_by_field_name("kind")
                if kind is not None and name in pattern_names(scope.child_by_field_name("left")):
                    return Resolution(ResolutionStatus.LOCAL, source_file, scope, name)
        return None

    def _lookup_in_statement(self, source_file: SourceFile, statement: Node, name: str) -> Resolution | None:
        if statement.type == "export_statement":
            declaration = statement.child_by_field_name("declaration")
            if declaration is None:
                return None
            statement = declaration

        if statement.type in DECLARATION_TYPES:
            if safe_decode_text(statement.child_by_field_name("name")) == name:
                return Resolution(ResolutionStatus.DECLARED, source_file, statement, name)
            return None

        if statement.type in VARIABLE_DECLARATION_TYPES:
            for declarator in statement.named_children:
                if declarator.type != "variable_declarator":
                    continue
                if name not in pattern_names(declarator.child_by_field_name("name")):
                    continue
                value = declarator.child_by_field_name("value")
                if _is_require(value):
                    binding = self.project.imports.find_binding(source_file, name)
                    if binding is not None and is_same_node(statement.parent, source_file.root_node):
                        return self._resolve_binding(source_file, binding)
                if value is not None and value.type == "class":
                    return Resolution(ResolutionStatus.DECLARED, source_file, value, name)
                return Resolution(ResolutionStatus.LOCAL, source_file, declarator, name)
        return None

    def resolve_export(
        self,
        path: Path,
        export_name: str,
        visited: set[tuple[Path, str]] | None = None,
    ) -> Resolution:
        """Find the declaration a module exports under `export_name`.

        Follows `export { a as b }`, `export default a`, re-exports and
        CommonJS `module.exports` assignments.
        """
        visited = visited if visited is not None else set()
        if (path, export_name) in visited:
            return Resolution(ResolutionStatus.UNRESOLVED, name=export_name)
        visited.add((path, export_name))

        target = self.project.get_file(path)
        if target is None:
            return Resolution(ResolutionStatus.EXTERNAL, name=export_name, path=path)

        root = target.root_node
        star_sources: list[str] = []
        for statement in root.named_children:
            if statement.type == "export_statement":
                found = self._match_export_statement(target, statement, export_name, visited, star_sources)
                if found is not None:
                    return found
            elif statement.type == "expression_statement":
                found = self._match_commonjs_export(target, statement, export_name)
                if found is not None:
                    return found

        for specifier in star_sources:
            resolved = self.project.imports.resolve_module(specifier, target.path)
            if resolved is None:
                continue
            found = self.resolve_export(resolved, export_name, visited)
            if found.status != ResolutionStatus.UNRESOLVED:
                return found

        logger.debug(f"No export '{export_name}' in {path.name}")
        return Resolution(ResolutionStatus.UNRESOLVED, name=export_name)

    def _match_export_statement(
        self,
        target: SourceFile,
        statement: Node,
        export_name: str,
        visited: set[tuple[Path, str]],
        star_sources: list[str],
    ) -> Resolution | None:
        is_default = any(child.type == "default" for child in statement.children)
        declaration = statement.child_by_field_name("declaration")
        value = statement.child_by_field_name("value")
        source = safe_decode_text(statement.child_by_field_name("source"))

        if is_default:
            if export_name != DEFAULT_EXPORT:
                return None
            node = declaration or value
            if node is None:
                return None
            if node.type == "identifier":
                return self.resolve_name(target, safe_decode_text(node) or "", node)
            if node.type in DECLARATION_TYPES or node.type in CLASS_TYPES:
                return Resolution(ResolutionStatus.DECLARED, target, node, export_name)
            return Resolution(ResolutionStatus.LOCAL, target, node, export_name)

        if declaration is not None:
            return self._lookup_in_statement(target, declaration, export_name)

        clause = next((c for c in statement.named_children if c.type == "export_clause"), None)
        if clause is None:
            if source and not any(c.type == "namespace_export" for c in statement.named_children):
                star_sources.append(strip_quotes(source))
            return None

        for specifier in clause.named_children:
            if specifier.type != "export_specifier":
                continue
            local = strip_quotes(safe_decode_text(specifier.child_by_field_name("name")) or "")
            exported = strip_quotes(safe_decode_text(specifier.child_by_field_name("alias")) or local)
            if exported != export_name:
                continue
            if source:
                resolved = self.project.imports.resolve_module(strip_quotes(source), target.path)
                if resolved is None:
                    return Resolution(ResolutionStatus.EXTERNAL, name=export_name)
                return self.resolve_export(resolved, local, visited)
            return self.resolve_name(target, local, specifier)
        return None

    def _match_commonjs_export(self, target: SourceFile, statement: Node, export_name: str) -> Resolution | None:
        expression = statement.named_children[0] if statement.named_children else None
        if expression is None or expression.type != "assignment_expression":
            return None
        left = safe_decode_text(expression.child_by_field_name("left"))
        right = expression.child_by_field_name("right")
        if right is None or left is None:
            return None

        if left == "module.exports" and export_name == DEFAULT_EXPORT:
            exported = right
        elif left in (f"module.exports.{export_name}", f"exports.{export_name}"):
            exported = right
        else:
            return None

        if exported.type == "identifier":
            return self.resolve_name(target, safe_decode_text(exported) or "", exported)
        if exported.type in CLASS_TYPES:
            return Resolution(ResolutionStatus.DECLARED, target, exported, export_name)
        return Resolution(ResolutionStatus.LOCAL, target, exported, export_name)
