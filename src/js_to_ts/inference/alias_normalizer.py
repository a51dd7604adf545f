"""Rewrites `var self = this` style receiver aliases to plain `this`.

Given

    myMethod() {
        var that = this;
        var fn = function(a) {
            that.prop = a;
        };
    }

the declaration is removed, every use of `that` becomes `this` and the
function expressions between a use and the method become arrow functions,
so `this` keeps referring to the instance:

    myMethod() {
        var fn = (a) => {
            this.prop = a;
        };
    }
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from js_to_ts.core.errors import AliasRewriteError, EditConflictError
from js_to_ts.core.types import SyntaxKind
from js_to_ts.parsing.nodes import (
    CLASS_TYPES,
    THIS_BINDING_TYPES,
    enclosing_this_scope,
    has_keyword,
    is_same_node,
    iter_ancestors,
    iter_descendants,
    node_key,
    safe_decode_text,
)
from js_to_ts.source.classes import ClassView
from js_to_ts.source.edits import TextEdit
from js_to_ts.source.symbols import pattern_names

if TYPE_CHECKING:
    from tree_sitter import Node

    from js_to_ts.source.project import Project
    from js_to_ts.source.source_file import SourceFile

logger = logging.getLogger(__name__)

FUNCTION_EXPRESSION_TYPES = frozenset({"function_expression", "function"})
ASSIGNMENT_TYPES = frozenset({"assignment_expression", "augmented_assignment_expression", "update_expression"})


@dataclass
class AliasPlan:
    """Edits for one method, computed against one snapshot."""

    aliases: list[str] = field(default_factory=list)
    edits: list[TextEdit] = field(default_factory=list)
    converted_functions: int = 0


class AliasNormalizer:
    """Replaces `const self = this` style aliases with `this` inside methods.

    Each file is rewritten in one pass: alias declarations are removed, uses
    become `this`, and function expressions between a use and its method
    become arrow functions. Unsafe rewrites raise AliasRewriteError.
    """

    def __init__(self, project: Project):
        self.project = project

    def normalize_project(self) -> int:
        total = 0
        for source_file in self.project:
            total += self.normalize_file(source_file)
        return total

    def normalize_file(self, source_file: SourceFile) -> int:
        """Rewrite receiver aliases in every method of the file's classes.

        Returns:
            Number of aliases removed.

        Raises:
            AliasRewriteError: An alias cannot be rewritten without changing
                what the code means.
        """
        edits: list[TextEdit] = []
        aliases = 0
        for class_node in source_file.get_classes():
            for method in ClassView(source_file, class_node).methods():
                plan = self._plan_method(source_file, method)
                edits.extend(plan.edits)
                aliases += len(plan.aliases)

        if not edits:
            return 0

        try:
            source_file.apply_edits(edits)
        except EditConflictError as e:
            raise AliasRewriteError(
                f"Could not rewrite receiver aliases in {source_file.path}",
                file_path=str(source_file.path),
                cause=e,
            ) from e

        logger.info(f"Rewrote {aliases} receiver aliases in {source_file.path.name}")
        return aliases

    def _plan_method(self, source_file: SourceFile, method: Node) -> AliasPlan:
        plan = AliasPlan()
        body = method.child_by_field_name("body")
        if body is None:
            return plan

        declarators = self._find_alias_declarators(source_file, method, body)
        if not declarators:
            return plan

        converted: dict[tuple[int, int, str], Node] = {}
        alias_keys = {node_key(d) for d in declarators}
        handled_statements: set[tuple[int, int, str]] = set()

        for declarator in declarators:
            alias = safe_decode_text(declarator.child_by_field_name("name")) or ""
            plan.aliases.append(alias)
            self._check_not_rebound(source_file, method, body, declarator, alias)

            for reference in self._find_references(body, declarator, alias):
                self._check_reference(source_file, method, reference, alias)
                for function in self._functions_to_convert(source_file, method, reference, alias):
                    converted[node_key(function)] = function
                if reference.type == "shorthand_property_identifier":
                    plan.edits.append(TextEdit.replace(reference, f"{alias}: this"))
                else:
                    plan.edits.append(TextEdit.replace(reference, "this"))

            statement = declarator.parent
            if node_key(statement) not in handled_statements:
                handled_statements.add(node_key(statement))
                plan.edits.append(self._declaration_edit(source_file, statement, alias_keys))

        for function in converted.values():
            plan.edits.extend(self._arrow_edits(function))
        plan.converted_functions = len(converted)

        logger.debug(
            f"Method {source_file.node_text(method.child_by_field_name('name'))}: "
            f"aliases {plan.aliases}, {plan.converted_functions} functions to arrows"
        )
        return plan

    def _find_alias_declarators(self, source_file: SourceFile, method: Node, body: Node) -> list[Node]:
        declarators = []
        for node in iter_descendants(body, stop_types=CLASS_TYPES):
            if SyntaxKind.classify(node) != SyntaxKind.VARIABLE_BINDING:
                continue
            name = node.child_by_field_name("name")
            value = node.child_by_field_name("value")
            if name is None or value is None or name.type != "identifier" or value.type != "this":
                continue
            if not is_same_node(enclosing_this_scope(node), method):
                continue
            if node.parent is None or node.parent.type not in ("lexical_declaration", "variable_declaration"):
                continue
            if node.parent.parent is not None and node.parent.parent.type == "for_statement":
                continue
            declarators.append(node)
        return declarators

    def _find_references(self, body: Node, declarator: Node, alias: str) -> list[Node]:
        name_node = declarator.child_by_field_name("name")
        references = []
        for node in iter_descendants(body):
            if node.type not in ("identifier", "shorthand_property_identifier"):
                continue
            if is_same_node(node, name_node) or safe_decode_text(node) != alias:
                continue
            references.append(node)
        return references

    def _check_not_rebound(
        self,
        source_file: SourceFile,
        method: Node,
        body: Node,
        declarator: Node,
        alias: str,
    ) -> None:
        params = method.child_by_field_name("parameters")
        rebound = params is not None and any(alias in pattern_names(p) for p in params.named_children)

        for node in iter_descendants(body):
            if rebound:
                break
            if node.type == "variable_declarator" and not is_same_node(node, declarator):
                rebound = alias in pattern_names(node.child_by_field_name("name"))
            elif node.type in THIS_BINDING_TYPES or node.type == "arrow_function":
                params = node.child_by_field_name("parameters") or node.child_by_field_name("parameter")
                if params is not None:
                    names = pattern_names(params) if params.type == "identifier" else [
                        n for p in params.named_children for n in pattern_names(p)
                    ]
                    rebound = alias in names
                if node.type != "method_definition" and safe_decode_text(node.child_by_field_name("name")) == alias:
                    rebound = True
            elif node.type == "catch_clause":
                rebound = alias in pattern_names(node.child_by_field_name("parameter"))

        if rebound:
            raise AliasRewriteError(
                f"Receiver alias '{alias}' is re-bound in {source_file.path}",
                file_path=str(source_file.path),
                alias=alias,
            )

    def _check_reference(self, source_file: SourceFile, method: Node, reference: Node, alias: str) -> None:
        parent = reference.parent
        if parent is not None and parent.type in ASSIGNMENT_TYPES:
            target = parent.child_by_field_name("left") or parent.child_by_field_name("argument")
            if is_same_node(target, reference):
                raise AliasRewriteError(
                    f"Receiver alias '{alias}' is reassigned at line "
                    f"{reference.start_point[0] + 1} of {source_file.path}",
                    file_path=str(source_file.path),
                    alias=alias,
                )

    def _functions_to_convert(
        self,
        source_file: SourceFile,
        method: Node,
        reference: Node,
        alias: str,
    ) -> list[Node]:
        functions = []
        for ancestor in iter_ancestors(reference):
            if is_same_node(ancestor, method):
                return functions
            if ancestor.type == "arrow_function":
                continue
            if ancestor.type in FUNCTION_EXPRESSION_TYPES and self._can_become_arrow(ancestor):
                functions.append(ancestor)
                continue
            if ancestor.type in THIS_BINDING_TYPES or ancestor.type in CLASS_TYPES:
                raise AliasRewriteError(
                    f"Receiver alias '{alias}' is used inside a {ancestor.type} at line "
                    f"{reference.start_point[0] + 1} of {source_file.path}",
                    file_path=str(source_file.path),
                    alias=alias,
                )
        raise AliasRewriteError(
            f"Could not locate the method enclosing '{alias}' in {source_file.path}",
            file_path=str(source_file.path),
            alias=alias,
        )

    def _can_become_arrow(self, function: Node) -> bool:
        if function.child_by_field_name("name") is not None or has_keyword(function, "*"):
            return False
        body = function.child_by_field_name("body")
        if body is None:
            return False
        for node in iter_descendants(body, stop_types=THIS_BINDING_TYPES | CLASS_TYPES):
            if node.type in ("this", "super"):
                return False
            if node.type == "identifier" and safe_decode_text(node) == "arguments":
                return False
        return True

    def _arrow_edits(self, function: Node) -> list[TextEdit]:
        params = function.child_by_field_name("parameters")
        body = function.child_by_field_name("body")
        prefix = "async " if has_keyword(function, "async") else ""
        return [
            TextEdit(function.start_byte, params.start_byte, prefix),
            TextEdit.insert(body.start_byte, "=> "),
        ]

    def _declaration_edit(
        self,
        source_file: SourceFile,
        statement: Node,
        alias_keys: set[tuple[int, int, str]],
    ) -> TextEdit:
        declarators = [c for c in statement.named_children if c.type == "variable_declarator"]
        remaining = [d for d in declarators if node_key(d) not in alias_keys]
        if not remaining:
            return source_file.removal_edit(statement)

        keyword = statement.children[0].type
        text = f"{keyword} " + ", ".join(source_file.node_text(d) for d in remaining)
        if source_file.node_text(statement).rstrip().endswith(";"):
            text += ";"
        return TextEdit.replace(statement, text)
