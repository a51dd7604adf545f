"""Type annotations for function and method signatures converted from JavaScript.

A parameter without a type gets the type of its matching JSDoc ``@param`` tag,
or the fallback type. A setter's only parameter may also take the ``@type``
tag. A return type comes from ``@returns``, or from ``@type`` on a getter.
Destructured parameters get an object or array type built from their
pattern. Constructors and setters never get a return type.

Example::

    /** @param {number} [seconds=0] @returns {number} */
    wait(seconds = 0, done) {}

becomes::

    wait(seconds: number = 0, done: any): number {}
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from js_to_ts.config import Settings, get_settings
from js_to_ts.core.types import CallableKind, Language
from js_to_ts.inference.annotations import JsDoc, parse_jsdoc
from js_to_ts.inference.arity import callable_kind
from js_to_ts.parsing.nodes import leading_comment, safe_decode_text
from js_to_ts.source.edits import TextEdit
from js_to_ts.source.parameters import Parameter, parameter_list, parameters

if TYPE_CHECKING:
    from tree_sitter import Node

    from js_to_ts.source.project import Project
    from js_to_ts.source.source_file import SourceFile

logger = logging.getLogger(__name__)


def converted_from_javascript(source_file: SourceFile) -> bool:
    language = Language.from_extension(source_file.original_path.suffix)
    return language is not None and not language.is_typescript


class SignatureTyper:
    """Adds parameter and return types from JSDoc to converted JavaScript files."""

    def __init__(self, project: Project, settings: Settings | None = None):
        self.project = project
        self.settings = settings or get_settings()

    def type_project(self) -> int:
        total = 0
        for source_file in self.project:
            if not converted_from_javascript(source_file):
                continue
            total += self.type_file(source_file)
        logger.info(f"Added {total} signature type annotations")
        return total

    def type_file(self, source_file: SourceFile) -> int:
        edits = []
        for node in source_file.get_functions():
            edits.extend(self.plan_callable(node))
        if edits:
            source_file.apply_edits(edits, promote_to_typescript=True)
        return len(edits)

    def plan_callable(self, node: Node) -> list[TextEdit]:
        comment = leading_comment(node)
        doc = parse_jsdoc(safe_decode_text(comment) or "") if comment is not None else None
        kind = callable_kind(node)

        edits = []
        for param in parameters(node):
            if param.has_type:
                continue
            param_type = self._parameter_type(param, doc, kind)
            edits.append(TextEdit.insert(param.type_offset, f": {param_type}"))

        return_type = self._return_type(doc, kind)
        params_node = parameter_list(node)
        if return_type and params_node is not None and node.child_by_field_name("return_type") is None:
            edits.append(TextEdit.insert(params_node.end_byte, f": {return_type}"))
        return edits

    def _parameter_type(self, param: Parameter, doc: JsDoc | None, kind: CallableKind) -> str:
        if doc is not None:
            tag = doc.param(param.name) if param.name else None
            if tag is not None and tag.type:
                return tag.type
            if kind == CallableKind.SETTER and doc.type:
                return doc.type

        pattern = param.pattern
        match pattern.type:
            case "object_pattern":
                return self._object_pattern_type(pattern)
            case "array_pattern":
                return f"{self.settings.fallback_type}[]"
            case _:
                return self.settings.fallback_type

    def _object_pattern_type(self, pattern: Node) -> str:
        entries = []
        for child in pattern.named_children:
            match child.type:
                case "shorthand_property_identifier_pattern":
                    entries.append(f"{safe_decode_text(child)}: {self.settings.fallback_type}")
                case "object_assignment_pattern":
                    key = safe_decode_text(child.child_by_field_name("left"))
                    entries.append(f"{key}?: {self.settings.fallback_type}")
                case "pair_pattern":
                    key = safe_decode_text(child.child_by_field_name("key"))
                    value = child.child_by_field_name("value")
                    marker = "?" if value is not None and value.type == "assignment_pattern" else ""
                    entries.append(f"{key}{marker}: {self.settings.fallback_type}")
                case "rest_pattern":
                    return self.settings.fallback_type
        return f"{{ {'; '.join(entries)} }}" if entries else self.settings.fallback_type

    @staticmethod
    def _return_type(doc: JsDoc | None, kind: CallableKind) -> str | None:
        if doc is None or kind in (CallableKind.CONSTRUCTOR, CallableKind.SETTER):
            return None
        if kind == CallableKind.GETTER:
            return doc.type or doc.returns
        return doc.returns
