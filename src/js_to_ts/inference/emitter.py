from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from js_to_ts.config import Settings, get_settings
from js_to_ts.inference.annotations import (
    CommentAnnotation,
    JsDoc,
    parse_comment_annotation,
    parse_jsdoc,
)
from js_to_ts.inference.models import ClassUsageRecord
from js_to_ts.parsing.nodes import leading_comment, safe_decode_text
from js_to_ts.source.classes import ClassView
from js_to_ts.source.edits import TextEdit

if TYPE_CHECKING:
    from tree_sitter import Node

    from js_to_ts.source.project import Project
    from js_to_ts.source.source_file import SourceFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldDeclaration:
    name: str
    type: str
    optional: bool = False
    initializer: str | None = None
    scope: str = "public"

    def render(self) -> str:
        prefix = f"{self.scope} " if self.scope else ""
        marker = "?" if self.optional else ""
        initializer = f" = {self.initializer}" if self.initializer else ""
        return f"{prefix}{self.name}{marker}: {self.type}{initializer};"


class DeclarationEmitter:
    """Inserts field declarations for corrected records at the top of each class.

    Types and defaults come from JSDoc tags on the class or its constructor,
    then from an annotated trailing comment on the constructor statement that
    assigns the field, then from the configured fallback type.
    """

    def __init__(self, project: Project, settings: Settings | None = None):
        self.project = project
        self.settings = settings or get_settings()

    def emit(self, records: list[ClassUsageRecord]) -> int:
        by_file: dict[Path, list[ClassUsageRecord]] = defaultdict(list)
        for record in records:
            by_file[record.path].append(record)

        total = 0
        for path, file_records in by_file.items():
            source_file = self.project.get_file_or_raise(path)
            edits = []
            for record in file_records:
                edit, count = self._plan_class(source_file, record)
                if edit is not None:
                    edits.append(edit)
                    total += count
            if edits:
                source_file.apply_edits(edits, promote_to_typescript=True)

        logger.info(f"Added {total} field declarations")
        return total

    def plan_fields(self, view: ClassView, record: ClassUsageRecord) -> list[FieldDeclaration]:
        declared = set(view.declared_field_names()) | view.accessor_names() | view.method_names()
        jsdocs = self._jsdocs(view)
        constructor = view.constructor

        fields = []
        for name in record.properties:
            if name in declared or name == "constructor":
                continue
            fields.append(self._field_for(view, name, jsdocs, constructor))
        return fields

    def _plan_class(self, source_file: SourceFile, record: ClassUsageRecord) -> tuple[TextEdit | None, int]:
        class_node = source_file.get_class(record.name)
        if class_node is None:
            logger.warning(f"Class {record.id} no longer found in {source_file.path}")
            return None, 0

        view = ClassView(source_file, class_node)
        fields = self.plan_fields(view, record)
        if not fields:
            return None, 0

        logger.debug(f"Declaring {[f.name for f in fields]} in {record.id}")
        return self._insertion_edit(view, fields), len(fields)

    def _field_for(
        self,
        view: ClassView,
        name: str,
        jsdocs: list[JsDoc],
        constructor: Node | None,
    ) -> FieldDeclaration:
        scope = self.settings.output.property_scope
        for doc in jsdocs:
            tag = doc.param(name)
            if tag is not None and tag.type:
                return FieldDeclaration(name, tag.type, tag.optional, tag.default, scope)

        annotation = self._constructor_annotation(view, constructor, name)
        if annotation is not None:
            return FieldDeclaration(
                name,
                annotation.type or self.settings.fallback_type,
                annotation.is_optional,
                annotation.default,
                scope,
            )
        return FieldDeclaration(name, self.settings.fallback_type, scope=scope)

    def _jsdocs(self, view: ClassView) -> list[JsDoc]:
        docs = []
        targets = [view.node]
        if view.constructor is not None:
            targets.append(view.constructor)
        for target in targets:
            comment = leading_comment(target)
            doc = parse_jsdoc(safe_decode_text(comment) or "") if comment is not None else None
            if doc is not None:
                docs.append(doc)
        return docs

    def _constructor_annotation(
        self,
        view: ClassView,
        constructor: Node | None,
        name: str,
    ) -> CommentAnnotation | None:
        body = constructor.child_by_field_name("body") if constructor is not None else None
        if body is None:
            return None

        for statement in body.named_children:
            if statement.type != "expression_statement" or not self._assigns_field(statement, name):
                continue
            comment = statement.next_sibling
            if comment is None or comment.type != "comment":
                continue
            if comment.start_point[0] != statement.end_point[0]:
                continue
            annotation = parse_comment_annotation(safe_decode_text(comment) or "")
            if annotation is not None:
                return annotation
        return None

    @staticmethod
    def _assigns_field(statement: Node, name: str) -> bool:
        expression = statement.named_children[0] if statement.named_children else None
        if expression is None or expression.type != "assignment_expression":
            return False
        left = expression.child_by_field_name("left")
        if left is None or left.type != "member_expression":
            return False
        obj = left.child_by_field_name("object")
        prop = left.child_by_field_name("property")
        return obj is not None and obj.type == "this" and safe_decode_text(prop) == name

    def _insertion_edit(self, view: ClassView, fields: list[FieldDeclaration]) -> TextEdit:
        source_file = view.source_file
        body = view.body
        content = source_file.content
        members = body.named_children
        class_indent = self._line_indent(content, view.node.start_byte)

        if members:
            indent = self._line_indent(content, members[0].start_byte)
        else:
            indent = class_indent + self.settings.indent_unit

        text = "".join(f"\n{indent}{field.render()}" for field in fields)
        after_brace = content[body.start_byte + 1 : body.end_byte]
        if not members:
            if not after_brace.lstrip(b" \t").startswith(b"\n"):
                text += f"\n{class_indent}"
        elif not self._starts_with_blank_line(after_brace):
            text += "\n"
        return TextEdit.insert(body.start_byte + 1, text)

    @staticmethod
    def _line_indent(content: bytes, offset: int) -> str:
        line_start = content.rfind(b"\n", 0, offset) + 1
        line = content[line_start:offset].decode("utf-8", errors="replace")
        return line[: len(line) - len(line.lstrip(" \t"))]

    @staticmethod
    def _starts_with_blank_line(text: bytes) -> bool:
        first_break = text.find(b"\n")
        if first_break == -1 or text[:first_break].strip():
            return False
        second_break = text.find(b"\n", first_break + 1)
        return second_break != -1 and not text[first_break + 1 : second_break].strip()
