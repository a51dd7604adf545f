from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from js_to_ts.core.types import Language
from js_to_ts.parsing.nodes import is_same_node, walk_tree
from js_to_ts.source.edits import TextEdit, apply_edits

if TYPE_CHECKING:
    from tree_sitter import Node, Tree

    from js_to_ts.parsing.parser import CodeParser

logger = logging.getLogger(__name__)

CLASS_DECLARATION_TYPES = frozenset({"class_declaration", "abstract_class_declaration"})


class SourceFile:
    """One file of the analyzed set: its bytes, language and current tree.

    The tree is replaced on every `apply_edits`; nodes taken from an earlier
    tree must not be used afterwards.
    """

    def __init__(
        self,
        path: Path,
        language: Language,
        content: bytes,
        parser: CodeParser,
    ):
        self.path = path
        self.original_path = path
        self.language = language
        self._parser = parser
        self._content = content
        self._tree = parser.parse_bytes(content, language)
        self.modified = False

    @property
    def content(self) -> bytes:
        return self._content

    @property
    def text(self) -> str:
        return self._content.decode("utf-8", errors="replace")

    @property
    def tree(self) -> Tree:
        return self._tree

    @property
    def root_node(self) -> Node:
        return self._tree.root_node

    @property
    def is_in_node_modules(self) -> bool:
        return "node_modules" in self.path.parts

    def node_text(self, node: Node) -> str:
        return self._content[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def removal_edit(self, node: Node) -> TextEdit:
        """Edit removing a statement, and its line when nothing else is on it.

        A blank line left directly after the opening brace of the enclosing
        block is removed as well.
        """
        content = self._content
        start, end = node.start_byte, node.end_byte

        line_start = content.rfind(b"\n", 0, start) + 1
        line_end = content.find(b"\n", end)
        if line_end == -1:
            line_end = len(content)
        if content[line_start:start].strip() or content[end:line_end].strip():
            return TextEdit.delete(start, end)

        end = min(line_end + 1, len(content))
        before = content[:line_start].rstrip(b" \t")
        if before.endswith(b"{\n"):
            next_end = content.find(b"\n", end)
            if next_end != -1 and not content[end:next_end].strip():
                end = next_end + 1
        return TextEdit.delete(line_start, end)

    def get_classes(self) -> list[Node]:
        """File-level class declarations, including exported ones.

        `export default class {}` contributes its anonymous class node.
        """
        classes = []
        for child in self.root_node.named_children:
            node = child
            if child.type == "export_statement":
                node = child.child_by_field_name("declaration") or child.child_by_field_name("value")
                if node is None:
                    continue
            if node.type in CLASS_DECLARATION_TYPES or node.type == "class":
                classes.append(node)
        return classes

    def is_file_level_class(self, node: Node) -> bool:
        return any(is_same_node(node, class_node) for class_node in self.get_classes())

    def get_class(self, name: str | None) -> Node | None:
        for class_node in self.get_classes():
            if class_name(class_node) == name:
                return class_node
        return None

    def get_functions(self) -> list[Node]:
        return walk_tree(
            self.root_node,
            {"function_declaration", "generator_function_declaration", "method_definition"},
        )

    def apply_edits(self, edits: list[TextEdit], promote_to_typescript: bool = False) -> None:
        """Apply all edits against the current snapshot and reparse."""
        if not edits and not promote_to_typescript:
            return

        self._content = apply_edits(self._content, edits)
        if promote_to_typescript:
            self.language = self.language.as_typescript()
        self._tree = self._parser.parse_bytes(self._content, self.language)
        self.modified = True
        logger.debug(f"Applied {len(edits)} edits to {self.path}")

    def move(self, new_path: Path) -> None:
        new_language = Language.from_extension(new_path.suffix)
        self.path = new_path
        if new_language is not None and new_language != self.language:
            self.language = new_language
            self._tree = self._parser.parse_bytes(self._content, self.language)
        self.modified = True

    def __repr__(self) -> str:
        return f"SourceFile({self.path}, {self.language.value})"


def class_name(class_node: Node) -> str | None:
    name_node = class_node.child_by_field_name("name")
    if name_node is None or name_node.text is None:
        return None
    return name_node.text.decode("utf-8")
