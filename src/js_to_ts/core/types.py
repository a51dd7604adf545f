from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tree_sitter import Node


class Language(str, Enum):
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    JSX = "jsx"
    TSX = "tsx"

    @classmethod
    def from_extension(cls, ext: str) -> "Language | None":
        mapping = {
            ".js": cls.JAVASCRIPT,
            ".mjs": cls.JAVASCRIPT,
            ".cjs": cls.JAVASCRIPT,
            ".jsx": cls.JSX,
            ".ts": cls.TYPESCRIPT,
            ".tsx": cls.TSX,
        }
        return mapping.get(ext.lower())

    @property
    def extensions(self) -> list[str]:
        mapping = {
            self.JAVASCRIPT: [".js", ".mjs", ".cjs"],
            self.JSX: [".jsx"],
            self.TYPESCRIPT: [".ts"],
            self.TSX: [".tsx"],
        }
        return mapping.get(self, [])

    @property
    def is_typescript(self) -> bool:
        return self in (Language.TYPESCRIPT, Language.TSX)

    def as_typescript(self) -> "Language":
        if self == Language.JSX:
            return Language.TSX
        if self == Language.JAVASCRIPT:
            return Language.TYPESCRIPT
        return self

    @property
    def typescript_extension(self) -> str:
        return ".tsx" if self in (Language.JSX, Language.TSX) else ".ts"


class SyntaxKind(str, Enum):
    """Node kinds the inference passes dispatch on."""

    MEMBER_ACCESS = "member_access"
    INDEXED_ACCESS = "indexed_access"
    VARIABLE_BINDING = "variable_binding"
    DESTRUCTURING_ELEMENT = "destructuring_element"
    CALL = "call"
    NEW = "new"

    @classmethod
    def classify(cls, node: Node) -> "SyntaxKind | None":
        return _NODE_KINDS.get(node.type)

    @property
    def node_types(self) -> frozenset[str]:
        return frozenset(t for t, kind in _NODE_KINDS.items() if kind is self)


_NODE_KINDS: dict[str, SyntaxKind] = {
    "member_expression": SyntaxKind.MEMBER_ACCESS,
    "subscript_expression": SyntaxKind.INDEXED_ACCESS,
    "variable_declarator": SyntaxKind.VARIABLE_BINDING,
    "shorthand_property_identifier_pattern": SyntaxKind.DESTRUCTURING_ELEMENT,
    "pair_pattern": SyntaxKind.DESTRUCTURING_ELEMENT,
    "object_assignment_pattern": SyntaxKind.DESTRUCTURING_ELEMENT,
    "call_expression": SyntaxKind.CALL,
    "new_expression": SyntaxKind.NEW,
}


class CallableKind(str, Enum):
    FUNCTION = "function"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    GETTER = "getter"
    SETTER = "setter"


class ConversionStage(str, Enum):
    SCANNING = "scanning"
    LOADING = "loading"
    NORMALIZING_ALIASES = "normalizing_aliases"
    COLLECTING_USAGE = "collecting_usage"
    CORRECTING_HIERARCHY = "correcting_hierarchy"
    EMITTING_DECLARATIONS = "emitting_declarations"
    RENAMING = "renaming"
    TYPING_SIGNATURES = "typing_signatures"
    INFERRING_OPTIONALS = "inferring_optionals"
    SAVING = "saving"
    COMPLETED = "completed"
    FAILED = "failed"
