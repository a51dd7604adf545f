"""Import processor for ES module and CommonJS bindings.

This module maps the local names a file imports to the module they come
from, and resolves module specifiers to files:
- Default imports (import Foo from './foo')
- Named and aliased imports (import { Foo as Bar } from './foo')
- Namespace imports (import * as foo from './foo')
- CommonJS requires (const Foo = require('./foo'), const { Foo } = require('./foo'))
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from js_to_ts.core.errors import ModuleResolutionError
from js_to_ts.parsing.models import DEFAULT_EXPORT, NAMESPACE_IMPORT, ImportBinding
from js_to_ts.parsing.nodes import node_line, safe_decode_text

if TYPE_CHECKING:
    from tree_sitter import Node

    from js_to_ts.source.project import Project
    from js_to_ts.source.source_file import SourceFile

logger = logging.getLogger(__name__)

RESOLVABLE_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")


def strip_quotes(text: str) -> str:
    return text.strip().strip("'\"`")


class ImportProcessor:
    """Handles parsing of import statements and module resolution.

    Bindings are parsed lazily per file and cached until the file changes.

    Attributes:
        project: The analyzed set used to prefer in-project files.
    """

    def __init__(self, project: "Project"):
        self.project = project
        self._bindings: dict[Path, dict[str, ImportBinding]] = {}

    def invalidate(self, path: Path) -> None:
        self._bindings.pop(path, None)

    def clear(self) -> None:
        self._bindings.clear()

    def get_bindings(self, source_file: "SourceFile") -> dict[str, ImportBinding]:
        """Get the import bindings for a file, keyed by local name."""
        if source_file.path not in self._bindings:
            self._bindings[source_file.path] = self._parse_imports(source_file)
        return self._bindings[source_file.path]

    def find_binding(self, source_file: "SourceFile", name: str) -> ImportBinding | None:
        return self.get_bindings(source_file).get(name)

    def _parse_imports(self, source_file: "SourceFile") -> dict[str, ImportBinding]:
        bindings: dict[str, ImportBinding] = {}
        for node in source_file.root_node.named_children:
            if node.type == "import_statement":
                self._handle_import_statement(node, source_file, bindings)
            elif node.type in ("lexical_declaration", "variable_declaration"):
                self._handle_require(node, source_file, bindings)

        logger.debug(f"Parsed {len(bindings)} import bindings in {source_file.path.name}")
        return bindings

    def _handle_import_statement(
        self,
        node: "Node",
        source_file: "SourceFile",
        bindings: dict[str, ImportBinding],
    ) -> None:
        source_node = node.child_by_field_name("source")
        specifier = safe_decode_text(source_node)
        if not specifier:
            return
        specifier = strip_quotes(specifier)

        for child in node.children:
            if child.type == "import_clause":
                self._parse_import_clause(child, specifier, source_file, bindings)

    def _parse_import_clause(
        self,
        clause_node: "Node",
        specifier: str,
        source_file: "SourceFile",
        bindings: dict[str, ImportBinding],
    ) -> None:
        for child in clause_node.children:
            if child.type == "identifier":
                name = safe_decode_text(child)
                if name:
                    bindings[name] = self._make_binding(name, DEFAULT_EXPORT, specifier, source_file, child)

            elif child.type == "named_imports":
                for subchild in child.children:
                    if subchild.type != "import_specifier":
                        continue
                    name_node = subchild.child_by_field_name("name")
                    alias_node = subchild.child_by_field_name("alias")
                    name = safe_decode_text(name_node)
                    local = safe_decode_text(alias_node) if alias_node else name
                    if name and local:
                        bindings[local] = self._make_binding(
                            local, strip_quotes(name), specifier, source_file, subchild
                        )

            elif child.type == "namespace_import":
                for subchild in child.children:
                    if subchild.type == "identifier":
                        name = safe_decode_text(subchild)
                        if name:
                            bindings[name] = self._make_binding(
                                name, NAMESPACE_IMPORT, specifier, source_file, subchild
                            )
                        break

    def _handle_require(
        self,
        node: "Node",
        source_file: "SourceFile",
        bindings: dict[str, ImportBinding],
    ) -> None:
        """Handle CommonJS require() declarators."""
        for child in node.named_children:
            if child.type != "variable_declarator":
                continue
            name_node = child.child_by_field_name("name")
            value_node = child.child_by_field_name("value")
            if name_node is None or value_node is None:
                continue

            imported_name = DEFAULT_EXPORT
            if value_node.type == "member_expression":
                property_node = value_node.child_by_field_name("property")
                imported_name = safe_decode_text(property_node) or DEFAULT_EXPORT
                value_node = value_node.child_by_field_name("object")

            specifier = require_specifier(value_node)
            if specifier is None:
                continue

            if name_node.type == "identifier":
                local = safe_decode_text(name_node)
                if local:
                    bindings[local] = self._make_binding(local, imported_name, specifier, source_file, child)
            elif name_node.type == "object_pattern" and imported_name == DEFAULT_EXPORT:
                for prop in name_node.named_children:
                    if prop.type == "shorthand_property_identifier_pattern":
                        local = safe_decode_text(prop)
                        if local:
                            bindings[local] = self._make_binding(local, local, specifier, source_file, prop)
                    elif prop.type == "pair_pattern":
                        key = safe_decode_text(prop.child_by_field_name("key"))
                        value = prop.child_by_field_name("value")
                        local = safe_decode_text(value) if value is not None and value.type == "identifier" else None
                        if key and local:
                            bindings[local] = self._make_binding(local, key, specifier, source_file, prop)

    def _make_binding(
        self,
        local: str,
        imported: str,
        specifier: str,
        source_file: "SourceFile",
        node: "Node",
    ) -> ImportBinding:
        resolved = self.resolve_module(specifier, source_file.path)
        if resolved is None:
            is_external = not is_relative_specifier(specifier)
        else:
            is_external = not self.project.contains(resolved)

        binding = ImportBinding(
            local_name=local,
            imported_name=imported,
            specifier=specifier,
            resolved_path=resolved,
            is_external=is_external,
            line_number=node_line(node),
        )
        logger.debug(f"Import: {local} -> {specifier}:{imported} ({resolved})")
        return binding

    def resolve_module(self, specifier: str, importer: Path, strict: bool = False) -> Path | None:
        """Resolve a module specifier to an absolute file.

        Bare specifiers are dependencies and resolve to None. Relative
        specifiers are tried as written, with each known extension, and as a
        directory index; files in the project win over files on disk.

        Args:
            specifier: Module specifier from the import.
            importer: Path of the importing file.
            strict: Raise ModuleResolutionError when a relative specifier
                matches no file at all.

        Returns:
            Absolute path, or None for external or unresolved modules.
        """
        if not is_relative_specifier(specifier):
            return None

        base = Path(os.path.normpath(importer.parent / specifier))
        candidates = self._candidates(base)

        for candidate in candidates:
            if self.project.contains(candidate):
                return candidate.resolve()
        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()

        if strict:
            raise ModuleResolutionError(
                f"Cannot resolve module '{specifier}' imported from {importer}",
                specifier=specifier,
                importer=str(importer),
            )
        logger.debug(f"Unresolved module '{specifier}' imported from {importer}")
        return None

    def _candidates(self, base: Path) -> list[Path]:
        candidates = []
        if base.suffix in RESOLVABLE_EXTENSIONS:
            candidates.append(base)
            # a .js specifier may point at a file already renamed to .ts
            stem = base.with_suffix("")
            candidates.extend(stem.with_suffix(ext) for ext in (".ts", ".tsx"))
        candidates.extend(base.with_name(base.name + ext) for ext in RESOLVABLE_EXTENSIONS)
        candidates.extend(base / f"index{ext}" for ext in RESOLVABLE_EXTENSIONS)
        return candidates


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith("./") or specifier.startswith("../") or specifier in (".", "..")


def require_specifier(node: "Node | None") -> str | None:
    """Module specifier of a `require('...')` call, or None for any other node."""
    if node is None or node.type != "call_expression":
        return None
    func_node = node.child_by_field_name("function")
    args_node = node.child_by_field_name("arguments")
    if safe_decode_text(func_node) != "require" or args_node is None:
        return None
    for arg in args_node.named_children:
        if arg.type == "string":
            text = safe_decode_text(arg)
            return strip_quotes(text) if text else None
        break
    return None
