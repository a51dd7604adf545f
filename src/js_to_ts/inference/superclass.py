from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from js_to_ts.core.errors import MissingSuperclassError
from js_to_ts.inference.models import ANONYMOUS_CLASS_NAME, make_class_id
from js_to_ts.parsing.nodes import safe_decode_text
from js_to_ts.source.classes import ClassView
from js_to_ts.source.symbols import ResolutionStatus, SymbolResolver

if TYPE_CHECKING:
    from js_to_ts.source.project import Project

logger = logging.getLogger(__name__)


class SuperclassResolver:
    """Finds the name and defining file of a class's superclass.

    A same-file class wins over an import; imports are followed through
    default exports and re-exports so the name is the one the superclass
    was declared with. Dependencies, class expressions and globals such as
    `Error` come back with no path. A relative import of a file that exists
    but was left out of the analyzed set raises MissingSuperclassError.
    """

    def __init__(self, project: Project, symbols: SymbolResolver | None = None):
        self.project = project
        self.symbols = symbols or SymbolResolver(project)

    def resolve(self, view: ClassView) -> tuple[str | None, Path | None]:
        expression = view.heritage_expression
        if expression is None:
            return None, None

        identifier = view.superclass_identifier
        if identifier is None:
            logger.debug(
                f"Ignoring non-identifier superclass '{view.source_file.node_text(expression)}' "
                f"of {view.name} in {view.source_file.path.name}"
            )
            return None, None

        name = safe_decode_text(identifier)
        resolution = self.symbols.resolve(view.source_file, identifier)

        if resolution.is_class and resolution.source_file is not None:
            declared_file = resolution.source_file
            if not declared_file.is_file_level_class(resolution.node):
                logger.debug(
                    f"Superclass {name} of {view.name} is not a file-level class declaration; treating it as opaque"
                )
                return name, None
            declared = ClassView(declared_file, resolution.node)
            return declared.name or ANONYMOUS_CLASS_NAME, declared_file.path

        if resolution.status == ResolutionStatus.EXTERNAL and resolution.path is not None:
            self._check_outside_file(view, resolution.name or name, resolution.path)

        if resolution.status == ResolutionStatus.UNRESOLVED:
            return self._resolve_unmatched_import(view, name)

        logger.debug(f"Superclass {name} of {view.name} is outside the analyzed set ({resolution.status.value})")
        return name, None

    def _check_outside_file(self, view: ClassView, name: str | None, path: Path) -> None:
        if "node_modules" in path.parts:
            return
        subclass_id = make_class_id(view.source_file.path, view.name)
        superclass_id = make_class_id(path, name)
        raise MissingSuperclassError(
            f"Superclass {superclass_id} of {subclass_id} is defined in {path}, "
            f"which is not part of the analyzed set",
            missing_path=str(path),
            subclass_id=subclass_id,
            superclass_id=superclass_id,
        )

    def _resolve_unmatched_import(self, view: ClassView, name: str | None) -> tuple[str | None, Path | None]:
        binding = self.project.imports.find_binding(view.source_file, name or "")
        if binding is None:
            return name, None

        path = binding.resolved_path
        if path is None and not binding.is_external:
            # raises: the import points at a file that does not exist
            path = self.project.imports.resolve_module(binding.specifier, view.source_file.path, strict=True)

        if path is None or not self.project.contains(path):
            return name, None

        imported = ANONYMOUS_CLASS_NAME if binding.is_default else binding.imported_name
        return imported, path
