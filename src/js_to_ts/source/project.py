from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from js_to_ts.core.errors import ParsingError
from js_to_ts.core.types import Language
from js_to_ts.parsing.import_processor import ImportProcessor
from js_to_ts.parsing.models import FileInfo
from js_to_ts.parsing.parser import CodeParser
from js_to_ts.source.source_file import SourceFile

logger = logging.getLogger(__name__)


class Project:
    """The analyzed set of source files, keyed by absolute path."""

    def __init__(self, root_path: str | Path, parser: CodeParser | None = None):
        self.root_path = Path(root_path).resolve()
        self.parser = parser or CodeParser()
        self._files: dict[Path, SourceFile] = {}
        self._removed_paths: list[Path] = []
        self.imports = ImportProcessor(self)

    def __iter__(self) -> Iterator[SourceFile]:
        return iter(list(self._files.values()))

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, Path) and path.resolve() in self._files

    @property
    def files(self) -> list[SourceFile]:
        return list(self._files.values())

    def add_file(self, file_info: FileInfo) -> SourceFile:
        source_file = self.parser.parse_file(file_info)
        self._register(source_file)
        return source_file

    def add_source(self, path: str | Path, content: str) -> SourceFile:
        """Add in-memory source text under `path` (relative to the root)."""
        full_path = Path(path)
        if not full_path.is_absolute():
            full_path = self.root_path / full_path

        language = Language.from_extension(full_path.suffix)
        if language is None:
            raise ParsingError(f"Unsupported file type: {full_path.name}", file_path=str(full_path))
        source_file = self.parser.parse_content(content, language, full_path.resolve())
        self._register(source_file)
        return source_file

    def _register(self, source_file: SourceFile) -> None:
        source_file.path = source_file.path.resolve()
        source_file.original_path = source_file.path
        self._files[source_file.path] = source_file
        self.imports.invalidate(source_file.path)

    def get_file(self, path: str | Path) -> SourceFile | None:
        return self._files.get(Path(path).resolve())

    def get_file_or_raise(self, path: str | Path) -> SourceFile:
        source_file = self.get_file(path)
        if source_file is None:
            raise ParsingError(f"File is not part of the project: {path}", file_path=str(path))
        return source_file

    def contains(self, path: str | Path) -> bool:
        return Path(path).resolve() in self._files

    def remove_file(self, source_file: SourceFile) -> None:
        self._files.pop(source_file.path, None)
        self.imports.invalidate(source_file.path)

    def filter_out_node_modules(self) -> int:
        removed = [f for f in self._files.values() if f.is_in_node_modules]
        for source_file in removed:
            logger.debug(f"Removing dependency file from analyzed set: {source_file.path}")
            self.remove_file(source_file)
        return len(removed)

    def rename_to_typescript(self) -> int:
        """Move .js/.jsx files to .ts/.tsx; returns how many moved."""
        renamed = 0
        for source_file in list(self._files.values()):
            if source_file.language.is_typescript and source_file.path.suffix in (".ts", ".tsx"):
                continue
            new_path = source_file.path.with_suffix(source_file.language.typescript_extension)
            if new_path in self._files:
                logger.warning(
                    f"Not renaming {source_file.path}: {new_path.name} already exists; "
                    f"TypeScript syntax written to it will not parse as JavaScript"
                )
                continue
            del self._files[source_file.path]
            logger.debug(f"Renaming {source_file.path.name} -> {new_path.name}")
            source_file.move(new_path)
            self._files[new_path] = source_file
            renamed += 1

        self.imports.clear()
        return renamed

    def save(self) -> int:
        """Write modified files; originals that were renamed are removed."""
        saved = 0
        for source_file in self._files.values():
            if not source_file.modified:
                continue
            source_file.path.write_bytes(source_file.content)
            saved += 1
            if source_file.original_path != source_file.path and source_file.original_path.exists():
                source_file.original_path.unlink()
                self._removed_paths.append(source_file.original_path)
            source_file.original_path = source_file.path
            source_file.modified = False
        logger.info(f"Saved {saved} files under {self.root_path}")
        return saved

    @property
    def removed_paths(self) -> list[Path]:
        return list(self._removed_paths)
