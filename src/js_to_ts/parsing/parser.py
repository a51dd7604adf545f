from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from tree_sitter_language_pack import get_parser

from js_to_ts.core.errors import ParsingError
from js_to_ts.core.types import Language
from js_to_ts.parsing.models import FileInfo

if TYPE_CHECKING:
    from tree_sitter import Parser, Tree

    from js_to_ts.source.source_file import SourceFile

logger = logging.getLogger(__name__)


class CodeParser:
    LANGUAGE_MAP: ClassVar[dict[Language, str]] = {
        Language.JAVASCRIPT: "javascript",
        Language.JSX: "javascript",
        Language.TYPESCRIPT: "typescript",
        Language.TSX: "tsx",
    }

    def __init__(self) -> None:
        self._parsers: dict[str, Parser] = {}

    def _get_parser(self, language: Language) -> Parser:
        lang_id = self.LANGUAGE_MAP[language]
        if lang_id not in self._parsers:
            self._parsers[lang_id] = get_parser(lang_id)
        return self._parsers[lang_id]

    def parse_bytes(self, content: bytes, language: Language) -> Tree:
        tree = self._get_parser(language).parse(content)
        if tree.root_node.has_error:
            logger.debug(f"Syntax errors in {language.value} source; continuing with partial tree")
        return tree

    def parse_file(self, file_info: FileInfo) -> SourceFile:
        from js_to_ts.source.source_file import SourceFile

        try:
            content = file_info.path.read_bytes()
        except OSError as e:
            raise ParsingError(
                f"Could not read {file_info.relative_path}",
                file_path=str(file_info.path),
                cause=e,
            ) from e

        return SourceFile(file_info.path, file_info.language, content, parser=self)

    def parse_content(
        self,
        content: str,
        language: Language,
        file_path: str | Path = "<string>",
    ) -> SourceFile:
        from js_to_ts.source.source_file import SourceFile

        return SourceFile(Path(file_path), language, content.encode("utf-8"), parser=self)
