"""Source scanning and parsing with Tree-sitter."""

from js_to_ts.parsing.import_processor import ImportProcessor
from js_to_ts.parsing.models import FileInfo, ImportBinding
from js_to_ts.parsing.parser import CodeParser
from js_to_ts.parsing.scanner import FileScanner

__all__ = [
    "CodeParser",
    "FileInfo",
    "FileScanner",
    "ImportBinding",
    "ImportProcessor",
]
