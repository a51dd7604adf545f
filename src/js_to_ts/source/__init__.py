"""In-memory source model: files, classes, symbols and text edits."""

from js_to_ts.source.classes import ClassView
from js_to_ts.source.edits import TextEdit, apply_edits
from js_to_ts.source.project import Project
from js_to_ts.source.references import CallSite, ReferenceResolver
from js_to_ts.source.source_file import SourceFile
from js_to_ts.source.symbols import Resolution, ResolutionStatus, SymbolResolver

__all__ = [
    "CallSite",
    "ClassView",
    "Project",
    "ReferenceResolver",
    "Resolution",
    "ResolutionStatus",
    "SourceFile",
    "SymbolResolver",
    "TextEdit",
    "apply_edits",
]
