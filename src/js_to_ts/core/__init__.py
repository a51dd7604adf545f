"""Core types and errors shared across js-to-ts."""

from js_to_ts.core.errors import (
    AliasRewriteError,
    ConfigurationError,
    ConversionError,
    ConverterError,
    EditConflictError,
    HierarchyCycleError,
    MissingSuperclassError,
    ModuleResolutionError,
    ParsingError,
    ReferenceResolutionError,
)
from js_to_ts.core.types import (
    CallableKind,
    ConversionStage,
    Language,
    SyntaxKind,
)

__all__ = [
    "CallableKind",
    "ConversionStage",
    "Language",
    "SyntaxKind",
    "AliasRewriteError",
    "ConfigurationError",
    "ConversionError",
    "ConverterError",
    "EditConflictError",
    "HierarchyCycleError",
    "MissingSuperclassError",
    "ModuleResolutionError",
    "ParsingError",
    "ReferenceResolutionError",
]
