"""js-to-ts - converts JavaScript class-based projects to TypeScript."""

__version__ = "0.1.0"

from js_to_ts.config import Settings, get_settings
from js_to_ts.pipeline.orchestrator import ConversionOrchestrator, convert_directory

__all__ = [
    "ConversionOrchestrator",
    "convert_directory",
    "get_settings",
    "Settings",
]
