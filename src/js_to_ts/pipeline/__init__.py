"""Conversion pipeline module."""

from js_to_ts.core.types import ConversionStage
from js_to_ts.pipeline.orchestrator import ConversionOrchestrator, convert_directory
from js_to_ts.pipeline.progress import ProgressTracker

__all__ = ["ConversionOrchestrator", "ConversionStage", "ProgressTracker", "convert_directory"]
