"""Progress tracking for a conversion run."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from js_to_ts.core.types import ConversionStage

logger = logging.getLogger(__name__)

STAGE_ORDER = [
    ConversionStage.SCANNING,
    ConversionStage.LOADING,
    ConversionStage.NORMALIZING_ALIASES,
    ConversionStage.COLLECTING_USAGE,
    ConversionStage.CORRECTING_HIERARCHY,
    ConversionStage.EMITTING_DECLARATIONS,
    ConversionStage.RENAMING,
    ConversionStage.TYPING_SIGNATURES,
    ConversionStage.INFERRING_OPTIONALS,
    ConversionStage.SAVING,
    ConversionStage.COMPLETED,
]


@dataclass
class StageProgress:
    """Progress for a single stage."""

    stage: ConversionStage
    current: int = 0
    total: int = 0
    message: str = ""

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.current / self.total) * 100


@dataclass
class ConversionProgress:
    current_stage: ConversionStage = ConversionStage.SCANNING
    stages: dict[ConversionStage, StageProgress] = field(default_factory=dict)
    start_time: datetime | None = None
    end_time: datetime | None = None
    error_message: str | None = None
    failed_stage: ConversionStage | None = None

    files_scanned: int = 0
    classes_found: int = 0
    aliases_rewritten: int = 0
    fields_added: int = 0
    files_renamed: int = 0
    signature_types_added: int = 0
    params_made_optional: int = 0
    files_saved: int = 0

    @property
    def is_running(self) -> bool:
        return self.start_time is not None and self.current_stage not in (
            ConversionStage.COMPLETED,
            ConversionStage.FAILED,
        )

    @property
    def is_complete(self) -> bool:
        return self.current_stage == ConversionStage.COMPLETED

    @property
    def has_error(self) -> bool:
        return self.current_stage == ConversionStage.FAILED

    @property
    def elapsed_time(self) -> float:
        if self.start_time is None:
            return 0.0
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()

    @property
    def overall_percentage(self) -> float:
        """Share of stages finished; stages are weighted equally."""
        if self.current_stage == ConversionStage.COMPLETED:
            return 100.0
        stage = self.failed_stage if self.has_error else self.current_stage
        if stage is None:
            return 0.0
        steps = len(STAGE_ORDER) - 1
        done = STAGE_ORDER.index(stage)
        current = self.stages.get(stage)
        if current is not None and current.total > 0:
            done += current.current / current.total
        return min(done / steps * 100, 100.0)


class ProgressTracker:
    """Tracks and reports conversion progress to registered callbacks."""

    def __init__(self):
        self._progress = ConversionProgress()
        self._callbacks: list[Callable[[ConversionProgress], None]] = []

    @property
    def progress(self) -> ConversionProgress:
        return self._progress

    def add_callback(self, callback: Callable[[ConversionProgress], None]) -> None:
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[ConversionProgress], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback(self._progress)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}", exc_info=True)

    def start(self) -> None:
        self._progress = ConversionProgress(
            current_stage=ConversionStage.SCANNING,
            start_time=datetime.now(),
        )
        self._notify()

    def set_stage(self, stage: ConversionStage, total: int = 0, message: str = "") -> None:
        self._progress.current_stage = stage
        self._progress.stages[stage] = StageProgress(stage=stage, total=total, message=message)
        self._notify()

    def update_stage(self, current: int, total: int | None = None, message: str | None = None) -> None:
        progress = self._progress.stages.get(self._progress.current_stage)
        if progress is not None:
            progress.current = current
            if total is not None:
                progress.total = total
            if message is not None:
                progress.message = message
        self._notify()

    def update_stats(self, **kwargs) -> None:
        for key, value in kwargs.items():
            if hasattr(self._progress, key):
                setattr(self._progress, key, value)
        self._notify()

    def complete(self) -> None:
        self._progress.current_stage = ConversionStage.COMPLETED
        self._progress.end_time = datetime.now()
        self._notify()

    def error(self, message: str) -> None:
        self._progress.failed_stage = self._progress.current_stage
        self._progress.current_stage = ConversionStage.FAILED
        self._progress.error_message = message
        self._progress.end_time = datetime.now()
        self._notify()
