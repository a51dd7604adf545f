import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from js_to_ts.config import Settings, get_settings
from js_to_ts.core.errors import ConversionError
from js_to_ts.core.types import ConversionStage
from js_to_ts.inference.alias_normalizer import AliasNormalizer
from js_to_ts.inference.arity import CallSiteArityAnalyzer
from js_to_ts.inference.corrector import PropertyCorrector
from js_to_ts.inference.emitter import DeclarationEmitter
from js_to_ts.inference.hierarchy import ClassHierarchyGraph
from js_to_ts.inference.models import ClassUsageRecord
from js_to_ts.inference.signatures import SignatureTyper
from js_to_ts.inference.usage_collector import UsageCollector
from js_to_ts.parsing.models import FileInfo
from js_to_ts.parsing.parser import CodeParser
from js_to_ts.parsing.scanner import FileScanner
from js_to_ts.pipeline.progress import ProgressTracker
from js_to_ts.source.project import Project

logger = logging.getLogger(__name__)


@dataclass
class ConversionContext:
    root_path: Path
    tracker: ProgressTracker
    project: Project

    scanned_files: list[FileInfo] = field(default_factory=list)
    records: list[ClassUsageRecord] = field(default_factory=list)
    hierarchy: ClassHierarchyGraph | None = None


class ConversionOrchestrator:
    """Runs the conversion stages in order over one directory.

    Every stage finishes its edits before the next one reads the trees. A
    failure in any stage is logged, recorded on the tracker and re-raised as
    ConversionError naming that stage.
    """

    def __init__(
        self,
        root_path: str | Path,
        settings: Settings | None = None,
        progress_callback: Callable | None = None,
        parser: CodeParser | None = None,
        dry_run: bool = False,
    ):
        self.root_path = Path(root_path).resolve()
        self.settings = settings or get_settings()
        self.dry_run = dry_run

        self.tracker = ProgressTracker()
        if progress_callback:
            self.tracker.add_callback(progress_callback)

        self._parser = parser or CodeParser()

    def run(self) -> dict:
        try:
            self.tracker.start()
            logger.info(f"Starting conversion of {self.root_path}")

            ctx = ConversionContext(
                root_path=self.root_path,
                tracker=self.tracker,
                project=Project(self.root_path, parser=self._parser),
            )

            self._execute_scan_stage(ctx)
            self._execute_load_stage(ctx)
            self._execute_alias_stage(ctx)
            self._execute_usage_stage(ctx)
            self._execute_hierarchy_stage(ctx)
            self._execute_emit_stage(ctx)
            self._execute_rename_stage(ctx)
            self._execute_signature_stage(ctx)
            self._execute_optionals_stage(ctx)
            self._execute_save_stage(ctx)

            self.tracker.complete()
            logger.info(f"Conversion completed for {self.root_path}")

            progress = self.tracker.progress
            return {
                "files_scanned": progress.files_scanned,
                "classes_found": progress.classes_found,
                "aliases_rewritten": progress.aliases_rewritten,
                "fields_added": progress.fields_added,
                "files_renamed": progress.files_renamed,
                "signature_types_added": progress.signature_types_added,
                "params_made_optional": progress.params_made_optional,
                "files_saved": progress.files_saved,
                "elapsed_seconds": progress.elapsed_time,
            }

        except ConversionError as e:
            self.tracker.error(str(e))
            raise

    def _fail(self, stage: ConversionStage, e: Exception) -> ConversionError:
        message = f"{stage.value.replace('_', ' ').capitalize()} failed: {e}"
        logger.error(message, exc_info=True)
        return ConversionError(message, stage=stage.value, cause=e)

    def _execute_scan_stage(self, ctx: ConversionContext) -> None:
        ctx.tracker.set_stage(ConversionStage.SCANNING, message="Scanning directory...")
        try:
            scanner = FileScanner(
                ctx.root_path,
                extensions=self.settings.supported_extensions,
                ignore_patterns=self.settings.ignore_patterns,
                exclude_patterns=self.settings.exclude_patterns,
            )
            ctx.scanned_files = scanner.scan_all()
            stats = scanner.get_statistics(ctx.scanned_files)
        except Exception as e:
            raise self._fail(ConversionStage.SCANNING, e) from e

        ctx.tracker.update_stats(files_scanned=stats.file_count)
        ctx.tracker.update_stage(stats.file_count, stats.file_count, f"Found {stats.file_count} files")
        by_language = ", ".join(f"{count} {name}" for name, count in sorted(stats.languages.items()))
        logger.info(f"Scanned {stats.file_count} files, {stats.total_lines} lines ({by_language or 'none'})")

    def _execute_load_stage(self, ctx: ConversionContext) -> None:
        ctx.tracker.set_stage(ConversionStage.LOADING, total=len(ctx.scanned_files), message="Parsing files...")
        try:
            for index, file_info in enumerate(ctx.scanned_files, start=1):
                ctx.project.add_file(file_info)
                ctx.tracker.update_stage(index, message=f"Parsed {file_info.relative_path}")
            dropped = ctx.project.filter_out_node_modules()
        except Exception as e:
            raise self._fail(ConversionStage.LOADING, e) from e

        if dropped:
            logger.info(f"Dropped {dropped} dependency files from the analyzed set")
        logger.info(f"Loaded {len(ctx.project)} source files")

    def _execute_alias_stage(self, ctx: ConversionContext) -> None:
        ctx.tracker.set_stage(ConversionStage.NORMALIZING_ALIASES, message="Rewriting `this` aliases...")
        try:
            rewritten = AliasNormalizer(ctx.project).normalize_project()
        except Exception as e:
            raise self._fail(ConversionStage.NORMALIZING_ALIASES, e) from e
        ctx.tracker.update_stats(aliases_rewritten=rewritten)

    def _execute_usage_stage(self, ctx: ConversionContext) -> None:
        ctx.tracker.set_stage(ConversionStage.COLLECTING_USAGE, message="Collecting property usage...")
        try:
            ctx.records = UsageCollector(ctx.project).collect_project()
        except Exception as e:
            raise self._fail(ConversionStage.COLLECTING_USAGE, e) from e
        ctx.tracker.update_stats(classes_found=len(ctx.records))
        ctx.tracker.update_stage(len(ctx.records), len(ctx.records), f"Found {len(ctx.records)} classes")

    def _execute_hierarchy_stage(self, ctx: ConversionContext) -> None:
        ctx.tracker.set_stage(ConversionStage.CORRECTING_HIERARCHY, message="Correcting inherited properties...")
        try:
            ctx.hierarchy = ClassHierarchyGraph.build(ctx.records)
            ctx.records = PropertyCorrector(ctx.hierarchy).correct()
        except Exception as e:
            raise self._fail(ConversionStage.CORRECTING_HIERARCHY, e) from e

    def _execute_emit_stage(self, ctx: ConversionContext) -> None:
        ctx.tracker.set_stage(ConversionStage.EMITTING_DECLARATIONS, message="Declaring class fields...")
        try:
            added = DeclarationEmitter(ctx.project, self.settings).emit(ctx.records)
        except Exception as e:
            raise self._fail(ConversionStage.EMITTING_DECLARATIONS, e) from e
        ctx.tracker.update_stats(fields_added=added)
        # the graph is not needed past this point
        ctx.hierarchy = None

    def _execute_rename_stage(self, ctx: ConversionContext) -> None:
        ctx.tracker.set_stage(ConversionStage.RENAMING, message="Renaming files to TypeScript...")
        if not self.settings.output.rename_to_typescript:
            javascript = sum(1 for source_file in ctx.project if source_file.path.suffix not in (".ts", ".tsx"))
            logger.info("Skipping rename to TypeScript")
            if javascript:
                logger.warning(
                    f"{javascript} JavaScript files keep their extension; the declarations and "
                    f"optional markers written to them will not parse as JavaScript"
                )
            return
        try:
            renamed = ctx.project.rename_to_typescript()
        except Exception as e:
            raise self._fail(ConversionStage.RENAMING, e) from e
        ctx.tracker.update_stats(files_renamed=renamed)
        logger.info(f"Renamed {renamed} files")

    def _execute_signature_stage(self, ctx: ConversionContext) -> None:
        ctx.tracker.set_stage(ConversionStage.TYPING_SIGNATURES, message="Typing function signatures...")
        if not self.settings.output.apply_jsdoc_signatures:
            logger.info("Skipping signature typing")
            return
        try:
            added = SignatureTyper(ctx.project, self.settings).type_project()
        except Exception as e:
            raise self._fail(ConversionStage.TYPING_SIGNATURES, e) from e
        ctx.tracker.update_stats(signature_types_added=added)

    def _execute_optionals_stage(self, ctx: ConversionContext) -> None:
        ctx.tracker.set_stage(ConversionStage.INFERRING_OPTIONALS, message="Inferring optional parameters...")
        if not self.settings.output.add_optional_params:
            logger.info("Skipping optional parameter inference")
            return
        try:
            marked = CallSiteArityAnalyzer(ctx.project).analyze_project()
        except Exception as e:
            raise self._fail(ConversionStage.INFERRING_OPTIONALS, e) from e
        ctx.tracker.update_stats(params_made_optional=marked)

    def _execute_save_stage(self, ctx: ConversionContext) -> None:
        ctx.tracker.set_stage(ConversionStage.SAVING, message="Writing files...")
        if self.dry_run:
            pending = sum(1 for source_file in ctx.project if source_file.modified)
            logger.info(f"Dry run: {pending} files would be written")
            return
        try:
            saved = ctx.project.save()
        except Exception as e:
            raise self._fail(ConversionStage.SAVING, e) from e
        ctx.tracker.update_stats(files_saved=saved)


def convert_directory(
    root_path: str | Path,
    settings: Settings | None = None,
    progress_callback: Callable | None = None,
    dry_run: bool = False,
) -> dict:
    orchestrator = ConversionOrchestrator(
        root_path,
        settings=settings,
        progress_callback=progress_callback,
        dry_run=dry_run,
    )
    return orchestrator.run()
