import argparse
import logging
import sys
from pathlib import Path

from js_to_ts.config.settings import INDENTATION_TEXTS


def main():
    parser = argparse.ArgumentParser(
        prog="js-to-ts",
        description="js-to-ts - convert a JavaScript project to TypeScript in place",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  js-to-ts ./my-project                              Convert every .js/.jsx file
  js-to-ts ./my-project --indentation-text twospaces Indent new fields with two spaces
  js-to-ts ./my-project --exclude "test/**,*.spec.js" Skip files matching the globs
  js-to-ts ./my-project --dry-run                    Report without writing files
""",
    )
    parser.add_argument("directory", help="Directory containing the JavaScript sources")
    parser.add_argument(
        "--indentation-text",
        choices=list(INDENTATION_TEXTS),
        default=None,
        help="Indentation used for generated field declarations (default: tab)",
    )
    parser.add_argument(
        "--exclude",
        default=None,
        help="Comma-separated glob patterns of files to leave out of the conversion",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Logging verbosity (default: info)",
    )
    parser.add_argument(
        "--no-optionals",
        action="store_true",
        help="Do not mark parameters optional from call-site argument counts",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run every stage but do not write any file",
    )

    args = parser.parse_args()
    sys.exit(run_convert(args))


def build_settings(args: argparse.Namespace):
    from pydantic import ValidationError

    from js_to_ts.config import get_settings
    from js_to_ts.core.errors import ConfigurationError

    settings = get_settings()
    files = settings.files.model_dump()
    output = settings.output.model_dump()
    logging_settings = settings.logging.model_dump()

    if args.exclude:
        files["exclude_patterns"] = [p.strip() for p in args.exclude.split(",") if p.strip()]
    if args.indentation_text:
        output["indentation_text"] = args.indentation_text
    if args.no_optionals:
        output["add_optional_params"] = False
    if args.log_level:
        logging_settings["log_level"] = args.log_level

    try:
        return settings.model_validate(
            {"files": files, "output": output, "logging": logging_settings}
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", cause=e)


def run_convert(args: argparse.Namespace) -> int:
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.progress import (
        BarColumn,
        Progress,
        SpinnerColumn,
        TaskProgressColumn,
        TextColumn,
        TimeElapsedColumn,
    )
    from rich.table import Table

    from js_to_ts.core.errors import ConverterError
    from js_to_ts.pipeline.orchestrator import ConversionOrchestrator
    from js_to_ts.pipeline.progress import ConversionProgress

    console = Console()
    path = Path(args.directory).resolve()

    if not path.is_dir():
        console.print(f"[red]Error: Not a directory: {path}[/red]")
        return 1

    try:
        settings = build_settings(args)
    except ConverterError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )

    mode = "[bold yellow]Dry run[/bold yellow]" if args.dry_run else "[bold blue]Converting[/bold blue]"
    console.print(f"{mode} directory: [cyan]{path}[/cyan]")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Starting...", total=100)

        def on_progress(p: ConversionProgress):
            progress.update(task, completed=p.overall_percentage)
            stage_name = p.current_stage.value.replace("_", " ").title()
            stage_progress = p.stages.get(p.current_stage)
            if stage_progress and stage_progress.total > 0:
                detail = f"({stage_progress.current}/{stage_progress.total})"
            else:
                detail = ""
            progress.update(task, description=f"{stage_name} {detail}")

        orchestrator = ConversionOrchestrator(
            path,
            settings=settings,
            progress_callback=on_progress,
            dry_run=args.dry_run,
        )

        try:
            result = orchestrator.run()
            progress.update(task, completed=100, description="Complete")
        except ConverterError as e:
            console.print(f"\n[red]Error: {e}[/red]")
            return 1

    table = Table(title="Conversion Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Files scanned", str(result["files_scanned"]))
    table.add_row("Classes found", str(result["classes_found"]))
    table.add_row("`this` aliases rewritten", str(result["aliases_rewritten"]))
    table.add_row("Fields added", str(result["fields_added"]))
    table.add_row("Files renamed", str(result["files_renamed"]))
    table.add_row("Signature types added", str(result["signature_types_added"]))
    table.add_row("Parameters made optional", str(result["params_made_optional"]))
    table.add_row("Files written", str(result["files_saved"]))
    table.add_row("Time elapsed", f"{result['elapsed_seconds']:.1f}s")

    console.print()
    console.print(table)
    if args.dry_run:
        console.print("[dim]Dry run: no files were written.[/dim]")
    return 0


if __name__ == "__main__":
    main()
