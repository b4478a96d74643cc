"""
Command-line interface for lingostat.

This module provides the `analyze` command that runs the ingestion engine
over a directory and the `connect` command that authorizes Google Drive.
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from lingostat.config import Settings
from lingostat.engine import IngestionEngine
from lingostat.models import ProgressEvent, RunResult
from lingostat.report import export_provenance, export_result, format_breakdown, format_duration
from lingostat.utils.errors import LingostatException
from lingostat.utils.logging import setup_logging

app = typer.Typer(
    name="lingostat",
    help="Per-language watch time and line counts for archives, documents, media and links",
    add_completion=False,
)
console = Console()


def _build_settings(**overrides) -> Settings:
    try:
        return Settings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1)


def _print_result(result: RunResult) -> None:
    totals = result.totals

    table = Table(title="Totals")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Watch time", format_duration(totals.watch_seconds))
    table.add_row("Lines", str(totals.lines))
    table.add_row("PDFs", str(totals.doc_count))
    table.add_row("Videos/Audio", str(totals.media_count))
    console.print(table)

    console.print(format_breakdown(result), markup=False, highlight=False)

    if result.failures:
        console.print(f"[yellow]Skipped {len(result.failures)} item(s):[/yellow]")
        for failure in result.failures:
            console.print(f"  - {failure.item}: {failure.error_type}: {failure.message}", markup=False)


@app.command()
def analyze(
    path: Path = typer.Argument(..., help="Directory or file to analyze"),
    max_concurrency: Optional[int] = typer.Option(
        None,
        "--max-concurrency",
        "-k",
        help="Max simultaneous extractor calls (unbounded if omitted)",
    ),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Abort on the first failed branch"),
    json_path: Optional[Path] = typer.Option(None, "--json", help="Write the result as JSON"),
    export_dir: Optional[Path] = typer.Option(
        None,
        "--export-dir",
        help="Write one <language>.txt file per language listing its items",
    ),
    workspace: Optional[Path] = typer.Option(None, "--workspace", help="Temporary workspace root"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
):
    """Analyze a content tree and print the language breakdown."""
    settings = _build_settings(
        max_concurrency=max_concurrency,
        fail_fast=fail_fast or None,
        workspace_dir=workspace,
        log_level=log_level,
    )
    setup_logging(log_level=settings.log_level)

    async def _analyze() -> RunResult:
        engine = IngestionEngine(settings=settings)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Analyzing...", total=None)

            def _on_event(event: ProgressEvent) -> None:
                progress.update(task, description=event.message)

            engine.subscribe(_on_event)
            return await engine.run(path)

    try:
        result = asyncio.run(_analyze())
    except LingostatException as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _print_result(result)

    if json_path:
        export_result(result, json_path)
        console.print(f"Results written to {json_path}")
    if export_dir:
        written = export_provenance(result, export_dir)
        console.print(f"Wrote {len(written)} language file(s) to {export_dir}")


@app.command()
def connect(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Force re-authentication",
    ),
):
    """Authenticate with Google Drive and store the token."""
    from lingostat.google_drive.auth import GoogleDriveAuth

    settings = _build_settings()
    setup_logging(log_level=settings.log_level)

    async def _connect():
        auth = GoogleDriveAuth(settings=settings)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task("Authenticating with Google Drive...", total=None)
            await auth.authenticate(force_reauth=force)
        return auth

    try:
        auth = asyncio.run(_connect())
    except LingostatException as e:
        console.print(f"[red]✗[/red] Authentication failed: {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Connected to Google Drive (token saved to {auth.token_path})")


@app.callback()
def main():
    """lingostat - per-language statistics for content trees."""
    load_dotenv()


if __name__ == "__main__":
    app()
