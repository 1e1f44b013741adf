"""
CLI: ``apple-explorer import``, bulk import and header inspection.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.table import Table

from apple_explorer.cli.utils import console, err_console, fail, make_context, output_result
from apple_explorer.ingest.pipeline import ImportSummary
from apple_explorer.ops.imports import read_headers, run_import
from apple_explorer.ops.requests import ImportRequest

app = typer.Typer(no_args_is_help=True)


def _print_summary(summary: ImportSummary) -> None:
    table = Table(title="Import summary" + (" (dry run)" if summary.dry_run else ""), show_header=False)
    table.add_column("metric", style="cyan")
    table.add_column("value", justify="right")
    table.add_row("rows", str(summary.total))
    table.add_row("inserted", f"[green]{summary.inserted}[/green]")
    table.add_row("validation failed", str(summary.validation_failed))
    table.add_row("duplicates", str(summary.duplicate_count))
    if summary.storage_failures:
        table.add_row("  of which storage errors", f"[red]{summary.storage_failures}[/red]")
    console.print(table)

    for name, files in summary.audit_files.items():
        console.print(f"[dim]{name}:[/dim] {files.json_path}  {files.csv_path}")
    console.print(f"[dim]run_id {summary.run_id}[/dim]")


@app.command("run")
def run(
    path: Path = typer.Argument(..., help="CSV, TSV, XLSX, JSON or JSONL file"),
    mapping: str | None = typer.Option(None, "--mapping", "-m", help="Mapping name or YAML file"),
    out: Path | None = typer.Option(None, "--out", "-o", help="Audit log directory"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate and reconcile without writing"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Import a file of apple records through the reconciliation pipeline."""
    ctx, settings = make_context(dry_run=dry_run)
    request = ImportRequest(
        path=path,
        mapping=mapping or settings.column_mapping,
        output_dir=out or Path(settings.log_dir),
    )
    result = run_import(ctx, request)
    if not result.success:
        fail(result)

    summary = result.data
    if json_out:
        console.print_json(json.dumps(summary.to_dict(), default=str))
        return

    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {warning}")
    _print_summary(summary)


@app.command("headers")
def headers(
    path: Path = typer.Argument(..., help="CSV, TSV or XLSX file"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Print the column labels of a file's header row."""
    result = read_headers(path)
    if json_out:
        output_result(result, as_json=True)
        return
    if not result.success:
        fail(result)
    for label in result.data:
        console.print(label)
