"""
CLI utility helpers: output formatting and store setup.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from apple_explorer.core.adapters import create_store
from apple_explorer.core.errors import AppleExplorerError
from apple_explorer.core.protocols import DocumentStore
from apple_explorer.core.settings import AppleExplorerSettings, get_settings
from apple_explorer.logging import configure_logging
from apple_explorer.ops.context import OperationContext
from apple_explorer.ops.result import OperationResult, PagedResult

console = Console()
err_console = Console(stderr=True)


# ── Store helper ─────────────────────────────────────────────────────────


def get_store(settings: AppleExplorerSettings) -> DocumentStore:
    """Open the configured document store, exiting 1 when it is unreachable."""
    try:
        return create_store(settings)
    except AppleExplorerError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {e.message}")
        raise typer.Exit(code=1) from e


def make_context(*, dry_run: bool = False) -> tuple[OperationContext, AppleExplorerSettings]:
    """Create an ``OperationContext`` + settings pair for CLI commands."""
    settings = get_settings()
    configure_logging(level=settings.log_level, format=settings.log_format)
    ctx = OperationContext(store=get_store(settings), caller="cli", dry_run=dry_run)
    return ctx, settings


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def fail(result: OperationResult) -> None:
    """Print a failed result and exit 1."""
    err = result.error
    msg = err.message if err else "Unknown error"
    code = err.code if err else "ERROR"
    err_console.print(f"[bold red]Error[/bold red] ({code}): {msg}")
    if err is not None:
        for detail in err.details.get("errors", []):
            err_console.print(f"  - {detail}")
    raise typer.Exit(code=1)


def output_result(result: OperationResult, *, as_json: bool = False, title: str = "") -> None:
    """Render an ``OperationResult`` to the terminal."""
    if not result.success:
        fail(result)

    data = result.data

    if as_json:
        payload = _to_dict(data) if not isinstance(data, list | tuple) else [_to_dict(d) for d in data]
        console.print_json(json.dumps(payload, default=str))
        return

    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {warning}")

    if isinstance(data, list):
        if not data:
            console.print("[dim]No items.[/dim]")
            return
        print_table(data, title=title)
    else:
        print_dict(_to_dict(data), title=title)


def output_paged(
    result: PagedResult,
    *,
    as_json: bool = False,
    title: str = "",
    columns: list[str] | None = None,
) -> None:
    """Render a ``PagedResult`` to the terminal with pagination info."""
    if not result.success:
        fail(result)

    items = result.data or []

    if as_json:
        payload = {
            "items": [_to_dict(d) for d in items],
            "total": result.total,
            "limit": result.limit,
            "offset": result.offset,
            "has_more": result.has_more,
        }
        console.print_json(json.dumps(payload, default=str))
        return

    if not items:
        console.print("[dim]No items.[/dim]")
        return

    print_table(items, title=title, columns=columns)
    console.print(f"\n[dim]Showing {len(items)} of {result.total} (offset {result.offset})[/dim]")


def print_table(items: list, *, title: str = "", columns: list[str] | None = None) -> None:
    """Render a list of dataclasses/dicts as a Rich table."""
    rows = [_to_dict(item) for item in items]
    names = columns or list(rows[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in names:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*("" if _cell(row, col) is None else str(_cell(row, col)) for col in names))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")


def _cell(row: dict[str, Any], column: str) -> Any:
    # Dotted names reach into joined sub-documents ("origin.country")
    value: Any = row
    for part in column.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value
