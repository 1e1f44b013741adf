"""
CLI: ``apple-explorer maintenance``, store housekeeping.
"""

from __future__ import annotations

import typer

from apple_explorer.cli.utils import make_context, output_result
from apple_explorer.ops.maintenance import sweep_orphans

app = typer.Typer(no_args_is_help=True)


@app.command("sweep-orphans")
def sweep_orphans_cmd(
    dry_run: bool = typer.Option(False, "--dry-run", help="Only report orphans"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Delete profile, attributes and origin records no apple references.

    Do not run while an import is in progress.
    """
    ctx, _ = make_context(dry_run=dry_run)
    output_result(sweep_orphans(ctx), as_json=json_out, title="Orphan sweep")
