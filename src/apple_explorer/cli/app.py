"""
Root Typer application for the ``apple-explorer`` CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from apple_explorer import __version__

app = Typer(
    name="apple-explorer",
    help="Apple Explorer: apple cultivar catalog and bulk import.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"apple-explorer {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Apple Explorer CLI: import, query and export apple cultivar records."""


# ── Sub-command registration ─────────────────────────────────────────────

from apple_explorer.cli.apples import app as apples_app  # noqa: E402
from apple_explorer.cli.imports import app as import_app  # noqa: E402
from apple_explorer.cli.maintenance import app as maintenance_app  # noqa: E402
from apple_explorer.cli.serve import app as serve_app  # noqa: E402

app.add_typer(import_app, name="import", help="Bulk import and header inspection.")
app.add_typer(apples_app, name="apples", help="Catalog records.")
app.add_typer(maintenance_app, name="maintenance", help="Store housekeeping.")
app.add_typer(serve_app, name="serve", help="Start the API server.")
