"""
CLI: ``apple-explorer serve``, start the API server.
"""

from __future__ import annotations

import typer
import uvicorn

from apple_explorer.cli.utils import console
from apple_explorer.core.settings import get_settings

app = typer.Typer(no_args_is_help=True)


@app.command("start")
def start(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (default from settings)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default from settings)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Start the Apple Explorer REST API server."""
    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    console.print(f"[bold green]Starting Apple Explorer API[/bold green] on {host}:{port}")
    uvicorn.run(
        "apple_explorer.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )
