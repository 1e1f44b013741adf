"""
Structured, run-aware logging.

Usage:
    from apple_explorer.logging import get_logger, configure_logging, log_step, set_context

    configure_logging(level="INFO", format="console")
    log = get_logger(__name__)

    set_context(run_id="3f2a9c1e7b04", source="TDInventory.xlsx")

    with log_step("import.run"):
        run_import()
"""

from apple_explorer.logging.config import configure_logging
from apple_explorer.logging.context import (
    LogContext,
    bind_context,
    clear_context,
    get_context,
    get_logger,
    new_run_id,
    push_context,
    set_context,
)
from apple_explorer.logging.timing import log_row_counts, log_step

__all__ = [
    "configure_logging",
    "get_logger",
    "set_context",
    "bind_context",
    "clear_context",
    "get_context",
    "push_context",
    "new_run_id",
    "LogContext",
    "log_step",
    "log_row_counts",
]
