"""
Import operations.

Reads a file or an uploaded CSV payload into rows and drives the
:class:`~apple_explorer.ingest.pipeline.ImportPipeline`. Whole-run input
failures (missing file, unreadable payload, unknown mapping) come back as
``INVALID_INPUT`` before any row is processed.
"""

from __future__ import annotations

from pathlib import Path

from apple_explorer.core.errors import AppleExplorerError, InputError
from apple_explorer.ingest.audit import AuditLogWriter
from apple_explorer.ingest.columns import load_column_mapping
from apple_explorer.ingest.pipeline import ImportConfig, ImportPipeline, ImportSummary
from apple_explorer.ingest.sources import FileRowSource, parse_csv_bytes
from apple_explorer.logging import get_logger
from apple_explorer.ops.context import OperationContext
from apple_explorer.ops.requests import ImportRequest
from apple_explorer.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def _load_rows(request: ImportRequest) -> tuple[list[dict], str]:
    if request.path is not None:
        source = FileRowSource(request.path)
        return source.read(), request.source_name or source.name
    if request.payload is not None:
        return parse_csv_bytes(request.payload), request.source_name or "<upload>"
    raise InputError("No file uploaded")


def run_import(ctx: OperationContext, request: ImportRequest) -> OperationResult[ImportSummary]:
    """
    Import a file or payload.

    ``ctx.dry_run`` validates and reconciles without writing records or
    audit files.
    """
    timer = start_timer()

    try:
        mapping = load_column_mapping(request.mapping)
        rows, source_name = _load_rows(request)
    except AppleExplorerError as exc:
        logger.warning("import.rejected", error=exc.message, category=exc.category.value)
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)

    # With a prefix both logs land in one file pair, written below
    pipeline_output = None if (ctx.dry_run or request.log_prefix) else request.output_dir
    config = ImportConfig(
        mapping=mapping,
        output_dir=Path(pipeline_output) if pipeline_output is not None else None,
        audit_fields=request.audit_fields,
        dry_run=ctx.dry_run,
        source=source_name,
    )
    summary = ImportPipeline(ctx.store, config).run(rows)

    if request.log_prefix and request.output_dir is not None and not ctx.dry_run:
        writer = AuditLogWriter(request.output_dir, fields=request.audit_fields)
        files = writer.write(request.log_prefix, summary.validation_failures + summary.duplicates)
        if files is not None:
            summary.audit_files[request.log_prefix] = files

    warnings = []
    if summary.storage_failures:
        warnings.append(f"{summary.storage_failures} row(s) failed to persist; see the duplicate log")

    return OperationResult.ok(
        summary,
        warnings=warnings,
        elapsed_ms=timer.elapsed_ms,
        metadata={"source": source_name, "mapping": mapping.label, "request_id": ctx.request_id},
    )


def read_headers(path: str | Path) -> OperationResult[list[str]]:
    """Column labels of a file's header row."""
    timer = start_timer()
    try:
        headers = FileRowSource(path).headers()
    except AppleExplorerError as exc:
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)
    return OperationResult.ok(headers, elapsed_ms=timer.elapsed_ms)


__all__ = ["run_import", "read_headers"]
