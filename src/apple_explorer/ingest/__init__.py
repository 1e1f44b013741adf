"""
Bulk import: sources, column mappings, validation, normalization,
duplicate resolution, the pipeline and its audit logs.
"""

from apple_explorer.ingest.audit import AuditEntry, AuditLogWriter
from apple_explorer.ingest.columns import BUILTIN_MAPPINGS, INVENTORY_V1, UPLOAD_V1, ColumnMapping, load_column_mapping
from apple_explorer.ingest.duplicates import DuplicateResolver
from apple_explorer.ingest.normalizer import normalize_row
from apple_explorer.ingest.pipeline import ImportConfig, ImportPipeline, ImportSummary
from apple_explorer.ingest.sources import FileRowSource, parse_csv_bytes
from apple_explorer.ingest.validator import validate_row

__all__ = [
    "AuditEntry",
    "AuditLogWriter",
    "BUILTIN_MAPPINGS",
    "INVENTORY_V1",
    "UPLOAD_V1",
    "ColumnMapping",
    "load_column_mapping",
    "DuplicateResolver",
    "normalize_row",
    "ImportConfig",
    "ImportPipeline",
    "ImportSummary",
    "FileRowSource",
    "parse_csv_bytes",
    "validate_row",
]
