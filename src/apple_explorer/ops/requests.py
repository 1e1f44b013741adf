"""
Typed request objects for operations.

Each dataclass is the input contract of one operation function. Requests
carry transport-agnostic data only: no raw HTTP bodies, no typer params.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# ------------------------------------------------------------------ #
# Catalog
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class CreateAppleRequest:
    """Request for :func:`apple_explorer.ops.apples.create_apple`.

    ``accession``, ``cultivar_name`` and ``origin_id`` are required; the
    other sub-record references are optional.
    """

    accession: str | None = None
    cultivar_name: str | None = None
    origin_id: str | None = None
    harvest_date: str | None = None
    taste_notes: str | None = None
    notes: str | None = None
    apple_profile_id: str | None = None
    physical_attributes_id: str | None = None


@dataclass(frozen=True, slots=True)
class AppleQuery:
    """Filters for :func:`apple_explorer.ops.apples.list_apples`.

    Text filters match as case-insensitive substrings; ``accession`` and
    ``harvest_date`` match exactly.
    """

    cultivar_name: str | None = None
    accession: str | None = None
    origin_country: str | None = None
    origin_province: str | None = None
    origin_city: str | None = None
    genus: str | None = None
    species: str | None = None
    pedigree: str | None = None
    harvest_date: str | None = None
    limit: int | None = None
    offset: int = 0


@dataclass(frozen=True, slots=True)
class ExportRequest:
    """Request for :func:`apple_explorer.ops.apples.export_apples_csv`."""

    query: AppleQuery = field(default_factory=AppleQuery)
    sort_by: str = "cultivarName"
    order: str = "asc"
    page: int = 1
    limit: int = 10


# ------------------------------------------------------------------ #
# Import
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class ImportRequest:
    """Request for :func:`apple_explorer.ops.imports.run_import`.

    Attributes:
        path: Local file to import (CSV, TSV, XLSX, JSON, JSONL).
        payload: Raw CSV bytes (uploads); used when ``path`` is None.
        source_name: Label for logs and audit entries.
        mapping: Built-in mapping label or path to a YAML mapping.
        output_dir: Directory for the audit logs; None writes no files.
        audit_fields: Fixed CSV projection for the audit logs.
        log_prefix: When set, both logs are written as ``<prefix>.json/csv``
            (the upload path keeps a single ``upload-errors`` log).
    """

    path: Path | None = None
    payload: bytes | None = None
    source_name: str | None = None
    mapping: str = "inventory-v1"
    output_dir: Path | None = None
    audit_fields: tuple[str, ...] | None = None
    log_prefix: str | None = None
