"""
Bulk import pipeline.

Manifesto:
    A bulk import is a partition, not a best effort. Every input row ends
    in exactly one place: persisted, in the validation-failure log, or in
    the duplicate log. Nothing is silently dropped and one bad row never
    stops the run.

Architecture:
    ::

        rows ──► validate_row ──errors──► validation log
                     │ ok
                     ▼
                normalize_row
                     │
                     ▼
             DuplicateResolver ──dup, lookup error──► duplicate log
                     │ new
                     ▼
        Profile ► Attributes ► Origin ► Apple ──storage error──► duplicate log
        (skipped when the row names an id)                      (STORAGE_ERROR)
                     ▼
             resolver.accept()
                     │
                     ▼
              AuditLogWriter ──► import-errors.{json,csv}
                                 duplicate-entries.{json,csv}

Per-row states:
    Received -> Validated -> {Rejected(validation) |
                              Normalized -> {Rejected(duplicate) | Persisted}}

Guardrails:
    - inserted + validation_failed + duplicates == total, always
    - The duplicate check runs before any sub-record is written; only a
      storage failure on the Apple insert can leave orphans, and the audit
      entry lists them
    - Rows are processed strictly in order; row N sees rows 1..N-1
    - Dry runs write nothing but keep the batch view, so intra-batch
      duplicates are still reported

Examples:
    >>> from apple_explorer.core.adapters.memory import MemoryDocumentStore
    >>> pipeline = ImportPipeline(MemoryDocumentStore())
    >>> summary = pipeline.run([{"ACCESSION": "TD001", "CULTIVAR NAME": "Honeycrisp"}])
    >>> summary.inserted
    1

Tags:
    import, pipeline, reconciliation, audit, bulk

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from apple_explorer.core.errors import AppleExplorerError, PersistenceError
from apple_explorer.core.models import REFERENCE_FIELDS, SUB_RECORD_KINDS, EntityKind
from apple_explorer.core.protocols import DocumentStore
from apple_explorer.ingest.audit import (
    DUPLICATE_LOG_NAME,
    REASON_DUPLICATE,
    REASON_STORAGE_ERROR,
    REASON_VALIDATION_FAILED,
    STAGE_PERSIST,
    STAGE_RECONCILE,
    STAGE_VALIDATE,
    VALIDATION_LOG_NAME,
    AuditEntry,
    AuditFiles,
    AuditLogWriter,
)
from apple_explorer.ingest.columns import INVENTORY_V1, ColumnMapping
from apple_explorer.ingest.duplicates import DuplicateResolver
from apple_explorer.ingest.normalizer import NormalizedRow, normalize_row
from apple_explorer.ingest.validator import validate_row
from apple_explorer.logging import get_logger, log_row_counts, log_step, new_run_id, push_context

log = get_logger(__name__)


@dataclass
class ImportConfig:
    """
    Options for one import run.

    Built at the edges (CLI, API) from settings and flags; the pipeline never
    reads the environment itself.
    """

    mapping: ColumnMapping = INVENTORY_V1
    output_dir: Path | None = None
    audit_fields: Sequence[str] | None = None
    validation_log_name: str = VALIDATION_LOG_NAME
    duplicate_log_name: str = DUPLICATE_LOG_NAME
    dry_run: bool = False
    source: str = "<rows>"


@dataclass
class ImportSummary:
    """Outcome of one import run."""

    run_id: str
    total: int = 0
    inserted: int = 0
    validation_failures: list[AuditEntry] = field(default_factory=list)
    duplicates: list[AuditEntry] = field(default_factory=list)
    inserted_ids: list[Any] = field(default_factory=list)
    audit_files: dict[str, AuditFiles] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def validation_failed(self) -> int:
        return len(self.validation_failures)

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicates)

    @property
    def storage_failures(self) -> int:
        return sum(1 for e in self.duplicates if e.reason_code == REASON_STORAGE_ERROR)

    @property
    def is_balanced(self) -> bool:
        return self.inserted + self.validation_failed + self.duplicate_count == self.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "dry_run": self.dry_run,
            "total": self.total,
            "inserted": self.inserted,
            "validation_failed": self.validation_failed,
            "duplicates": self.duplicate_count,
            "storage_failures": self.storage_failures,
            "inserted_ids": [str(i) for i in self.inserted_ids],
            "validation_failures": [e.to_dict() for e in self.validation_failures],
            "duplicate_entries": [e.to_dict() for e in self.duplicates],
            "audit_files": {
                name: {"json": str(files.json_path), "csv": str(files.csv_path)}
                for name, files in self.audit_files.items()
            },
        }


class ImportPipeline:
    """Validate, reconcile and persist a batch of raw rows."""

    def __init__(self, store: DocumentStore, config: ImportConfig | None = None):
        self.store = store
        self.config = config or ImportConfig()

    def run(self, rows: Sequence[Mapping[str, Any]]) -> ImportSummary:
        """
        Process every row in order and write the audit logs.

        Args:
            rows: Fully materialized raw rows (column label -> raw value)

        Returns:
            ImportSummary with counts, both logs and any audit files written
        """
        config = self.config
        summary = ImportSummary(run_id=new_run_id(), total=len(rows), dry_run=config.dry_run)
        resolver = DuplicateResolver(self.store)

        token = push_context(run_id=summary.run_id, source=config.source, mapping=config.mapping.label)
        try:
            with log_step("import.run", rows_in=summary.total, dry_run=config.dry_run) as timer:
                for row_number, row in enumerate(rows, start=1):
                    self._process_row(row_number, row, resolver, summary)

                if config.output_dir is not None:
                    writer = AuditLogWriter(config.output_dir, fields=config.audit_fields)
                    summary.audit_files = writer.write_logs(
                        summary.validation_failures,
                        summary.duplicates,
                        validation_name=config.validation_log_name,
                        duplicate_name=config.duplicate_log_name,
                    )

                timer.add_metric("inserted", summary.inserted)
                timer.add_metric("validation_failed", summary.validation_failed)
                timer.add_metric("duplicates", summary.duplicate_count)

            log_row_counts(
                log,
                "import",
                rows_in=summary.total,
                rows_out=summary.inserted,
                rows_rejected=summary.validation_failed + summary.duplicate_count,
                storage_failures=summary.storage_failures,
            )
        finally:
            token.restore()
        return summary

    # -------------------------------------------------------------------------
    # PER-ROW STEPS
    # -------------------------------------------------------------------------

    def _process_row(
        self,
        row_number: int,
        row: Mapping[str, Any],
        resolver: DuplicateResolver,
        summary: ImportSummary,
    ) -> None:
        mapping = self.config.mapping

        errors = validate_row(row, mapping)
        if errors:
            log.info("import.row.invalid", row_number=row_number, errors=errors)
            summary.validation_failures.append(
                AuditEntry(row_number, STAGE_VALIDATE, REASON_VALIDATION_FAILED, errors, dict(row))
            )
            return

        candidate = normalize_row(row, mapping)
        accession, cultivar_name = candidate.natural_key

        try:
            match = resolver.check(accession, cultivar_name)
        except AppleExplorerError as e:
            self._storage_failure(summary, row_number, row, STAGE_RECONCILE, e)
            return

        if match is not None:
            log.info("import.row.duplicate", row_number=row_number, fields=list(match.fields), source=match.source)
            summary.duplicates.append(
                AuditEntry(
                    row_number,
                    STAGE_RECONCILE,
                    REASON_DUPLICATE,
                    [match.reason],
                    dict(row),
                    {"fields": list(match.fields), "source": match.source},
                )
            )
            return

        if not self.config.dry_run:
            written: dict[EntityKind, Any] = {}
            try:
                apple_id = self._persist(candidate, written)
            except AppleExplorerError as e:
                self._storage_failure(summary, row_number, row, STAGE_PERSIST, e, written)
                return
            summary.inserted_ids.append(apple_id)

        resolver.accept(accession, cultivar_name)
        summary.inserted += 1

    def _storage_failure(
        self,
        summary: ImportSummary,
        row_number: int,
        row: Mapping[str, Any],
        stage: str,
        error: AppleExplorerError,
        written: dict[EntityKind, Any] | None = None,
    ) -> None:
        """Record a per-row store failure in the duplicate log; the run continues."""
        log.warning("import.row.storage_error", row_number=row_number, stage=stage, error=str(error))
        details: dict[str, Any] = {"error": error.to_dict()}
        if written:
            details["orphaned"] = {kind.value: str(ref) for kind, ref in written.items()}
        summary.duplicates.append(
            AuditEntry(
                row_number,
                stage,
                REASON_STORAGE_ERROR,
                [f"Storage error: {error.message}"],
                dict(row),
                details,
            )
        )

    def _persist(self, candidate: NormalizedRow, written: dict[EntityKind, Any]) -> Any:
        """
        Write sub-records then the Apple; ``written`` collects ids as they land.

        A sub-record whose id the row already names is linked as given, not
        written.
        """
        given = candidate.apple.references()
        documents = {
            EntityKind.PROFILE: candidate.profile.to_document(),
            EntityKind.ATTRIBUTES: candidate.attributes.to_document(),
            EntityKind.ORIGIN: candidate.origin.to_document(),
        }
        for kind in SUB_RECORD_KINDS:
            if kind not in given:
                written[kind] = self.store.insert(kind, documents[kind])

        apple = candidate.apple.with_references(written)
        document = apple.to_document()
        missing = [name for name in REFERENCE_FIELDS.values() if document.get(name) is None]
        if missing:
            raise PersistenceError(f"Sub-record ids missing after insert: {missing}")
        return self.store.insert(EntityKind.APPLE, document)


def run_import(
    store: DocumentStore,
    rows: Sequence[Mapping[str, Any]],
    config: ImportConfig | None = None,
) -> ImportSummary:
    """Convenience wrapper: ``ImportPipeline(store, config).run(rows)``."""
    return ImportPipeline(store, config).run(rows)


__all__ = ["ImportConfig", "ImportSummary", "ImportPipeline", "run_import"]
