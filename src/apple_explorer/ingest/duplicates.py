"""
Duplicate resolution on the (accession, cultivarName) natural key.

A candidate is a duplicate when its accession OR its cultivar name is
already taken, either by a persisted Apple record or by a row accepted
earlier in the same batch. Comparison is exact (case-sensitive) on trimmed
values.

The batch view is explicit: the pipeline calls :meth:`accept` after every
accepted row, so row N is checked against rows 1..N-1 even in dry runs where
nothing reaches the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from apple_explorer.core.errors import DuplicateConflictError
from apple_explorer.core.protocols import DocumentStore

FIELD_LABELS = {"accession": "accession", "cultivarName": "cultivar name"}

SOURCE_EXISTING = "existing record"
SOURCE_BATCH = "earlier row in this batch"


@dataclass(frozen=True)
class DuplicateMatch:
    """Which natural-key fields collided, and with what."""

    fields: tuple[str, ...]
    source: str
    accession: str
    cultivar_name: str

    @property
    def reason(self) -> str:
        parts = []
        for name in self.fields:
            value = self.accession if name == "accession" else self.cultivar_name
            parts.append(f"{FIELD_LABELS[name]} {value!r}")
        return f"Duplicate {' and '.join(parts)} ({self.source})"

    def to_error(self) -> DuplicateConflictError:
        return DuplicateConflictError(self.reason, fields=list(self.fields))


@dataclass
class DuplicateResolver:
    """Natural-key checks against the store and the current batch."""

    store: DocumentStore
    _batch_accessions: set[str] = field(default_factory=set)
    _batch_names: set[str] = field(default_factory=set)

    def accept(self, accession: str, cultivar_name: str) -> None:
        """Record an accepted row in the batch view."""
        self._batch_accessions.add(accession)
        self._batch_names.add(cultivar_name)

    @property
    def accepted_count(self) -> int:
        return len(self._batch_accessions)

    def check_batch(self, accession: str, cultivar_name: str) -> DuplicateMatch | None:
        fields = []
        if accession in self._batch_accessions:
            fields.append("accession")
        if cultivar_name in self._batch_names:
            fields.append("cultivarName")
        if not fields:
            return None
        return DuplicateMatch(tuple(fields), SOURCE_BATCH, accession, cultivar_name)

    def check_store(self, accession: str, cultivar_name: str) -> DuplicateMatch | None:
        existing = self.store.find_by_natural_key(accession, cultivar_name)
        if existing is None:
            return None
        fields = []
        if existing.get("accession") == accession:
            fields.append("accession")
        if existing.get("cultivarName") == cultivar_name:
            fields.append("cultivarName")
        return DuplicateMatch(tuple(fields or ("accession",)), SOURCE_EXISTING, accession, cultivar_name)

    def check(self, accession: str, cultivar_name: str) -> DuplicateMatch | None:
        """Batch view first (no I/O), then the store."""
        return self.check_batch(accession, cultivar_name) or self.check_store(accession, cultivar_name)


__all__ = ["DuplicateMatch", "DuplicateResolver", "SOURCE_EXISTING", "SOURCE_BATCH"]
