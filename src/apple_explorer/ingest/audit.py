"""
Import audit logs.

Rows that an import run does not persist are never silently dropped. Each
becomes an :class:`AuditEntry` carrying the original row exactly as read,
the stage it was rejected at, a machine-readable reason code and the
human-readable reason(s). At the end of a run the
:class:`AuditLogWriter` writes every non-empty log twice:

- ``<name>.json``: full-fidelity list of entries
- ``<name>.csv``: flattened projection for spreadsheet viewing

Architecture:
    ::

        AuditEntry:
        ┌────────────────────────────────────────────────────────┐
        │ row_number: int         # 7                            │
        │ stage: str              # "validate"                   │
        │ reason_code: str        # "VALIDATION_FAILED"          │
        │ reasons: list[str]      # ["Missing or invalid accession"] │
        │ row: dict               # {"ACCESSION": "", ...}       │
        │ details: dict           # {"orphaned": {...}}          │
        └────────────────────────────────────────────────────────┘

        Flattened (CSV):
        row_number | reason_code | reasons | row.ACCESSION | row.CULTIVAR NAME | ...

Guardrails:
    - Empty logs write no file
    - Heterogeneous rows: CSV columns are the union of observed keys in
      first-seen order unless the caller fixes the projection
    - Non-JSON values (dates, ObjectIds) are written via str()

Tags:
    audit, reject, validation, duplicates, import
"""

from __future__ import annotations

import csv
import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

STAGE_VALIDATE = "validate"
STAGE_RECONCILE = "reconcile"
STAGE_PERSIST = "persist"

REASON_VALIDATION_FAILED = "VALIDATION_FAILED"
REASON_DUPLICATE = "DUPLICATE"
REASON_STORAGE_ERROR = "STORAGE_ERROR"

VALIDATION_LOG_NAME = "import-errors"
DUPLICATE_LOG_NAME = "duplicate-entries"


@dataclass
class AuditEntry:
    """A row the import did not persist, with the reason(s) why."""

    row_number: int
    stage: str
    reason_code: str
    reasons: list[str]
    row: dict[str, Any]
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result = {
            "row_number": self.row_number,
            "stage": self.stage,
            "reason_code": self.reason_code,
            "reasons": list(self.reasons),
            "row": dict(self.row),
        }
        if self.details:
            result["details"] = dict(self.details)
        return result

    def flatten(self) -> dict[str, Any]:
        flat: dict[str, Any] = {
            "row_number": self.row_number,
            "reason_code": self.reason_code,
            "reasons": "; ".join(self.reasons),
        }
        for key, value in self.row.items():
            flat[f"row.{key}"] = value
        return flat


@dataclass(frozen=True)
class AuditFiles:
    json_path: Path
    csv_path: Path


def union_fields(records: Iterable[dict[str, Any]]) -> list[str]:
    """Union of keys in first-seen order."""
    seen: dict[str, None] = {}
    for record in records:
        for key in record:
            seen.setdefault(key, None)
    return list(seen)


class AuditLogWriter:
    """Write audit logs as JSON + CSV pairs into one directory."""

    def __init__(self, output_dir: str | Path, fields: Sequence[str] | None = None):
        self.output_dir = Path(output_dir)
        self.fields = list(fields) if fields else None

    def write_json(self, entries: Sequence[AuditEntry], path: Path) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump([e.to_dict() for e in entries], f, indent=2, default=str)

    def write_csv(self, entries: Sequence[AuditEntry], path: Path) -> None:
        flat = [e.flatten() for e in entries]
        fieldnames = self.fields or union_fields(flat)
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
            writer.writeheader()
            for record in flat:
                writer.writerow({k: "" if record.get(k) is None else record.get(k) for k in fieldnames})

    def write(self, name: str, entries: Sequence[AuditEntry]) -> AuditFiles | None:
        """Write ``<name>.json`` and ``<name>.csv``; None for an empty log."""
        if not entries:
            return None
        self.output_dir.mkdir(parents=True, exist_ok=True)
        files = AuditFiles(
            json_path=self.output_dir / f"{name}.json",
            csv_path=self.output_dir / f"{name}.csv",
        )
        self.write_json(entries, files.json_path)
        self.write_csv(entries, files.csv_path)
        return files

    def write_logs(
        self,
        validation_failures: Sequence[AuditEntry],
        duplicates: Sequence[AuditEntry],
        *,
        validation_name: str = VALIDATION_LOG_NAME,
        duplicate_name: str = DUPLICATE_LOG_NAME,
    ) -> dict[str, AuditFiles]:
        """Write both logs; returns the files written keyed by log name."""
        written = {}
        for name, entries in ((validation_name, validation_failures), (duplicate_name, duplicates)):
            files = self.write(name, entries)
            if files is not None:
                written[name] = files
        return written


__all__ = [
    "AuditEntry",
    "AuditFiles",
    "AuditLogWriter",
    "union_fields",
    "STAGE_VALIDATE",
    "STAGE_RECONCILE",
    "STAGE_PERSIST",
    "REASON_VALIDATION_FAILED",
    "REASON_DUPLICATE",
    "REASON_STORAGE_ERROR",
    "VALIDATION_LOG_NAME",
    "DUPLICATE_LOG_NAME",
]
