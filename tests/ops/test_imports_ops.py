"""Tests for the import operation."""

import json

from apple_explorer.core.errors import PersistenceError
from apple_explorer.core.models import EntityKind
from apple_explorer.ingest.columns import UPLOAD_V1
from apple_explorer.ops.imports import read_headers, run_import
from apple_explorer.ops.requests import ImportRequest

UPLOAD_CSV = (
    b"accession,cultivarName,genus,originCountry\n"
    b"TD001,Honeycrisp,Malus,Canada\n"
    b",Nameless,Malus,Canada\n"
    b"TD001,Honeycrisp Clone,Malus,Canada\n"
    b"TD002,Gala,Malus,New Zealand\n"
)


def _upload(**overrides):
    fields = {"payload": UPLOAD_CSV, "source_name": "apples.csv", "mapping": UPLOAD_V1.label}
    fields.update(overrides)
    return ImportRequest(**fields)


class TestPayloadImport:
    def test_partitions_rows(self, ctx, store):
        result = run_import(ctx, _upload())
        assert result.success
        summary = result.data
        assert summary.total == 4
        assert summary.inserted == 2
        assert summary.validation_failed == 1
        assert summary.duplicate_count == 1
        assert store.count(EntityKind.APPLE) == 2
        assert result.metadata["source"] == "apples.csv"
        assert result.metadata["mapping"] == "upload-v1"

    def test_separate_logs(self, ctx, tmp_path):
        result = run_import(ctx, _upload(output_dir=tmp_path))
        assert set(result.data.audit_files) == {"import-errors", "duplicate-entries"}
        assert (tmp_path / "import-errors.csv").exists()
        assert (tmp_path / "duplicate-entries.json").exists()

    def test_combined_log_with_prefix(self, ctx, tmp_path):
        result = run_import(ctx, _upload(output_dir=tmp_path, log_prefix="upload-errors"))
        assert list(result.data.audit_files) == ["upload-errors"]
        entries = json.loads((tmp_path / "upload-errors.json").read_text())
        assert sorted(e["reason_code"] for e in entries) == ["DUPLICATE", "VALIDATION_FAILED"]
        assert not (tmp_path / "import-errors.json").exists()

    def test_dry_run_writes_nothing(self, dry_ctx, store, tmp_path):
        result = run_import(dry_ctx, _upload(output_dir=tmp_path, log_prefix="upload-errors"))
        assert result.data.dry_run
        assert result.data.inserted == 2
        assert store.count(EntityKind.APPLE) == 0
        assert list(tmp_path.iterdir()) == []

    def test_no_input(self, ctx):
        result = run_import(ctx, ImportRequest())
        assert result.error.code == "INVALID_INPUT"
        assert result.error.message == "No file uploaded"

    def test_unreadable_payload(self, ctx, store):
        result = run_import(ctx, _upload(payload=b"accession\n\xff\n"))
        assert result.error.code == "INVALID_INPUT"
        assert store.count(EntityKind.APPLE) == 0

    def test_unknown_mapping(self, ctx):
        result = run_import(ctx, _upload(mapping="upload-v7"))
        assert result.error.code == "INVALID_INPUT"


class TestFileImport:
    def test_csv_file(self, ctx, store, tmp_path):
        path = tmp_path / "apples.csv"
        path.write_bytes(UPLOAD_CSV)
        result = run_import(ctx, ImportRequest(path=path, mapping="upload-v1"))
        assert result.data.inserted == 2
        assert result.metadata["source"] == "apples.csv"

    def test_missing_file(self, ctx, tmp_path):
        result = run_import(ctx, ImportRequest(path=tmp_path / "missing.xlsx"))
        assert result.error.code == "INVALID_INPUT"
        assert result.error.details["source_name"].endswith("missing.xlsx")

    def test_storage_failure_warns(self, ctx, store, monkeypatch):
        original = store.insert

        def insert(kind, record):
            if kind is EntityKind.APPLE and record.get("accession") == "TD002":
                raise PersistenceError("Insert failed")
            return original(kind, record)

        monkeypatch.setattr(store, "insert", insert)
        result = run_import(ctx, _upload())
        assert result.success
        assert result.data.storage_failures == 1
        assert "failed to persist" in result.warnings[0]


class TestReadHeaders:
    def test_headers(self, tmp_path):
        path = tmp_path / "apples.csv"
        path.write_bytes(UPLOAD_CSV)
        assert read_headers(path).data == ["accession", "cultivarName", "genus", "originCountry"]

    def test_missing_file(self, tmp_path):
        assert read_headers(tmp_path / "nope.csv").error.code == "INVALID_INPUT"
