"""
Row sources for local files and uploaded payloads.

Supports:
- CSV (comma-separated), TSV (tab-separated)
- XLSX (first worksheet, requires openpyxl)
- JSON (array of objects) and JSON Lines

Rows are fully materialized: the import pipeline needs the whole batch
before it starts, so there is no streaming API here.

Every failure to produce rows is an :class:`InputError` (fatal to the run):
missing file, unknown extension, unreadable content.

Usage:
    from apple_explorer.ingest.sources import FileRowSource

    source = FileRowSource("TDInventory.xlsx")
    headers = source.headers()
    rows = source.read()
"""

from __future__ import annotations

import csv
import io
import json
import zipfile
from enum import Enum
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from apple_explorer.core.errors import InputError, ParseError, SourceNotFoundError

Row = dict[str, Any]


class FileFormat(str, Enum):
    """Supported file formats."""

    CSV = "csv"
    TSV = "tsv"
    XLSX = "xlsx"
    JSON = "json"
    JSONL = "jsonl"


EXTENSION_MAP = {
    ".csv": FileFormat.CSV,
    ".tsv": FileFormat.TSV,
    ".xlsx": FileFormat.XLSX,
    ".xlsm": FileFormat.XLSX,
    ".json": FileFormat.JSON,
    ".jsonl": FileFormat.JSONL,
    ".ndjson": FileFormat.JSONL,
}


def _clean_delimited_row(row: dict[str | None, Any]) -> Row:
    # DictReader files surplus cells under a None key
    return {k: v for k, v in row.items() if k is not None}


def parse_delimited(stream: io.TextIOBase, delimiter: str = ",") -> list[Row]:
    """Read delimited text into rows keyed by the header line."""
    try:
        reader = csv.DictReader(stream, delimiter=delimiter)
        return [_clean_delimited_row(row) for row in reader]
    except (csv.Error, UnicodeDecodeError) as e:
        raise ParseError(f"Unreadable delimited data: {e}", cause=e)


def parse_csv_bytes(data: bytes, *, encoding: str = "utf-8-sig", delimiter: str = ",") -> list[Row]:
    """Rows from an uploaded CSV payload."""
    try:
        text = data.decode(encoding)
    except UnicodeDecodeError as e:
        raise ParseError(f"Upload is not valid {encoding} text", cause=e)
    return parse_delimited(io.StringIO(text, newline=""), delimiter=delimiter)


class FileRowSource:
    """
    Materialize rows from a local file.

    The format is detected from the extension unless given explicitly.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        format: FileFormat | str | None = None,
        encoding: str = "utf-8-sig",
    ):
        self._path = Path(path)
        self._encoding = encoding
        if format is None:
            self._format = self._detect_format()
        elif isinstance(format, str):
            try:
                self._format = FileFormat(format.lower())
            except ValueError as e:
                raise InputError(f"Unsupported format: {format}", cause=e).with_context(
                    source_name=str(self._path)
                )
        else:
            self._format = format

    @property
    def path(self) -> Path:
        return self._path

    @property
    def format(self) -> FileFormat:
        return self._format

    @property
    def name(self) -> str:
        return self._path.name

    def _detect_format(self) -> FileFormat:
        ext = self._path.suffix.lower()
        if ext in EXTENSION_MAP:
            return EXTENSION_MAP[ext]
        raise InputError(f"Cannot detect format for extension: {ext or '(none)'}").with_context(
            source_name=str(self._path)
        )

    def _check_exists(self) -> None:
        if not self._path.is_file():
            raise SourceNotFoundError(f"File not found: {self._path}").with_context(source_name=str(self._path))

    def read(self) -> list[Row]:
        """All rows, in file order."""
        self._check_exists()
        try:
            match self._format:
                case FileFormat.CSV:
                    return self._read_delimited(",")
                case FileFormat.TSV:
                    return self._read_delimited("\t")
                case FileFormat.XLSX:
                    return self._read_xlsx()
                case FileFormat.JSON:
                    return self._read_json()
                case FileFormat.JSONL:
                    return self._read_jsonl()
        except InputError as e:
            raise e.with_context(source_name=str(self._path))
        except OSError as e:
            raise InputError(f"Failed to read file: {self._path}", cause=e).with_context(
                source_name=str(self._path)
            )
        raise InputError(f"Unsupported format: {self._format}")

    def headers(self) -> list[str]:
        """Column labels from the header row (first row of the first sheet)."""
        self._check_exists()
        try:
            match self._format:
                case FileFormat.CSV | FileFormat.TSV:
                    delimiter = "\t" if self._format is FileFormat.TSV else ","
                    with open(self._path, encoding=self._encoding, newline="") as f:
                        first = next(csv.reader(f, delimiter=delimiter), [])
                    return list(first)
                case FileFormat.XLSX:
                    workbook = self._open_workbook()
                    try:
                        first = next(workbook.worksheets[0].iter_rows(max_row=1, values_only=True), ())
                    finally:
                        workbook.close()
                    return [str(v) for v in first if v is not None]
                case _:
                    return list(dict.fromkeys(k for row in self.read() for k in row))
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise InputError(f"Failed to read headers: {self._path}", cause=e).with_context(
                source_name=str(self._path)
            )

    # -------------------------------------------------------------------------
    # FORMAT-SPECIFIC READERS
    # -------------------------------------------------------------------------

    def _read_delimited(self, delimiter: str) -> list[Row]:
        with open(self._path, encoding=self._encoding, newline="") as f:
            return parse_delimited(f, delimiter=delimiter)

    def _open_workbook(self):
        try:
            return load_workbook(self._path, read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError) as e:
            raise ParseError(f"Not a readable workbook: {self._path}", cause=e)

    def _read_xlsx(self) -> list[Row]:
        """First worksheet; the first row is the header, empty cells are omitted."""
        workbook = self._open_workbook()
        try:
            if not workbook.worksheets:
                return []
            rows_iter = workbook.worksheets[0].iter_rows(values_only=True)
            header = next(rows_iter, None)
            if header is None:
                return []
            labels = [str(v).strip() if v is not None else None for v in header]
            rows = []
            for values in rows_iter:
                row = {
                    label: value
                    for label, value in zip(labels, values)
                    if label is not None and value is not None
                }
                if row:
                    rows.append(row)
            return rows
        finally:
            workbook.close()

    def _read_json(self) -> list[Row]:
        with open(self._path, encoding=self._encoding) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ParseError(f"Invalid JSON: {e}", cause=e)
        if isinstance(data, dict):
            for key in ("data", "items", "records", "rows"):
                if isinstance(data.get(key), list):
                    data = data[key]
                    break
            else:
                data = [data]
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise ParseError("Expected a JSON array of objects")
        return data

    def _read_jsonl(self) -> list[Row]:
        rows = []
        with open(self._path, encoding=self._encoding) as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    item = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ParseError(f"Invalid JSON at line {line_num}: {e}", cause=e)
                if not isinstance(item, dict):
                    raise ParseError(f"Expected an object at line {line_num}")
                rows.append(item)
        return rows


__all__ = [
    "FileFormat",
    "FileRowSource",
    "EXTENSION_MAP",
    "parse_delimited",
    "parse_csv_bytes",
]
