"""Tests for file and payload row sources."""

import json

import pytest
from openpyxl import Workbook

from apple_explorer.core.errors import InputError, ParseError, SourceNotFoundError
from apple_explorer.ingest.sources import FileFormat, FileRowSource, parse_csv_bytes


@pytest.fixture()
def xlsx_path(tmp_path):
    path = tmp_path / "TDInventory.xlsx"
    wb = Workbook()
    ws = wb.active
    ws.append(["ACCESSION", "CULTIVAR NAME", "Weight"])
    ws.append(["TD001", "Honeycrisp", 150])
    ws.append([None, None, None])
    ws.append([1234, "Gala", None])
    wb.save(path)
    return path


class TestDelimited:
    def test_csv(self, tmp_path):
        path = tmp_path / "apples.csv"
        path.write_text("accession,cultivarName\nTD001,Honeycrisp\nTD002,\n", encoding="utf-8")
        rows = FileRowSource(path).read()
        assert rows == [
            {"accession": "TD001", "cultivarName": "Honeycrisp"},
            {"accession": "TD002", "cultivarName": ""},
        ]

    def test_csv_with_bom(self, tmp_path):
        path = tmp_path / "apples.csv"
        path.write_bytes(b"\xef\xbb\xbfaccession,cultivarName\nTD001,Gala\n")
        assert list(FileRowSource(path).read()[0]) == ["accession", "cultivarName"]

    def test_surplus_cells_dropped(self, tmp_path):
        path = tmp_path / "apples.csv"
        path.write_text("accession\nTD001,extra\n")
        assert FileRowSource(path).read() == [{"accession": "TD001"}]

    def test_tsv(self, tmp_path):
        path = tmp_path / "apples.tsv"
        path.write_text("accession\tcultivarName\nTD001\tGala\n")
        assert FileRowSource(path).read() == [{"accession": "TD001", "cultivarName": "Gala"}]

    def test_headers(self, tmp_path):
        path = tmp_path / "apples.csv"
        path.write_text("ACCESSION,CULTIVAR NAME,E GENUS\nTD001,Gala,Malus\n")
        assert FileRowSource(path).headers() == ["ACCESSION", "CULTIVAR NAME", "E GENUS"]


class TestXlsx:
    def test_first_sheet_rows(self, xlsx_path):
        rows = FileRowSource(xlsx_path).read()
        assert rows == [
            {"ACCESSION": "TD001", "CULTIVAR NAME": "Honeycrisp", "Weight": 150},
            {"ACCESSION": 1234, "CULTIVAR NAME": "Gala"},
        ]

    def test_headers(self, xlsx_path):
        assert FileRowSource(xlsx_path).headers() == ["ACCESSION", "CULTIVAR NAME", "Weight"]

    def test_not_a_workbook(self, tmp_path):
        path = tmp_path / "fake.xlsx"
        path.write_text("not a zip")
        with pytest.raises(ParseError):
            FileRowSource(path).read()


class TestJson:
    def test_array(self, tmp_path):
        path = tmp_path / "apples.json"
        path.write_text(json.dumps([{"accession": "TD1"}]))
        assert FileRowSource(path).read() == [{"accession": "TD1"}]

    def test_wrapped_array(self, tmp_path):
        path = tmp_path / "apples.json"
        path.write_text(json.dumps({"data": [{"accession": "TD1"}, {"accession": "TD2"}]}))
        assert len(FileRowSource(path).read()) == 2

    def test_invalid(self, tmp_path):
        path = tmp_path / "apples.json"
        path.write_text("{nope")
        with pytest.raises(ParseError):
            FileRowSource(path).read()

    def test_jsonl(self, tmp_path):
        path = tmp_path / "apples.jsonl"
        path.write_text('{"accession": "TD1"}\n\n{"accession": "TD2"}\n')
        assert [r["accession"] for r in FileRowSource(path).read()] == ["TD1", "TD2"]

    def test_jsonl_non_object(self, tmp_path):
        path = tmp_path / "apples.jsonl"
        path.write_text('{"accession": "TD1"}\n[1, 2]\n')
        with pytest.raises(ParseError, match="line 2"):
            FileRowSource(path).read()


class TestErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceNotFoundError) as exc_info:
            FileRowSource(tmp_path / "missing.csv").read()
        assert exc_info.value.context.source_name.endswith("missing.csv")

    def test_unknown_extension(self, tmp_path):
        with pytest.raises(InputError, match="Cannot detect format"):
            FileRowSource(tmp_path / "apples.txt")

    def test_explicit_format(self, tmp_path):
        path = tmp_path / "apples.txt"
        path.write_text("accession\nTD1\n")
        source = FileRowSource(path, format="csv")
        assert source.format is FileFormat.CSV
        assert source.read() == [{"accession": "TD1"}]

    def test_unsupported_explicit_format(self, tmp_path):
        with pytest.raises(InputError, match="Unsupported format"):
            FileRowSource(tmp_path / "apples.txt", format="parquet")


class TestParseCsvBytes:
    def test_rows(self):
        rows = parse_csv_bytes(b"accession,cultivarName\r\nTD1,Gala\r\n")
        assert rows == [{"accession": "TD1", "cultivarName": "Gala"}]

    def test_empty_payload(self):
        assert parse_csv_bytes(b"") == []

    def test_not_utf8(self):
        with pytest.raises(ParseError):
            parse_csv_bytes(b"accession\n\xff\xfe\n")
