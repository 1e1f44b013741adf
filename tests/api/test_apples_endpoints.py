"""Tests for the /apples endpoints."""

import csv
import io

import pytest
from fastapi.testclient import TestClient

from apple_explorer.api import create_app
from apple_explorer.core.models import EntityKind
from apple_explorer.ingest.pipeline import run_import

UPLOAD_CSV = (
    b"accession,cultivarName,genus,originCountry\n"
    b"TD001,Honeycrisp,Malus,Canada\n"
    b",Nameless,Malus,Canada\n"
    b"TD001,Honeycrisp Clone,Malus,Canada\n"
    b"TD002,Gala,Malus,New Zealand\n"
)


@pytest.fixture()
def catalog(store, inventory_rows):
    run_import(store, inventory_rows)
    return store


def _upload(client, content=UPLOAD_CSV, filename="apples.csv"):
    return client.post("/api/v1/apples/upload", files={"file": (filename, content, "text/csv")})


class TestQuery:
    def test_all(self, client, catalog):
        resp = client.get("/api/v1/apples")
        assert resp.status_code == 200
        body = resp.json()
        assert body["page"]["total"] == 3
        assert {a["origin"]["country"] for a in body["data"]} == {"United States", "New Zealand", "Japan"}

    def test_camel_case_filters(self, client, catalog):
        resp = client.get("/api/v1/apples", params={"cultivarName": "GALA", "originCountry": "zealand"})
        assert [a["accession"] for a in resp.json()["data"]] == ["TD002"]

    def test_no_match(self, client, catalog):
        body = client.get("/api/v1/apples", params={"accession": "TD999"}).json()
        assert body["data"] == []
        assert body["page"]["total"] == 0


class TestCreate:
    def test_created(self, client, store):
        resp = client.post(
            "/api/v1/apples",
            json={"accession": "TD100", "cultivarName": "Ambrosia", "originId": "origin-1"},
        )
        assert resp.status_code == 201
        assert resp.json()["data"]["cultivarName"] == "Ambrosia"
        assert store.count(EntityKind.APPLE) == 1

    def test_missing_fields(self, client):
        resp = client.post("/api/v1/apples", json={"accession": "TD100"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["title"] == "Missing required fields: accession, cultivarName, or originId"
        assert [e["field"] for e in body["errors"]] == ["cultivarName", "originId"]

    def test_conflict(self, client, catalog):
        resp = client.post(
            "/api/v1/apples",
            json={"accession": "TD001", "cultivarName": "Honeycrisp", "originId": "origin-1"},
        )
        assert resp.status_code == 409
        assert {e["field"] for e in resp.json()["errors"]} == {"accession", "cultivarName"}


class TestUpload:
    def test_partitioned_outcome(self, client, store, settings):
        resp = _upload(client)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["message"] == "CSV processed"
        assert data["insertedCount"] == 2
        assert data["skippedCount"] == 2
        assert data["validationFailedCount"] == 1
        assert data["duplicateCount"] == 1
        assert [e["row_number"] for e in data["errors"]] == [2, 3]
        assert data["error_log"] == "/api/v1/apples/upload/errors"
        assert store.count(EntityKind.APPLE) == 2

    def test_error_log_download(self, client):
        _upload(client)
        resp = client.get("/api/v1/apples/upload/errors")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        rows = list(csv.DictReader(io.StringIO(resp.text)))
        assert sorted(r["reason_code"] for r in rows) == ["DUPLICATE", "VALIDATION_FAILED"]

    def test_clean_upload_has_no_log(self, client):
        data = _upload(client, b"accession,cultivarName\nTD050,Jazz\n").json()["data"]
        assert data["insertedCount"] == 1
        assert data["error_log"] is None
        assert client.get("/api/v1/apples/upload/errors").status_code == 404

    def test_clean_upload_clears_previous_log(self, client):
        _upload(client)
        assert client.get("/api/v1/apples/upload/errors").status_code == 200

        data = _upload(client, b"accession,cultivarName\nTD060,Ambrosia\n").json()["data"]

        assert data["error_log"] is None
        assert client.get("/api/v1/apples/upload/errors").status_code == 404

    def test_upload_links_given_origin(self, client, store):
        origin_id = store.insert(EntityKind.ORIGIN, {"country": "Canada"})
        content = f"accession,cultivarName,originId\nTD070,Cortland,{origin_id}\n".encode()

        assert _upload(client, content).json()["data"]["insertedCount"] == 1

        apple = store.find(EntityKind.APPLE, accession="TD070")[0]
        assert apple["originId"] == origin_id
        assert store.count(EntityKind.ORIGIN) == 1

    def test_no_file(self, client):
        resp = client.post("/api/v1/apples/upload")
        assert resp.status_code == 400
        assert resp.json()["title"] == "No file uploaded"

    def test_too_large(self, settings, store):
        small = settings.model_copy(update={"max_upload_bytes": 16})
        with TestClient(create_app(settings=small, store=store)) as client:
            resp = _upload(client)
        assert resp.status_code == 413
        assert store.count(EntityKind.APPLE) == 0

    def test_unreadable_file(self, client):
        resp = _upload(client, b"accession\n\xff\xfe\n")
        assert resp.status_code == 400


class TestExport:
    def test_csv_attachment(self, client, catalog):
        resp = client.get("/api/v1/apples/export")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert 'filename="filtered_apple_data.csv"' in resp.headers["content-disposition"]
        rows = list(csv.DictReader(io.StringIO(resp.text)))
        assert [r["cultivarName"] for r in rows] == ["Fuji", "Gala", "Honeycrisp"]

    def test_sort_and_page(self, client, catalog):
        resp = client.get("/api/v1/apples/export", params={"sortBy": "accession", "order": "desc", "limit": 2})
        rows = list(csv.DictReader(io.StringIO(resp.text)))
        assert [r["accession"] for r in rows] == ["TD003", "TD002"]

    def test_filtered(self, client, catalog):
        resp = client.get("/api/v1/apples/export", params={"originCountry": "japan"})
        assert [r["accession"] for r in csv.DictReader(io.StringIO(resp.text))] == ["TD003"]

    def test_empty_page(self, client, catalog):
        resp = client.get("/api/v1/apples/export", params={"page": 9})
        assert resp.status_code == 404
        assert resp.json()["title"] == "No apples found to export"

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"order": "up"}])
    def test_invalid_params(self, client, params):
        assert client.get("/api/v1/apples/export", params=params).status_code == 422
