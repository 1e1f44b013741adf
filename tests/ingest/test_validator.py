"""Tests for row validation."""

import pytest

from apple_explorer.ingest.columns import UPLOAD_V1
from apple_explorer.ingest.validator import (
    MSG_ACCESSION,
    MSG_CULTIVAR_NAME,
    MSG_GENUS,
    MSG_ORIGIN_CITY,
    MSG_ORIGIN_COUNTRY,
    MSG_ORIGIN_PROVINCE,
    MSG_PEDIGREE,
    MSG_SPECIES,
    validate_row,
)


class TestRequiredFields:
    def test_valid_row_has_no_errors(self, make_row):
        assert validate_row(make_row()) == []

    def test_blank_accession(self):
        errors = validate_row({"ACCESSION": "", "CULTIVAR NAME": "Gala"})
        assert errors == [MSG_ACCESSION]

    def test_missing_both_in_order(self):
        assert validate_row({}) == [MSG_CULTIVAR_NAME, MSG_ACCESSION]

    def test_whitespace_cultivar_name(self):
        assert validate_row({"ACCESSION": "TD1", "CULTIVAR NAME": "   "}) == [MSG_CULTIVAR_NAME]

    def test_non_string_cultivar_name(self):
        assert validate_row({"ACCESSION": "TD1", "CULTIVAR NAME": 42}) == [MSG_CULTIVAR_NAME]


class TestAccession:
    @pytest.mark.parametrize("value", ["TD-001", "TD 001", " TD001", "TD001 ", "TD_1"])
    def test_rejects_non_alphanumeric(self, value):
        assert validate_row({"ACCESSION": value, "CULTIVAR NAME": "Gala"}) == [MSG_ACCESSION]

    def test_integer_cell_accepted(self):
        assert validate_row({"ACCESSION": 12345, "CULTIVAR NAME": "Gala"}) == []

    @pytest.mark.parametrize("value", [12.5, True])
    def test_float_and_bool_rejected(self, value):
        assert validate_row({"ACCESSION": value, "CULTIVAR NAME": "Gala"}) == [MSG_ACCESSION]


class TestOptionalFields:
    def _row(self, **extra):
        row = {"ACCESSION": "TD1", "CULTIVAR NAME": "Gala"}
        row.update(extra)
        return row

    def test_absent_optional_fields_are_fine(self):
        assert validate_row(self._row()) == []

    def test_blank_optional_fields_are_absent(self):
        row = self._row(**{"E Origin Province": "  ", "E GENUS": ""})
        assert validate_row(row) == []

    def test_country_must_be_string(self):
        assert validate_row(self._row(**{"E Origin Country": 7})) == [MSG_ORIGIN_COUNTRY]

    @pytest.mark.parametrize("value", ["O", "New York", "Ont.", 12])
    def test_province_pattern(self, value):
        assert validate_row(self._row(**{"E Origin Province": value})) == [MSG_ORIGIN_PROVINCE]

    def test_province_ok(self):
        assert validate_row(self._row(**{"E Origin Province": "ON"})) == []

    def test_city_must_be_string(self):
        assert validate_row(self._row(**{"E Origin City": 3.0})) == [MSG_ORIGIN_CITY]

    def test_pedigree_must_be_string(self):
        assert validate_row(self._row(**{"E pedigree": 99})) == [MSG_PEDIGREE]

    @pytest.mark.parametrize("value", ["malus", "MALUS", "Malus ", "M"])
    def test_genus_pattern(self, value):
        assert validate_row(self._row(**{"E GENUS": value})) == [MSG_GENUS]

    @pytest.mark.parametrize("value", ["Domestica", "sieversii x", "d0mestica"])
    def test_species_pattern(self, value):
        assert validate_row(self._row(**{"E SPECIES": value})) == [MSG_SPECIES]

    def test_fallback_column_is_checked(self):
        row = self._row(**{"Origin Provir": "X"})
        assert validate_row(row) == [MSG_ORIGIN_PROVINCE]


class TestAccumulation:
    def test_all_errors_reported_in_order(self):
        row = {
            "ACCESSION": "bad-1",
            "CULTIVAR NAME": "",
            "E Origin Country": 1,
            "E Origin Province": "Q",
            "E Origin City": 2,
            "E pedigree": 3,
            "E GENUS": "malus",
            "E SPECIES": "Domestica",
        }
        assert validate_row(row) == [
            MSG_CULTIVAR_NAME,
            MSG_ACCESSION,
            MSG_ORIGIN_COUNTRY,
            MSG_ORIGIN_PROVINCE,
            MSG_ORIGIN_CITY,
            MSG_PEDIGREE,
            MSG_GENUS,
            MSG_SPECIES,
        ]

    def test_does_not_mutate_row(self, make_row):
        row = make_row(**{"ACCESSION": ""})
        before = dict(row)
        validate_row(row)
        assert row == before


class TestUploadMapping:
    def test_camel_case_labels(self):
        assert validate_row({"accession": "TD1", "cultivarName": "Gala"}, UPLOAD_V1) == []

    def test_inventory_labels_ignored_under_upload_mapping(self):
        row = {"ACCESSION": "TD1", "CULTIVAR NAME": "Gala"}
        assert validate_row(row, UPLOAD_V1) == [MSG_CULTIVAR_NAME, MSG_ACCESSION]
