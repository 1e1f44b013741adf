"""
Shared pytest fixtures for apple-explorer tests.

This module provides:
- An in-memory document store and operation contexts around it
- Raw rows in the curator-spreadsheet and upload-CSV shapes
- Log-context and settings-cache cleanup for test isolation
"""

from __future__ import annotations

from typing import Any

import pytest

from apple_explorer.core.adapters.memory import MemoryDocumentStore
from apple_explorer.core.settings import get_settings
from apple_explorer.logging import clear_context
from apple_explorer.ops.context import OperationContext


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark api/ and cli/ tests as integration, everything else as unit."""
    for item in items:
        path = str(item.path)
        if "/api/" in path or "/cli/" in path:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _clean_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture(autouse=True)
def _clean_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Store and contexts
# =============================================================================


@pytest.fixture()
def store() -> MemoryDocumentStore:
    """Empty in-memory document store."""
    return MemoryDocumentStore()


@pytest.fixture()
def ctx(store: MemoryDocumentStore) -> OperationContext:
    return OperationContext(store=store, caller="test")


@pytest.fixture()
def dry_ctx(store: MemoryDocumentStore) -> OperationContext:
    return OperationContext(store=store, caller="test", dry_run=True)


# =============================================================================
# Sample rows
# =============================================================================


def inventory_row(**overrides: Any) -> dict[str, Any]:
    """A valid curator-spreadsheet row; overrides are keyed by column label."""
    row: dict[str, Any] = {
        "ACCESSION": "TD001",
        "CULTIVAR NAME": "Honeycrisp",
        "ACNO": "1001",
        "E GENUS": "Malus",
        "E SPECIES": "domestica",
        "E pedigree": "Macoun x Honeygold",
        "Color": "Red",
        "Weight": "210 g",
        "E Origin Country": "United States",
        "E Origin Province": "Minnesota",
        "E Origin City": "Excelsior",
        "E Date Collected": "09/15/2023",
        "cmt (Inventory Comment)": "Crisp, sweet",
        "sitecmt (Site comment)": "Block 4",
    }
    row.update(overrides)
    return row


@pytest.fixture()
def inventory_rows() -> list[dict[str, Any]]:
    """Three valid spreadsheet rows with distinct natural keys."""
    return [
        inventory_row(),
        inventory_row(**{"ACCESSION": "TD002", "CULTIVAR NAME": "Gala", "E Origin Country": "New Zealand"}),
        inventory_row(**{"ACCESSION": "TD003", "CULTIVAR NAME": "Fuji", "E Origin Country": "Japan"}),
    ]


@pytest.fixture()
def upload_rows() -> list[dict[str, Any]]:
    """Upload-CSV shaped rows (camelCase labels, every value a string)."""
    return [
        {"accession": "TD001", "cultivarName": "Honeycrisp", "genus": "Malus", "originCountry": "Canada"},
        {"accession": "TD002", "cultivarName": "Gala", "genus": "Malus", "originCountry": "New Zealand"},
    ]


@pytest.fixture()
def make_row():
    """Factory for curator-spreadsheet rows: ``make_row(**{"ACCESSION": "X1"})``."""
    return inventory_row
