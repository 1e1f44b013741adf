"""API test fixtures: an app wired to the in-memory store."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from apple_explorer.api import create_app
from apple_explorer.core.settings import AppleExplorerSettings


@pytest.fixture()
def settings(tmp_path) -> AppleExplorerSettings:
    return AppleExplorerSettings(store_backend="memory", log_dir=str(tmp_path / "logs"))


@pytest.fixture()
def app(settings, store):
    return create_app(settings=settings, store=store)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c
