"""
Centralized settings for Apple Explorer.

One validated, cached settings object is read at the edges (CLI entry,
API app factory) and handed to the import pipeline and operations as
explicit values. Core logic never reads the environment.

All fields can be set via ``APPLE_EXPLORER_*`` environment variables (e.g.
``APPLE_EXPLORER_MONGO_URI=mongodb://localhost:27017``) or a ``.env`` file.

Tags:
    configuration, settings, pydantic, environment

Doc-Types:
    api-reference
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppleExplorerSettings(BaseSettings):
    """Apple Explorer configuration.

    Fields
    ──────
    store_backend     : ``mongo`` for MongoDB, ``memory`` for a process-local store
    mongo_uri         : MongoDB connection string
    database_name     : Database holding the Apples/AppleProfile/... collections
    log_level         : Structlog log level
    log_format        : ``console`` or ``json``
    log_dir           : Directory receiving import audit files
    column_mapping    : Built-in mapping name or path to a YAML mapping file
    max_upload_bytes  : Upload size cap enforced by the API
    """

    model_config = SettingsConfigDict(
        env_prefix="APPLE_EXPLORER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    store_backend: Literal["mongo", "memory"] = Field(default="mongo")
    mongo_uri: str = Field(default="mongodb://localhost:27017")
    database_name: str = Field(default="AppleExplorer")
    mongo_timeout_ms: int = Field(default=5000, description="Server selection timeout")

    # ── Import ───────────────────────────────────────────────────
    column_mapping: str = Field(default="inventory-v1", description="Mapping name or YAML path")
    log_dir: str = Field(default="logs", description="Audit file output directory")

    # ── Logging ──────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["console", "json"] = Field(default="console")

    # ── API ──────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    debug: bool = Field(default=False)
    api_prefix: str = Field(default="/api/v1")
    api_title: str = Field(default="Apple Explorer API")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, description="Upload cap (5 MiB)")
    cors_origins: list[str] = Field(default=["*"])


@lru_cache(maxsize=1)
def get_settings() -> AppleExplorerSettings:
    """Cached settings, loaded once per process."""
    return AppleExplorerSettings()
