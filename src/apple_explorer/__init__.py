"""
Apple Explorer - cultivar catalog with a reconciling bulk import pipeline.

Packages:
- apple_explorer.core: errors, settings, records, document-store adapters
- apple_explorer.ingest: column mappings, row sources, validation,
  normalization, duplicate resolution, the import pipeline and audit logs
- apple_explorer.ops: operations shared by the CLI and the REST API
- apple_explorer.api / apple_explorer.cli: transports
"""

__version__ = "0.1.0"
