"""
REST API over the catalog and import operations.

Usage::

    from apple_explorer.api import create_app

    app = create_app()
"""

from apple_explorer.api.app import create_app

__all__ = ["create_app"]
