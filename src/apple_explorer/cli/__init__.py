"""Command-line interface (``apple-explorer``)."""
