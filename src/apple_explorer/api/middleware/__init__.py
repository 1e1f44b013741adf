"""API middleware: error mapping and request ids."""
