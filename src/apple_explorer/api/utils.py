"""
Shared router helpers.

- ``handle_error()``: turn a failed OperationResult into a problem response
"""

from __future__ import annotations

from fastapi import Request

from apple_explorer.api.middleware.errors import problem_response, status_for_error_code


def handle_error(result, request: Request | None = None):
    """Convert a failed ``OperationResult`` into a Problem Details response.

    Colliding or missing fields reported by the operation become
    field-level ``errors`` entries.
    """
    error = result.error
    code = error.code if error else "INTERNAL"
    details = error.details if error else {}
    field_names = details.get("fields") or details.get("missing") or []
    errors = [{"code": code, "message": name, "field": name} for name in field_names]
    errors.extend({"code": code, "message": msg} for msg in details.get("errors", []))
    return problem_response(
        status=status_for_error_code(code),
        title=error.message if error else "Operation failed",
        instance=str(request.url) if request is not None else "",
        errors=errors,
    )
