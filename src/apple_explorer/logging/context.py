"""
Logging context management using contextvars.

Run-aware context that attaches to every log entry: the import run id, the
row source, the current step and span ids for nested timing blocks. Context
propagates through the call stack without explicit parameter passing.
"""

import uuid
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Any

import structlog


def new_run_id() -> str:
    """Short, unique import run identifier."""
    return uuid.uuid4().hex[:12]


@dataclass
class LogContext:
    """
    Context attached to all log entries.

    Run identifiers:
        run_id: Import run identifier
        source: Row source label (file name, "upload", ...)
        mapping: Column mapping name and version

    Tracing (for nested timing blocks):
        span_id: Current span identifier
        parent_span_id: Parent span for nested operations

    Request context:
        caller: "cli", "api" or "sdk"
        request_id: API request id
        step: Current processing step name
    """

    run_id: str | None = None
    source: str | None = None
    mapping: str | None = None

    span_id: str | None = None
    parent_span_id: str | None = None

    caller: str | None = None
    request_id: str | None = None
    step: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merge(self, **kwargs) -> "LogContext":
        """Create new context with merged values."""
        current = asdict(self)
        current.update({k: v for k, v in kwargs.items() if v is not None and k in current})
        return LogContext(**current)


_log_context: ContextVar[LogContext] = ContextVar("log_context")  # noqa: B039


def get_context() -> LogContext:
    """Get the current log context."""
    return _log_context.get(LogContext())


def set_context(**kwargs) -> LogContext:
    """
    Replace the current log context.

    Use bind_context() to add to the existing one.
    """
    ctx = LogContext().merge(**kwargs)
    _log_context.set(ctx)
    return ctx


def bind_context(**kwargs) -> LogContext:
    """Merge values into the current context."""
    updated = get_context().merge(**kwargs)
    _log_context.set(updated)
    return updated


def clear_context() -> None:
    """Reset to an empty context."""
    _log_context.set(LogContext())


class _ContextToken:
    """Token for restoring context after a scoped operation."""

    def __init__(self, token):
        self._token = token

    def restore(self):
        _log_context.reset(self._token)


def push_context(**kwargs) -> _ContextToken:
    """
    Push new context values, returning a token to restore later.

    Usage:
        token = push_context(run_id=run_id, source="inventory.xlsx")
        try:
            do_work()
        finally:
            token.restore()
    """
    updated = get_context().merge(**kwargs)
    token = _log_context.set(updated)
    return _ContextToken(token)


def add_context_processor(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that adds the current context to every entry."""
    for key, value in get_context().to_dict().items():
        if key not in event_dict:
            event_dict[key] = value
    return event_dict


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)
