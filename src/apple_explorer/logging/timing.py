"""
Step timing for structured logs.

``log_step`` brackets a unit of work (a whole import run, a file read) with
``<event>.start`` and ``<event>.end`` entries. The end entry carries
``duration_ms`` plus whatever metrics the block recorded on its
:class:`StepTimer`. A failing block logs ``<event>.error`` and re-raises.

Each step opens a span: its id is pushed into the log context, so entries
emitted inside the block (row rejections, store errors) carry ``span_id``
and nested steps record it as their ``parent_span_id``.
"""

import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from apple_explorer.logging.context import get_context, get_logger, push_context


@dataclass
class StepTimer:
    """Wall-clock span of one logged step and the metrics it reports."""

    step: str
    parent_span_id: str | None = None
    span_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    metrics: dict[str, Any] = field(default_factory=dict)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None

    def finish(self) -> None:
        if self.finished is None:
            self.finished = time.perf_counter()

    @property
    def duration_ms(self) -> float:
        end = time.perf_counter() if self.finished is None else self.finished
        return round((end - self.started) * 1000, 2)

    def add_metric(self, key: str, value: Any) -> "StepTimer":
        self.metrics[key] = value
        return self

    def fields(self) -> dict[str, Any]:
        """Span ids, duration and metrics for the closing log entry."""
        out: dict[str, Any] = {"span_id": self.span_id, "duration_ms": self.duration_ms}
        if self.parent_span_id:
            out["parent_span_id"] = self.parent_span_id
        out.update(self.metrics)
        return out


@contextmanager
def log_step(event: str, log_start: bool = True, level: str = "info", **metrics: Any) -> Iterator[StepTimer]:
    """
    Time a block and log it as one step.

    Usage:
        with log_step("import.run", rows_in=120) as timer:
            summary = pipeline.run(rows)
            timer.add_metric("inserted", summary.inserted)

        # DEBUG import.run.start span_id=a1b2c3d4 rows_in=120
        # INFO  import.run.end   span_id=a1b2c3d4 duration_ms=42.1 rows_in=120 inserted=117
    """
    log = get_logger("apple_explorer.timing")
    timer = StepTimer(step=event, parent_span_id=get_context().span_id, metrics=dict(metrics))
    token = push_context(span_id=timer.span_id, parent_span_id=timer.parent_span_id, step=event)

    try:
        if log_start:
            log.debug(f"{event}.start", span_id=timer.span_id, **metrics)
        yield timer
    except Exception as e:
        timer.finish()
        log.error(f"{event}.error", error_type=type(e).__name__, error=str(e), **timer.fields())
        raise
    finally:
        timer.finish()
        token.restore()

    getattr(log, level)(f"{event}.end", **timer.fields())


def log_row_counts(log: Any, step: str, **counts: Any) -> None:
    """
    Log the row counts of a processing step as ``<step>.rows``.

    Counts given as None are left out.

    Usage:
        log_row_counts(log, "import", rows_in=120, rows_out=117, rows_rejected=3)
    """
    log.info(f"{step}.rows", **{k: v for k, v in counts.items() if v is not None})
