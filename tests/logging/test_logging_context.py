"""Tests for the run-aware log context."""

from apple_explorer.logging import (
    LogContext,
    bind_context,
    clear_context,
    get_context,
    new_run_id,
    push_context,
    set_context,
)
from apple_explorer.logging.context import add_context_processor


class TestLogContext:
    def test_to_dict_skips_none(self):
        assert LogContext(run_id="r1", caller="cli").to_dict() == {"run_id": "r1", "caller": "cli"}

    def test_merge_ignores_unknown_and_none(self):
        merged = LogContext(run_id="r1").merge(source="a.csv", run_id=None, colour="red")
        assert merged.to_dict() == {"run_id": "r1", "source": "a.csv"}

    def test_new_run_id(self):
        run_id = new_run_id()
        assert len(run_id) == 12
        assert run_id != new_run_id()


class TestContextVar:
    def test_set_replaces(self):
        set_context(run_id="r1", source="a.csv")
        set_context(caller="api")
        assert get_context().to_dict() == {"caller": "api"}

    def test_bind_merges(self):
        set_context(run_id="r1")
        bind_context(source="a.csv")
        assert get_context().to_dict() == {"run_id": "r1", "source": "a.csv"}

    def test_push_and_restore(self):
        set_context(request_id="req-1")
        token = push_context(run_id="r1", mapping="upload-v1")
        assert get_context().run_id == "r1"
        assert get_context().request_id == "req-1"
        token.restore()
        assert get_context().to_dict() == {"request_id": "req-1"}

    def test_clear(self):
        set_context(run_id="r1")
        clear_context()
        assert get_context().to_dict() == {}


class TestContextProcessor:
    def test_adds_context(self):
        set_context(run_id="r1", source="a.csv")
        event = add_context_processor(None, "info", {"event": "import.row.invalid"})
        assert event == {"event": "import.row.invalid", "run_id": "r1", "source": "a.csv"}

    def test_event_values_win(self):
        set_context(run_id="r1")
        event = add_context_processor(None, "info", {"event": "x", "run_id": "explicit"})
        assert event["run_id"] == "explicit"
