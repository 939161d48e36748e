"""Tests for telemetry spans and @traced."""

from __future__ import annotations

from samplectl.services.result import ServiceResult
from samplectl.services.telemetry import (
    Span,
    disable_telemetry,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)


class _Service:
    @traced
    def run(self) -> ServiceResult:
        with trace_span("step") as span:
            if span is not None:
                span.annotate("rows", 3)
        return ServiceResult(ok=True, op="run", meta={"kept": True})

    @traced
    def plain(self) -> int:
        return 7


class TestSpan:
    def test_duration_zero_until_ended(self) -> None:
        span = Span(name="x")
        assert span.duration_ms == 0.0
        span.end()
        assert span.duration_ms >= 0.0

    def test_to_dict_nests_children(self) -> None:
        parent = Span(name="p")
        parent.children.append(Span(name="c"))
        parent.annotate("k", "v")
        data = parent.to_dict()
        assert data["name"] == "p"
        assert data["annotations"] == {"k": "v"}
        assert data["children"][0]["name"] == "c"


class TestTraced:
    def test_disabled_leaves_result_untouched(self) -> None:
        disable_telemetry()
        result = _Service().run()
        assert result.meta == {"kept": True}

    def test_enabled_merges_telemetry_into_meta(self) -> None:
        enable_telemetry()
        try:
            result = _Service().run()
        finally:
            disable_telemetry()
        assert result.meta is not None
        assert result.meta["kept"] is True
        tree = result.meta["telemetry"]
        assert tree["name"] == "_Service.run"
        assert tree["children"][0]["name"] == "step"
        assert tree["children"][0]["annotations"] == {"rows": 3}

    def test_non_result_return_passes_through(self) -> None:
        enable_telemetry()
        try:
            assert _Service().plain() == 7
        finally:
            disable_telemetry()

    def test_trace_span_outside_traced_call_yields_none(self) -> None:
        enable_telemetry()
        try:
            with trace_span("orphan") as span:
                assert span is None
            assert get_current_span() is None
        finally:
            disable_telemetry()
