"""Tests for resolution span event emission."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    SimpleSpanProcessor,
    SpanExporter,
    SpanExportResult,
)

from semconv_registry.config import RegistryConfig
from semconv_registry.resolver.errors import (
    CompoundResolutionError,
    InheritanceCycleError,
    UnresolvedReferenceError,
)
from semconv_registry.resolver.otel import emit_resolution_complete, emit_resolution_failed
from semconv_registry.resolver.registry import resolve_registry
from semconv_registry.resolver.stats import RegistryStats


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_span():
    """Create a mock OTel span that is recording."""
    span = MagicMock()
    span.is_recording.return_value = True
    return span


@pytest.fixture
def mock_otel(mock_span):
    """Patch OTel to return our mock span."""
    with patch("semconv_registry._otel_helpers.otel_trace") as mock_trace:
        mock_trace.get_current_span.return_value = mock_span
        yield mock_span


# ---------------------------------------------------------------------------
# emit_resolution_complete
# ---------------------------------------------------------------------------


class TestEmitResolutionComplete:
    def test_emits_counts(self, mock_otel):
        stats = RegistryStats(
            group_count=3,
            groups_by_kind={"attribute_group": 1, "span": 2},
            attribute_count=7,
        )
        emit_resolution_complete(stats, duration_ms=12.34567)
        mock_otel.add_event.assert_called_once()
        call_args = mock_otel.add_event.call_args
        assert call_args.kwargs["name"] == "registry.resolution.complete"
        attrs = call_args.kwargs["attributes"]
        assert attrs["registry.groups"] == 3
        assert attrs["registry.attributes"] == 7
        assert attrs["registry.groups.span"] == 2
        assert attrs["registry.duration_ms"] == 12.346

    def test_not_recording_is_noop(self, mock_otel):
        mock_otel.is_recording.return_value = False
        emit_resolution_complete(RegistryStats(), duration_ms=0.0)
        mock_otel.add_event.assert_not_called()


# ---------------------------------------------------------------------------
# emit_resolution_failed
# ---------------------------------------------------------------------------


class TestEmitResolutionFailed:
    def test_single_error(self, mock_otel):
        emit_resolution_failed(InheritanceCycleError(["a", "b", "a"]))
        attrs = mock_otel.add_event.call_args.kwargs["attributes"]
        assert attrs["registry.error.type"] == "InheritanceCycleError"
        assert attrs["registry.error.count"] == 1
        assert "a -> b -> a" in attrs["registry.error.first"]

    def test_compound_error(self, mock_otel):
        error = CompoundResolutionError(
            [UnresolvedReferenceError("x.one", "x"), UnresolvedReferenceError("y.two", "y")]
        )
        emit_resolution_failed(error)
        attrs = mock_otel.add_event.call_args.kwargs["attributes"]
        assert attrs["registry.error.type"] == "CompoundResolutionError"
        assert attrs["registry.error.count"] == 2
        assert "x.one" in attrs["registry.error.first"]

    def test_without_sdk_no_crash(self):
        emit_resolution_failed(UnresolvedReferenceError("x.one"))


# ---------------------------------------------------------------------------
# With a real SDK tracer
# ---------------------------------------------------------------------------


class CollectingExporter(SpanExporter):
    """Collects spans in memory for testing."""

    def __init__(self):
        self.spans = []

    def export(self, spans):
        self.spans.extend(spans)
        return SpanExportResult.SUCCESS

    def shutdown(self):
        pass

    def force_flush(self, timeout_millis=30000):
        return True


@pytest.fixture
def exporter():
    return CollectingExporter()


@pytest.fixture
def tracer(exporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return provider.get_tracer("semconv-registry-test")


class TestWithSdkTracer:
    def test_resolution_event_recorded_on_current_span(self, tracer, exporter, db_registry_groups):
        with tracer.start_as_current_span("resolve"):
            resolve_registry(db_registry_groups, config=RegistryConfig())

        assert len(exporter.spans) == 1
        events = exporter.spans[0].events
        assert [e.name for e in events] == ["registry.resolution.complete"]
        assert events[0].attributes["registry.groups"] == 4
        assert events[0].attributes["registry.groups.span"] == 3

    def test_failure_event_recorded(self, tracer, exporter):
        groups = [{"id": "x", "type": "span", "attributes": [{"ref": "x.one"}]}]
        with tracer.start_as_current_span("resolve"):
            with pytest.raises(UnresolvedReferenceError):
                resolve_registry(groups, config=RegistryConfig())

        event = exporter.spans[0].events[0]
        assert event.name == "registry.resolution.failed"
        assert event.attributes["registry.error.count"] == 1
