"""
Shared OTel span event emission helper.

Provides ``add_span_event()``, the single place where resolver telemetry
touches the OpenTelemetry API.  Without a configured SDK the current span
is non-recording and the call is a no-op.

Usage::

    from semconv_registry._otel_helpers import add_span_event

    add_span_event("registry.resolution.complete", {"registry.groups": 12})
"""

from __future__ import annotations

from opentelemetry import trace as otel_trace


def add_span_event(
    name: str, attributes: dict[str, str | int | float | bool]
) -> None:
    """Add an event to the current OTel span if it is recording.

    Args:
        name: Event name (e.g. ``"registry.resolution.complete"``).
        attributes: Flat dict of span event attributes.
    """
    span = otel_trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name=name, attributes=attributes)
