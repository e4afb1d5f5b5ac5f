"""
OTel span event emission helpers for registry resolution.

Usage::

    from semconv_registry.resolver.otel import (
        emit_resolution_complete,
        emit_resolution_failed,
    )

    emit_resolution_complete(registry.stats(), duration_ms=12.5)
    emit_resolution_failed(exc)
"""

from __future__ import annotations

import logging

from semconv_registry._otel_helpers import add_span_event
from semconv_registry.resolver.errors import CompoundResolutionError, RegistryResolutionError
from semconv_registry.resolver.stats import RegistryStats

logger = logging.getLogger(__name__)


def emit_resolution_complete(stats: RegistryStats, duration_ms: float) -> None:
    """Emit a span event summarising a successful resolution.

    Event name: ``registry.resolution.complete``
    """
    attrs: dict[str, str | int | float | bool] = {
        "registry.groups": stats.group_count,
        "registry.attributes": stats.attribute_count,
        "registry.duration_ms": round(duration_ms, 3),
    }
    for kind, count in stats.groups_by_kind.items():
        attrs[f"registry.groups.{kind}"] = count

    logger.debug(
        "Registry resolution complete: groups=%d attributes=%d duration_ms=%.1f",
        stats.group_count,
        stats.attribute_count,
        duration_ms,
    )

    add_span_event("registry.resolution.complete", attrs)


def emit_resolution_failed(error: RegistryResolutionError) -> None:
    """Emit a span event for a failed resolution.

    Event name: ``registry.resolution.failed``
    """
    errors = error.errors if isinstance(error, CompoundResolutionError) else [error]
    attrs: dict[str, str | int | float | bool] = {
        "registry.error.type": type(error).__name__,
        "registry.error.count": len(errors),
        "registry.error.first": str(errors[0]),
    }

    logger.warning(
        "Registry resolution FAILED: type=%s errors=%d",
        type(error).__name__,
        len(errors),
    )

    add_span_event("registry.resolution.failed", attrs)
