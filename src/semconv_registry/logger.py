"""
Structured logging for registry resolution runs.

Outputs one JSON line per run event for log shippers (or a short text
line when ``log_format`` is ``text``).  Per-group detail stays on the
module loggers at DEBUG; this logger only records run-level events.

Logged events:
- resolution.started
- resolution.completed
- resolution.failed
- resolution.cancelled

Usage:
    from semconv_registry.logger import ResolutionLogger

    events = ResolutionLogger()
    events.log_started(group_count=120, max_workers=4)
    events.log_completed(group_count=120, attribute_count=870, duration_ms=41.2)
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from semconv_registry.config import RegistryConfig, get_config

# Structured event logger
_events_logger = logging.getLogger("semconv_registry.events")
_events_logger.setLevel(logging.INFO)

# Default handler writes one line per event to stdout
if not _events_logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    _events_logger.addHandler(handler)

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class ResolutionLogger:
    """
    Structured logger for resolution run events.

    Each entry carries timestamp, level, event, service and run_id so
    that the events of one run can be correlated.
    """

    def __init__(
        self,
        service_name: Optional[str] = None,
        run_id: Optional[str] = None,
        extra_labels: Optional[Dict[str, str]] = None,
        config: Optional[RegistryConfig] = None,
    ):
        """
        Initialize the event logger.

        Args:
            service_name: Service name for attribution (defaults to config)
            run_id: Correlation id for this run (generated if omitted)
            extra_labels: Additional labels attached to every entry
            config: Settings for format and level (defaults to get_config())
        """
        config = config or get_config()
        self.service_name = service_name or config.service_name
        self.run_id = run_id or uuid.uuid4().hex[:16]
        self.log_format = config.log_format
        self.extra_labels = extra_labels or {}
        self._logger = _events_logger
        self._logger.setLevel(_LEVELS[config.log_level])

    def _emit(self, event: str, level: str = "info", **fields: Any) -> None:
        """
        Emit a structured log entry.

        Args:
            event: Event type (e.g., "resolution.started")
            level: Log level (info, warn, error)
            **fields: Event-specific fields; ``None`` values are dropped
        """
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "event": event,
            "service": self.service_name,
            "run_id": self.run_id,
        }
        entry.update({k: v for k, v in fields.items() if v is not None})

        if self.extra_labels:
            entry["labels"] = self.extra_labels

        if self.log_format == "text":
            details = " ".join(f"{k}={v}" for k, v in fields.items() if v is not None)
            log_line = f"{event} run_id={self.run_id} {details}".rstrip()
        else:
            log_line = json.dumps(entry, default=str)

        if level == "error":
            self._logger.error(log_line)
        elif level == "warn":
            self._logger.warning(log_line)
        else:
            self._logger.info(log_line)

    def log_started(self, group_count: int, max_workers: int = 1) -> None:
        """Log the start of a resolution run."""
        self._emit(
            event="resolution.started",
            group_count=group_count,
            max_workers=max_workers,
        )

    def log_completed(
        self,
        group_count: int,
        attribute_count: int,
        duration_ms: float,
        groups_by_kind: Optional[Dict[str, int]] = None,
    ) -> None:
        """Log a successful resolution run."""
        self._emit(
            event="resolution.completed",
            group_count=group_count,
            attribute_count=attribute_count,
            duration_ms=round(duration_ms, 3),
            groups_by_kind=groups_by_kind,
        )

    def log_failed(
        self,
        error_type: str,
        error_count: int,
        message: str,
        phase: Optional[str] = None,
    ) -> None:
        """Log a failed resolution run."""
        self._emit(
            event="resolution.failed",
            level="error",
            error_type=error_type,
            error_count=error_count,
            message=message,
            phase=phase,
        )

    def log_cancelled(self, group_id: Optional[str] = None, phase: Optional[str] = None) -> None:
        """Log a cancelled resolution run."""
        self._emit(
            event="resolution.cancelled",
            level="warn",
            group_id=group_id,
            phase=phase,
        )
