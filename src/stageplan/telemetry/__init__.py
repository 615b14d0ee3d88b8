"""OpenTelemetry and structlog integration for stageplan.

- create_span / traced: spans around planning operations
- configure_logging / add_trace_context: structlog with trace correlation
"""

from __future__ import annotations

from stageplan.telemetry.logging import add_trace_context, configure_logging
from stageplan.telemetry.sanitization import sanitize_error_message
from stageplan.telemetry.tracing import (
    create_span,
    get_tracer,
    reset_tracer,
    set_tracer,
    traced,
)

__all__ = [
    "add_trace_context",
    "configure_logging",
    "create_span",
    "get_tracer",
    "reset_tracer",
    "sanitize_error_message",
    "set_tracer",
    "traced",
]
