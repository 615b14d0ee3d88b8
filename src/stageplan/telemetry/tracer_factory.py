"""Thread-safe tracer cache for stageplan.

Tracers are created lazily with double-checked locking. If OpenTelemetry
fails to hand out a tracer, planning continues with a NoOpTracer.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from opentelemetry import trace

if TYPE_CHECKING:
    from opentelemetry.trace import Tracer

_tracers: dict[str, Tracer] = {}
_tracer_init_failed: bool = False
_lock = threading.Lock()


def get_tracer(name: str = "stageplan") -> Tracer:
    """Get or create the tracer for ``name``.

    Args:
        name: Instrumenting module name.

    Returns:
        Cached tracer, or a NoOpTracer if OpenTelemetry initialization failed.
    """
    global _tracer_init_failed

    if name in _tracers:
        return _tracers[name]

    if _tracer_init_failed:
        return trace.NoOpTracer()

    with _lock:
        if name in _tracers:
            return _tracers[name]
        if _tracer_init_failed:
            return trace.NoOpTracer()

        try:
            tracer = trace.get_tracer(name)
        except Exception:
            # Corrupted global OTel state; stop retrying
            _tracer_init_failed = True
            return trace.NoOpTracer()
        _tracers[name] = tracer
        return tracer


def set_tracer(name: str, tracer: Tracer | None) -> None:
    """Set or clear the cached tracer for ``name`` (for testing)."""
    with _lock:
        if tracer is None:
            _tracers.pop(name, None)
        else:
            _tracers[name] = tracer


def reset_tracer() -> None:
    """Clear all cached tracers and the failure flag (for test isolation)."""
    global _tracer_init_failed
    with _lock:
        _tracers.clear()
        _tracer_init_failed = False


__all__ = ["get_tracer", "reset_tracer", "set_tracer"]
