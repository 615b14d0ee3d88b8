"""OpenTelemetry tracing utilities for stageplan.

Provides the ``create_span()`` context manager and the ``@traced`` decorator.
Exceptions escaping a span mark it as errored; their messages are sanitized
before being recorded.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, overload

from opentelemetry.trace import Status, StatusCode, Tracer

from stageplan.telemetry.sanitization import sanitize_error_message
from stageplan.telemetry.tracer_factory import get_tracer as _factory_get_tracer
from stageplan.telemetry.tracer_factory import reset_tracer
from stageplan.telemetry.tracer_factory import set_tracer as _factory_set_tracer

if TYPE_CHECKING:
    from collections.abc import Generator

    from opentelemetry.trace import Span

__all__ = ["create_span", "get_tracer", "reset_tracer", "set_tracer", "traced"]

P = ParamSpec("P")
R = TypeVar("R")

_TRACER_NAME = "stageplan"


def get_tracer() -> Tracer:
    """Get the stageplan tracer."""
    return _factory_get_tracer(_TRACER_NAME)


def set_tracer(tracer: Tracer | None) -> None:
    """Replace the stageplan tracer (for testing)."""
    _factory_set_tracer(_TRACER_NAME, tracer)


def _record_error(span: Span, exc: Exception) -> None:
    sanitized = sanitize_error_message(str(exc))
    span.set_status(Status(StatusCode.ERROR, sanitized))
    span.set_attribute("exception.type", type(exc).__name__)
    span.set_attribute("exception.message", sanitized)


@contextmanager
def create_span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Create a span as a context manager.

    Nested calls create parent-child relationships automatically.

    Args:
        name: Span name.
        attributes: Optional attributes to set on the span.

    Yields:
        The active span.

    Examples:
        >>> with create_span("stageplan.build", attributes={"environment.count": 3}):
        ...     pass
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(
        name,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            _record_error(span, e)
            raise


@overload
def traced(func: Callable[P, R]) -> Callable[P, R]: ...


@overload
def traced(
    *,
    name: str | None = None,
    attributes: dict[str, str] | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]: ...


def traced(
    func: Callable[P, R] | None = None,
    *,
    name: str | None = None,
    attributes: dict[str, str] | None = None,
) -> Callable[P, R] | Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator wrapping each call of a function in a span.

    Can be used with or without arguments:
        @traced
        def resolve(): ...

        @traced(name="stageplan.resolve_strategy")
        def resolve(): ...

    Args:
        func: The function to decorate (when used without parentheses).
        name: Span name. Defaults to the function name.
        attributes: Static attributes set on every span.

    Returns:
        The decorated function.
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        span_name = name if name is not None else fn.__name__

        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with create_span(span_name, attributes=attributes):
                return fn(*args, **kwargs)

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
