"""Span helpers for service methods.

@traced() opens a span named after the function. Arguments whose names are
on the allowlist (ids, slugs, dates, counts) are recorded as span
attributes, whether passed positionally or by keyword.
"""

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode


def _bound_arguments(func: Callable, args: tuple, kwargs: dict[str, Any]) -> dict[str, Any]:
    try:
        bound = inspect.signature(func).bind_partial(*args, **kwargs)
    except TypeError:
        return dict(kwargs)
    return dict(bound.arguments)


def _setup_span(
    span: trace.Span,
    attributes: dict[str, str | int | float | bool] | None,
    arguments: dict[str, Any],
) -> None:
    if attributes:
        for key, value in attributes.items():
            span.set_attribute(key, value)
    _set_safe_span_attrs(span, arguments)


def _record_failure(span: trace.Span, exc: Exception) -> None:
    span.set_status(Status(StatusCode.ERROR, str(exc)))
    span.record_exception(exc)


def traced(
    operation_name: str | None = None,
    attributes: dict | None = None,
) -> Callable:
    """Decorator to create a span for a function (sync or async).

    Args:
        operation_name: Span name (defaults to module.qualname).
        attributes: Optional dict of static attributes to set on the span.
    """

    def decorator(func: Callable) -> Callable:
        tracer = trace.get_tracer(func.__module__)
        span_name = operation_name or f"{func.__module__}.{func.__qualname__}"

        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(span_name, record_exception=False) as span:
                _setup_span(span, attributes, _bound_arguments(func, args, kwargs))
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    _record_failure(span, e)
                    raise

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(span_name, record_exception=False) as span:
                _setup_span(span, attributes, _bound_arguments(func, args, kwargs))
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    _record_failure(span, e)
                    raise

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


# Allowlist of known-safe argument names for span attributes (case-insensitive).
# Only these are recorded; any other key is skipped to avoid leaking secrets.
_SAFE_SPAN_ATTR_KEYS = frozenset({
    "id", "ids", "name", "count", "limit", "status", "type", "kind", "slug",
    "organization_id", "user_id", "program_id", "week_id", "cohort_id",
    "instance_id", "enrollment_id", "habit_id", "task_id", "squad_id", "post_id",
    "event_id", "config_id", "week_number", "day_index", "global_day_index",
    "date", "today", "event_type",
})


def _set_safe_span_attrs(span: trace.Span, arguments: dict) -> None:
    """Set span attributes from call arguments; only allowlisted names are recorded."""
    for key, value in arguments.items():
        if not key.startswith("_") and key.lower() in _SAFE_SPAN_ATTR_KEYS:
            span.set_attribute(f"arg.{key}", str(value))


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Add attributes to the current span."""
    span = trace.get_current_span()
    if span and span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


def add_span_event(name: str, attributes: dict | None = None) -> None:
    """Add an event to the current span."""
    span = trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name, attributes=attributes or {})


def set_span_error(exception: Exception) -> None:
    """Mark the current span as error and record the exception."""
    span = trace.get_current_span()
    if span and span.is_recording():
        span.set_status(Status(StatusCode.ERROR, str(exception)))
        span.record_exception(exception)


def get_trace_id() -> str | None:
    """Return the current trace ID as 32-char hex, or None."""
    span = trace.get_current_span()
    if span:
        ctx = span.get_span_context()
        if ctx.is_valid:
            return format(ctx.trace_id, "032x")
    return None


