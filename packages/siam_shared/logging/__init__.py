"""Public logging API for SIAM processes.

This package wraps Python's ``logging`` module with stdout defaults,
optional rotated file output, and ``contextvars``-based context propagation.
"""

from .config import ContextFilter, FileOutput, JsonFormatter, PlainFormatter, configure_logging, get_logger
from .context import bind_context, clear_context, get_context, log_context
from .trace import (
    TraceContext,
    ensure_trace,
    new_span_id,
    new_trace_id,
    parse_traceparent,
    valid_span_id,
    valid_trace_id,
)

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "ContextFilter",
    "ensure_trace",
    "FileOutput",
    "get_context",
    "get_logger",
    "JsonFormatter",
    "log_context",
    "new_span_id",
    "new_trace_id",
    "parse_traceparent",
    "PlainFormatter",
    "TraceContext",
    "valid_span_id",
    "valid_trace_id",
]
