"""Canonical structured-log field names shared across SIAM processes."""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"

# Correlation fields (W3C trace-context identifiers).
TRACE_ID = "trace_id"
SPAN_ID = "span_id"

# Process-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
PID = "pid"
