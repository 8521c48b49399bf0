"""W3C trace-context identifiers for log correlation.

A trace id is 32 lowercase hex characters and a span id is 16; neither may
be all zeros. ``ensure_trace`` binds both into the logging context so every
record emitted afterwards carries them.
"""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from typing import Final

from . import fields
from .context import bind_context, get_context

TRACE_VERSION: Final[str] = "00"
DEFAULT_FLAGS: Final[str] = "01"

_HEX_RE: Final[re.Pattern[str]] = re.compile(r"^[0-9a-fA-F]+$")


@dataclass(frozen=True, slots=True)
class TraceContext:
    """Identifiers carried by one ``traceparent`` header."""

    trace_id: str
    span_id: str
    flags: str = DEFAULT_FLAGS
    version: str = TRACE_VERSION

    def header(self) -> str:
        """Render as a ``traceparent`` header value."""
        return f"{self.version}-{self.trace_id}-{self.span_id}-{self.flags}"


def _valid_hex_id(value: str, width: int) -> bool:
    return len(value) == width and bool(_HEX_RE.match(value)) and value.strip("0") != ""


def valid_trace_id(value: str) -> bool:
    """Return True for 32 hex characters that are not all zero."""
    return _valid_hex_id(value, 32)


def valid_span_id(value: str) -> bool:
    """Return True for 16 hex characters that are not all zero."""
    return _valid_hex_id(value, 16)


def _random_hex(nbytes: int) -> str:
    while True:
        value = secrets.token_hex(nbytes)
        if value.strip("0"):
            return value


def new_trace_id() -> str:
    return _random_hex(16)


def new_span_id() -> str:
    return _random_hex(8)


def parse_traceparent(value: str) -> TraceContext:
    """Parse a ``traceparent`` header; raise ``ValueError`` when malformed."""
    parts = value.strip().split("-")
    if len(parts) != 4:
        raise ValueError("traceparent must have four dash-separated parts")
    version, trace_id, span_id, flags = parts
    if version != TRACE_VERSION:
        raise ValueError(f"unsupported traceparent version: {version!r}")
    if not valid_trace_id(trace_id):
        raise ValueError("invalid trace-id")
    if not valid_span_id(span_id):
        raise ValueError("invalid span-id")
    if len(flags) != 2 or not _HEX_RE.match(flags):
        raise ValueError("invalid trace-flags")
    return TraceContext(
        trace_id=trace_id.lower(),
        span_id=span_id.lower(),
        flags=flags.lower(),
        version=version,
    )


def ensure_trace() -> TraceContext:
    """Bind trace and span ids into the logging context unless already present.

    An existing valid ``trace_id`` is kept; a fresh span id is minted only
    when none is bound.
    """
    context = get_context()
    trace_id = context.get(fields.TRACE_ID, "")
    span_id = context.get(fields.SPAN_ID, "")
    if not valid_trace_id(trace_id):
        trace_id = new_trace_id()
    if not valid_span_id(span_id):
        span_id = new_span_id()
    bind_context(**{fields.TRACE_ID: trace_id, fields.SPAN_ID: span_id})
    return TraceContext(trace_id=trace_id, span_id=span_id)
