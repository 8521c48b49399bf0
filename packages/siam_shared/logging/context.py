"""Per-task logging context.

Fields bound here ride along on every record emitted from the same thread
or asyncio task, so trace ids and the service name are set once instead of
at each call site.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Iterator, Mapping

_EMPTY: Mapping[str, str] = MappingProxyType({})

_FIELDS: ContextVar[Mapping[str, str]] = ContextVar("siam_log_context", default=_EMPTY)


def _stringify(values: Mapping[str, object]) -> dict[str, str]:
    return {str(key): str(value) for key, value in values.items() if value is not None}


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound in the current context."""
    return dict(_FIELDS.get())


def bind_context(**values: object) -> None:
    """Add fields to the current context; ``None`` values are skipped."""
    fields = _stringify(values)
    if fields:
        _FIELDS.set(MappingProxyType({**_FIELDS.get(), **fields}))


def clear_context(*keys: str) -> None:
    """Drop ``keys`` from the current context, or every field when none given."""
    if not keys:
        _FIELDS.set(_EMPTY)
        return
    kept = {key: value for key, value in _FIELDS.get().items() if key not in keys}
    _FIELDS.set(MappingProxyType(kept))


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind ``values`` for the duration of a ``with`` block."""
    token = _FIELDS.set(MappingProxyType({**_FIELDS.get(), **_stringify(values)}))
    try:
        yield
    finally:
        _FIELDS.reset(token)
