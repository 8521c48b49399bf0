"""Exceptions that carry a numeric error code through a cause chain."""

from __future__ import annotations

from typing import Iterator


class CodedError(Exception):
    """Exception tagged with a registry code.

    Chain an underlying failure with ``raise CodedError(...) from exc``; the
    chained exception is available as ``cause``.
    """

    def __init__(self, code: int, message: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


def with_code(code: int, message: str) -> CodedError:
    """Build a fresh code-carrying error with no cause."""
    return CodedError(code, message)


def wrap_code(exc: BaseException | None, code: int, message: str) -> CodedError | None:
    """Wrap ``exc`` in a code-carrying error; ``None`` passes through."""
    if exc is None:
        return None
    wrapped = CodedError(code, message)
    wrapped.__cause__ = exc
    return wrapped


def iter_chain(exc: BaseException | None) -> Iterator[BaseException]:
    """Yield ``exc`` and every exception chained below it.

    Follows ``__cause__``, falling back to ``__context__`` unless context was
    suppressed. Stops on cycles.
    """
    seen: set[int] = set()
    current = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def find_coded(exc: BaseException | None) -> CodedError | None:
    """Return the outermost ``CodedError`` in the chain, if any."""
    for item in iter_chain(exc):
        if isinstance(item, CodedError):
            return item
    return None
