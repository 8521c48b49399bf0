"""Error-code descriptors.

A descriptor answers four questions about a numeric error code: the code
itself, the HTTP status to answer with, the message safe to show users, and
a reference document.
"""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Final, Protocol, runtime_checkable

RESERVED_CODE: Final[int] = 0
UNKNOWN_CODE_VALUE: Final[int] = 1
REFERENCE_URL: Final[str] = "http://github.com/strayca7/pkg/serrors/README.md"


@runtime_checkable
class Coder(Protocol):
    """Read-only view of a registered error code's metadata."""

    @property
    def code(self) -> int: ...

    @property
    def http_status(self) -> int: ...

    @property
    def external(self) -> str: ...

    @property
    def reference(self) -> str: ...


@dataclass(frozen=True, slots=True)
class Code:
    """Basic ``Coder`` implementation.

    ``http`` of 0 means "unset" and reports as 500.
    """

    code: int
    http: int = 0
    external: str = ""
    reference: str = ""

    @property
    def http_status(self) -> int:
        if self.http == 0:
            return int(HTTPStatus.INTERNAL_SERVER_ERROR)
        return self.http


UNKNOWN_CODE: Final[Code] = Code(
    code=UNKNOWN_CODE_VALUE,
    http=int(HTTPStatus.INTERNAL_SERVER_ERROR),
    external="An internal server error occurred",
    reference=REFERENCE_URL,
)
