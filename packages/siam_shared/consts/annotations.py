"""Parsers for ``ErrName - <status>: <message>.`` comment annotations.

Both parsers are plain ``str -> str`` callables meant for
``extract_comments``. They never raise: a comment that does not follow the
annotation layout yields ``""`` and a warning.
"""

from __future__ import annotations

from typing import Final

from packages.siam_shared.logging import get_logger

_LOGGER = get_logger(__name__)

ANNOTATION_PREFIX: Final[str] = "Err"


def _has_prefix(comment: str) -> bool:
    if comment.startswith(ANNOTATION_PREFIX):
        return True
    _LOGGER.warning(
        "comment does not start with annotation prefix",
        extra={"prefix": ANNOTATION_PREFIX, "comment": comment},
    )
    return False


def parse_err_http_status(comment: str) -> str:
    """Return the status field, e.g. ``"404"`` from ``ErrX - 404: Missing.``."""
    if not _has_prefix(comment):
        return ""
    fields = comment.split(":", 1)[0].split(" ")
    if len(fields) < 3:
        _LOGGER.warning("annotation has no status field", extra={"comment": comment})
        return ""
    return fields[2]


def parse_err_external(comment: str) -> str:
    """Return the external message, e.g. ``"Missing"`` from ``ErrX - 404: Missing.``."""
    if not _has_prefix(comment):
        return ""
    parts = comment.split(".", 1)[0].split(": ")
    if len(parts) < 2:
        _LOGGER.warning("annotation has no message separator", extra={"comment": comment})
        return ""
    return parts[1]
