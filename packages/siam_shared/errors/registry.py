"""Process-wide error-code registry.

Writes are serialized by one lock and publish a fresh read-only mapping, so
readers on request paths never lock and never see a half-applied write. The
unknown sentinel (code 1) is present from construction and cannot be
replaced. Code 0 is reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from types import MappingProxyType
from typing import Mapping

from packages.siam_shared.logging import get_logger

from .coded import CodedError, find_coded, iter_chain
from .codes import RESERVED_CODE, UNKNOWN_CODE, Coder

_LOGGER = get_logger(__name__)


class FatalConfigurationError(RuntimeError):
    """Raised when registry invariants are violated during startup wiring."""


def _initial_codes() -> Mapping[int, Coder]:
    return MappingProxyType({UNKNOWN_CODE.code: UNKNOWN_CODE})


@dataclass(slots=True)
class CodeRegistry:
    """In-memory registry of error-code descriptors keyed by code."""

    _codes: Mapping[int, Coder] = field(default_factory=_initial_codes)
    _lock: Lock = field(default_factory=Lock)

    def register(self, coder: Coder) -> None:
        """Register ``coder``, replacing any existing descriptor for its code."""
        self._check_writable(coder)
        with self._lock:
            self._publish(coder)
        _LOGGER.debug("error code registered", extra={"code": coder.code})

    def must_register(self, coder: Coder) -> None:
        """Register ``coder``; raise if its code is already present."""
        self._check_writable(coder)
        with self._lock:
            if coder.code in self._codes:
                raise FatalConfigurationError(f"code {coder.code} already registered")
            self._publish(coder)
        _LOGGER.debug("error code registered", extra={"code": coder.code})

    def classify(self, exc: BaseException | None) -> Coder | None:
        """Resolve an exception chain to its registered descriptor.

        Returns ``None`` for ``None`` and the unknown sentinel when the chain
        carries no code or an unregistered one.
        """
        if exc is None:
            return None
        codes = self._codes
        coded = find_coded(exc)
        if coded is not None and coded.code in codes:
            return codes[coded.code]
        return UNKNOWN_CODE

    def has_code(self, exc: BaseException | None, code: int) -> bool:
        """Return True if any ``CodedError`` in the chain carries ``code``."""
        return any(
            isinstance(item, CodedError) and item.code == code for item in iter_chain(exc)
        )

    def get(self, code: int) -> Coder | None:
        return self._codes.get(code)

    def codes(self) -> Mapping[int, Coder]:
        """Return a read-only snapshot of every registered descriptor."""
        return self._codes

    def _check_writable(self, coder: Coder) -> None:
        if coder.code == RESERVED_CODE:
            raise FatalConfigurationError(f"code {RESERVED_CODE} is reserved")
        if coder.code == UNKNOWN_CODE.code:
            raise FatalConfigurationError(
                f"code {UNKNOWN_CODE.code} is reserved for the unknown error sentinel"
            )

    def _publish(self, coder: Coder) -> None:
        updated = dict(self._codes)
        updated[coder.code] = coder
        self._codes = MappingProxyType(updated)


_DEFAULT_REGISTRY = CodeRegistry()


def get_registry() -> CodeRegistry:
    """Return the process-default registry instance."""
    return _DEFAULT_REGISTRY


def register(coder: Coder) -> None:
    """Register into the process-default registry, overwriting on collision."""
    _DEFAULT_REGISTRY.register(coder)


def must_register(coder: Coder) -> None:
    """Register into the process-default registry, failing on collision."""
    _DEFAULT_REGISTRY.must_register(coder)


def classify(exc: BaseException | None) -> Coder | None:
    return _DEFAULT_REGISTRY.classify(exc)


def has_code(exc: BaseException | None, code: int) -> bool:
    return _DEFAULT_REGISTRY.has_code(exc, code)


def codes() -> Mapping[int, Coder]:
    return _DEFAULT_REGISTRY.codes()
