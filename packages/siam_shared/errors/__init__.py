"""Public error-code API: descriptors, code-carrying errors, and the registry."""

from .coded import CodedError, find_coded, iter_chain, with_code, wrap_code
from .codes import RESERVED_CODE, UNKNOWN_CODE, Code, Coder
from .registry import (
    CodeRegistry,
    FatalConfigurationError,
    classify,
    codes,
    get_registry,
    has_code,
    must_register,
    register,
)

__all__ = [
    "classify",
    "Code",
    "CodedError",
    "Coder",
    "CodeRegistry",
    "codes",
    "FatalConfigurationError",
    "find_coded",
    "get_registry",
    "has_code",
    "iter_chain",
    "must_register",
    "register",
    "RESERVED_CODE",
    "UNKNOWN_CODE",
    "with_code",
    "wrap_code",
]
