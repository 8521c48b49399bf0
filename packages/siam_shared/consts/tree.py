"""Parsed declaration tree consumed by constant evaluation and extraction.

The tree is deliberately small: it exposes only constant groups, the specs
inside each group, their right-hand-side expressions, and the comment text
attached to each spec. Any source front-end that can produce this shape can
feed the evaluators and extractors in this package.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TypeAlias


class DeclarationParseError(ValueError):
    """Raised when a source file cannot be read or parsed into declarations."""

    def __init__(self, message: str, *, path: str, line: int = 0, column: int = 0) -> None:
        self.path = path
        self.line = line
        self.column = column
        location = f"{path}:{line}:{column}" if line else path
        super().__init__(f"{location}: {message}")


class LiteralKind(str, Enum):
    """Kinds of basic literals produced by declaration front-ends."""

    INT = "int"
    FLOAT = "float"
    IMAG = "imag"
    CHAR = "char"
    STRING = "string"


@dataclass(frozen=True, slots=True)
class BasicLit:
    """Literal with its raw source text (quotes and prefixes included)."""

    kind: LiteralKind
    value: str


@dataclass(frozen=True, slots=True)
class Ident:
    """Bare identifier reference."""

    name: str


@dataclass(frozen=True, slots=True)
class ParenExpr:
    """Parenthesized expression."""

    x: Expr


@dataclass(frozen=True, slots=True)
class UnaryExpr:
    """Prefix operator applied to one operand."""

    op: str
    x: Expr


@dataclass(frozen=True, slots=True)
class BinaryExpr:
    """Infix operator applied to two operands."""

    op: str
    x: Expr
    y: Expr


@dataclass(frozen=True, slots=True)
class Unsupported:
    """Expression shape the front-end recognized but does not model.

    Calls, selectors, index expressions, composite literals and conversions
    all land here so evaluation can reject them without failing the parse.
    """

    text: str


Expr: TypeAlias = BasicLit | Ident | ParenExpr | UnaryExpr | BinaryExpr | Unsupported


@dataclass(frozen=True, slots=True)
class ConstantSpec:
    """One declaration line inside a constant group.

    ``values`` is empty when the declaration line omits its expression list and should
    inherit the previous line's list. ``comment`` holds the plain text of the
    attached comment, or ``None`` when nothing is attached.
    """

    names: tuple[str, ...]
    values: tuple[Expr, ...] = ()
    comment: str | None = None
    line: int = 0


@dataclass(frozen=True, slots=True)
class ConstantGroup:
    """Specs sharing one placeholder scope, in declaration order."""

    specs: tuple[ConstantSpec, ...]
    line: int = 0


@dataclass(frozen=True, slots=True)
class DeclarationTree:
    """All top-level constant groups of one source file, in file order."""

    path: str
    groups: tuple[ConstantGroup, ...] = field(default_factory=tuple)


DeclarationParser: TypeAlias = Callable[[str | Path], DeclarationTree]
