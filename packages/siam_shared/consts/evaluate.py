"""Constant-expression evaluation over declaration tree nodes.

Evaluation never raises: every unsupported shape or arithmetic fault comes
back as ``(zero value, False)`` so callers can drop the symbol and move on.
Integer arithmetic wraps like a signed 64-bit machine integer.
"""

from __future__ import annotations

import re
from typing import Final

from .tree import BasicLit, BinaryExpr, Expr, Ident, LiteralKind, ParenExpr, UnaryExpr

PLACEHOLDER: Final[str] = "iota"

_BITS: Final[int] = 64
_MASK: Final[int] = (1 << _BITS) - 1
_INT_MAX: Final[int] = (1 << (_BITS - 1)) - 1

_DECIMAL_RE: Final[re.Pattern[str]] = re.compile(r"^(0|[1-9](_?[0-9])*)$")
_PREFIXED_RE: Final[dict[str, re.Pattern[str]]] = {
    "x": re.compile(r"^_?[0-9a-fA-F](_?[0-9a-fA-F])*$"),
    "o": re.compile(r"^_?[0-7](_?[0-7])*$"),
    "b": re.compile(r"^_?[01](_?[01])*$"),
}
_LEGACY_OCTAL_RE: Final[re.Pattern[str]] = re.compile(r"^0(_?[0-7])+$")
_BASES: Final[dict[str, int]] = {"x": 16, "o": 8, "b": 2}

_SIMPLE_ESCAPES: Final[dict[str, str]] = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
}


def _wrap(value: int) -> int:
    """Narrow an unbounded integer to signed 64-bit two's complement."""
    value &= _MASK
    if value > _INT_MAX:
        value -= 1 << _BITS
    return value


def parse_int_literal(text: str) -> int | None:
    """Parse a Go integer literal; return ``None`` when invalid or out of range."""
    value: int | None = None
    if len(text) > 1 and text[0] == "0" and text[1].lower() in _BASES:
        prefix = text[1].lower()
        digits = text[2:]
        if _PREFIXED_RE[prefix].match(digits):
            value = int(digits.replace("_", ""), _BASES[prefix])
    elif _LEGACY_OCTAL_RE.match(text):
        value = int(text.replace("_", ""), 8)
    elif _DECIMAL_RE.match(text):
        value = int(text.replace("_", ""))

    if value is None or value > _INT_MAX:
        return None
    return value


def _trunc_div(x: int, y: int) -> int:
    quotient = abs(x) // abs(y)
    return quotient if (x >= 0) == (y >= 0) else -quotient


def _apply_binary(op: str, x: int, y: int) -> tuple[int, bool]:
    if op == "+":
        return _wrap(x + y), True
    if op == "-":
        return _wrap(x - y), True
    if op == "*":
        return _wrap(x * y), True
    if op == "/":
        if y == 0:
            return 0, False
        return _wrap(_trunc_div(x, y)), True
    if op == "%":
        if y == 0:
            return 0, False
        return _wrap(x - y * _trunc_div(x, y)), True
    if op == "|":
        return _wrap(x | y), True
    if op == "&":
        return _wrap(x & y), True
    if op == "^":
        return _wrap(x ^ y), True
    if op == "<<":
        if y < 0:
            return 0, False
        # Shift counts past the width clear every bit.
        if y >= _BITS:
            return 0, True
        return _wrap((x & _MASK) << y), True
    if op == ">>":
        if y < 0:
            return 0, False
        if y >= _BITS:
            return 0, True
        return _wrap((x & _MASK) >> y), True
    return 0, False


def _int_leaf(expr: Expr | None, placeholder: int) -> tuple[int, bool]:
    if isinstance(expr, Ident):
        if expr.name == PLACEHOLDER:
            return placeholder, True
        return 0, False
    if isinstance(expr, BasicLit) and expr.kind is LiteralKind.INT:
        value = parse_int_literal(expr.value)
        if value is not None:
            return value, True
    return 0, False


def eval_int(expr: Expr | None, placeholder: int) -> tuple[int, bool]:
    """Evaluate an integer constant expression.

    ``placeholder`` is the value ``iota`` resolves to on the declaration line
    being evaluated. Supported forms are integer literals, ``iota``, parentheses,
    unary ``+``/``-`` and the binary operators ``+ - * / % | & ^ << >>``.

    The tree is walked with an explicit stack, so long operator chains
    evaluate without deep recursion.
    """
    # (node, operands_ready): a node is revisited once its operands are on ``values``.
    pending: list[tuple[Expr | None, bool]] = [(expr, False)]
    values: list[int] = []
    while pending:
        node, ready = pending.pop()
        if isinstance(node, ParenExpr):
            pending.append((node.x, False))
        elif isinstance(node, UnaryExpr):
            if node.op not in ("+", "-"):
                return 0, False
            if ready:
                if node.op == "-":
                    values.append(_wrap(-values.pop()))
            else:
                pending.append((node, True))
                pending.append((node.x, False))
        elif isinstance(node, BinaryExpr):
            if ready:
                right = values.pop()
                left = values.pop()
                value, ok = _apply_binary(node.op, left, right)
                if not ok:
                    return 0, False
                values.append(value)
            else:
                pending.append((node, True))
                pending.append((node.y, False))
                pending.append((node.x, False))
        else:
            value, ok = _int_leaf(node, placeholder)
            if not ok:
                return 0, False
            values.append(value)
    return values[-1], True


def _string_leaf(expr: Expr | None) -> tuple[str, bool]:
    if not isinstance(expr, BasicLit) or expr.kind not in (LiteralKind.STRING, LiteralKind.CHAR):
        return "", False
    try:
        return unquote(expr.value), True
    except ValueError:
        return expr.value[1:-1], True


def eval_string(expr: Expr | None) -> tuple[str, bool]:
    """Evaluate a string constant expression.

    Supports string and character literals, parentheses, and ``+``
    concatenation of two string operands. Identifiers are never resolved.
    """
    pending: list[tuple[Expr | None, bool]] = [(expr, False)]
    values: list[str] = []
    while pending:
        node, ready = pending.pop()
        if isinstance(node, ParenExpr):
            pending.append((node.x, False))
        elif isinstance(node, BinaryExpr):
            if node.op != "+":
                return "", False
            if ready:
                right = values.pop()
                values.append(values.pop() + right)
            else:
                pending.append((node, True))
                pending.append((node.y, False))
                pending.append((node.x, False))
        else:
            value, ok = _string_leaf(node)
            if not ok:
                return "", False
            values.append(value)
    return values[-1], True


def unquote(literal: str) -> str:
    """Interpret a Go string, raw string, or rune literal.

    Raises ``ValueError`` for malformed literals or escape sequences.
    """
    if len(literal) < 2 or literal[0] != literal[-1] or literal[0] not in "\"'`":
        raise ValueError(f"invalid quoted literal: {literal!r}")

    quote = literal[0]
    body = literal[1:-1]
    if quote == "`":
        if "`" in body:
            raise ValueError("backquote inside raw string")
        return body.replace("\r", "")

    if "\n" in body:
        raise ValueError("newline in quoted literal")

    decoded = _decode_escapes(body, quote)
    if quote == "'" and len(decoded) != 1:
        raise ValueError(f"rune literal must hold exactly one character: {literal!r}")
    return decoded


def _decode_escapes(body: str, quote: str) -> str:
    out = bytearray()
    index = 0
    while index < len(body):
        ch = body[index]
        if ch == quote:
            raise ValueError("unescaped quote in literal")
        if ch != "\\":
            out.extend(ch.encode("utf-8"))
            index += 1
            continue

        if index + 1 >= len(body):
            raise ValueError("trailing backslash")
        esc = body[index + 1]
        index += 2
        if esc in _SIMPLE_ESCAPES:
            out.extend(_SIMPLE_ESCAPES[esc].encode("utf-8"))
        elif esc == quote:
            out.extend(esc.encode("utf-8"))
        elif esc == "x":
            out.append(_hex_value(body[index:index + 2], 2))
            index += 2
        elif esc in "01234567":
            digits = body[index - 1:index + 2]
            if len(digits) != 3 or any(d not in "01234567" for d in digits):
                raise ValueError(f"invalid octal escape: \\{digits}")
            value = int(digits, 8)
            if value > 0xFF:
                raise ValueError(f"octal escape out of range: \\{digits}")
            out.append(value)
            index += 2
        elif esc in ("u", "U"):
            width = 4 if esc == "u" else 8
            code_point = _hex_value(body[index:index + width], width)
            if code_point > 0x10FFFF or 0xD800 <= code_point <= 0xDFFF:
                raise ValueError(f"invalid unicode escape: \\{esc}{body[index:index + width]}")
            out.extend(chr(code_point).encode("utf-8"))
            index += width
        else:
            raise ValueError(f"unknown escape sequence: \\{esc}")

    return bytes(out).decode("utf-8", errors="replace")


def _hex_value(digits: str, width: int) -> int:
    if len(digits) != width or any(d not in "0123456789abcdefABCDEF" for d in digits):
        raise ValueError(f"invalid hex escape: {digits!r}")
    return int(digits, 16)
