"""Tests for integer and string constant-expression evaluation."""

from __future__ import annotations

import pytest

from packages.siam_shared.consts import (
    BasicLit,
    BinaryExpr,
    Ident,
    LiteralKind,
    ParenExpr,
    UnaryExpr,
    Unsupported,
    eval_int,
    eval_string,
    unquote,
)
from packages.siam_shared.consts.evaluate import parse_int_literal

_INT64_MAX = 2**63 - 1
_INT64_MIN = -(2**63)


def _int(text: str) -> BasicLit:
    return BasicLit(kind=LiteralKind.INT, value=text)


def _str(text: str) -> BasicLit:
    return BasicLit(kind=LiteralKind.STRING, value=text)


def _bin(op: str, x: object, y: object) -> BinaryExpr:
    return BinaryExpr(op=op, x=x, y=y)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("0", 0),
        ("42", 42),
        ("1_000_000", 1_000_000),
        ("0x1F", 31),
        ("0X_ff", 255),
        ("0o17", 15),
        ("017", 15),
        ("0b101", 5),
        ("9223372036854775807", _INT64_MAX),
    ],
)
def test_parse_int_literal_accepts_go_forms(text: str, expected: int) -> None:
    """Every Go integer literal base should parse."""
    assert parse_int_literal(text) == expected


@pytest.mark.parametrize("text", ["08", "1__0", "0x", "9223372036854775808", "1_"])
def test_parse_int_literal_rejects_invalid_or_oversized(text: str) -> None:
    """Malformed literals and values past int64 should be rejected."""
    assert parse_int_literal(text) is None


def test_placeholder_resolves_to_current_value() -> None:
    """iota should evaluate to the placeholder passed in."""
    assert eval_int(Ident("iota"), 3) == (3, True)
    assert eval_int(_bin("+", Ident("iota"), _int("110001")), 1) == (110002, True)


def test_other_identifiers_are_not_resolved() -> None:
    """Identifiers other than iota are unknown."""
    assert eval_int(Ident("Other"), 0) == (0, False)


def test_division_and_modulo_truncate_toward_zero() -> None:
    """Signed division should follow truncation, not floor, semantics."""
    neg_seven = UnaryExpr(op="-", x=_int("7"))
    assert eval_int(_bin("/", neg_seven, _int("2")), 0) == (-3, True)
    assert eval_int(_bin("%", neg_seven, _int("2")), 0) == (-1, True)
    assert eval_int(_bin("%", _int("7"), UnaryExpr(op="-", x=_int("2"))), 0) == (1, True)


@pytest.mark.parametrize("op", ["/", "%"])
def test_division_by_zero_fails(op: str) -> None:
    """Dividing by zero is not a value."""
    assert eval_int(_bin(op, _int("1"), _int("0")), 0) == (0, False)


def test_arithmetic_wraps_at_int64() -> None:
    """Overflow should wrap like a 64-bit two's-complement integer."""
    assert eval_int(_bin("+", _int(str(_INT64_MAX)), _int("1")), 0) == (_INT64_MIN, True)
    assert eval_int(_bin("*", _int("4611686018427387904"), _int("4")), 0) == (0, True)


def test_shifts_use_unsigned_view() -> None:
    """Shifts treat the operand as uint64 and narrow the result."""
    assert eval_int(_bin("<<", _int("1"), _int("63")), 0) == (_INT64_MIN, True)
    assert eval_int(_bin("<<", _int("1"), _int("64")), 0) == (0, True)
    minus_one = UnaryExpr(op="-", x=_int("1"))
    assert eval_int(_bin(">>", minus_one, _int("1")), 0) == (_INT64_MAX, True)


def test_negative_shift_count_fails() -> None:
    """A negative shift count is not a value."""
    expr = _bin("<<", _int("1"), UnaryExpr(op="-", x=_int("1")))
    assert eval_int(expr, 0) == (0, False)


def test_bitwise_operators() -> None:
    """Bitwise or, and, xor evaluate on the integer values."""
    assert eval_int(_bin("|", _int("0b1010"), _int("0b0101")), 0) == (15, True)
    assert eval_int(_bin("&", _int("0b1110"), _int("0b0111")), 0) == (6, True)
    assert eval_int(_bin("^", _int("0b1100"), _int("0b1010")), 0) == (6, True)


def test_parentheses_are_transparent() -> None:
    """Parenthesized expressions evaluate to their inner value."""
    expr = _bin("*", ParenExpr(_bin("+", Ident("iota"), _int("1"))), _int("10"))
    assert eval_int(expr, 2) == (30, True)


@pytest.mark.parametrize(
    "expr",
    [
        BasicLit(kind=LiteralKind.FLOAT, value="1.5"),
        BasicLit(kind=LiteralKind.CHAR, value="'a'"),
        _str('"1"'),
        UnaryExpr(op="^", x=_int("1")),
        _bin("&^", _int("3"), _int("1")),
        _bin("==", _int("1"), _int("1")),
        Unsupported("len ( x )"),
        None,
    ],
)
def test_unsupported_integer_shapes_fail(expr: object) -> None:
    """Shapes outside the integer subset report ok=False."""
    assert eval_int(expr, 0) == (0, False)  # type: ignore[arg-type]


def test_string_literals_and_concatenation() -> None:
    """Quoted, raw and rune literals concatenate with +."""
    expr = _bin("+", _str('"siam-"'), _bin("+", _str("`api\\n`"), BasicLit(LiteralKind.CHAR, "'x'")))
    assert eval_string(expr) == ("siam-api\\nx", True)


def test_string_escapes_follow_go_rules() -> None:
    """Interpreted strings decode Go escape sequences."""
    assert eval_string(_str('"tab\\there \\u00e9 \\101 \\x41 \\U0001F600"')) == (
        "tab\there é A A \U0001F600",
        True,
    )


def test_bad_escape_falls_back_to_literal_content() -> None:
    """An unescape failure yields the literal text without its quotes."""
    assert eval_string(_str('"bad \\q"')) == ("bad \\q", True)


@pytest.mark.parametrize(
    "expr",
    [
        Ident("iota"),
        Ident("Other"),
        _int("1"),
        _bin("-", _str('"a"'), _str('"b"')),
        _bin("+", _str('"a"'), _int("1")),
        Unsupported("fmt . Sprint ( )"),
    ],
)
def test_unsupported_string_shapes_fail(expr: object) -> None:
    """Identifiers, numbers and non-+ operators are not strings."""
    assert eval_string(expr) == ("", False)  # type: ignore[arg-type]


def test_unquote_rejects_malformed_literals() -> None:
    """Malformed rune and string literals raise ValueError."""
    with pytest.raises(ValueError):
        unquote("'ab'")
    with pytest.raises(ValueError):
        unquote('"open')
    with pytest.raises(ValueError):
        unquote('"\\uD800"')


def test_unquote_raw_string_drops_carriage_returns() -> None:
    """Raw strings are taken verbatim apart from carriage returns."""
    assert unquote("`a\r\nb`") == "a\nb"


def test_deeply_nested_trees_evaluate() -> None:
    """Nesting far beyond the interpreter recursion limit still evaluates."""
    expr: object = _int("1")
    for _ in range(5000):
        expr = ParenExpr(x=UnaryExpr(op="-", x=_bin("+", _int("0"), expr)))  # type: ignore[arg-type]
    assert eval_int(expr, 0) == (1, True)  # type: ignore[arg-type]

    text: object = _str('"a"')
    for _ in range(5000):
        text = ParenExpr(x=_bin("+", text, _str('"b"')))  # type: ignore[arg-type]
    assert eval_string(text) == ("a" + "b" * 5000, True)  # type: ignore[arg-type]
