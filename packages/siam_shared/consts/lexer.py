"""Tokenizer for Go-syntax declaration files.

Produces the token stream the declaration parser needs: identifiers,
literals, operators, comments, and the semicolons Go inserts automatically
at line ends. Only lexical structure is checked here; anything beyond that
is the parser's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Final

from .tree import DeclarationParseError


class TokenType(Enum):
    """Token categories emitted by the lexer."""

    IDENT = auto()
    INT = auto()
    FLOAT = auto()
    IMAG = auto()
    CHAR = auto()
    STRING = auto()
    OP = auto()
    SEMICOLON = auto()
    COMMENT = auto()
    EOF = auto()


@dataclass(frozen=True, slots=True)
class Token:
    """One lexical token with its starting position."""

    type: TokenType
    value: str
    line: int
    column: int

    @property
    def end_line(self) -> int:
        """Return the line the token ends on (differs for multi-line tokens)."""
        return self.line + self.value.count("\n")


# Longest operators first so a greedy prefix match picks the right one.
_OPERATORS: Final[tuple[str, ...]] = (
    "<<=", ">>=", "&^=", "...",
    "&&", "||", "<-", "++", "--", "==", "!=", "<=", ">=", ":=",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<", ">>", "&^",
    "+", "-", "*", "/", "%", "&", "|", "^", "<", ">", "=", "!", "~",
    "(", ")", "[", "]", "{", "}", ",", ";", ".", ":",
)

KEYWORDS: Final[frozenset[str]] = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer",
        "else", "fallthrough", "for", "func", "go", "goto", "if", "import",
        "interface", "map", "package", "range", "return", "select", "struct",
        "switch", "type", "var",
    }
)
_SEMI_KEYWORDS: Final[frozenset[str]] = frozenset(
    {"break", "continue", "fallthrough", "return"}
)
_SEMI_OPERATORS: Final[frozenset[str]] = frozenset({"++", "--", ")", "]", "}"})
_LITERAL_TYPES: Final[frozenset[TokenType]] = frozenset(
    {TokenType.INT, TokenType.FLOAT, TokenType.IMAG, TokenType.CHAR, TokenType.STRING}
)
_HEX_DIGITS: Final[frozenset[str]] = frozenset("0123456789abcdefABCDEF_")
_DECIMAL_DIGITS: Final[frozenset[str]] = frozenset("0123456789_")


def _is_decimal_digit(ch: str | None) -> bool:
    """Return True for ASCII ``0`` to ``9`` only."""
    return ch is not None and "0" <= ch <= "9"


class Lexer:
    """Tokenizer for Go source text.

    Usage:
        tokens = Lexer(source, path="codes.go").tokenize()
    """

    def __init__(self, source: str, *, path: str = "<source>") -> None:
        self.source = source
        self.path = path
        self.pos = 0
        self.line = 1
        self.column = 1
        self.length = len(source)
        self._tokens: list[Token] = []
        self._insert_semi = False

    def tokenize(self) -> list[Token]:
        """Scan the whole source and return tokens terminated by ``EOF``."""
        while True:
            self._skip_blanks()
            ch = self._current()
            if ch is None:
                if self._insert_semi:
                    self._emit(TokenType.SEMICOLON, "\n", self.line, self.column)
                self._emit(TokenType.EOF, "", self.line, self.column)
                return self._tokens

            if ch == "\n":
                if self._insert_semi:
                    self._emit(TokenType.SEMICOLON, "\n", self.line, self.column)
                self._advance()
                continue

            line, column = self.line, self.column
            if ch == "/" and self._peek() in ("/", "*"):
                self._read_comment(line, column)
            elif ch == "_" or ch.isalpha():
                word = self._read_identifier()
                self._emit(TokenType.IDENT, word, line, column)
                self._insert_semi = word not in KEYWORDS or word in _SEMI_KEYWORDS
            elif _is_decimal_digit(ch) or (ch == "." and _is_decimal_digit(self._peek())):
                kind, text = self._read_number()
                self._emit(kind, text, line, column)
                self._insert_semi = True
            elif ch == '"':
                self._emit(TokenType.STRING, self._read_quoted('"'), line, column)
                self._insert_semi = True
            elif ch == "'":
                self._emit(TokenType.CHAR, self._read_quoted("'"), line, column)
                self._insert_semi = True
            elif ch == "`":
                self._emit(TokenType.STRING, self._read_raw_string(), line, column)
                self._insert_semi = True
            else:
                op = self._read_operator()
                if op == ";":
                    self._emit(TokenType.SEMICOLON, ";", line, column)
                else:
                    self._emit(TokenType.OP, op, line, column)
                    self._insert_semi = op in _SEMI_OPERATORS

    def _emit(self, kind: TokenType, value: str, line: int, column: int) -> None:
        if kind is TokenType.SEMICOLON:
            self._insert_semi = False
        self._tokens.append(Token(kind, value, line, column))

    def _error(self, message: str, line: int | None = None, column: int | None = None) -> DeclarationParseError:
        return DeclarationParseError(
            message,
            path=self.path,
            line=self.line if line is None else line,
            column=self.column if column is None else column,
        )

    def _current(self) -> str | None:
        if self.pos >= self.length:
            return None
        return self.source[self.pos]

    def _peek(self, offset: int = 1) -> str | None:
        pos = self.pos + offset
        if pos >= self.length:
            return None
        return self.source[pos]

    def _advance(self) -> str | None:
        ch = self._current()
        if ch is not None:
            self.pos += 1
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return ch

    def _skip_blanks(self) -> None:
        """Skip spaces, tabs and carriage returns (newlines are significant)."""
        while self._current() in (" ", "\t", "\r", "\ufeff"):
            self._advance()

    def _read_comment(self, line: int, column: int) -> None:
        start = self.pos
        if self._peek() == "/":
            while self._current() not in (None, "\n"):
                self._advance()
            # A line comment always ends the line, so the pending semicolon
            # belongs before it.
            if self._insert_semi:
                self._emit(TokenType.SEMICOLON, "\n", line, column)
        else:
            self._advance()
            self._advance()
            while True:
                ch = self._current()
                if ch is None:
                    raise self._error("comment not terminated", line, column)
                if ch == "*" and self._peek() == "/":
                    self._advance()
                    self._advance()
                    break
                self._advance()
            if self._insert_semi and self._general_comment_ends_line(start):
                self._emit(TokenType.SEMICOLON, "\n", line, column)
        text = self.source[start:self.pos].replace("\r", "")
        self._tokens.append(Token(TokenType.COMMENT, text, line, column))

    def _general_comment_ends_line(self, start: int) -> bool:
        if "\n" in self.source[start:self.pos]:
            return True
        rest = self.source[self.pos:].split("\n", 1)[0]
        stripped = rest.strip(" \t\r")
        return stripped == "" or stripped.startswith("//")

    def _read_identifier(self) -> str:
        start = self.pos
        while True:
            ch = self._current()
            if ch is None or not (ch == "_" or ch.isalnum()):
                break
            self._advance()
        return self.source[start:self.pos]

    def _read_number(self) -> tuple[TokenType, str]:
        start = self.pos
        is_float = False
        if self._current() == "0" and (self._peek() or "") in "xX":
            self._advance()
            self._advance()
            self._consume(_HEX_DIGITS)
            if self._current() == ".":
                is_float = True
                self._advance()
                self._consume(_HEX_DIGITS)
            if (self._current() or "") in ("p", "P"):
                is_float = True
                self._read_exponent()
        elif self._current() == "0" and (self._peek() or "") in "bBoO":
            self._advance()
            self._advance()
            self._consume(_DECIMAL_DIGITS)
        else:
            self._consume(_DECIMAL_DIGITS)
            if self._current() == ".":
                is_float = True
                self._advance()
                self._consume(_DECIMAL_DIGITS)
            if (self._current() or "") in ("e", "E"):
                is_float = True
                self._read_exponent()

        if self._current() == "i":
            self._advance()
            return TokenType.IMAG, self.source[start:self.pos]

        text = self.source[start:self.pos]
        if not text:
            raise self._error(f"malformed number at {self._current()!r}")
        return (TokenType.FLOAT if is_float else TokenType.INT), text

    def _read_exponent(self) -> None:
        self._advance()
        if (self._current() or "") in ("+", "-"):
            self._advance()
        if not _is_decimal_digit(self._current()):
            raise self._error("exponent has no digits")
        self._consume(_DECIMAL_DIGITS)

    def _consume(self, allowed: frozenset[str]) -> None:
        while (ch := self._current()) is not None and ch in allowed:
            self._advance()

    def _read_quoted(self, quote: str) -> str:
        line, column = self.line, self.column
        start = self.pos
        self._advance()
        while True:
            ch = self._current()
            if ch is None or ch == "\n":
                kind = "string" if quote == '"' else "rune"
                raise self._error(f"{kind} literal not terminated", line, column)
            if ch == "\\":
                self._advance()
                if self._current() is None:
                    continue
                self._advance()
                continue
            self._advance()
            if ch == quote:
                return self.source[start:self.pos]

    def _read_raw_string(self) -> str:
        line, column = self.line, self.column
        start = self.pos
        self._advance()
        while True:
            ch = self._advance()
            if ch is None:
                raise self._error("raw string literal not terminated", line, column)
            if ch == "`":
                return self.source[start:self.pos]

    def _read_operator(self) -> str:
        for op in _OPERATORS:
            if self.source.startswith(op, self.pos):
                for _ in op:
                    self._advance()
                return op
        raise self._error(f"unexpected character {self._current()!r}")


def tokenize(source: str, *, path: str = "<source>") -> list[Token]:
    """Tokenize Go source text into a list of tokens ending with ``EOF``."""
    return Lexer(source, path=path).tokenize()


def is_literal(token: Token) -> bool:
    """Return True for basic literal tokens."""
    return token.type in _LITERAL_TYPES
