"""Parse Go-syntax source files into a ``DeclarationTree``.

Only top-level constant declarations are modeled. ``import``, ``var``,
``type`` and ``func`` declarations are skipped by bracket balancing, so
arbitrary Go files parse as long as they are lexically sound and their
brackets match.

Comment attachment tracks lead comments (the group ending on the line just
above a token) and line comments (the group trailing a token on its own
line) while advancing, the same way ``go/parser`` does. When a constant has
both, the doc comment above it wins; ``go/ast.CommentMap`` would keep both
groups and a trailing line comment would be read last.

Expressions may nest at most ``MAX_NESTING`` levels of parentheses or unary
operators; deeper input is a ``DeclarationParseError``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Final

from packages.siam_shared.logging import get_logger

from .lexer import KEYWORDS, Token, TokenType, is_literal, tokenize
from .tree import (
    BasicLit,
    BinaryExpr,
    ConstantGroup,
    ConstantSpec,
    DeclarationParseError,
    DeclarationTree,
    Expr,
    Ident,
    LiteralKind,
    ParenExpr,
    UnaryExpr,
    Unsupported,
)

_LOGGER = get_logger(__name__)

MAX_NESTING: Final[int] = 100

_BINARY_PRECEDENCE: Final[dict[str, int]] = {
    "||": 1,
    "&&": 2,
    "==": 3, "!=": 3, "<": 3, "<=": 3, ">": 3, ">=": 3,
    "+": 4, "-": 4, "|": 4, "^": 4,
    "*": 5, "/": 5, "%": 5, "<<": 5, ">>": 5, "&": 5, "&^": 5,
}
_UNARY_OPERATORS: Final[frozenset[str]] = frozenset(
    {"+", "-", "!", "^", "*", "&", "<-", "~"}
)
_TYPE_KEYWORDS: Final[frozenset[str]] = frozenset(
    {"func", "map", "struct", "chan", "interface"}
)
_SKIPPED_DECLARATIONS: Final[frozenset[str]] = frozenset(
    {"import", "var", "type", "func"}
)
_OPENERS: Final[dict[str, str]] = {"(": ")", "[": "]", "{": "}"}
_CLOSERS: Final[frozenset[str]] = frozenset(_OPENERS.values())
_LITERAL_KINDS: Final[dict[TokenType, LiteralKind]] = {
    TokenType.INT: LiteralKind.INT,
    TokenType.FLOAT: LiteralKind.FLOAT,
    TokenType.IMAG: LiteralKind.IMAG,
    TokenType.CHAR: LiteralKind.CHAR,
    TokenType.STRING: LiteralKind.STRING,
}
_DIRECTIVE_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+:[a-z0-9]")
_DIRECTIVE_PREFIXES: Final[tuple[str, ...]] = ("line ", "extern ", "export ")

CommentGroup = list[Token]


class Parser:
    """Recursive-descent parser over a Go token stream."""

    def __init__(self, tokens: list[Token], *, path: str) -> None:
        self.path = path
        self._tokens = tokens
        self._index = -1
        self.tok: Token = Token(TokenType.EOF, "", 0, 0)
        self.lead_comment: CommentGroup | None = None
        self.line_comment: CommentGroup | None = None
        self._depth = 0
        self._next()

    def parse_file(self) -> DeclarationTree:
        """Parse all top-level declarations and keep the constant groups."""
        if self._at_ident("package"):
            self._next()
            self._expect_type(TokenType.IDENT, "package name")
            self._expect_semi()

        groups: list[ConstantGroup] = []
        while self.tok.type is not TokenType.EOF:
            if self.tok.type is TokenType.SEMICOLON:
                self._next()
            elif self._at_ident("const"):
                groups.append(self._parse_const_decl())
            elif self.tok.type is TokenType.IDENT and self.tok.value in _SKIPPED_DECLARATIONS:
                self._skip_declaration()
            else:
                raise self._error(f"expected declaration, found {self.tok.value!r}")
        return DeclarationTree(path=self.path, groups=tuple(groups))

    # Token handling

    def _next0(self) -> None:
        if self._index < len(self._tokens) - 1:
            self._index += 1
        self.tok = self._tokens[self._index]

    def _next(self) -> None:
        self.lead_comment = None
        self.line_comment = None
        prev_line = self.tok.line
        self._next0()
        if self.tok.type is not TokenType.COMMENT:
            return

        comment: CommentGroup | None = None
        if self.tok.line == prev_line:
            comment, end_line = self._consume_comment_group(0)
            if self.tok.line != end_line or self.tok.type in (TokenType.SEMICOLON, TokenType.EOF):
                self.line_comment = comment

        end_line = -1
        while self.tok.type is TokenType.COMMENT:
            comment, end_line = self._consume_comment_group(1)
        if end_line + 1 == self.tok.line:
            self.lead_comment = comment

    def _consume_comment_group(self, n: int) -> tuple[CommentGroup, int]:
        group: CommentGroup = []
        end_line = self.tok.line
        while self.tok.type is TokenType.COMMENT and self.tok.line <= end_line + n:
            group.append(self.tok)
            end_line = self.tok.end_line
            self._next0()
        return group, end_line

    def _at_ident(self, value: str) -> bool:
        return self.tok.type is TokenType.IDENT and self.tok.value == value

    def _at_op(self, *values: str) -> bool:
        return self.tok.type is TokenType.OP and self.tok.value in values

    def _expect_op(self, value: str) -> None:
        if not self._at_op(value):
            raise self._error(f"expected {value!r}, found {self.tok.value!r}")
        self._next()

    def _expect_type(self, kind: TokenType, what: str) -> Token:
        token = self.tok
        if token.type is not kind:
            raise self._error(f"expected {what}, found {token.value!r}")
        self._next()
        return token

    def _expect_semi(self) -> None:
        if self._at_op(")", "}"):
            return
        if self.tok.type is TokenType.SEMICOLON:
            self._next()
            return
        if self.tok.type is TokenType.EOF:
            return
        raise self._error(f"expected ';', found {self.tok.value!r}")

    @contextmanager
    def _nested(self) -> Iterator[None]:
        self._depth += 1
        try:
            if self._depth > MAX_NESTING:
                raise self._error("expression nested too deeply")
            yield
        finally:
            self._depth -= 1

    def _error(self, message: str) -> DeclarationParseError:
        return DeclarationParseError(
            message, path=self.path, line=self.tok.line, column=self.tok.column
        )

    # Declarations

    def _parse_const_decl(self) -> ConstantGroup:
        doc = self.lead_comment
        line = self.tok.line
        self._next()
        specs: list[ConstantSpec] = []
        if self._at_op("("):
            self._next()
            while not self._at_op(")") and self.tok.type is not TokenType.EOF:
                specs.append(self._parse_value_spec(self.lead_comment))
            self._expect_op(")")
            self._expect_semi()
        else:
            # An ungrouped declaration documents its only spec.
            specs.append(self._parse_value_spec(doc))
        return ConstantGroup(specs=tuple(specs), line=line)

    def _parse_value_spec(self, doc: CommentGroup | None) -> ConstantSpec:
        line = self.tok.line
        names = [self._expect_type(TokenType.IDENT, "identifier").value]
        while self._at_op(","):
            self._next()
            names.append(self._expect_type(TokenType.IDENT, "identifier").value)

        values: list[Expr] = []
        if self.tok.type not in (TokenType.SEMICOLON, TokenType.EOF) and not self._at_op(")"):
            if not self._at_op("="):
                self._skip_type()
            if self._at_op("="):
                self._next()
                values = self._parse_expr_list()

        self._expect_semi()
        attached = doc or self.line_comment
        return ConstantSpec(
            names=tuple(names),
            values=tuple(values),
            comment=comment_text(attached) if attached else None,
            line=line,
        )

    def _skip_type(self) -> None:
        """Consume an explicit constant type such as ``int`` or ``pkg.Code``."""
        depth = 0
        while self.tok.type is not TokenType.EOF:
            if depth == 0 and (
                self.tok.type is TokenType.SEMICOLON or self._at_op("=", ")")
            ):
                return
            if self._at_op(*_OPENERS):
                depth += 1
            elif self._at_op(*_CLOSERS):
                depth -= 1
            self._next()

    def _skip_declaration(self) -> None:
        self._next()
        stack: list[str] = []
        while self.tok.type is not TokenType.EOF:
            if not stack and self.tok.type is TokenType.SEMICOLON:
                self._next()
                return
            if self._at_op(*_OPENERS):
                stack.append(_OPENERS[self.tok.value])
            elif self._at_op(*_CLOSERS):
                if not stack or stack.pop() != self.tok.value:
                    raise self._error(f"unbalanced {self.tok.value!r}")
            self._next()
        if stack:
            raise self._error(f"expected {stack[-1]!r}, found end of file")

    # Expressions

    def _parse_expr_list(self) -> list[Expr]:
        exprs = [self._parse_expr()]
        while self._at_op(","):
            self._next()
            exprs.append(self._parse_expr())
        return exprs

    def _parse_expr(self) -> Expr:
        return self._parse_binary(1)

    def _parse_binary(self, min_precedence: int) -> Expr:
        x = self._parse_unary()
        while True:
            op = self.tok.value if self.tok.type is TokenType.OP else ""
            precedence = _BINARY_PRECEDENCE.get(op, 0)
            if precedence < min_precedence:
                return x
            self._next()
            y = self._parse_binary(precedence + 1)
            x = BinaryExpr(op=op, x=x, y=y)

    def _parse_unary(self) -> Expr:
        if self.tok.type is TokenType.OP and self.tok.value in _UNARY_OPERATORS:
            op = self.tok.value
            self._next()
            with self._nested():
                return UnaryExpr(op=op, x=self._parse_unary())
        return self._parse_primary()

    def _parse_primary(self) -> Expr:
        start = self._index
        token = self.tok
        x: Expr
        if is_literal(token):
            self._next()
            x = BasicLit(kind=_LITERAL_KINDS[token.type], value=token.value)
        elif token.type is TokenType.IDENT and token.value in _TYPE_KEYWORDS:
            self._skip_operand()
            return Unsupported(self._text_since(start))
        elif token.type is TokenType.IDENT and token.value not in KEYWORDS:
            self._next()
            x = Ident(name=token.value)
        elif self._at_op("("):
            self._next()
            with self._nested():
                inner = self._parse_expr()
            self._expect_op(")")
            x = ParenExpr(x=inner)
        elif self._at_op("["):
            self._skip_operand()
            return Unsupported(self._text_since(start))
        else:
            raise self._error(f"expected operand, found {token.value!r}")

        suffixed = False
        while self._at_op(".", "(", "[", "{"):
            if self._at_op("{") and not isinstance(x, Ident) and not suffixed:
                break
            suffixed = True
            if self._at_op("."):
                self._next()
                if self.tok.type is TokenType.IDENT:
                    self._next()
                elif self._at_op("("):
                    self._skip_balanced()
                else:
                    raise self._error(f"expected selector, found {self.tok.value!r}")
            else:
                self._skip_balanced()
        if suffixed:
            return Unsupported(self._text_since(start))
        return x

    def _skip_balanced(self) -> None:
        """Consume one bracketed region starting at the current opener."""
        stack = [_OPENERS[self.tok.value]]
        self._next()
        while stack:
            if self.tok.type is TokenType.EOF:
                raise self._error(f"expected {stack[-1]!r}, found end of file")
            if self._at_op(*_OPENERS):
                stack.append(_OPENERS[self.tok.value])
            elif self._at_op(*_CLOSERS):
                if stack.pop() != self.tok.value:
                    raise self._error(f"unbalanced {self.tok.value!r}")
            self._next()

    def _skip_operand(self) -> None:
        """Consume a type-led operand (func literal, composite literal, ...)."""
        while self.tok.type is not TokenType.EOF:
            if self.tok.type is TokenType.SEMICOLON or self._at_op(",", ")", "="):
                return
            if self._at_op(*_OPENERS):
                self._skip_balanced()
                continue
            self._next()

    def _text_since(self, start: int) -> str:
        parts = [
            token.value
            for token in self._tokens[start:self._index]
            if token.type is not TokenType.COMMENT
            and not (token.type is TokenType.SEMICOLON and token.value == "\n")
        ]
        return " ".join(parts)


def comment_text(group: CommentGroup) -> str:
    """Return the plain text of a comment group.

    Comment markers, the first space of each line comment, tool directives
    such as ``//go:generate``, trailing whitespace, and leading or repeated
    blank lines are removed. Non-empty results end with a newline.
    """
    lines: list[str] = []
    for token in group:
        text = token.value
        if text.startswith("//"):
            text = text[2:]
            if text.startswith(" "):
                text = text[1:]
            elif text and _is_directive(text):
                continue
        else:
            text = text[2:-2]
        lines.extend(line.rstrip(" \t\n\r") for line in text.split("\n"))

    compact: list[str] = []
    for line in lines:
        if line or (compact and compact[-1]):
            compact.append(line)
    if compact and compact[-1]:
        compact.append("")
    return "\n".join(compact)


def _is_directive(text: str) -> bool:
    return text.startswith(_DIRECTIVE_PREFIXES) or bool(_DIRECTIVE_RE.match(text))


def parse_source(source: str, *, path: str = "<source>") -> DeclarationTree:
    """Parse Go source text held in memory."""
    return Parser(tokenize(source, path=path), path=path).parse_file()


def parse_declarations(path: str | Path) -> DeclarationTree:
    """Read and parse one Go source file.

    Raises ``DeclarationParseError`` when the file cannot be read, decoded, or
    parsed.
    """
    display = str(path)
    try:
        source = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DeclarationParseError(f"cannot read source: {exc}", path=display) from exc

    tree = parse_source(source, path=display)
    _LOGGER.debug(
        "parsed declaration file",
        extra={"path": display, "group_count": len(tree.groups)},
    )
    return tree
