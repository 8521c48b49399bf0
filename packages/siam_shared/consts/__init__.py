"""Constant extraction from Go-syntax declaration files.

Parses ``const`` groups, evaluates their integer and string values with
``iota`` semantics, and pulls structured annotations out of the comments
attached to each declaration.
"""

from .annotations import parse_err_external, parse_err_http_status
from .evaluate import PLACEHOLDER, eval_int, eval_string, unquote
from .extract import (
    collect_comments,
    evaluate_ints,
    evaluate_strings,
    extract_comments,
    extract_int,
    extract_string,
)
from .parser import parse_declarations, parse_source
from .tree import (
    BasicLit,
    BinaryExpr,
    ConstantGroup,
    ConstantSpec,
    DeclarationParseError,
    DeclarationParser,
    DeclarationTree,
    Ident,
    LiteralKind,
    ParenExpr,
    UnaryExpr,
    Unsupported,
)

__all__ = [
    "BasicLit",
    "BinaryExpr",
    "collect_comments",
    "ConstantGroup",
    "ConstantSpec",
    "DeclarationParseError",
    "DeclarationParser",
    "DeclarationTree",
    "eval_int",
    "eval_string",
    "evaluate_ints",
    "evaluate_strings",
    "extract_comments",
    "extract_int",
    "extract_string",
    "Ident",
    "LiteralKind",
    "ParenExpr",
    "parse_declarations",
    "parse_err_external",
    "parse_err_http_status",
    "parse_source",
    "PLACEHOLDER",
    "UnaryExpr",
    "unquote",
]
