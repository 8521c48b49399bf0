"""Walk constant groups and produce ``name -> value`` maps.

Each group opens a fresh ``iota`` scope. Inside a group, a declaration line
that omits its expression list reuses the last explicit list, and a list
shorter than the names it declares repeats its final expression. ``iota``
advances once per line, not once per name.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

from packages.siam_shared.logging import get_logger

from .evaluate import eval_int, eval_string
from .parser import parse_declarations
from .tree import DeclarationParser, DeclarationTree, Expr

_LOGGER = get_logger(__name__)

CommentParser = Callable[[str], str]


def expand_values(values: tuple[Expr, ...], count: int) -> tuple[Expr | None, ...]:
    """Stretch an expression list to ``count`` entries by repeating its last item."""
    if count == 0:
        return ()
    if not values:
        return (None,) * count
    last = values[-1]
    return tuple(values[i] if i < len(values) else last for i in range(count))


def iter_bindings(tree: DeclarationTree) -> Iterator[tuple[str, Expr | None, int]]:
    """Yield ``(name, expression, iota)`` for every declared constant name.

    The expression is ``None`` when neither the declaration line nor any
    earlier line in its group supplied one.
    """
    for group in tree.groups:
        previous: tuple[Expr, ...] = ()
        for placeholder, spec in enumerate(group.specs):
            values = spec.values
            if values:
                previous = values
            else:
                values = previous
            expanded = expand_values(values, len(spec.names))
            for name, expr in zip(spec.names, expanded):
                yield name, expr, placeholder


def evaluate_ints(tree: DeclarationTree) -> dict[str, int]:
    """Evaluate every integer constant in an already parsed tree."""
    out: dict[str, int] = {}
    for name, expr, placeholder in iter_bindings(tree):
        if expr is None:
            continue
        value, ok = eval_int(expr, placeholder)
        if ok:
            out[name] = value
        else:
            _LOGGER.debug(
                "constant has no integer value",
                extra={"path": tree.path, "constant": name},
            )
    return out


def evaluate_strings(tree: DeclarationTree) -> dict[str, str]:
    """Evaluate every string constant in an already parsed tree."""
    out: dict[str, str] = {}
    for name, expr, _placeholder in iter_bindings(tree):
        if expr is None:
            continue
        value, ok = eval_string(expr)
        if ok:
            out[name] = value
    return out


def collect_comments(tree: DeclarationTree, parse: CommentParser) -> dict[str, str]:
    """Apply ``parse`` to each declaration line's comment, keyed by declared name."""
    out: dict[str, str] = {}
    for group in tree.groups:
        for spec in group.specs:
            if spec.comment is None:
                continue
            parsed = parse(spec.comment)
            for name in spec.names:
                out[name] = parsed
    return out


def extract_int(
    path: str | Path, *, parser: DeclarationParser = parse_declarations
) -> dict[str, int]:
    """Parse ``path`` and return all integer constants, ``iota`` included."""
    return evaluate_ints(parser(path))


def extract_string(
    path: str | Path, *, parser: DeclarationParser = parse_declarations
) -> dict[str, str]:
    """Parse ``path`` and return all string constants."""
    return evaluate_strings(parser(path))


def extract_comments(
    path: str | Path,
    parse: CommentParser,
    *,
    parser: DeclarationParser = parse_declarations,
) -> dict[str, str]:
    """Parse ``path`` and map each documented constant to ``parse(comment)``."""
    return collect_comments(parser(path), parse)
