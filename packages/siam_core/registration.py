"""Turn an annotated constant file into registered error codes.

A symbol becomes an ``ErrorCodeRecord`` only when it has an integer value,
a comment with a numeric HTTP status, and a non-empty external message.
Everything else is reported in ``CodeAssembly.skipped`` with a reason.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from packages.siam_shared.config import SiamSettings
from packages.siam_shared.consts import (
    DeclarationParser,
    collect_comments,
    evaluate_ints,
    parse_declarations,
    parse_err_external,
    parse_err_http_status,
)
from packages.siam_shared.errors import Code, CodeRegistry, get_registry
from packages.siam_shared.logging import get_logger

_LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ErrorCodeRecord:
    """Metadata joined for one annotated error-code constant."""

    code: int
    http_status: int
    external_message: str
    reference: str = ""
    name: str = ""

    def to_code(self) -> Code:
        return Code(
            code=self.code,
            http=self.http_status,
            external=self.external_message,
            reference=self.reference,
        )


@dataclass(frozen=True, slots=True)
class CodeAssembly:
    """Records ready to register plus the symbols that were left out."""

    path: str
    records: tuple[ErrorCodeRecord, ...] = ()
    skipped: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "skipped", MappingProxyType(dict(self.skipped)))


def assemble_code_records(
    path: str | Path, *, parser: DeclarationParser = parse_declarations
) -> CodeAssembly:
    """Parse ``path`` once and join integer values with comment annotations."""
    tree = parser(path)
    values = evaluate_ints(tree)
    statuses = collect_comments(tree, parse_err_http_status)
    externals = collect_comments(tree, parse_err_external)

    records: list[ErrorCodeRecord] = []
    skipped: dict[str, str] = {}
    for name, code in values.items():
        reason = None
        status_text = statuses.get(name, "")
        external = externals.get(name, "")
        if name not in statuses:
            reason = "no attached comment"
        elif not status_text:
            reason = "comment has no http status"
        elif not external:
            reason = "comment has no external message"
        else:
            try:
                status = int(status_text)
            except ValueError:
                reason = f"non-numeric http status {status_text!r}"
            else:
                records.append(
                    ErrorCodeRecord(
                        code=code,
                        http_status=status,
                        external_message=external,
                        name=name,
                    )
                )
        if reason is not None:
            skipped[name] = reason

    for name in statuses:
        if name not in values:
            skipped[name] = "no integer value"

    for name, reason in skipped.items():
        _LOGGER.warning(
            "error code symbol skipped",
            extra={"path": str(path), "symbol": name, "reason": reason},
        )
    return CodeAssembly(path=str(path), records=tuple(records), skipped=skipped)


def register_service_codes(
    service: str,
    *,
    settings: SiamSettings,
    registry: CodeRegistry | None = None,
    parser: DeclarationParser = parse_declarations,
) -> CodeAssembly:
    """Register every annotated code declared for ``service``.

    Raises ``UnknownServiceError`` for an unconfigured service,
    ``DeclarationParseError`` when the file cannot be parsed, and
    ``FatalConfigurationError`` when a code collides with one already
    registered.
    """
    target = registry if registry is not None else get_registry()
    path = settings.codes.resolve_path(service)
    assembly = assemble_code_records(path, parser=parser)
    for record in assembly.records:
        target.must_register(record.to_code())
    _LOGGER.info(
        "service error codes registered",
        extra={
            "service": service,
            "path": str(path),
            "registered": len(assembly.records),
            "skipped": len(assembly.skipped),
        },
    )
    return assembly
