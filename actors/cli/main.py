"""``siam-apiserver`` command-line entry point implemented with Typer."""

from __future__ import annotations

import dataclasses
import json
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable

import typer

from packages.siam_core import (
    APISERVER_SERVICE,
    CodeAssembly,
    __version__,
    configure_process_logging,
    register_service_codes,
    run_apiserver_startup,
)
from packages.siam_shared.config import SiamSettings, UnknownServiceError, load_settings
from packages.siam_shared.consts import DeclarationParseError, extract_int, extract_string
from packages.siam_shared.errors import CodeRegistry, FatalConfigurationError, with_code

SUCCESS_EXIT_CODE = 0
EXTRACTION_ERROR_EXIT_CODE = 1
FATAL_CONFIGURATION_EXIT_CODE = 2


class ConstantKind(str, Enum):
    """Value kinds ``extract`` can evaluate."""

    INT = "int"
    STRING = "string"


@dataclass(frozen=True)
class CliConfig:
    """Global CLI options shared by every command."""

    config_path: Path | None
    log_level: str | None
    as_json: bool


def _serialize(value: Any) -> Any:
    """Reduce dataclasses, paths and mappings to JSON-ready values."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Path):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {item.name: _serialize(getattr(value, item.name)) for item in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {str(key): _serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_serialize(item) for item in value]
    return str(value)


def _emit_output(result: Any, as_json: bool, render: Callable[[Any], str] | None = None) -> None:
    """Print ``result`` as compact JSON or through ``render``."""
    data = _serialize(result)
    if as_json:
        typer.echo(json.dumps(data, sort_keys=True, separators=(",", ":")))
        return
    if render is not None:
        typer.echo(render(data))
        return
    typer.echo(json.dumps(data, indent=2, sort_keys=True))


def _emit_error(exc: BaseException, as_json: bool) -> None:
    """Render one failure to stderr."""
    if as_json:
        typer.echo(json.dumps({"error": str(exc)}), err=True)
        return
    typer.echo(f"error: {exc}", err=True)


def _render_assembly(data: dict[str, Any]) -> str:
    """Render registered codes as aligned rows followed by skipped symbols."""
    records = sorted(data.get("records", []), key=lambda item: item["code"])
    if not records:
        lines = ["No error codes registered."]
    else:
        lines = [
            f"{item['code']:>8}  {item['http_status']:>3}  {item['external_message']}  ({item['name']})"
            for item in records
        ]
    skipped = data.get("skipped", {})
    if skipped:
        lines.append("skipped:")
        lines.extend(f"  {name}: {reason}" for name, reason in sorted(skipped.items()))
    return "\n".join(lines)


def _render_constants(data: dict[str, Any]) -> str:
    if not data:
        return "No constants found."
    return "\n".join(f"{name} = {value!r}" for name, value in data.items())


def _render_descriptor(data: dict[str, Any]) -> str:
    lines = [
        f"code: {data['code']}",
        f"http_status: {data['http_status']}",
        f"external: {data['external']}",
    ]
    if data.get("reference"):
        lines.append(f"reference: {data['reference']}")
    return "\n".join(lines)


def _require_config(ctx: typer.Context) -> CliConfig:
    """Fetch the global options stored by the callback."""
    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


def _load(cfg: CliConfig) -> SiamSettings:
    """Resolve settings with global CLI options as the top override layer."""
    logging_overrides: dict[str, Any] = {}
    if cfg.log_level is not None:
        logging_overrides["level"] = cfg.log_level
    if cfg.as_json:
        logging_overrides["json_output"] = True
    cli_params = {"logging": logging_overrides} if logging_overrides else None
    try:
        return load_settings(cli_params=cli_params, config_path=cfg.config_path)
    except ValueError as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=FATAL_CONFIGURATION_EXIT_CODE) from exc


def _configure_command_logging(settings: SiamSettings) -> None:
    """Log to stderr so stdout carries only the command result."""
    configure_process_logging(settings.logging, stream=sys.stderr)


def _run_command(cfg: CliConfig, invoke: Callable[[], Any], render: Callable[[Any], str] | None = None) -> None:
    """Execute one command body and map failures to process exit codes."""
    try:
        result = invoke()
    except FatalConfigurationError as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=FATAL_CONFIGURATION_EXIT_CODE) from exc
    except (DeclarationParseError, UnknownServiceError) as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=EXTRACTION_ERROR_EXIT_CODE) from exc
    _emit_output(result, cfg.as_json, render)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"siam-apiserver {__version__}")
        raise typer.Exit()


app = typer.Typer(no_args_is_help=True, help="SIAM apiserver command-line interface")


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", envvar="SIAM_CONFIG", help="YAML config file path"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override logging.level"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON output and JSON logs"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the version and exit",
    ),
) -> None:
    """Store global options for all commands."""
    ctx.obj = CliConfig(config_path=config, log_level=log_level, as_json=as_json)


@app.command("start")
def start_command(ctx: typer.Context) -> None:
    """Run apiserver startup: logging, error-code registration, database."""
    cfg = _require_config(ctx)
    settings = _load(cfg)

    def invoke() -> dict[str, Any]:
        result = run_apiserver_startup(settings)
        return {
            "service": APISERVER_SERVICE,
            "registered": len(result.assembly.records),
            "skipped": len(result.assembly.skipped),
            "postgres": result.engine is not None,
        }

    _run_command(
        cfg,
        invoke,
        lambda data: (
            f"{data['service']}: {data['registered']} codes registered, "
            f"{data['skipped']} skipped"
        ),
    )


@app.command("codes")
def codes_command(
    ctx: typer.Context,
    service: str = typer.Argument(APISERVER_SERVICE, help="Service whose codes to list"),
) -> None:
    """Register one service's codes into a fresh registry and list them."""
    cfg = _require_config(ctx)
    settings = _load(cfg)
    _configure_command_logging(settings)

    def invoke() -> CodeAssembly:
        return register_service_codes(service, settings=settings, registry=CodeRegistry())

    _run_command(cfg, invoke, _render_assembly)


@app.command("extract")
def extract_command(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Declaration file to evaluate"),
    kind: ConstantKind = typer.Option(
        ConstantKind.INT,
        "--kind",
        help="Constant kind to evaluate",
        case_sensitive=False,
        show_choices=True,
    ),
) -> None:
    """Print every constant of the requested kind declared in PATH."""
    cfg = _require_config(ctx)
    _configure_command_logging(_load(cfg))
    extractor = extract_int if kind is ConstantKind.INT else extract_string
    _run_command(cfg, lambda: extractor(path), _render_constants)


@app.command("classify")
def classify_command(
    ctx: typer.Context,
    service: str = typer.Argument(..., help="Service whose codes to load"),
    code: int = typer.Argument(..., help="Error code to classify"),
) -> None:
    """Show the descriptor an error carrying CODE resolves to."""
    cfg = _require_config(ctx)
    settings = _load(cfg)
    _configure_command_logging(settings)

    def invoke() -> dict[str, Any]:
        registry = CodeRegistry()
        register_service_codes(service, settings=settings, registry=registry)
        coder = registry.classify(with_code(code, f"classify {code}"))
        return {
            "code": coder.code,
            "http_status": coder.http_status,
            "external": coder.external,
            "reference": coder.reference,
        }

    _run_command(cfg, invoke, _render_descriptor)


if __name__ == "__main__":
    app()
