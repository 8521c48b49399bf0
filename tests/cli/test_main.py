"""CLI tests for the siam-apiserver Typer commands."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

import actors.cli.main as cli_main
from packages.siam_core import CodeAssembly, ErrorCodeRecord, StartupResult
from packages.siam_shared.errors import CodeRegistry, FatalConfigurationError
from packages.siam_shared.logging import clear_context

REPO_ROOT = Path(__file__).resolve().parents[2]

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Commands reconfigure root logging; put the previous handlers back."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    clear_context()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a config whose code paths resolve against the repository root."""
    path = tmp_path / "siam.yaml"
    path.write_text(
        "logging:\n  level: WARNING\ncodes:\n" f'  base_dir: "{REPO_ROOT}"\n',
        encoding="utf-8",
    )
    return path


def _invoke(*args: str) -> Any:
    return runner.invoke(cli_main.app, list(args))


def test_version_flag_prints_version() -> None:
    """--version prints the program name and version."""
    result = _invoke("--version")
    assert result.exit_code == 0
    assert result.stdout.strip() == "siam-apiserver 0.1.0"


def test_codes_lists_registered_apiserver_codes(config_file: Path) -> None:
    """Human output prints one aligned row per code."""
    result = _invoke("--config", str(config_file), "codes")

    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert len(lines) == 5
    assert lines[0].split() == ["110001", "404", "User", "not", "found", "(ErrUserNotFound)"]
    assert "skipped:" not in result.stdout


def test_codes_json_output(config_file: Path) -> None:
    """--json emits the assembly as one JSON document."""
    result = _invoke("--config", str(config_file), "--json", "codes", "apiserver")

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["skipped"] == {}
    assert {item["code"]: item["http_status"] for item in payload["records"]} == {
        110001: 404,
        110002: 409,
        110101: 429,
        110102: 404,
        110201: 404,
    }


def test_codes_unknown_service_exits_with_extraction_error(config_file: Path) -> None:
    """An unconfigured service maps to exit code 1."""
    result = _invoke("--config", str(config_file), "codes", "billing")

    assert result.exit_code == cli_main.EXTRACTION_ERROR_EXIT_CODE
    assert "unknown service: billing" in result.output


def test_extract_int_constants(tmp_path: Path) -> None:
    """extract --kind int prints each integer constant."""
    source = tmp_path / "consts.go"
    source.write_text("package x\n\nconst (\n\tA = iota + 1\n\tB\n)\n", encoding="utf-8")

    result = _invoke("--json", "extract", str(source), "--kind", "int")

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"A": 1, "B": 2}


def test_extract_string_constants(tmp_path: Path) -> None:
    """extract --kind string unquotes string literals."""
    source = tmp_path / "consts.go"
    source.write_text('package x\n\nconst Greeting = "hi" + "\\tthere"\n', encoding="utf-8")

    result = _invoke("extract", str(source), "--kind", "STRING")

    assert result.exit_code == 0
    assert result.stdout.strip() == "Greeting = 'hi\\tthere'"


def test_extract_parse_error_exits_with_extraction_error(tmp_path: Path) -> None:
    """Unparseable input maps to exit code 1 with an error line."""
    source = tmp_path / "broken.go"
    source.write_text("package x\n\nconst (\n\tA = \n", encoding="utf-8")

    result = _invoke("extract", str(source))

    assert result.exit_code == cli_main.EXTRACTION_ERROR_EXIT_CODE
    assert "error:" in result.output


def test_classify_registered_code(config_file: Path) -> None:
    """A registered code resolves to its HTTP status and message."""
    result = _invoke("--config", str(config_file), "--json", "classify", "apiserver", "110001")

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "code": 110001,
        "http_status": 404,
        "external": "User not found",
        "reference": "",
    }


def test_classify_unregistered_code_falls_back_to_unknown(config_file: Path) -> None:
    """An unregistered code resolves to the unknown sentinel."""
    result = _invoke("--config", str(config_file), "classify", "apiserver", "424242")

    assert result.exit_code == 0
    assert "code: 1" in result.stdout
    assert "http_status: 500" in result.stdout


def test_invalid_config_file_exits_with_fatal_configuration(tmp_path: Path) -> None:
    """A config file without a top-level mapping maps to exit code 2."""
    path = tmp_path / "siam.yaml"
    path.write_text("- not\n- a mapping\n", encoding="utf-8")

    result = _invoke("--config", str(path), "codes")

    assert result.exit_code == cli_main.FATAL_CONFIGURATION_EXIT_CODE
    assert "top-level mapping" in result.output


def test_start_reports_summary(monkeypatch: pytest.MonkeyPatch, config_file: Path) -> None:
    """start prints a one-line summary of the startup result."""
    seen: list[Any] = []

    def _fake_startup(settings: Any) -> StartupResult:
        seen.append(settings)
        return StartupResult(
            registry=CodeRegistry(),
            assembly=CodeAssembly(
                path="apiserver.go",
                records=(ErrorCodeRecord(110001, 404, "User not found"),),
                skipped={"ErrBare": "no attached comment"},
            ),
        )

    monkeypatch.setattr(cli_main, "run_apiserver_startup", _fake_startup)
    result = _invoke("--config", str(config_file), "--log-level", "debug", "start")

    assert result.exit_code == 0
    assert result.stdout.strip() == "apiserver: 1 codes registered, 1 skipped"
    assert seen[0].logging.level == "DEBUG"


def test_start_fatal_configuration_exits_two(
    monkeypatch: pytest.MonkeyPatch, config_file: Path
) -> None:
    """Registry invariant violations map to exit code 2."""

    def _fake_startup(_settings: Any) -> StartupResult:
        raise FatalConfigurationError("code 110001 already registered")

    monkeypatch.setattr(cli_main, "run_apiserver_startup", _fake_startup)
    result = _invoke("--config", str(config_file), "--json", "start")

    assert result.exit_code == cli_main.FATAL_CONFIGURATION_EXIT_CODE
    assert "already registered" in result.output


def test_extract_deeply_nested_expression_exits_with_extraction_error(tmp_path: Path) -> None:
    """Over-nested expressions map to exit code 1 like any parse error."""
    source = tmp_path / "nested.go"
    source.write_text("package x\n\nconst X = " + "(" * 300 + "1" + ")" * 300 + "\n", encoding="utf-8")

    result = _invoke("extract", str(source))

    assert result.exit_code == cli_main.EXTRACTION_ERROR_EXIT_CODE
    assert "nested too deeply" in result.output


def test_codes_logs_skipped_symbols_as_json_on_stderr(tmp_path: Path) -> None:
    """Skip warnings use the configured JSON log format, not bare fallback output."""
    source = tmp_path / "codes.go"
    source.write_text(
        "package codes\n\nconst (\n\t// ErrGood - 404: Good.\n\tErrGood = 8\n\tErrBare = 7\n)\n",
        encoding="utf-8",
    )
    config = tmp_path / "siam.yaml"
    config.write_text(
        f'logging:\n  level: WARNING\ncodes:\n  base_dir: "{tmp_path}"\n  paths:\n    apiserver: codes.go\n',
        encoding="utf-8",
    )

    result = _invoke("--config", str(config), "--json", "codes")

    assert result.exit_code == 0
    documents = [json.loads(line) for line in result.output.splitlines() if line.startswith("{")]
    warnings = [doc for doc in documents if doc.get("message") == "error code symbol skipped"]
    assert len(warnings) == 1
    assert warnings[0]["level"] == "WARNING"
    assert warnings[0]["symbol"] == "ErrBare"
    assert json.loads(result.stdout.splitlines()[-1])["skipped"] == {"ErrBare": "no attached comment"}
