"""Tests for pydantic-settings-backed configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.siam_shared.config import (
    CodesSettings,
    UnknownServiceError,
    load_config,
    load_settings,
)
from packages.siam_shared.config.loader import parse_env_value, read_config_file


def test_load_settings_uses_precedence_cascade(tmp_path: Path) -> None:
    """CLI params override env, env overrides YAML, YAML overrides defaults."""
    config_file = tmp_path / "siam.yaml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: WARNING",
                "  service: from-yaml",
                "postgres:",
                "  host: yaml-db",
                "  port: 6000",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(
        cli_params={"logging": {"level": "DEBUG"}},
        environ={
            "SIAM_LOGGING__LEVEL": "ERROR",
            "SIAM_POSTGRES__PORT": "6543",
            "SIAM_POSTGRES__ENABLED": "true",
            "OTHER_IGNORED": "1",
        },
        config_path=config_file,
    )

    assert settings.logging.level == "DEBUG"
    assert settings.logging.service == "from-yaml"
    assert settings.postgres.host == "yaml-db"
    assert settings.postgres.port == 6543
    assert settings.postgres.enabled is True


def test_load_settings_uses_defaults_when_sources_missing(tmp_path: Path) -> None:
    """Missing YAML and empty env fall back to built-in defaults."""
    settings = load_settings(environ={}, config_path=tmp_path / "missing.yaml")

    assert settings.logging.level == "INFO"
    assert settings.logging.json_output is True
    assert settings.logging.file.enabled is False
    assert settings.postgres.enabled is False
    assert settings.codes.paths == {"apiserver": "services/apiserver/codes/apiserver.go"}


def test_log_level_is_case_insensitive(tmp_path: Path) -> None:
    """Lowercase level names are normalized."""
    settings = load_settings(
        cli_params={"logging": {"level": "debug"}},
        environ={},
        config_path=tmp_path / "missing.yaml",
    )
    assert settings.logging.level == "DEBUG"


def test_invalid_log_level_is_rejected(tmp_path: Path) -> None:
    """Unknown level names fail validation."""
    with pytest.raises(ValidationError):
        load_settings(
            environ={"SIAM_LOGGING__LEVEL": "LOUD"},
            config_path=tmp_path / "missing.yaml",
        )


def test_env_json_values_merge_into_mappings(tmp_path: Path) -> None:
    """JSON-valued env vars are decoded and merged into nested mappings."""
    merged = load_config(
        environ={"SIAM_CODES__PATHS": '{"billing": "billing/codes.go"}', "SIAM_X": "null"},
        config_path=tmp_path / "missing.yaml",
    )
    assert merged["codes"]["paths"] == {
        "apiserver": "services/apiserver/codes/apiserver.go",
        "billing": "billing/codes.go",
    }
    assert merged["x"] is None


def test_yaml_without_mapping_is_rejected(tmp_path: Path) -> None:
    """A YAML document that is not a mapping raises ValueError."""
    config_file = tmp_path / "siam.yaml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError, match="top-level mapping"):
        load_settings(environ={}, config_path=config_file)


def test_empty_yaml_is_treated_as_absent(tmp_path: Path) -> None:
    """An empty YAML file contributes nothing."""
    config_file = tmp_path / "siam.yaml"
    config_file.write_text("", encoding="utf-8")
    assert load_settings(environ={}, config_path=config_file).logging.level == "INFO"


def test_resolve_path_joins_relative_entries_with_base_dir(tmp_path: Path) -> None:
    """Relative declaration paths resolve under base_dir; absolute ones do not."""
    absolute = tmp_path / "abs.go"
    codes = CodesSettings(
        base_dir=str(tmp_path),
        paths={"apiserver": "codes/apiserver.go", "other": str(absolute)},
    )
    assert codes.resolve_path("apiserver") == tmp_path / "codes" / "apiserver.go"
    assert codes.resolve_path("other") == absolute


def test_resolve_path_rejects_unknown_service() -> None:
    """Unknown services raise a KeyError subclass naming the service."""
    with pytest.raises(UnknownServiceError) as excinfo:
        CodesSettings().resolve_path("billing")
    assert isinstance(excinfo.value, KeyError)
    assert excinfo.value.service == "billing"
    assert str(excinfo.value) == "unknown service: billing"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("true", True),
        ("False", False),
        ("6543", 6543),
        ("2.5", 2.5),
        ("null", None),
        ("[1, 2]", [1, 2]),
        ("plain text", "plain text"),
        ("", ""),
        ("{broken", "{broken"),
    ],
)
def test_parse_env_value(raw: str, expected: object) -> None:
    """Env values decode as YAML scalars and fall back to the raw string."""
    assert parse_env_value(raw) == expected


def test_read_config_file_rejects_invalid_yaml(tmp_path: Path) -> None:
    """Unparseable YAML surfaces as ValueError naming the file."""
    config_file = tmp_path / "siam.yaml"
    config_file.write_text("logging: [unclosed\n", encoding="utf-8")
    with pytest.raises(ValueError, match="not valid YAML"):
        read_config_file(config_file)
