"""Layered configuration loading for SIAM processes.

Layers are applied lowest first, each one overlaying the mappings below it:

1) built-in defaults
2) the YAML file (``config/siam.yaml`` unless a path is given)
3) ``SIAM_*`` environment variables, ``__`` separating nested keys
4) CLI parameters

``SIAM_POSTGRES__ENABLED=true`` therefore sets ``postgres.enabled`` unless
the command line says otherwise.
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from packages.siam_shared.logging import get_logger

from .defaults import BUILTIN_DEFAULTS
from .models import DEFAULT_CONFIG_PATH, ENV_PREFIX, SiamSettings

_LOGGER = get_logger(__name__)

_KEY_SEPARATOR = "__"


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
) -> SiamSettings:
    """Resolve every layer and validate the result into ``SiamSettings``."""
    merged = load_config(cli_params=cli_params, environ=environ, config_path=config_path)
    return SiamSettings.model_validate(merged)


def load_config(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
    defaults: Mapping[str, Any] | None = None,
    env_prefix: str = ENV_PREFIX,
) -> dict[str, Any]:
    """Overlay defaults, file, environment and CLI layers into one mapping."""
    layers: list[tuple[str, Mapping[str, Any]]] = [
        ("defaults", BUILTIN_DEFAULTS if defaults is None else defaults),
        ("file", read_config_file(config_path)),
        ("env", env_overrides(os.environ if environ is None else environ, env_prefix)),
        ("cli", cli_params or {}),
    ]

    merged: dict[str, Any] = {}
    for name, layer in layers:
        if layer:
            _LOGGER.debug("config layer applied", extra={"layer": name, "keys": sorted(layer)})
        merged = overlay(merged, layer)
    return merged


def read_config_file(path: str | Path | None = None) -> dict[str, Any]:
    """Read the YAML config file; a missing or empty file yields ``{}``.

    Raises ``ValueError`` when the file is not valid YAML or its document is
    not a mapping.
    """
    resolved = DEFAULT_CONFIG_PATH if path is None else Path(path)
    if not resolved.is_file():
        return {}

    text = resolved.read_text(encoding="utf-8")
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Config file is not valid YAML: {resolved}: {exc}") from exc

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ValueError(f"Config file must contain a top-level mapping: {resolved}")
    return document


def env_overrides(environ: Mapping[str, str], prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Collect ``<prefix>SECTION__KEY`` variables into a nested mapping."""
    tree: dict[str, Any] = {}
    for key in sorted(environ):
        if not key.startswith(prefix):
            continue
        path = [part.strip().lower() for part in key[len(prefix):].split(_KEY_SEPARATOR)]
        path = [part for part in path if part]
        if not path:
            continue

        node = tree
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[path[-1]] = parse_env_value(environ[key])
    return tree


def parse_env_value(raw: str) -> Any:
    """Decode one environment value as a YAML scalar or flow collection.

    Booleans, numbers, ``null`` and ``{...}`` / ``[...]`` literals are
    decoded; anything that parses to a plain string, or fails to parse,
    comes back unchanged.
    """
    if not raw.strip():
        return raw
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    if isinstance(value, (bool, int, float, dict, list)) or value is None:
        return value
    return raw


def overlay(base: Mapping[str, Any], top: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``top`` laid over it, merging nested mappings."""
    result = dict(base)
    for key, value in top.items():
        below = result.get(key)
        if isinstance(value, Mapping):
            result[key] = overlay(below if isinstance(below, Mapping) else {}, value)
        else:
            result[key] = copy.deepcopy(value)
    return result
