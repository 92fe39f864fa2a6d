"""Resolve Mirage settings from CLI params, environment, YAML and defaults.

Later sources win, key by key:

    built-in defaults < mirage.yml < MIRAGE_* environment < CLI params

Environment keys nest on ``__``, so ``MIRAGE_HTTP__TIMEOUT_SECONDS=5`` sets
``http.timeout_seconds``. Values are read as YAML scalars or flow
collections (``5``, ``true``, ``["request", "response"]``); anything that
does not parse stays a string, and values under ``MIRAGE_HTTP__HEADERS__``
are always kept as text. ``MIRAGE_CONFIG_FILE`` names an alternative YAML
file when no path is passed explicitly.
"""

from __future__ import annotations

import copy
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml

from .defaults import BUILTIN_DEFAULTS
from .models import DEFAULT_CONFIG_PATH, MirageSettings

ENV_PREFIX = "MIRAGE_"
CONFIG_FILE_ENV = f"{ENV_PREFIX}CONFIG_FILE"

_NULL_WORDS = frozenset({"null", "none", "~"})
_BOOL_WORDS = frozenset({"true", "false"})

# Sections whose env values are always kept as raw strings.
_RAW_SECTIONS = (("http", "headers"),)


def load_config(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Return the merged configuration mapping before validation."""
    env = os.environ if environ is None else environ
    layers = (
        BUILTIN_DEFAULTS if defaults is None else defaults,
        _read_yaml(_config_file(config_path, env)),
        _env_layer(env),
        cli_params or {},
    )
    merged: dict[str, Any] = {}
    for layer in layers:
        merged = _deep_merge(merged, layer)
    return merged


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
) -> MirageSettings:
    """Resolve the cascade and validate it into ``MirageSettings``.

    Raises:
        pydantic.ValidationError: a resolved value is out of range or mistyped.
        ValueError: the YAML file is not a mapping.
    """
    return MirageSettings.model_validate(
        load_config(cli_params=cli_params, environ=environ, config_path=config_path)
    )


@lru_cache(maxsize=1)
def get_settings() -> MirageSettings:
    """Process settings from the real environment, resolved once."""
    return load_settings()


def _reset_settings() -> None:
    """For tests: forget the cached settings."""
    get_settings.cache_clear()


def _config_file(config_path: str | Path | None, env: Mapping[str, str]) -> Path:
    if config_path is not None:
        return Path(config_path)
    override = env.get(CONFIG_FILE_ENV)
    return Path(override).expanduser() if override else DEFAULT_CONFIG_PATH


def _read_yaml(path: Path) -> Mapping[str, Any]:
    if not path.is_file():
        return {}
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, Mapping):
        raise ValueError(f"Config file must contain a top-level mapping: {path}")
    return parsed


def _env_layer(env: Mapping[str, str]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for key, raw in env.items():
        if not key.startswith(ENV_PREFIX) or key == CONFIG_FILE_ENV:
            continue
        path = [part.lower() for part in key[len(ENV_PREFIX) :].split("__") if part]
        if not path:
            continue
        node = layer
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[path[-1]] = raw if _is_raw(path) else _env_value(raw)
    return layer


def _is_raw(path: list[str]) -> bool:
    return any(
        len(path) > len(section) and tuple(path[: len(section)]) == section
        for section in _RAW_SECTIONS
    )


def _env_value(raw: str) -> Any:
    """Interpret one environment value."""
    text = raw.strip()
    lowered = text.lower()
    if lowered in _NULL_WORDS:
        return None
    if lowered in _BOOL_WORDS:
        return lowered == "true"
    try:
        value = yaml.safe_load(text)
    except yaml.YAMLError:
        return raw
    # YAML 1.1 also reads yes/no/on/off and dates; those stay strings.
    if isinstance(value, bool) or not isinstance(value, (int, float, list, dict)):
        return raw
    return value


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = {str(key): copy.deepcopy(value) for key, value in base.items()}
    for key, value in override.items():
        current = merged.get(str(key))
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[str(key)] = _deep_merge(current, value)
        else:
            merged[str(key)] = copy.deepcopy(value)
    return merged
