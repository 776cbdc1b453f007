"""
quickfire — runtime config loader.

File: src/quickfire/config/loader.py

Purpose
- Build the effective run configuration from ``quickfire.toml``, ``QUICKFIRE_*``
  environment variables and CLI overrides, on top of the schema defaults.

What is included in this file
- Precedence: CLI > env > file > defaults. Each layer is validated after merging.
- The fixed table of environment variables and how each one is coerced.

Functional requirements
- A missing ``quickfire.toml`` in the working directory is not an error; a
  missing explicit path is.
- Errors name the offending file or variable.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from quickfire.config.schema import assert_valid_config, default_config, merge_config
from quickfire.constants import DEFAULT_CONFIG_FILE, ENV_PREFIX

_TRUTHY = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSY = frozenset({"0", "false", "f", "no", "n", "off"})


class ConfigLoadError(ValueError):
    """Raised when a config layer cannot be read or an override cannot be coerced."""


def _integer(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigLoadError(f"{name} must be an integer, got {raw!r}") from exc


def _boolean(name: str, raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigLoadError(f"{name} must be a boolean (true/false/1/0/yes/no/on/off), got {raw!r}")


def _text(name: str, raw: str) -> str:
    return raw


def _glyphs(name: str, raw: str) -> list[str]:
    # Whitespace separated, so multi-codepoint glyphs survive intact.
    return raw.split()


_Coercer = Callable[[str, str], object]

# (section, key) -> coercer; the variable name is QUICKFIRE_<SECTION>_<KEY>.
_ENV_FIELDS: dict[tuple[str, str], _Coercer] = {
    ("run", "processes"): _integer,
    ("run", "threads"): _integer,
    ("run", "fail_fast"): _boolean,
    ("run", "abort_on_worker_lost"): _boolean,
    ("run", "require_assertions"): _boolean,
    ("presentation", "success_symbol"): _text,
    ("presentation", "failure_symbol"): _text,
    ("presentation", "success_glyphs"): _glyphs,
    ("observability", "log_level"): _text,
    ("observability", "log_format"): _text,
}


def env_variable(section: str, key: str) -> str:
    """Name of the environment variable that overrides ``section.key``."""

    return f"{ENV_PREFIX}{section.upper()}_{key.upper()}"


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return the validated effective config (CLI > env > file > defaults).

    ``cli_overrides`` accepts dotted keys (``{"run.threads": 4}``) or nested
    section mappings; ``None`` values are ignored so unset CLI flags fall through.
    """

    if config_path is None:
        path = Path.cwd() / DEFAULT_CONFIG_FILE
        file_layer = _read_toml(path) if path.is_file() else {}
    else:
        path = Path(config_path).expanduser()
        if not path.is_file():
            raise ConfigLoadError(f"config file not found: {path}")
        file_layer = _read_toml(path)

    config = assert_valid_config(merge_config(default_config(), file_layer))
    config = merge_config(config, _env_layer(os.environ if environ is None else environ))
    config = merge_config(config, _cli_layer(cli_overrides or {}))
    return assert_valid_config(config)


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Serialize ``config`` as compact JSON with sorted keys."""

    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _env_layer(environ: Mapping[str, str]) -> dict[str, dict[str, object]]:
    layer: dict[str, dict[str, object]] = {}
    for (section, key), coerce in _ENV_FIELDS.items():
        name = env_variable(section, key)
        raw = environ.get(name)
        if raw is None:
            continue
        layer.setdefault(section, {})[key] = coerce(name, raw.strip())
    return layer


def _cli_layer(overrides: Mapping[str, object]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for name, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            layer = merge_config(layer, {name: value})
            continue
        parts = [part for part in name.split(".") if part]
        if not parts:
            raise ConfigLoadError(f"invalid CLI override key {name!r}")
        nested: dict[str, Any] = {parts[-1]: value}
        for part in reversed(parts[:-1]):
            nested = {part: nested}
        layer = merge_config(layer, nested)
    return layer


__all__ = [
    "ConfigLoadError",
    "dump_effective_config",
    "env_variable",
    "load_config",
]
