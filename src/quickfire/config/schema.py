"""
quickfire — configuration schema and validation.

File: src/quickfire/config/schema.py

Purpose
- Define authoritative configuration defaults and strict validation rules.

What is included in this file
- Schema versioning and migration guidance.
- Validation rules for required fields, types, enums, and numeric constraints.
- Deterministic deep-merge helpers used by the loader.

Functional requirements
- Validate config payloads and return structured errors (field path + message).
- ``run.processes`` is optional; when absent the host decides.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, NotRequired, TypedDict

from quickfire.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_FAILURE_SYMBOL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SUCCESS_GLYPHS,
    DEFAULT_SUCCESS_SYMBOL,
    DEFAULT_THREADS,
    LOG_FORMATS,
)

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION
LOG_LEVELS: Final[tuple[str, ...]] = ("CRITICAL", "DEBUG", "ERROR", "INFO", "WARNING")


class MetaConfig(TypedDict):
    schema_version: int


class RunSection(TypedDict):
    processes: NotRequired[int]
    threads: int
    fail_fast: bool
    abort_on_worker_lost: bool
    require_assertions: bool


class PresentationConfig(TypedDict):
    success_symbol: str
    failure_symbol: str
    success_glyphs: list[str]


class ObservabilityConfig(TypedDict):
    log_level: str
    log_format: Literal["console", "json"]


class QuickfireConfig(TypedDict):
    meta: MetaConfig
    run: RunSection
    presentation: PresentationConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[QuickfireConfig] = {
    "meta": {"schema_version": CONFIG_SCHEMA_VERSION},
    "run": {
        "threads": DEFAULT_THREADS,
        "fail_fast": False,
        "abort_on_worker_lost": False,
        "require_assertions": False,
    },
    "presentation": {
        "success_symbol": DEFAULT_SUCCESS_SYMBOL,
        "failure_symbol": DEFAULT_FAILURE_SYMBOL,
        "success_glyphs": list(DEFAULT_SUCCESS_GLYPHS),
    },
    "observability": {
        "log_level": DEFAULT_LOG_LEVEL,
        "log_format": "console",
    },
}

_SECTION_KEYS: Final[dict[str, frozenset[str]]] = {
    "meta": frozenset({"schema_version"}),
    "run": frozenset(
        {"processes", "threads", "fail_fast", "abort_on_worker_lost", "require_assertions"}
    ),
    "presentation": frozenset({"success_symbol", "failure_symbol", "success_glyphs"}),
    "observability": frozenset({"log_level", "log_format"}),
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> QuickfireConfig:
    """Return a deep copy of deterministic built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    """Return deterministic migration guidance for schema version mismatch."""

    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade quickfire.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade the quickfire runtime"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate a full config payload and return structured issues."""

    issues = _IssueCollector()
    root = _as_object(config, "$", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    _reject_unknown_keys(root, set(_SECTION_KEYS), "", issues)
    for section in sorted(_SECTION_KEYS):
        if section not in root:
            issues.add(section, "missing required section")

    _validate_meta(root.get("meta"), issues)
    _validate_run(root.get("run"), issues)
    _validate_presentation(root.get("presentation"), issues)
    _validate_observability(root.get("observability"), issues)

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=_deep_copy_mapping(root), issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate ``config`` and return a normalized copy or raise ``ConfigValidationError``."""

    result = validate_config(config)
    if not result.is_valid or result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_meta(value: object, issues: _IssueCollector) -> None:
    if value is None:
        return
    section = _as_object(value, "meta", issues)
    if section is None:
        return
    _reject_unknown_keys(section, set(_SECTION_KEYS["meta"]), "meta", issues)
    version = _as_int(section.get("schema_version"), "meta.schema_version", issues, minimum=1)
    if version is not None and version != ConfigSchemaVersion:
        issues.add("meta.schema_version", migration_guidance(version))


def _validate_run(value: object, issues: _IssueCollector) -> None:
    if value is None:
        return
    section = _as_object(value, "run", issues)
    if section is None:
        return
    _reject_unknown_keys(section, set(_SECTION_KEYS["run"]), "run", issues)
    if "processes" in section:
        _as_int(section["processes"], "run.processes", issues, minimum=1)
    _require_keys(
        section,
        ("threads", "fail_fast", "abort_on_worker_lost", "require_assertions"),
        "run",
        issues,
    )
    if "threads" in section:
        _as_int(section["threads"], "run.threads", issues, minimum=1)
    for key in ("fail_fast", "abort_on_worker_lost", "require_assertions"):
        if key in section:
            _as_bool(section[key], _join("run", key), issues)


def _validate_presentation(value: object, issues: _IssueCollector) -> None:
    if value is None:
        return
    section = _as_object(value, "presentation", issues)
    if section is None:
        return
    _reject_unknown_keys(section, set(_SECTION_KEYS["presentation"]), "presentation", issues)
    _require_keys(
        section, ("success_symbol", "failure_symbol", "success_glyphs"), "presentation", issues
    )
    for key in ("success_symbol", "failure_symbol"):
        if key in section:
            _as_str(section[key], _join("presentation", key), issues)
    if "success_glyphs" in section:
        glyphs = section["success_glyphs"]
        path = "presentation.success_glyphs"
        if isinstance(glyphs, str) or not isinstance(glyphs, Sequence):
            issues.add(path, f"expected array of strings, got {type(glyphs).__name__}")
            return
        if not glyphs:
            issues.add(path, "must not be empty")
        for index, glyph in enumerate(glyphs):
            _as_str(glyph, f"{path}[{index}]", issues)


def _validate_observability(value: object, issues: _IssueCollector) -> None:
    if value is None:
        return
    section = _as_object(value, "observability", issues)
    if section is None:
        return
    _reject_unknown_keys(section, set(_SECTION_KEYS["observability"]), "observability", issues)
    if "log_level" in section:
        level = section["log_level"]
        if isinstance(level, str):
            level = level.strip().upper()
        _as_enum(level, "observability.log_level", issues, allowed_values=LOG_LEVELS)
    if "log_format" in section:
        _as_enum(
            section["log_format"],
            "observability.log_format",
            issues,
            allowed_values=LOG_FORMATS,
        )


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key in allowed:
            continue
        issues.add(_join(path, key), "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: Sequence[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in required:
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = _deep_copy_value(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    return {str(key): _deep_copy_value(item) for key, item in value.items()}


def _deep_copy_value(value: object) -> Any:
    if isinstance(value, Mapping):
        return _deep_copy_mapping(value)
    if isinstance(value, (list, tuple)):
        return [_deep_copy_value(item) for item in value]
    return value


__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ObservabilityConfig",
    "PresentationConfig",
    "QuickfireConfig",
    "RunSection",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
