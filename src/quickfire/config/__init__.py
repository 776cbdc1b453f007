"""Configuration: schema validation, layered loading and the runtime Configuration."""

from quickfire.config.loader import ConfigLoadError, dump_effective_config, load_config
from quickfire.config.runtime import Configuration, ConfigurationFrozenError
from quickfire.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "Configuration",
    "ConfigurationFrozenError",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "load_config",
    "merge_config",
    "validate_config",
]
