"""Unit tests for the runtime ``Configuration`` object."""

from __future__ import annotations

import pytest

from quickfire.config.runtime import Configuration, ConfigurationFrozenError
from quickfire.config.schema import ConfigValidationError
from quickfire.constants import DEFAULT_SUCCESS_GLYPHS
from quickfire.matchers.context import AssertionContext
from quickfire.matchers.registry import MatcherRegistry, RegistryFrozenError
from quickfire.utils.host import HostCapabilities


def _noop(context: AssertionContext) -> None:
    context.success()


def test_defaults_on_a_host_that_cannot_fork() -> None:
    configuration = Configuration(host=HostCapabilities(supports_forking=False, usable_cores=8))

    assert configuration.processes == 1
    assert configuration.threads == 8
    assert configuration.success_symbol == "🟢"
    assert configuration.failure_symbol == "🔴"
    assert configuration.success_glyphs == DEFAULT_SUCCESS_GLYPHS
    assert configuration.success_emoji == DEFAULT_SUCCESS_GLYPHS
    assert configuration.fail_fast is False
    assert configuration.abort_on_worker_lost is False
    assert configuration.require_assertions is False
    assert "to_have_attributes" in configuration.registry


def test_processes_default_to_usable_cores_when_forking() -> None:
    configuration = Configuration(host=HostCapabilities(supports_forking=True, usable_cores=6))

    assert configuration.processes == 6


def test_setters_validate_values(inline_configuration: Configuration) -> None:
    with pytest.raises(ValueError, match="processes must be >= 1"):
        inline_configuration.processes = 0
    with pytest.raises(ValueError, match="threads must be an integer"):
        inline_configuration.threads = 2.5  # type: ignore[assignment]
    with pytest.raises(ValueError, match="must not be empty"):
        inline_configuration.success_glyphs = []
    with pytest.raises(ValueError, match="non-empty string"):
        inline_configuration.failure_symbol = ""

    inline_configuration.success_emoji = ["🚀"]
    assert inline_configuration.success_glyphs == ("🚀",)


def test_matcher_forwards_to_owned_registry(inline_configuration: Configuration) -> None:
    returned = inline_configuration.matcher("to_be_even", _noop, int)

    assert returned is _noop
    assert inline_configuration.registry.resolve("to_be_even", 2) is _noop


def test_frozen_configuration_rejects_writes(inline_configuration: Configuration) -> None:
    inline_configuration.freeze()

    assert inline_configuration.frozen
    assert inline_configuration.registry.frozen
    with pytest.raises(ConfigurationFrozenError):
        inline_configuration.threads = 2
    with pytest.raises(ConfigurationFrozenError):
        inline_configuration.success_symbol = "+"
    with pytest.raises(ConfigurationFrozenError):
        inline_configuration.matcher("to_be_even", _noop)
    with pytest.raises(RegistryFrozenError):
        inline_configuration.registry.register("to_be_even", _noop)


def test_registry_can_be_supplied_without_builtins(inline_host: HostCapabilities) -> None:
    registry = MatcherRegistry()

    configuration = Configuration(host=inline_host, registry=registry, builtin_matchers=False)

    assert configuration.registry is registry
    assert len(registry) == 0


def test_supplied_registry_keeps_custom_matchers_under_builtin_names(
    inline_host: HostCapabilities,
) -> None:
    registry = MatcherRegistry()
    registry.register("to_equal", _noop)

    configuration = Configuration(host=inline_host, registry=registry)

    assert registry.resolve("to_equal", 1) is _noop
    assert "to_have_attributes" in configuration.registry


def test_frozen_registry_is_used_as_is(inline_host: HostCapabilities) -> None:
    registry = MatcherRegistry()
    registry.register("to_equal", _noop)
    registry.freeze()

    configuration = Configuration(host=inline_host, registry=registry)

    assert configuration.registry is registry
    assert registry.names() == ("to_equal",)


def test_from_mapping_applies_run_and_presentation_sections(
    inline_host: HostCapabilities,
) -> None:
    configuration = Configuration.from_mapping(
        {
            "run": {"processes": 3, "threads": 2, "fail_fast": True},
            "presentation": {"success_symbol": ".", "success_glyphs": ["ok"]},
        },
        host=inline_host,
    )

    assert configuration.processes == 3
    assert configuration.threads == 2
    assert configuration.fail_fast is True
    assert configuration.success_symbol == "."
    assert configuration.failure_symbol == "🔴"
    assert configuration.success_glyphs == ("ok",)
    assert configuration.as_dict()["run"]["processes"] == 3


def test_from_mapping_without_processes_keeps_host_default() -> None:
    host = HostCapabilities(supports_forking=True, usable_cores=5)

    configuration = Configuration.from_mapping({"run": {"threads": 1}}, host=host)

    assert configuration.processes == 5


def test_from_mapping_rejects_invalid_values(inline_host: HostCapabilities) -> None:
    with pytest.raises(ConfigValidationError) as excinfo:
        Configuration.from_mapping({"run": {"threads": 0}}, host=inline_host)

    assert [issue.path for issue in excinfo.value.issues] == ["run.threads"]
