"""Unit tests for structlog configuration and correlation scopes."""

from __future__ import annotations

import io
import json

import pytest
import structlog

from quickfire.observability.logging import (
    configure_from_config,
    configure_logging,
    correlation_scope,
)


def _lines(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


def test_json_output_has_level_timestamp_and_filters_debug() -> None:
    stream = io.StringIO()
    configure_logging("info", "json", stream)
    logger = structlog.get_logger("quickfire.test")

    logger.debug("hidden_event")
    logger.info("visible_event", units=3)

    records = _lines(stream)
    assert [record["event"] for record in records] == ["visible_event"]
    assert records[0]["level"] == "info"
    assert records[0]["units"] == 3
    assert str(records[0]["timestamp"]).endswith("Z")


def test_correlation_scope_binds_and_unbinds_fields() -> None:
    stream = io.StringIO()
    configure_logging("DEBUG", "json", stream)
    logger = structlog.get_logger("quickfire.test")

    with correlation_scope(run_id="run-1", shard_index=2, unit_id=None):
        logger.info("inside")
    logger.info("outside")

    inside, outside = _lines(stream)
    assert inside["run_id"] == "run-1"
    assert inside["shard_index"] == 2
    assert "unit_id" not in inside
    assert "run_id" not in outside


def test_invalid_arguments_are_rejected() -> None:
    with pytest.raises(ValueError, match="log format"):
        configure_logging("INFO", "xml")
    with pytest.raises(ValueError, match="unknown log level"):
        configure_logging("LOUD", "json")
    with pytest.raises(ValueError, match="unknown correlation key"):
        with correlation_scope(user="x"):
            pass


def test_configure_from_config_uses_observability_section() -> None:
    stream = io.StringIO()
    configure_from_config(
        {"observability": {"log_level": "WARNING", "log_format": "console"}}, stream=stream
    )
    logger = structlog.get_logger("quickfire.test")

    logger.info("quiet")
    logger.warning("loud", detail="x")

    output = stream.getvalue()
    assert "quiet" not in output
    assert "loud" in output
    assert "detail=x" in output
