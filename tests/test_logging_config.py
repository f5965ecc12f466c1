"""Tests for logging configuration and formatters."""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from marketmatch.logging import ComponentLoggerAdapter, get_logger
from marketmatch.logging.config import (
    ContextualFilter,
    JSONFormatter,
    KeyValueFormatter,
    configure_logging,
)
from marketmatch.logging.context import log_context


@pytest.fixture
def logger():
    """Create a test logger with no handlers attached."""
    test_logger = logging.getLogger("test_logger")
    test_logger.setLevel(logging.DEBUG)
    test_logger.handlers.clear()

    yield test_logger

    test_logger.handlers.clear()


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def make_record(logger, message="Test message", extra=None):
    return logger.makeRecord("test", logging.INFO, "test.py", 1, message, (), None, extra=extra)


def test_json_formatter_basic(logger):
    """Test JSONFormatter produces valid JSON with mandatory fields."""
    log_obj = json.loads(JSONFormatter().format(make_record(logger)))

    assert log_obj["level"] == "INFO"
    assert log_obj["message"] == "Test message"
    assert log_obj["logger"] == "test"
    assert "name" not in log_obj


def test_json_formatter_with_extra_fields(logger):
    record = make_record(logger, extra={"event": "matching.find.started", "candidate_count": 4, "flag": True})

    log_obj = json.loads(JSONFormatter().format(record))

    assert log_obj["event"] == "matching.find.started"
    assert log_obj["candidate_count"] == 4
    assert log_obj["flag"] is True


def test_json_formatter_serializes_scores_and_times(logger):
    """Test Decimal scores keep their exact text and datetimes become ISO strings."""
    record = make_record(
        logger,
        extra={
            "match_score": Decimal("0.6800"),
            "loaded_at": datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
            "fallbacks": {"geo_proximity": "missing_geo_point"},
        },
    )

    log_obj = json.loads(JSONFormatter().format(record))

    assert log_obj["match_score"] == "0.6800"
    assert log_obj["loaded_at"] == "2026-10-01T12:00:00+00:00"
    assert log_obj["fallbacks"] == {"geo_proximity": "missing_geo_point"}


def test_json_formatter_keeps_chinese_text(logger):
    output = JSONFormatter().format(make_record(logger, message="展台搭建"))

    assert "展台搭建" in output


def test_json_timestamp_format(logger):
    """Test timestamps look like 2026-10-01T10:30:00.123Z."""
    timestamp = json.loads(JSONFormatter().format(make_record(logger)))["timestamp"]

    assert timestamp.endswith("Z")
    assert "T" in timestamp
    assert len(timestamp) == 24


def test_contextual_filter_adds_static_fields(logger):
    record = make_record(logger)

    ContextualFilter(service="test-service", environment="test").filter(record)

    assert record.service == "test-service"
    assert record.environment == "test"


def test_contextual_filter_adds_context_fields(logger):
    with log_context(listing_id="D-1", candidate_id="S-1"):
        record = make_record(logger)
        ContextualFilter().filter(record)

    assert record.listing_id == "D-1"
    assert record.candidate_id == "S-1"


def test_explicit_extra_wins_over_context(logger):
    with log_context(listing_id="D-1"):
        record = make_record(logger, extra={"listing_id": "S-9"})
        ContextualFilter().filter(record)

    assert record.listing_id == "S-9"


def test_json_formatter_with_context(logger):
    """Test full pipeline: context + filter + JSON formatter."""
    with log_context(listing_id="D-1"):
        record = make_record(logger, "Scoring candidates", extra={"event": "matching.find.started"})
        ContextualFilter(service="marketmatch", environment="test").filter(record)

    log_obj = json.loads(JSONFormatter().format(record))

    assert log_obj["event"] == "matching.find.started"
    assert log_obj["service"] == "marketmatch"
    assert log_obj["environment"] == "test"
    assert log_obj["listing_id"] == "D-1"


def test_key_value_formatter_with_extras(logger):
    formatter = KeyValueFormatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    record = make_record(
        logger,
        extra={"event": "config.reloaded", "count": 42, "location": "/tmp/my config.json", "source": None},
    )

    output = formatter.format(record)

    assert "[INFO]" in output
    assert "Test message" in output
    assert "event=config.reloaded" in output
    assert "count=42" in output
    assert 'location="/tmp/my config.json"' in output
    assert "source=null" in output


def test_key_value_formatter_skips_static_fields(logger):
    record = make_record(logger)
    ContextualFilter().filter(record)

    output = KeyValueFormatter("%(message)s").format(record)

    assert output == "Test message"


def test_component_adapter_merges_extras(caplog):
    adapter = get_logger("marketmatch.test", component="matching")

    with caplog.at_level(logging.INFO, logger="marketmatch.test"):
        adapter.info("Scored", extra={"event": "matching.score.calculated"})
        adapter.info("Overridden", extra={"component": "config"})

    assert isinstance(adapter, ComponentLoggerAdapter)
    assert caplog.records[0].component == "matching"
    assert caplog.records[0].event == "matching.score.calculated"
    assert caplog.records[1].component == "config"


def test_get_logger_without_component():
    assert isinstance(get_logger("marketmatch.test"), logging.Logger)


def test_configure_logging_invalid_level():
    with pytest.raises(ValueError, match="Invalid log level"):
        configure_logging(level="INVALID")


def test_configure_logging_invalid_format():
    with pytest.raises(ValueError, match="Invalid log format"):
        configure_logging(format_type="invalid")


@pytest.mark.parametrize("format_type,formatter_cls", [("json", JSONFormatter), ("key-value", KeyValueFormatter)])
def test_configure_logging_installs_formatter(restore_root_logger, format_type, formatter_cls):
    configure_logging(level="DEBUG", format_type=format_type, environment="test")

    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG
    assert len(root_logger.handlers) == 1
    assert isinstance(root_logger.handlers[0].formatter, formatter_cls)
