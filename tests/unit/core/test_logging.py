"""
Unit tests for the logging subsystem: ambient LogContext, the context
filter and the JSON formatter.
"""

import json
import logging

import pytest

from hearthvale.core.logging.logger import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    get_log_context,
    set_log_context,
)


def _record(name="hearthvale.core.event.bus", msg="hello", extra=None):
    logger = logging.getLogger(name)
    return logger.makeRecord(name, logging.INFO, __file__, 1, msg, (), None, extra=extra)


@pytest.mark.unit
class TestLogContext:
    """Test scoped ambient context."""

    def test_context_applies_and_restores(self):
        with LogContext(subsystem="Farming", operation="harvest"):
            inside = get_log_context()

        assert inside["subsystem"] == "Farming"
        assert inside["operation"] == "harvest"
        assert len(inside["correlation_id"]) == 8
        assert get_log_context() == {}

    def test_nested_contexts_merge_and_keep_correlation_id(self):
        with LogContext(subsystem="Farming", correlation_id="frame-3"):
            with LogContext(operation="update", frame=3):
                inner = get_log_context()
            outer = get_log_context()

        assert inner == {
            "subsystem": "Farming",
            "operation": "update",
            "frame": 3,
            "correlation_id": "frame-3",
        }
        assert "operation" not in outer

    def test_set_log_context_is_unscoped(self):
        set_log_context(subsystem="Economy", correlation_id="abc")

        assert get_log_context() == {"subsystem": "Economy", "correlation_id": "abc"}


@pytest.mark.unit
class TestContextFilter:
    """Test record enrichment."""

    def test_filter_stamps_ambient_fields(self):
        record = _record()

        with LogContext(subsystem="Farming", correlation_id="frame-1", frame=1):
            ContextFilter().filter(record)

        assert record.subsystem == "Farming"
        assert record.correlation_id == "frame-1"
        assert record.frame == 1
        assert record.event_name == "N/A"
        assert record.component == "event.bus"

    def test_explicit_extra_wins(self):
        record = _record(extra={"subsystem": "Economy"})

        with LogContext(subsystem="Farming"):
            ContextFilter().filter(record)

        assert record.subsystem == "Economy"


@pytest.mark.unit
class TestJSONFormatter:
    """Test the JSON payload shape."""

    def test_payload_contains_context_and_extras(self):
        record = _record(msg="crop harvested", extra={"plot_id": 4})
        with LogContext(subsystem="Farming", correlation_id="frame-9"):
            ContextFilter().filter(record)

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "crop harvested"
        assert payload["level"] == "INFO"
        assert payload["subsystem"] == "Farming"
        assert payload["correlation_id"] == "frame-9"
        assert payload["extra"] == {"plot_id": 4}

    def test_unserializable_extras_fall_back_to_str(self):
        record = _record(extra={"payload": object()})

        payload = json.loads(JSONFormatter().format(record))

        assert payload["extra"]["payload"].startswith("<object object")
