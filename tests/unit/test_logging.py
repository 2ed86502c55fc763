"""Tests for structured logging and correlation IDs."""

import json
import logging

from dropjournal.shared.correlation import CorrelationContext, get_correlation_id
from dropjournal.shared.logging_config import CorrelationIdFilter, HumanReadableFormatter, JSONFormatter


def _record(message="Analysis created", **extra):
    record = logging.LogRecord("DropJournal.Analysis", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_correlation_and_extras():
    record = _record(owner_id=42, entry_count=7)
    with CorrelationContext("req-1"):
        CorrelationIdFilter().filter(record)

    payload = json.loads(JSONFormatter(service_name="drop-journal-service").format(record))

    assert payload["message"] == "Analysis created"
    assert payload["service"] == "drop-journal-service"
    assert payload["correlation_id"] == "req-1"
    assert payload["owner_id"] == 42
    assert payload["entry_count"] == 7


def test_correlation_context_resets():
    with CorrelationContext("outer"):
        assert get_correlation_id() == "outer"
    assert get_correlation_id() is None


def test_human_readable_formatter_has_correlation_prefix():
    record = _record(state="done")
    record.correlation_id = "abc"

    line = HumanReadableFormatter().format(record)

    assert "[INFO] [abc]" in line
    assert line.endswith("state=done")
