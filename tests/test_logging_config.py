"""Tests for structured logging and payload elision."""

import json
import logging

from palettefs.core.logging_config import _JsonFormatter, _PayloadFilter, request_id_var


def _record(msg, *args, **extra):
    record = logging.LogRecord("palettefs.test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:

    def test_extra_fields_are_top_level(self):
        line = _JsonFormatter().format(_record("Persisted new file", file_id=3))
        data = json.loads(line)
        assert data["message"] == "Persisted new file"
        assert data["file_id"] == 3
        assert data["level"] == "INFO"

    def test_request_id_included_when_set(self):
        token = request_id_var.set("req-1")
        try:
            data = json.loads(_JsonFormatter().format(_record("hello")))
        finally:
            request_id_var.reset(token)
        assert data["request_id"] == "req-1"


class TestPayloadFilter:

    def test_long_base64_elided(self):
        blob = "A" * 200
        record = _record("content=%s", blob)
        _PayloadFilter().filter(record)
        assert record.getMessage() == "content=<200 chars elided>"

    def test_short_words_untouched(self):
        record = _record("Saved file sunset.png in Photos")
        _PayloadFilter().filter(record)
        assert record.getMessage() == "Saved file sunset.png in Photos"
