"""Observability: JSON log formatting and idempotent setup."""

import json
import logging

from itemdb.infrastructure.observability import JSONFormatter, _ItemDBHandler, setup_logging


def _record(**extra):
    record = logging.LogRecord("itemdb.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_extra_fields():
    line = JSONFormatter().format(_record(collection="todos", item_id="u1"))
    payload = json.loads(line)
    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["collection"] == "todos"
    assert payload["item_id"] == "u1"


def test_json_formatter_skips_absent_fields():
    payload = json.loads(JSONFormatter().format(_record()))
    assert "collection" not in payload
    assert "version" not in payload


def test_setup_logging_is_idempotent():
    previous_level = logging.root.level
    setup_logging("DEBUG", "json")
    setup_logging("WARNING", "text")
    installed = [h for h in logging.root.handlers if isinstance(h, _ItemDBHandler)]
    try:
        assert len(installed) == 1
        assert not isinstance(installed[0].formatter, JSONFormatter)
        assert logging.root.level == logging.WARNING
    finally:
        for handler in installed:
            logging.root.removeHandler(handler)
        logging.root.setLevel(previous_level)
