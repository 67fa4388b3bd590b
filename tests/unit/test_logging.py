"""Logging setup."""

import json
import logging
import sys

from src.notelink.core.logging import JSONFormatter, build_logging_config, get_log_level


def test_json_formatter_includes_node_and_extra():
    record = logging.LogRecord("notelink.chat", logging.INFO, __file__, 10, "sent %s", ("m1",), None)
    record.recipient = "u2"

    entry = json.loads(JSONFormatter(node_id="api-1").format(record))

    assert entry["message"] == "sent m1"
    assert entry["node_id"] == "api-1"
    assert entry["extra"] == {"recipient": "u2"}


def test_json_formatter_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord("notelink", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

    entry = json.loads(JSONFormatter().format(record))

    assert entry["exception"]["type"] == "RuntimeError"
    assert "node_id" not in entry


def test_log_level_names():
    assert get_log_level("debug") == logging.DEBUG
    assert get_log_level("loud") == logging.INFO


def test_socketio_loggers_are_quiet(test_settings, tmp_path):
    config = build_logging_config(test_settings, tmp_path)

    assert config["loggers"]["socketio"]["level"] == "WARNING"
    assert config["loggers"]["engineio"]["level"] == "WARNING"
    assert config["handlers"]["console"]["formatter"] == "colored"
    assert config["handlers"]["file"]["filename"].startswith(str(tmp_path))


async def test_responses_carry_request_id(async_client):
    response = await async_client.get("/health")
    assert len(response.headers["x-request-id"]) == 12
