import json
import logging
import sys

from eth_headers.logging import JsonFormatter, log
from eth_headers.rpc_context import clear_current_rpc, set_current_rpc


def make_record(msg="block_dumped", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord("eth_headers", level, __file__, 1, msg, (), exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    line = JsonFormatter().format(make_record(block=42, path="/tmp/42.json"))

    payload = json.loads(line)
    assert payload["msg"] == "block_dumped"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "eth_headers"
    assert payload["block"] == 42
    assert payload["path"] == "/tmp/42.json"
    assert payload["ts"].endswith("Z")
    assert "lineno" not in payload


def test_json_formatter_stamps_current_rpc():
    set_current_rpc("https://mainnet.infura.io")
    try:
        payload = json.loads(JsonFormatter().format(make_record()))
    finally:
        clear_current_rpc()

    assert payload["rpc"] == "https://mainnet.infura.io"
    assert json.loads(JsonFormatter().format(make_record()))["rpc"] == "unknown"


def test_json_formatter_renders_exceptions():
    try:
        raise ValueError("header not found")
    except ValueError:
        record = make_record("block_fetch_failed", logging.ERROR, exc_info=sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))
    assert "header not found" in payload["exc"]


def test_logger_is_configured_once():
    assert log.name == "eth_headers"
    assert log.propagate is False
    # pytest attaches its own capture handlers next to ours
    json_handlers = [h for h in log.handlers if isinstance(h.formatter, JsonFormatter)]
    assert len(json_handlers) == 1
