from __future__ import annotations

import logging

from vapecave.core.context import reset_request_id, set_request_id
from vapecave.core.logging import RequestContextFilter, _build_logging_config


def _record() -> logging.LogRecord:
    return logging.LogRecord("vapecave.test", logging.INFO, __file__, 1, "hello", None, None)


def test_filter_tags_records_with_current_request_id() -> None:
    token = set_request_id("req-123")
    try:
        record = _record()
        assert RequestContextFilter().filter(record) is True
        assert record.request_id == "req-123"
    finally:
        reset_request_id(token)


def test_filter_uses_placeholder_outside_requests() -> None:
    record = _record()

    RequestContextFilter().filter(record)

    assert record.request_id == "-"


def test_config_applies_level_and_quiets_sql_echo() -> None:
    config = _build_logging_config("debug", "production")

    assert config["loggers"]["vapecave"]["level"] == "DEBUG"
    assert config["root"]["level"] == "DEBUG"
    assert config["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"
    assert config["formatters"]["json"]["static_fields"]["environment"] == "production"
